#!/usr/bin/env python3
"""Encoders for represented data.

Entities hand their serializable hash to these functions. Formatting
defaults come from the ``silhouette.serialization`` configuration section.

Example:
    >>> to_json({"name": "Ada"})
    '{"name": "Ada"}'
    >>> to_xml({"name": "Ada"})
    '<hash><name>Ada</name></hash>'
"""

import datetime
import decimal
import enum
import json
import uuid
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Set
from typing import Any, Optional

import yaml

from silhouette.core.constants import ConfigKey, Defaults
from silhouette.core.errors import SerializationError
from silhouette.infrastructure.config_manager import get_config_manager
from silhouette.infrastructure.logger import get_logger


def _plain(value: Any) -> Any:
    """Convert values the encoders do not know to plain data."""
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, Set)):
        return [_plain(item) for item in value]
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, decimal.Decimal):
        return str(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, enum.Enum):
        return _plain(value.value)
    return value


def _fail(format_name: str, error: Exception) -> SerializationError:
    get_logger().error("Serialization failed", format=format_name, error=str(error))
    return SerializationError(f"Cannot encode as {format_name}: {error}", format_name)


def to_json(data: Any, indent: Optional[int] = None, sort_keys: Optional[bool] = None) -> str:
    """Encode data as JSON.

    Args:
        data: Plain data
        indent: Indentation, defaults to configuration
        sort_keys: Sort mapping keys, defaults to configuration

    Returns:
        JSON document

    Raises:
        SerializationError: If data cannot be encoded
    """
    config = get_config_manager()
    if indent is None:
        indent = config.get(ConfigKey.JSON_INDENT, Defaults.JSON_INDENT)
    if sort_keys is None:
        sort_keys = config.get(ConfigKey.SORT_KEYS, Defaults.SORT_KEYS)

    try:
        return json.dumps(_plain(data), indent=indent, sort_keys=bool(sort_keys), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise _fail("json", e) from e


def to_yaml(data: Any, sort_keys: Optional[bool] = None) -> str:
    """Encode data as YAML.

    Raises:
        SerializationError: If data cannot be encoded
    """
    if sort_keys is None:
        sort_keys = get_config_manager().get(ConfigKey.SORT_KEYS, Defaults.SORT_KEYS)

    try:
        return yaml.safe_dump(
            _plain(data),
            default_flow_style=False,
            sort_keys=bool(sort_keys),
            allow_unicode=True,
        )
    except yaml.YAMLError as e:
        raise _fail("yaml", e) from e


def to_xml(data: Any, root: Optional[str] = None) -> str:
    """Encode data as XML.

    Mappings become child elements, lists become ``type="array"`` elements
    with one child per item, None becomes an empty ``nil="true"`` element.

    Raises:
        SerializationError: If data cannot be encoded
    """
    if root is None:
        root = get_config_manager().get(ConfigKey.XML_ROOT, Defaults.XML_ROOT)

    try:
        element = ET.Element(root)
        _fill_element(element, _plain(data))
        return ET.tostring(element, encoding="unicode")
    except (TypeError, ValueError) as e:
        raise _fail("xml", e) from e


def _fill_element(element: ET.Element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, item in value.items():
            _fill_element(ET.SubElement(element, _tag(key)), item)
    elif isinstance(value, list):
        element.set("type", "array")
        for item in value:
            _fill_element(ET.SubElement(element, _item_tag(element.tag)), item)
    elif value is None:
        element.set("nil", "true")
    elif isinstance(value, bool):
        element.set("type", "boolean")
        element.text = "true" if value else "false"
    elif isinstance(value, (int, float)):
        element.set("type", "integer" if isinstance(value, int) else "float")
        element.text = str(value)
    else:
        element.text = str(value)


def _tag(key: Any) -> str:
    tag = str(key).replace(" ", "_")
    if not tag or not (tag[0].isalpha() or tag[0] == "_"):
        raise ValueError(f"{key!r} is not a valid element name")
    return tag


def _item_tag(parent: str) -> str:
    if parent.endswith("ies"):
        return parent[:-3] + "y"
    if parent.endswith("s") and len(parent) > 1:
        return parent[:-1]
    return "item"
