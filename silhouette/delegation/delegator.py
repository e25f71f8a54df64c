#!/usr/bin/env python3
"""Uniform attribute access over heterogeneous source objects.

The delegator variant is chosen once per represented object:
- mappings are read by key (a missing key reads as None)
- namespaces (SimpleNamespace, argparse.Namespace) are read by attribute,
  a missing attribute reads as None
- objects with a ``fetch`` method are read through it
- anything else is read by attribute; bound methods are called

Example:
    >>> delegator = delegator_for({"name": "Ada"})
    >>> delegator.delegate("name")
    'Ada'
"""

import argparse
import inspect
import types
from abc import ABC, abstractmethod
from typing import Any, FrozenSet, Mapping

from silhouette.core.errors import AttributeNotFoundError

# Attributes every object has; never treated as exposed data
_BASE_OBJECT_NAMES: FrozenSet[str] = frozenset(dir(object))


class Delegator(ABC):
    """Reads named fields from one source object."""

    def __init__(self, obj: Any):
        self.object = obj

    @abstractmethod
    def delegate(self, attribute: str) -> Any:
        """Read attribute from the object.

        Raises:
            AttributeNotFoundError: If the object cannot supply the attribute
        """

    def delegatable(self, attribute: str) -> bool:
        """Check, without raising, whether attribute can be read."""
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.object!r})"


class HashObject(Delegator):
    """Delegator for mappings."""

    def delegate(self, attribute: str) -> Any:
        return self.object.get(attribute)


class StructObject(Delegator):
    """Delegator for open attribute containers."""

    def delegate(self, attribute: str) -> Any:
        return getattr(self.object, attribute, None)


class FetchableObject(Delegator):
    """Delegator for containers exposing ``fetch(name)``."""

    def delegate(self, attribute: str) -> Any:
        try:
            return self.object.fetch(attribute)
        except KeyError as e:
            raise AttributeNotFoundError(attribute, obj=self.object) from e


class PlainObject(Delegator):
    """Delegator for arbitrary objects."""

    def delegate(self, attribute: str) -> Any:
        if not self.delegatable(attribute):
            raise AttributeNotFoundError(attribute, obj=self.object)

        value = getattr(self.object, attribute)
        if _is_accessor(value, self.object):
            return value()
        return value

    def delegatable(self, attribute: str) -> bool:
        if attribute in _BASE_OBJECT_NAMES:
            return False
        return hasattr(self.object, attribute)


def _is_accessor(value: Any, obj: Any) -> bool:
    if inspect.ismethod(value):
        return True
    return inspect.isbuiltin(value) and getattr(value, "__self__", None) is obj


def delegator_for(obj: Any) -> Delegator:
    """Pick the delegator variant for obj by structural inspection.

    Args:
        obj: Source object

    Returns:
        Delegator bound to obj
    """
    if isinstance(obj, Mapping):
        return HashObject(obj)
    if isinstance(obj, (types.SimpleNamespace, argparse.Namespace)):
        return StructObject(obj)
    if callable(getattr(obj, "fetch", None)):
        return FetchableObject(obj)
    return PlainObject(obj)
