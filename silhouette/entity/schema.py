#!/usr/bin/env python3
"""Declaration state of one entity class.

A Schema owns the root nesting exposure, the formatter registry and the
presentation settings (root names, collection presentation). A derived
entity gets a copy of its parent's schema when the subclass is created, so
declarations on the child never reach the parent.

Declarations take the schema lock. Representation only reads the exposure
tree, so it needs no lock once declarations are done.
"""

import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from silhouette.core.constants import ConfigKey, Defaults, OptionKey
from silhouette.core.errors import DeclarationError, NestingMisuseError
from silhouette.core.validators import merge_options, validate_attributes, validate_options
from silhouette.exposures.base import Exposure, build_exposure
from silhouette.exposures.nested import NestedExposures
from silhouette.infrastructure.config_manager import get_config_manager
from silhouette.infrastructure.logger import get_logger

COLLECTION_ROOT = "collection_root"
ROOT = "root"

# Options that would turn a nesting exposure into another kind
_NON_NESTING_OPTIONS = (OptionKey.PROC, OptionKey.USING, OptionKey.FORMAT_WITH)


class Schema:
    """Exposures, formatters and presentation settings of an entity class."""

    def __init__(self, name: str, parent: Optional["Schema"] = None):
        """Initialize schema.

        Args:
            name: Name of the owning entity class
            parent: Schema of the base entity class, copied into this one
        """
        self.name = name
        self.parent = parent
        if parent is not None:
            self.root_exposure = parent.root_exposure.copy()
            self.formatters: Dict[str, Callable[[Any], Any]] = dict(parent.formatters)
        else:
            self.root_exposure = build_exposure(None, {OptionKey.NESTING: True})
            self.formatters = {}

        self._roots: Dict[str, Optional[str]] = {}
        self._present_collection: Optional[bool] = None
        self._collection_name: Optional[str] = None
        self._block_options: List[Dict[str, Any]] = []
        self._nesting_stack: List[Exposure] = []
        self._documentation: Optional[Dict[Any, Any]] = None
        self._lock = threading.RLock()

    def derive(self, name: str) -> "Schema":
        """Create the schema of a subclass."""
        return Schema(name, parent=self)

    @property
    def root_exposures(self) -> NestedExposures:
        return self.root_exposure.nested_exposures

    @property
    def in_nesting(self) -> bool:
        return bool(self._nesting_stack)

    # Exposure declarations

    def expose(self, attributes: List[str], options: Dict[str, Any]) -> List[Exposure]:
        """Declare one exposure per attribute.

        Args:
            attributes: Attribute names
            options: Raw exposure options

        Returns:
            The exposures created

        Raises:
            UnknownOptionError: If an option is not recognized
            InvalidMultiAttributeUsageError: If single-field options are used
                with several attributes
        """
        with self._lock:
            merged = merge_options(self._block_options, validate_options(options))
            validate_attributes(attributes, merged)
            return [self._add_exposure(attribute, merged) for attribute in attributes]

    @contextmanager
    def nesting(self, attribute: str, options: Dict[str, Any]) -> Iterator[Exposure]:
        """Open a nesting exposure; exposures declared in the block are its children."""
        with self._lock:
            merged = merge_options(self._block_options, validate_options(options))
            validate_attributes([attribute], merged)
            for key in _NON_NESTING_OPTIONS:
                if key in merged:
                    raise DeclarationError(f"A nesting exposure cannot use the {key!r} option")
            merged[OptionKey.NESTING] = True

            exposure = self._add_exposure(attribute, merged)
            self._nesting_stack.append(exposure)
            try:
                yield exposure
            finally:
                self._nesting_stack.pop()

    def _add_exposure(self, attribute: str, options: Dict[str, Any]) -> Exposure:
        exposure_list = self._nesting_stack[-1].nested_exposures if self._nesting_stack else self.root_exposures
        exposure = build_exposure(attribute, options)

        if exposure.override:
            exposure_list.delete_by(attribute)
        exposure_list.append(exposure)
        self._documentation = None

        get_logger().debug(
            "Exposure declared",
            entity=self.name,
            attribute=attribute,
            kind=exposure.kind.value,
            depth=len(self._nesting_stack),
        )
        return exposure

    def unexpose(self, *attributes: str) -> None:
        """Remove root exposures of attributes.

        Raises:
            NestingMisuseError: If called inside a nesting block
        """
        with self._lock:
            self._ensure_can_unexpose()
            self.root_exposures.delete_by(*attributes)
            self._documentation = None

    def unexpose_all(self) -> None:
        """Remove every root exposure.

        Raises:
            NestingMisuseError: If called inside a nesting block
        """
        with self._lock:
            self._ensure_can_unexpose()
            self.root_exposures.clear()
            self._documentation = None

    def _ensure_can_unexpose(self) -> None:
        if self._nesting_stack:
            raise NestingMisuseError()

    @contextmanager
    def with_options(self, options: Dict[str, Any]) -> Iterator[None]:
        """Apply options to every exposure declared in the block."""
        with self._lock:
            self._block_options.append(validate_options(options))
            try:
                yield
            finally:
                self._block_options.pop()

    def find_exposure(self, attribute: str) -> Optional[Exposure]:
        return self.root_exposures.find_by(attribute)

    # Formatters

    def add_formatter(self, name: str, formatter: Callable[[Any], Any]) -> None:
        """Register a formatter usable through ``format_with=name``.

        Raises:
            DeclarationError: If formatter is not callable
        """
        if not callable(formatter):
            raise DeclarationError("You must pass a callable for formatters")
        with self._lock:
            self.formatters[str(name)] = formatter

    # Presentation

    def set_root(self, plural: Optional[str], singular: Optional[str] = None) -> None:
        with self._lock:
            self._roots[COLLECTION_ROOT] = plural
            self._roots[ROOT] = singular

    def root_element(self, root_type: str) -> Optional[str]:
        """Own root name of root_type, else the nearest ancestor's."""
        value = self._roots.get(root_type)
        if value:
            return value
        if self.parent is not None:
            return self.parent.root_element(root_type)
        return None

    def set_present_collection(self, present_collection: bool, collection_name: Optional[str]) -> None:
        with self._lock:
            self._present_collection = present_collection
            self._collection_name = collection_name

    def presents_collection(self) -> bool:
        if self._present_collection is not None:
            return self._present_collection
        if self.parent is not None:
            return self.parent.presents_collection()
        return False

    def collection_name(self) -> str:
        if self._collection_name is not None:
            return self._collection_name
        if self.parent is not None:
            return self.parent.collection_name()
        return get_config_manager().get(ConfigKey.COLLECTION_NAME, Defaults.COLLECTION_NAME)

    # Documentation

    def documentation(self) -> Dict[Any, Any]:
        """Documentation of root exposures, keyed by output key."""
        if self._documentation is None:
            self._documentation = {
                exposure.raw_key: exposure.documentation
                for exposure in self.root_exposures
                if exposure.documentation
            }
        return self._documentation
