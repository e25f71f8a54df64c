#!/usr/bin/env python3
"""Exposures: the declared field rules of an entity.

An Exposure is one node of the projection tree. Its kind is fixed when it is
built and decides how the value is resolved:
- DELEGATOR: read the attribute from the object (entity methods first)
- BLOCK: call ``proc(object, options)``
- FORMATTER: apply a named formatter to the attribute
- FORMATTER_BLOCK: apply an inline formatter to the attribute
- NESTING: build a mapping from child exposures
- REPRESENT: resolve an inner exposure, then represent it with another entity

Exposures are built at declaration time and are not changed while objects
are represented.

Example:
    >>> exposure = build_exposure("name", {"if": {"type": "full"}})
    >>> exposure.kind
    <ExposureKind.DELEGATOR: 'delegator'>
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from silhouette.core.constants import ExposureKind, OptionKey
from silhouette.core.errors import AttributeNotFoundError, DeclarationError, FormatterNotFoundError
from silhouette.core.options import Options
from silhouette.exposures.nested import NestedExposures
from silhouette.exposures.output import OutputBuilder
from silhouette.rules.conditions import Condition


@dataclass
class Exposure:
    """A declared output field."""

    attribute: Optional[str]
    kind: ExposureKind
    options: Dict[str, Any] = field(default_factory=dict)
    conditions: List[Condition] = field(default_factory=list)
    proc: Optional[Callable[[Any, Options], Any]] = None
    format_with: Any = None
    using: Any = None
    subexposure: Optional["Exposure"] = None
    nested_exposures: NestedExposures = field(default_factory=NestedExposures)
    _using_class: Any = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        as_ = self.options.get(OptionKey.AS)
        self._key = as_ if as_ is not None else self.attribute
        self.is_safe = bool(self.options.get(OptionKey.SAFE))
        self.for_merge = self.options.get(OptionKey.MERGE)
        self.documentation = self.options.get(OptionKey.DOCUMENTATION)
        self.override = bool(self.options.get(OptionKey.OVERRIDE))
        self.preload = self.options.get(OptionKey.PRELOAD)
        self._attr_path_proc = self.options.get(OptionKey.ATTR_PATH)
        self.expose_nil = self.options.get(OptionKey.EXPOSE_NIL, True) is not False

    @property
    def nesting(self) -> bool:
        return self.kind == ExposureKind.NESTING

    @property
    def proc_key(self) -> bool:
        """True when the output key is computed per object."""
        return callable(self._key)

    @property
    def conditional(self) -> bool:
        return bool(self.conditions) or not self.expose_nil

    @property
    def raw_key(self) -> Any:
        """Declared key; a callable for dynamic keys."""
        return self._key

    def key(self, entity: Any = None) -> Any:
        """Output key of this exposure for entity."""
        if callable(self._key):
            return self._key(entity.object, entity.options)
        return self._key

    def copy(self) -> "Exposure":
        """Copy for a derived entity; nested children are copied too."""
        return Exposure(
            attribute=self.attribute,
            kind=self.kind,
            options=dict(self.options),
            conditions=list(self.conditions),
            proc=self.proc,
            format_with=self.format_with,
            using=self.using,
            subexposure=self.subexposure.copy() if self.subexposure else None,
            nested_exposures=self.nested_exposures.copy(),
        )

    def find_nested_exposure(self, attribute: str) -> Optional["Exposure"]:
        return self.nested_exposures.find_by(attribute)

    def deep_complex_nesting(self, entity: Any) -> bool:
        """Check whether nesting children share a key and need merging."""
        if not self.nesting:
            return False
        return self.nested_exposures.deep_complex_nesting(entity)

    # Visibility

    def should_return_key(self, options: Options) -> bool:
        return options.should_return_key(self._key)

    def conditions_met(self, entity: Any, options: Any) -> bool:
        options = Options.wrap(options)
        if not all(condition.met(entity.object, options) for condition in self.conditions):
            return False
        return self.expose_nil or not self._is_nil(entity, options)

    def _is_nil(self, entity: Any, options: Options) -> bool:
        # Same lookup as value(): entity methods first, safe honored
        if self.nesting:
            return False
        proc = self.options.get(OptionKey.PROC)
        if proc is not None:
            return proc(entity.object, options) is None
        if self.is_safe and not (
            entity.delegator.delegatable(self.attribute) or entity.has_entity_method(self.attribute)
        ):
            return True
        return entity.delegate_attribute(self.attribute) is None

    def should_expose(self, entity: Any, options: Options) -> bool:
        """Projection check and all conditions."""
        return self.should_return_key(options) and self.conditions_met(entity, options)

    def valid(self, entity: Any) -> bool:
        """Check whether the value can be resolved for entity's object.

        Raises:
            AttributeNotFoundError: If the attribute is missing and the
                exposure is not safe
        """
        if self.kind == ExposureKind.BLOCK:
            return True
        if self.kind == ExposureKind.NESTING:
            return all(e.valid(entity) for e in self.nested_exposures)
        if self.kind == ExposureKind.REPRESENT:
            return self.subexposure.valid(entity)

        delegatable = entity.delegator.delegatable(self.attribute) or entity.has_entity_method(
            self.attribute
        )
        if delegatable or self.is_safe:
            return delegatable
        raise AttributeNotFoundError(self.attribute, type(entity).__name__, entity.object)

    # Attribute path

    def attr_path(self, entity: Any, options: Options) -> Any:
        if self._attr_path_proc is not None:
            return self._attr_path_proc(entity.object, options)
        return self.key(entity)

    @contextmanager
    def with_attr_path(self, entity: Any, options: Options) -> Iterator[None]:
        with options.with_attr_path(self.attr_path(entity, options)):
            yield

    # Values

    def value(self, entity: Any, options: Options) -> Any:
        """Resolve the raw value, entity instances left unconverted."""
        if self.kind == ExposureKind.DELEGATOR:
            return entity.delegate_attribute(self.attribute)
        elif self.kind == ExposureKind.BLOCK:
            return self.proc(entity.object, options)
        elif self.kind == ExposureKind.FORMATTER:
            return self._apply_named_formatter(entity)
        elif self.kind == ExposureKind.FORMATTER_BLOCK:
            return self.format_with(entity.delegate_attribute(self.attribute))
        elif self.kind == ExposureKind.REPRESENT:
            new_options = options.for_nesting(self.key(entity))
            return self.using_class.represent(self.subexposure.value(entity, options), new_options)
        elif self.kind == ExposureKind.NESTING:
            return self._map_entity_exposures(
                entity, options, lambda exposure, nested_options: exposure.value(entity, nested_options)
            )

        raise DeclarationError(f"Unknown exposure kind {self.kind!r}")

    def valid_value(self, entity: Any, options: Options) -> Any:
        if self.valid(entity):
            return self.value(entity, options)
        return None

    def serializable_value(self, entity: Any, options: Options) -> Any:
        """Resolve the value as plain data."""
        if self.nesting:
            return self._map_entity_exposures(
                entity,
                options,
                lambda exposure, nested_options: exposure.serializable_value(entity, nested_options),
            )
        return to_serializable(self.valid_value(entity, options))

    def valid_value_for(self, key: Any, entity: Any, options: Options) -> Any:
        """Value of the child exposure rendered under key."""
        new_options = self._nesting_options_for(options)
        value = None
        for exposure in self._normalized_exposures(entity, new_options):
            if exposure.key(entity) != key:
                continue
            with exposure.with_attr_path(entity, new_options):
                value = exposure.valid_value(entity, new_options)
        return value

    @property
    def using_class(self) -> Any:
        """Entity class named by the ``using`` option."""
        if self._using_class is None:
            from silhouette.entity.entity import resolve_entity

            self._using_class = resolve_entity(self.using)
        return self._using_class

    def _apply_named_formatter(self, entity: Any) -> Any:
        formatters = type(entity).formatters()
        name = self.format_with
        if name in formatters:
            return formatters[name](entity.delegate_attribute(self.attribute))
        if entity.has_entity_method(name):
            return getattr(entity, name)(entity.delegate_attribute(self.attribute))
        raise FormatterNotFoundError(name, type(entity).__name__)

    # Nesting

    def _nesting_options_for(self, options: Options) -> Options:
        if self._key is not None:
            return options.for_nesting(self._key)
        return options

    def _normalized_exposures(self, entity: Any, options: Options) -> List["Exposure"]:
        """Children to render, one per output key.

        Children are grouped by key in order of first appearance. For each key
        the last child whose visibility check passes wins; when that child is a
        nesting exposure, every visible nesting child of the key is combined
        into one nesting exposure instead.
        """
        table: Dict[Any, List[Exposure]] = {}
        for exposure in self.nested_exposures:
            with exposure.with_attr_path(entity, options):
                if not exposure.should_expose(entity, options):
                    continue
            table.setdefault(exposure.key(entity), []).append(exposure)

        combine = self.deep_complex_nesting(entity)
        normalized = []
        for exposures in table.values():
            last = exposures[-1]
            if combine and last.nesting:
                normalized.append(_combine_nesting([e for e in exposures if e.nesting]))
            else:
                normalized.append(last)
        return normalized

    def _map_entity_exposures(
        self,
        entity: Any,
        options: Options,
        resolve: Callable[["Exposure", Options], Any],
    ) -> Any:
        new_options = self._nesting_options_for(options)
        output = OutputBuilder(entity)

        for exposure in self._normalized_exposures(entity, new_options):
            with exposure.with_attr_path(entity, new_options):
                result = resolve(exposure, new_options)
            output.add(exposure, result)

        return output.output()


def _combine_nesting(exposures: List[Exposure]) -> Exposure:
    if len(exposures) == 1:
        return exposures[0]

    last = exposures[-1]
    children = NestedExposures(child for exposure in exposures for child in exposure.nested_exposures)
    return Exposure(
        attribute=last.attribute,
        kind=ExposureKind.NESTING,
        options=dict(last.options),
        nested_exposures=children,
    )


def has_serializable_hash(value: Any) -> bool:
    """Check whether value converts itself with serializable_hash()."""
    if isinstance(value, type):
        return False
    return callable(getattr(value, "serializable_hash", None))


def to_serializable(value: Any) -> Any:
    """Convert embedded entities (and lists or mappings of them) to plain data."""
    if has_serializable_hash(value):
        return value.serializable_hash()
    if isinstance(value, list) and all(has_serializable_hash(item) for item in value):
        return [item.serializable_hash() for item in value]
    if isinstance(value, Mapping):
        return {
            key: item.serializable_hash() if has_serializable_hash(item) else item
            for key, item in value.items()
        }
    return value


def build_exposure(attribute: Optional[str], options: Dict[str, Any]) -> Exposure:
    """Build the exposure for attribute from merged, validated options.

    Args:
        attribute: Source attribute name, or None for the root node
        options: Exposure options

    Returns:
        Exposure with its kind fixed

    Raises:
        DeclarationError: If format_with is neither a name nor a callable
    """
    conditions = compile_conditions(attribute, options)
    using = options.get(OptionKey.USING)
    proc = options.get(OptionKey.PROC)
    format_with = options.get(OptionKey.FORMAT_WITH)

    if using is not None:
        inner_kind = ExposureKind.BLOCK if proc is not None else ExposureKind.DELEGATOR
        inner = Exposure(attribute, inner_kind, options=options, proc=proc)
        return Exposure(
            attribute,
            ExposureKind.REPRESENT,
            options=options,
            conditions=conditions,
            using=using,
            subexposure=inner,
        )
    if proc is not None:
        return Exposure(attribute, ExposureKind.BLOCK, options=options, conditions=conditions, proc=proc)
    if format_with is not None:
        if isinstance(format_with, str):
            kind = ExposureKind.FORMATTER
        elif callable(format_with):
            kind = ExposureKind.FORMATTER_BLOCK
        else:
            raise DeclarationError(f"format_with must be a formatter name or a callable, got {format_with!r}")
        return Exposure(attribute, kind, options=options, conditions=conditions, format_with=format_with)
    if options.get(OptionKey.NESTING):
        return Exposure(attribute, ExposureKind.NESTING, options=options, conditions=conditions)

    return Exposure(attribute, ExposureKind.DELEGATOR, options=options, conditions=conditions)


def compile_conditions(attribute: Optional[str], options: Mapping[str, Any]) -> List[Condition]:
    """Build the if/unless conditions of an exposure, ``if`` ones first."""
    if_conditions = [
        Condition.new_if(spec)
        for spec in _flatten(options.get(OptionKey.IF_EXTRAS), options.get(OptionKey.IF))
    ]
    unless_conditions = [
        Condition.new_unless(spec)
        for spec in _flatten(options.get(OptionKey.UNLESS_EXTRAS), options.get(OptionKey.UNLESS))
    ]

    return if_conditions + unless_conditions


def _flatten(*values: Any) -> List[Any]:
    flat: List[Any] = []
    for value in values:
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            flat.extend(_flatten(*value))
        else:
            flat.append(value)
    return flat
