#!/usr/bin/env python3
"""Conditions gating whether an exposure is rendered.

A condition is built from the value of an ``if``/``unless`` option:
- a mapping compares runtime options for equality
- a callable is invoked with (object, options)
- a string tests the truthiness of one runtime option

``unless`` is not always the plain negation of ``if``. For a mapping, ``if``
requires every pair to match while ``unless`` passes as soon as any pair
mismatches, so ``unless={"a": 1, "b": 2}`` hides the field only when both
options match.

Example:
    >>> cond = Condition.new_if({"type": "full"})
    >>> cond.met(user, Options({"type": "full"}))
    True
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Union

from silhouette.core.errors import DeclarationError
from silhouette.core.options import Options

ConditionSpec = Union[Mapping[str, Any], Callable[[Any, Options], Any], str]


class ConditionKind(Enum):
    """What a condition inspects."""

    HASH = "hash"  # Runtime options equal the given values
    BLOCK = "block"  # User predicate of (object, options)
    SYMBOL = "symbol"  # Runtime option is truthy


@dataclass(frozen=True)
class Condition:
    """A single predicate over (object, runtime options)."""

    kind: ConditionKind
    spec: Any
    inverse: bool = False

    @classmethod
    def new_if(cls, spec: ConditionSpec) -> "Condition":
        """Build a condition that must hold for the field to be exposed."""
        return build_condition(False, spec)

    @classmethod
    def new_unless(cls, spec: ConditionSpec) -> "Condition":
        """Build a condition that hides the field when it holds."""
        return build_condition(True, spec)

    def met(self, obj: Any, options: Options) -> bool:
        """Evaluate the condition.

        Args:
            obj: Object being represented
            options: Runtime options

        Returns:
            True if the exposure may be rendered
        """
        if self.inverse:
            return self._unless_value(obj, options)
        return self._if_value(obj, options)

    def _if_value(self, obj: Any, options: Options) -> bool:
        if self.kind == ConditionKind.HASH:
            return all(options[key] == value for key, value in self.spec.items())
        elif self.kind == ConditionKind.BLOCK:
            return bool(self.spec(obj, options))
        elif self.kind == ConditionKind.SYMBOL:
            return bool(options[self.spec])

        return False

    def _unless_value(self, obj: Any, options: Options) -> bool:
        if self.kind == ConditionKind.HASH:
            return any(options[key] != value for key, value in self.spec.items())
        return not self._if_value(obj, options)


def build_condition(inverse: bool, spec: ConditionSpec) -> Condition:
    """Choose the condition kind from the shape of spec.

    Args:
        inverse: True for ``unless`` conditions
        spec: Mapping, callable or option name

    Returns:
        Condition

    Raises:
        DeclarationError: If spec has none of the supported shapes
    """
    if isinstance(spec, Mapping):
        values: Dict[str, Any] = {str(key): value for key, value in spec.items()}
        return Condition(ConditionKind.HASH, values, inverse)
    if isinstance(spec, str):
        return Condition(ConditionKind.SYMBOL, spec, inverse)
    if callable(spec):
        return Condition(ConditionKind.BLOCK, spec, inverse)

    option = "unless" if inverse else "if"
    raise DeclarationError(
        f"Unsupported {option} condition {spec!r}: expected a mapping, a callable or an option name"
    )
