"""Silhouette Rules.

Conditions deciding whether an exposure is rendered for an object:
- HASH: compare runtime options against expected values
- BLOCK: call a predicate with (object, options)
- SYMBOL: test the truthiness of one runtime option
"""

from .conditions import Condition, ConditionKind, build_condition

__all__ = [
    "Condition",
    "ConditionKind",
    "build_condition",
]
