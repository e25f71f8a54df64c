"""Attribute access over mappings, namespaces, fetchable containers and objects."""

from .delegator import (
    Delegator,
    FetchableObject,
    HashObject,
    PlainObject,
    StructObject,
    delegator_for,
)

__all__ = [
    "Delegator",
    "HashObject",
    "StructObject",
    "FetchableObject",
    "PlainObject",
    "delegator_for",
]
