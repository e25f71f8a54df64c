"""Entity classes and their declaration state."""

from .dsl import EntityDSL
from .entity import Entity, resolve_entity
from .schema import Schema

__all__ = [
    "Entity",
    "EntityDSL",
    "Schema",
    "resolve_entity",
]
