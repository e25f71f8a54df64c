"""Silhouette: declarative object representations.

Entities declare which attributes of a source object are exposed, under
which keys and conditions, and how nested objects are represented:

    from silhouette import Entity

    class UserEntity(Entity):
        @classmethod
        def declare(cls):
            cls.expose("name")
            cls.expose("email", if_={"type": "full"})

    UserEntity.represent(user, serializable=True, type="full")
"""

from silhouette.core.constants import SILHOUETTE_VERSION, ErrorCode, ExposureKind
from silhouette.core.errors import (
    AttributeNotFoundError,
    DeclarationError,
    FormatterNotFoundError,
    InvalidMultiAttributeUsageError,
    NestingMisuseError,
    RequiredOptionError,
    SerializationError,
    SilhouetteError,
    UnknownEntityError,
    UnknownOptionError,
)
from silhouette.core.options import Options
from silhouette.entity import Entity, EntityDSL, resolve_entity
from silhouette.integration import Preloader, set_default_loader

__version__ = SILHOUETTE_VERSION

__all__ = [
    # Entities
    "Entity",
    "EntityDSL",
    "Options",
    "resolve_entity",
    # Preloading
    "Preloader",
    "set_default_loader",
    # Errors
    "SilhouetteError",
    "DeclarationError",
    "UnknownOptionError",
    "InvalidMultiAttributeUsageError",
    "NestingMisuseError",
    "AttributeNotFoundError",
    "RequiredOptionError",
    "UnknownEntityError",
    "FormatterNotFoundError",
    "SerializationError",
    "ErrorCode",
    "ExposureKind",
]
