"""
Silhouette Core: Error taxonomy.

Declaration-time errors are raised while building an entity and leave no usable
partial declaration behind. Evaluation-time errors propagate unchanged to the
caller of represent() / serializable_hash().
"""
from typing import Optional

from silhouette.core.constants import ErrorCode


class SilhouetteError(Exception):
    """Base exception for all Silhouette errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        """Initialize SilhouetteError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class DeclarationError(SilhouetteError, ValueError):
    """Invalid use of the declaration API."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message, error_code)


class UnknownOptionError(DeclarationError):
    """An exposure was declared with an unrecognized option."""

    def __init__(self, option: str):
        self.option = option
        super().__init__(f"{option!r} is not a valid option.", ErrorCode.INVALID_INPUT)


class InvalidMultiAttributeUsageError(DeclarationError):
    """A single-field option was used on a multi-attribute exposure."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFLICT)


class NestingMisuseError(DeclarationError):
    """A root-only declaration was made inside an open nesting scope."""

    def __init__(self, message: str = "You cannot call 'unexpose' inside of nesting exposure!"):
        super().__init__(message, ErrorCode.CONFLICT)


class AttributeNotFoundError(SilhouetteError, AttributeError):
    """The source object cannot supply an exposed attribute."""

    def __init__(self, attribute: str, entity_name: Optional[str] = None, obj: object = None):
        owner = f"{entity_name} " if entity_name else ""
        super().__init__(
            f"{owner}missing attribute `{attribute}' on {obj!r}", ErrorCode.NOT_FOUND
        )
        # AttributeError.__init__ clears name/obj, so assign afterwards
        self.attribute = attribute
        self.entity_name = entity_name
        self.obj = obj


class RequiredOptionError(SilhouetteError, KeyError):
    """A required runtime option was not supplied."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"key not found: {key!r}", ErrorCode.MISSING_OPTION)

    def __str__(self) -> str:
        return self.message


class UnknownEntityError(SilhouetteError, LookupError):
    """A `using` reference does not resolve to an Entity class."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Cannot resolve entity {reference!r}", ErrorCode.NOT_FOUND)


class FormatterNotFoundError(SilhouetteError, LookupError):
    """A named formatter is neither registered nor an entity method."""

    def __init__(self, name: str, entity_name: str):
        self.name = name
        super().__init__(
            f"{entity_name} has no formatter or method named {name!r}", ErrorCode.NOT_FOUND
        )


class SerializationError(SilhouetteError):
    """Encoding a representation failed."""

    def __init__(self, message: str, format_name: Optional[str] = None):
        self.format_name = format_name
        super().__init__(message, ErrorCode.INTERNAL_ERROR)
