"""
Silhouette Core: Constants and Type Definitions

This module provides package-wide constants, error codes, and the recognized
exposure option names.
"""
from enum import Enum, IntEnum
from typing import FrozenSet, TypeAlias

# Version information
SILHOUETTE_VERSION = "1.0.0"


class ErrorCode(IntEnum):
    """Standardized error codes for Silhouette errors."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Unknown option, bad declaration
    NOT_FOUND = 2  # Attribute, entity or formatter doesn't exist
    MISSING_OPTION = 3  # Required runtime option not supplied
    CONFLICT = 4  # Declaration used in the wrong place
    DEPENDENCY_ERROR = 5  # Encoder or loader unavailable
    INTERNAL_ERROR = 6  # Bug in Silhouette


class ExposureKind(Enum):
    """How an exposure resolves its value."""

    DELEGATOR = "delegator"  # Read the attribute from the source object
    BLOCK = "block"  # Call a user function
    FORMATTER = "formatter"  # Named formatter applied to the attribute
    FORMATTER_BLOCK = "formatter_block"  # Inline formatter applied to the attribute
    NESTING = "nesting"  # Sub-mapping built from child exposures
    REPRESENT = "represent"  # Inner value wrapped through another entity


# Type aliases for clarity
AttributeName: TypeAlias = str
OutputKey: TypeAlias = str


class OptionKey:
    """Exposure option names."""

    AS = "as"
    IF = "if"
    UNLESS = "unless"
    USING = "using"
    WITH = "with"
    PROC = "proc"
    DOCUMENTATION = "documentation"
    FORMAT_WITH = "format_with"
    SAFE = "safe"
    ATTR_PATH = "attr_path"
    IF_EXTRAS = "if_extras"
    UNLESS_EXTRAS = "unless_extras"
    MERGE = "merge"
    EXPOSE_NIL = "expose_nil"
    OVERRIDE = "override"
    PRELOAD = "preload"

    # Set internally by Entity.nesting(), never accepted from callers
    NESTING = "nesting"


# All options a caller may pass to expose() or with_options()
EXPOSE_OPTIONS: FrozenSet[str] = frozenset(
    {
        OptionKey.AS,
        OptionKey.IF,
        OptionKey.UNLESS,
        OptionKey.USING,
        OptionKey.WITH,
        OptionKey.PROC,
        OptionKey.DOCUMENTATION,
        OptionKey.FORMAT_WITH,
        OptionKey.SAFE,
        OptionKey.ATTR_PATH,
        OptionKey.IF_EXTRAS,
        OptionKey.UNLESS_EXTRAS,
        OptionKey.MERGE,
        OptionKey.EXPOSE_NIL,
        OptionKey.OVERRIDE,
        OptionKey.PRELOAD,
    }
)

# Options that only make sense for a single attribute
SINGLE_ATTRIBUTE_OPTIONS: FrozenSet[str] = frozenset(
    {OptionKey.AS, OptionKey.EXPOSE_NIL, OptionKey.PROC}
)


class RuntimeKey:
    """Runtime option names the engine itself reads or writes."""

    ROOT = "root"
    SERIALIZABLE = "serializable"
    ONLY = "only"
    EXCEPT = "except"
    COLLECTION = "collection"
    ATTR_PATH = "attr_path"


class ConfigKey:
    """Configuration keys consumed by the engine."""

    LOG_LEVEL = "silhouette.logging.level"
    COLLECTION_NAME = "silhouette.representation.collection_name"
    MAX_WORKERS = "silhouette.representation.max_workers"
    JSON_INDENT = "silhouette.serialization.json_indent"
    SORT_KEYS = "silhouette.serialization.sort_keys"
    XML_ROOT = "silhouette.serialization.xml_root"


class Defaults:
    """Default values for configurable behavior."""

    LOG_LEVEL = "WARNING"
    COLLECTION_NAME = "items"
    MAX_WORKERS = 1
    JSON_INDENT = None
    SORT_KEYS = False
    XML_ROOT = "hash"
