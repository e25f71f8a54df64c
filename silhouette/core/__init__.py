"""Silhouette Core - constants, errors, validation and runtime options.

Import specific names from submodules:
    from silhouette.core.errors import AttributeNotFoundError
    from silhouette.core.options import Options
    from silhouette.core import validators
"""

from silhouette.core import constants, errors, options, validators

__all__ = [
    "constants",
    "errors",
    "options",
    "validators",
]
