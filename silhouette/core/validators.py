"""
Silhouette Core: Declaration validators.

This module validates and merges the options given to Entity.expose() and
Entity.with_options(). Everything here runs at declaration time, so a bad
declaration fails before any object is ever represented.
"""
from typing import Any, Dict, Iterable, List, Sequence

from silhouette.core.constants import EXPOSE_OPTIONS, SINGLE_ATTRIBUTE_OPTIONS, OptionKey
from silhouette.core.errors import DeclarationError, InvalidMultiAttributeUsageError, UnknownOptionError

# Options whose values accumulate instead of overriding
_CONDITION_OPTIONS = (OptionKey.IF, OptionKey.UNLESS)


def normalize_option_name(name: str) -> str:
    """Map a Python keyword-safe option name to its canonical form.

    ``if_`` becomes ``if``, ``as_`` becomes ``as`` and so on.

    Args:
        name: Option name as passed by the caller

    Returns:
        Canonical option name
    """
    if name.endswith("_") and name.rstrip("_") in EXPOSE_OPTIONS:
        return name.rstrip("_")
    return name


def validate_options(options: Dict[str, Any]) -> Dict[str, Any]:
    """Validate exposure options and resolve aliases.

    Args:
        options: Raw options

    Returns:
        New dictionary with canonical names; ``with`` is renamed to ``using``

    Raises:
        UnknownOptionError: If an option is not recognized
    """
    validated: Dict[str, Any] = {}
    for name, value in options.items():
        key = normalize_option_name(name)
        if key not in EXPOSE_OPTIONS:
            raise UnknownOptionError(name)
        validated[key] = value

    if OptionKey.WITH in validated:
        validated[OptionKey.USING] = validated.pop(OptionKey.WITH)

    return validated


def validate_attributes(attributes: Sequence[Any], options: Dict[str, Any]) -> None:
    """Validate the attribute list of an expose() call against its options.

    Args:
        attributes: Attribute names
        options: Validated, merged options

    Raises:
        DeclarationError: If no attribute is given or a name is not a string
        InvalidMultiAttributeUsageError: If single-field options are combined
            with several attributes, or a proc is combined with a callable formatter
    """
    if not attributes:
        raise DeclarationError("expose() requires at least one attribute")

    for attribute in attributes:
        if not isinstance(attribute, str):
            raise DeclarationError(f"Attribute names must be strings, got {attribute!r}")

    if len(attributes) > 1:
        for key in sorted(SINGLE_ATTRIBUTE_OPTIONS):
            if key in options:
                raise InvalidMultiAttributeUsageError(
                    f"You may not use the :{key} option on multi-attribute exposures."
                )

    if OptionKey.PROC in options and callable(options.get(OptionKey.FORMAT_WITH)):
        raise InvalidMultiAttributeUsageError(
            "You may not use a proc when also using a callable format_with"
        )


def merge_options(block_options: Iterable[Dict[str, Any]], options: Dict[str, Any]) -> Dict[str, Any]:
    """Merge with_options() scopes and explicit expose() options.

    Inner scopes override outer ones and explicit options override every scope.
    ``if``/``unless`` are special: two mappings are merged key by key, while a
    mapping meeting a callable or option name keeps the mapping in place and
    moves the other value to ``if_extras``/``unless_extras``, so all of them
    must still pass.

    Args:
        block_options: Active with_options() scopes, outermost first
        options: Validated options of the expose() call

    Returns:
        Merged options
    """
    extras: Dict[str, List[Any]] = {}

    def merge_value(key: str, existing: Any, new: Any) -> Any:
        if key not in _CONDITION_OPTIONS:
            return new

        extras_key = f"{key}_extras"
        if isinstance(existing, dict) and isinstance(new, dict):
            return {**existing, **new}
        if isinstance(new, dict):
            extras.setdefault(extras_key, []).append(existing)
            return new
        extras.setdefault(extras_key, []).append(new)
        return existing

    def merge_into(target: Dict[str, Any], step: Dict[str, Any]) -> Dict[str, Any]:
        result = dict(target)
        for key, value in step.items():
            if key in result:
                result[key] = merge_value(key, result[key], value)
            else:
                result[key] = value
        return result

    merged: Dict[str, Any] = {}
    for step in block_options:
        merged = merge_into(merged, step)
    merged = merge_into(merged, options)

    result: Dict[str, Any] = dict(extras)
    result.update(merged)
    return result
