"""Helpers for nested dict content addressed by dotted keys ("a.b.c")."""

from typing import Any

from .exceptions import MissingKeyFailure

KEY_SEPARATOR = "."


def get_required_nested_value(key: str, content: dict[str, Any]) -> Any:
    """Resolve a dotted key in nested content.

    Args:
        key: Dotted key (e.g., "database.connection.host")
        content: Nested dict content

    Returns:
        The value stored at key

    Raises:
        MissingKeyFailure: If any level of the key is not defined
    """
    current: Any = content
    for level in key.split(KEY_SEPARATOR):
        if not isinstance(current, dict) or level not in current:
            raise MissingKeyFailure(key)
        current = current[level]
    return current


def is_empty_value(value: Any) -> bool:
    """Loose emptiness: None, False, 0, "", "0" and empty containers."""
    if value is None or value == "0":
        return True
    return not value


def is_numeric(value: Any) -> bool:
    """Check for a number or a numeric string (booleans excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def stringify_value(value: Any) -> str:
    """Compact value rendering for action descriptions."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return repr(value)


__all__ = [
    "KEY_SEPARATOR",
    "get_required_nested_value",
    "is_empty_value",
    "is_numeric",
    "stringify_value",
]
