"""Utility helper functions."""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TruncationEvent:
    """Records that a piece of text was cut to a length cap."""

    location: str
    original_length: int
    limit: int


def truncate_text(
    text: str,
    limit: int,
    ellipsis: str = "...",
) -> tuple[str, bool]:
    """Cap text at a character limit.

    Args:
        text: Text to cap
        limit: Maximum number of characters kept
        ellipsis: Marker appended when the text is cut

    Returns:
        Tuple of (possibly truncated text, whether truncation happened)
    """
    if len(text) > limit:
        return text[:limit] + ellipsis, True
    return text, False


def json_type_name(value: Any) -> str:
    """Return the JSON type name of a Python value."""
    if value is None:
        return "null"
    # bool is a subclass of int
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def schema_size(schema: Any) -> int:
    """Get the serialized size of a schema in characters.

    Returns 0 when the value cannot be serialized.
    """
    try:
        return len(json.dumps(schema))
    except (TypeError, ValueError):
        return 0


def format_path(parts: Any) -> str:
    """Format a sequence of keys and indexes as ``a.b[0].c``."""
    path = ""
    for part in parts:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path
