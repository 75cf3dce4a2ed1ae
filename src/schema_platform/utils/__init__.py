"""Utility functions for the Schema Platform."""

from schema_platform.utils.helpers import (
    TruncationEvent,
    truncate_text,
    json_type_name,
    schema_size,
    format_path,
)

__all__ = [
    "TruncationEvent",
    "truncate_text",
    "json_type_name",
    "schema_size",
    "format_path",
]
