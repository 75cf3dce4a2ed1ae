"""Validator synthesizer.

Walks a wire schema tree and produces an executable record validator. The
tree is normalized into a plain JSON Schema (nullable optionals, date
patterns, bounds) and executed by ``jsonschema``.
"""

from dataclasses import dataclass, field
from typing import Any

import jsonschema

from schema_platform.schemas.wire import (
    ArrayNode,
    ObjectNode,
    PrimitiveNode,
    WireNode,
    WireTree,
    parse_wire_tree,
)
from schema_platform.utils.helpers import format_path


# ASCII digits only, no trailing newline
DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}\Z"


@dataclass(frozen=True)
class ValidatorMismatch:
    """A single field-level mismatch between a record and its schema."""

    path: str
    message: str
    expected: Any = None
    actual: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "message": self.message,
            "expected": self.expected,
            "actual": self.actual,
        }

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


@dataclass
class RecordValidationResult:
    """Result of validating one record."""

    valid: bool
    mismatches: list[ValidatorMismatch] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.mismatches)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "error_count": self.error_count,
            "mismatches": [m.to_dict() for m in self.mismatches],
        }


class RecordValidator:
    """Executable validator synthesized from a wire tree.

    Build once per schema version and reuse it for every record.
    """

    def __init__(self, validation_schema: dict[str, Any]):
        self.validation_schema = validation_schema
        self._validator = jsonschema.Draft202012Validator(validation_schema)

    def validate(self, record: Any) -> RecordValidationResult:
        """Validate a record.

        Args:
            record: Arbitrary candidate record

        Returns:
            Acceptance, or every field-level mismatch ordered by path
        """
        mismatches = sorted(
            (self._to_mismatch(error) for error in self._validator.iter_errors(record)),
            key=lambda m: (m.path, m.message),
        )
        return RecordValidationResult(valid=not mismatches, mismatches=mismatches)

    def is_valid(self, record: Any) -> bool:
        return self._validator.is_valid(record)

    def first_mismatch(self, record: Any) -> ValidatorMismatch | None:
        """Return the first mismatch by path order, or None if valid."""
        result = self.validate(record)
        return result.mismatches[0] if result.mismatches else None

    def _to_mismatch(self, error: jsonschema.ValidationError) -> ValidatorMismatch:
        parts = list(error.absolute_path)

        if error.validator == "required":
            missing = _missing_property(error)
            if missing is not None:
                parts.append(missing)
            return ValidatorMismatch(
                path=format_path(parts),
                message=error.message,
                expected="required",
                actual=None,
            )

        return ValidatorMismatch(
            path=format_path(parts),
            message=error.message,
            expected=f"{error.validator}: {error.validator_value}",
            actual=error.instance,
        )


def synthesize_validator(tree: WireTree | dict[str, Any]) -> RecordValidator:
    """Synthesize a record validator from a wire tree.

    Pure: the same tree always yields an equivalent validator.
    """
    return RecordValidator(build_validation_schema(tree))


def build_validation_schema(tree: WireTree | dict[str, Any]) -> dict[str, Any]:
    """Translate a wire tree into the JSON Schema that validators execute."""
    return _node_schema(parse_wire_tree(tree), nullable=False)


def _node_schema(node: WireNode, nullable: bool) -> dict[str, Any]:
    schema: dict[str, Any]

    if isinstance(node, ObjectNode):
        schema = {
            "type": "object",
            "properties": {
                name: _node_schema(child, nullable=not node.is_required(name))
                for name, child in node.properties.items()
            },
        }
        if node.required:
            schema["required"] = list(node.required)
        if node.additional_properties is False:
            schema["additionalProperties"] = False

    elif isinstance(node, ArrayNode):
        schema = {"type": "array", "items": _node_schema(node.items, nullable=False)}

    elif isinstance(node, PrimitiveNode):
        schema = {"type": node.type}
        if node.is_date:
            schema["pattern"] = DATE_PATTERN
        if node.type == "string":
            if node.min_length is not None:
                schema["minLength"] = node.min_length
            if node.max_length is not None:
                schema["maxLength"] = node.max_length
        if node.type in ("number", "integer"):
            if node.minimum is not None:
                schema["minimum"] = node.minimum
            if node.maximum is not None:
                schema["maximum"] = node.maximum

    else:
        # Opaque nodes accept anything
        return {}

    if node.enum is not None:
        schema["enum"] = list(node.enum) + ([None] if nullable else [])

    if nullable:
        schema["type"] = [schema["type"], "null"]

    return schema


def _missing_property(error: jsonschema.ValidationError) -> str | None:
    instance = error.instance
    if not isinstance(instance, dict):
        return None
    for name in error.validator_value:
        if name not in instance and repr(name) in error.message:
            return name
    return None
