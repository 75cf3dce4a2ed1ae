"""Extraction result gate.

Screens candidate records before they reach the agent pipeline. A batch
always completes: rejected records are quarantined with their error attached
instead of being dropped or raised.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from schema_platform.compiler.compiled import CompiledSchema
from schema_platform.utils.helpers import json_type_name


logger = logging.getLogger(__name__)

VALIDATION_ERROR_KEY = "_validationError"
SKIP_AGENTS_KEY = "_skipAgents"

REPORT_SAMPLE_SIZE = 3


class _Rejected(Exception):
    """Internal signal carrying the first violated reason for a record."""


@dataclass(frozen=True)
class GateRejection:
    """Why a candidate at a given batch index was rejected."""

    index: int
    error: str
    data: Any

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "error": self.error, "data": self.data}


@dataclass
class GateResult:
    """Partition of a candidate batch."""

    valid: list[Any] = field(default_factory=list)
    invalid: list[dict[str, Any]] = field(default_factory=list)
    validation_errors: list[GateRejection] = field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return len(self.valid)

    @property
    def invalid_count(self) -> int:
        return len(self.invalid)

    @property
    def total(self) -> int:
        return self.valid_count + self.invalid_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "invalid": self.invalid,
            "validCount": self.valid_count,
            "invalidCount": self.invalid_count,
            "validationErrors": [e.to_dict() for e in self.validation_errors],
        }


class ResultGate:
    """Partitions candidate records into valid and invalid.

    By default the schema check is shallow: top-level required fields and
    top-level field types. With ``deep=True`` a compiled schema's synthesized
    validator is applied as well.
    """

    def __init__(self, deep: bool = False):
        self.deep = deep

    def validate_results(
        self,
        results: list[Any],
        schema: CompiledSchema | dict[str, Any] | None = None,
    ) -> GateResult:
        """Validate a batch of candidate records.

        Args:
            results: Candidate records, in batch order
            schema: Optional compiled schema or wire schema dict

        Returns:
            GateResult preserving batch order within each partition
        """
        gate_result = GateResult()
        wire_schema = schema.wire_tree if isinstance(schema, CompiledSchema) else schema

        for i, result in enumerate(results):
            try:
                self._check_structure(result)
                if wire_schema:
                    self._check_against_schema(result, wire_schema)
                if self.deep and isinstance(schema, CompiledSchema):
                    self._check_with_validator(result, schema)
            except _Rejected as e:
                error = str(e)
                logger.info("Rejected extraction result #%d: %s", i, error)
                base = dict(result) if isinstance(result, dict) else {}
                gate_result.invalid.append({
                    **base,
                    VALIDATION_ERROR_KEY: error,
                    SKIP_AGENTS_KEY: True,
                })
                gate_result.validation_errors.append(GateRejection(index=i, error=error, data=result))
                continue

            gate_result.valid.append(result)

        logger.debug(
            "Gate partitioned %d results: %d valid, %d invalid",
            len(results),
            gate_result.valid_count,
            gate_result.invalid_count,
        )
        return gate_result

    def _check_structure(self, result: Any) -> None:
        if not isinstance(result, dict):
            raise _Rejected(f"Invalid extraction result structure: {json_type_name(result)}")
        if not result:
            raise _Rejected("Invalid extraction result structure: empty object")

    def _check_against_schema(self, result: dict[str, Any], schema: dict[str, Any]) -> None:
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return

        required = schema.get("required")
        required = required if isinstance(required, list) else []
        for required_field in required:
            if required_field not in result:
                raise _Rejected(f"Missing required field: {required_field}")

        for field_name, field_schema in properties.items():
            if not isinstance(field_schema, dict) or field_name not in result:
                continue

            expected_type = field_schema.get("type")
            if not isinstance(expected_type, str) or expected_type not in _TYPE_MATCHERS:
                continue

            value = result[field_name]
            if value is None and field_name not in required:
                continue

            if value is None or not _TYPE_MATCHERS[expected_type](value):
                raise _Rejected(
                    f'Field "{field_name}" has wrong type: '
                    f"expected {expected_type}, got {json_type_name(value)}"
                )

    def _check_with_validator(self, result: dict[str, Any], schema: CompiledSchema) -> None:
        mismatch = schema.validator.first_mismatch(result)
        if mismatch is not None:
            raise _Rejected(f"Schema validation failed: {mismatch}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int) and not isinstance(value, bool)


_TYPE_MATCHERS = {
    "string": lambda value: isinstance(value, str),
    "number": _is_number,
    "integer": _is_integer,
    "boolean": lambda value: isinstance(value, bool),
    "array": lambda value: isinstance(value, list),
    "object": lambda value: isinstance(value, dict),
}


def generate_report(result: GateResult) -> str:
    """Summarize a gate result: counts plus the first few errors."""
    if result.invalid_count == 0:
        return f"All {result.valid_count} extraction results passed validation"

    error_summary = "\n".join(
        f"• Result #{e.index}: {e.error}"
        for e in result.validation_errors[:REPORT_SAMPLE_SIZE]
    )
    return (
        f"Validation issues: {result.valid_count} valid, {result.invalid_count} invalid\n"
        f"Sample errors:\n{error_summary}"
    )
