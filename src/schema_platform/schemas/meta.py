"""Meta-schema validation for author-submitted schema definitions.

Runs before any recursive conversion. Every violation is collected so the
author sees all problems at once.
"""

from typing import Any

import jsonschema

from schema_platform.config import CompilerSettings
from schema_platform.errors import SchemaIssue, SchemaShapeError
from schema_platform.utils.helpers import schema_size


AUTHOR_SCHEMA_META_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"enum": ["object"]},
        "properties": {"type": "object"},
    },
}

# Optional extraction-guidance keys on each top-level field
GUIDANCE_META_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "properties": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "importance": {"enum": ["high", "medium", "low"]},
                    "displayName": {"type": "string"},
                    "extractionInstructions": {"type": "string"},
                    "order": {"type": "integer", "minimum": 0},
                    "examples": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["input", "output"],
                            "properties": {
                                "input": {"type": "string"},
                                "output": {
                                    "type": ["string", "number", "boolean", "object", "array"],
                                },
                            },
                        },
                    },
                },
            },
        },
    },
}


class MetaSchemaValidator:
    """Checks author schemas against the structural contract.

    The jsonschema validators are built per instance, never shared through
    module state.
    """

    def __init__(self, settings: CompilerSettings | None = None):
        self.settings = settings or CompilerSettings()
        self._author_validator = jsonschema.Draft7Validator(AUTHOR_SCHEMA_META_SCHEMA)
        self._guidance_validator = jsonschema.Draft7Validator(GUIDANCE_META_SCHEMA)

    def collect_issues(self, definition: Any) -> list[SchemaIssue]:
        """Return every contract violation of a definition.

        Args:
            definition: Candidate schema definition

        Returns:
            List of issues, empty when the definition is acceptable
        """
        issues = self._issues_from(self._author_validator, definition)

        # Guidance checks only make sense once the outer shape is right
        if not issues:
            issues.extend(self._issues_from(self._guidance_validator, definition))

        size = schema_size(definition)
        if size > self.settings.max_schema_size_bytes:
            issues.append(
                SchemaIssue(
                    path="",
                    message=(
                        f"schema is {size} bytes, exceeding the "
                        f"{self.settings.max_schema_size_bytes} byte limit"
                    ),
                )
            )

        return issues

    def validate(self, definition: Any) -> None:
        """Validate a definition, raising on any violation.

        Raises:
            SchemaShapeError: Listing every violated location
        """
        if definition is None or (isinstance(definition, dict) and not definition):
            raise SchemaShapeError(
                [SchemaIssue(path="", message="schema definition is required and cannot be empty")]
            )

        issues = self.collect_issues(definition)
        if issues:
            raise SchemaShapeError(issues)

    def _issues_from(
        self,
        validator: jsonschema.Draft7Validator,
        definition: Any,
    ) -> list[SchemaIssue]:
        errors = sorted(validator.iter_errors(definition), key=lambda e: list(map(str, e.absolute_path)))
        return [
            SchemaIssue(
                path="/" + "/".join(str(p) for p in error.absolute_path),
                message=error.message,
            )
            for error in errors
        ]


def validate_author_schema(
    definition: Any,
    settings: CompilerSettings | None = None,
) -> None:
    """Convenience function to validate an author schema.

    Raises:
        SchemaShapeError: If the definition violates the contract
    """
    MetaSchemaValidator(settings).validate(definition)
