"""Exceptions raised by the schema platform.

Schema-level problems (author meta-schema, malformed wire trees, agent lists)
are raised to the caller and abort the operation. Record-level problems are
reported as result records instead (see ``ValidatorMismatch`` and
``GateRejection``).
"""

from dataclasses import dataclass


class SchemaPlatformError(ValueError):
    """Base class for all schema platform errors."""


@dataclass(frozen=True)
class SchemaIssue:
    """A single meta-schema violation."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path or '/'}: {self.message}"


class SchemaShapeError(SchemaPlatformError):
    """An author schema failed the structural contract.

    Carries every violated location, not just the first.
    """

    def __init__(self, issues: list[SchemaIssue]):
        self.issues = list(issues)
        details = "; ".join(str(issue) for issue in self.issues) or "Invalid schema"
        super().__init__(f"Invalid author schema: {details}")


class MalformedWireNode(SchemaPlatformError):
    """A wire schema tree node is structurally broken."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Malformed wire node at '{path}': {message}")


class AgentListError(SchemaPlatformError):
    """An agent list violated one of its constraints."""
