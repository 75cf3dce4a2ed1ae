"""Compiled schema artifact."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from schema_platform.compiler.validator import RecordValidationResult, RecordValidator
from schema_platform.utils.helpers import TruncationEvent

if TYPE_CHECKING:
    from schema_platform.engine.agents import AgentDefinition


@dataclass(frozen=True)
class CompiledSchema:
    """Every artifact derived from one schema version.

    Immutable once built. Versioning and caching belong to the caller.
    """

    validator: RecordValidator
    wire_tree: dict[str, Any]
    clean_view: dict[str, Any]
    output_view: dict[str, Any]
    metadata: dict[str, Any]
    name: str | None = None
    prompt: str | None = None
    agents: tuple["AgentDefinition", ...] = ()
    truncations: tuple[TruncationEvent, ...] = field(default=())

    def validate(self, record: Any) -> RecordValidationResult:
        """Validate a record with the synthesized validator."""
        return self.validator.validate(record)

    def to_dict(self) -> dict[str, Any]:
        """Serialize every artifact except the executable validator."""
        return {
            "name": self.name,
            "prompt": self.prompt,
            "wireTree": self.wire_tree,
            "cleanView": self.clean_view,
            "outputView": self.output_view,
            "metadata": self.metadata,
            "agents": [agent.to_dict() for agent in self.agents],
        }
