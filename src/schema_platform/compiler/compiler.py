"""Schema compiler.

Turns one author schema into every derived artifact: a record validator, the
guidance and structure-only LLM views, and the extraction prompt. A schema is
either compiled completely or not at all.
"""

import copy
import logging
from typing import Any

from schema_platform.config import CompilerSettings, PromptMode
from schema_platform.compiler.compiled import CompiledSchema
from schema_platform.compiler.prompt import PromptComposer
from schema_platform.compiler.validator import RecordValidationResult, synthesize_validator
from schema_platform.compiler.views import project_guidance_view, project_structure_view
from schema_platform.engine.agents import (
    AgentDefinition,
    AgentListValidator,
    sort_agents_by_order,
)
from schema_platform.schemas.base import Property
from schema_platform.schemas.converter import to_wire
from schema_platform.schemas.meta import MetaSchemaValidator
from schema_platform.schemas.wire import WireTree, parse_wire_tree
from schema_platform.utils.helpers import TruncationEvent


logger = logging.getLogger(__name__)


class SchemaCompiler:
    """Compiles author schemas into CompiledSchema artifacts.

    Holds no per-schema state, so one instance can serve any number of
    schemas and callers.
    """

    def __init__(self, settings: CompilerSettings | None = None):
        self.settings = settings or CompilerSettings()
        self.meta_validator = MetaSchemaValidator(self.settings)
        self.agent_validator = AgentListValidator(self.settings)
        self.prompt_composer = PromptComposer(self.settings)

    def validate_author_schema(self, definition: Any) -> None:
        """Check a definition against the author meta-schema.

        Raises:
            SchemaShapeError: Listing every violated location
        """
        self.meta_validator.validate(definition)

    def compile(
        self,
        definition: dict[str, Any] | WireTree,
        name: str | None = None,
        prompt: str | None = None,
        agents: list[Any] | None = None,
    ) -> CompiledSchema:
        """Compile a wire schema definition.

        Args:
            definition: Author schema in wire format
            name: Optional schema name
            prompt: Optional general extraction instructions
            agents: Optional agent list to validate and order

        Returns:
            The compiled schema

        Raises:
            SchemaShapeError: If the definition violates the meta-schema
            MalformedWireNode: If the wire tree is structurally broken
            AgentListError: If the agent list is invalid
        """
        if isinstance(definition, WireTree):
            definition = definition.to_dict()

        self.validate_author_schema(definition)
        tree = parse_wire_tree(definition)
        wire_tree = copy.deepcopy(definition)

        ordered_agents: list[AgentDefinition] = []
        if agents is not None:
            ordered_agents = sort_agents_by_order(self.agent_validator.validate(agents))

        events: list[TruncationEvent] = []
        validator = synthesize_validator(tree)
        clean_view = project_guidance_view(
            tree,
            self.settings.instruction_char_limit,
            self.settings.ellipsis,
            events,
        )
        output_view = project_structure_view(tree)

        logger.debug(
            "Compiled schema %r: %d top-level fields, %d agents, %d truncations",
            name,
            len(tree.properties),
            len(ordered_agents),
            len(events),
        )

        return CompiledSchema(
            validator=validator,
            wire_tree=wire_tree,
            clean_view=clean_view,
            output_view=output_view,
            metadata={"jsonSchema": wire_tree},
            name=name,
            prompt=prompt,
            agents=tuple(ordered_agents),
            truncations=tuple(events),
        )

    def compile_properties(
        self,
        properties: list[Property] | list[dict[str, Any]],
        name: str | None = None,
        prompt: str | None = None,
        agents: list[Any] | None = None,
    ) -> CompiledSchema:
        """Convert a Property list to the wire format and compile it."""
        return self.compile(to_wire(properties).to_dict(), name=name, prompt=prompt, agents=agents)

    def validate_data(
        self,
        compiled_schema: CompiledSchema,
        data: Any,
    ) -> RecordValidationResult:
        """Validate a record against a compiled schema."""
        return compiled_schema.validator.validate(data)

    def generate_extraction_prompt(
        self,
        compiled_schema: CompiledSchema,
        general_instructions: str | None = None,
        mode: PromptMode | str | None = None,
        events: list[TruncationEvent] | None = None,
    ) -> str:
        """Compose the extraction prompt for a compiled schema.

        Falls back to the instructions stored on the compiled schema.
        """
        instructions = general_instructions if general_instructions is not None else compiled_schema.prompt
        return self.prompt_composer.compose(
            compiled_schema.wire_tree,
            instructions,
            mode=mode,
            events=events,
        )

    def validate_agents(self, agents: Any) -> list[AgentDefinition]:
        """Validate an agent list (fail-fast)."""
        return self.agent_validator.validate(agents)

    def sort_agents_by_order(self, agents: list[AgentDefinition]) -> list[AgentDefinition]:
        """Enabled agents in ascending order."""
        return sort_agents_by_order(agents)
