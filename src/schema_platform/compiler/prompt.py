"""Prompt composer.

Assembles the extraction prompt from general instructions, an LLM view of the
schema and per-field guidance. The section markers are consumed by people and
models reading the prompt and must stay verbatim.
"""

import json
import logging
from typing import Any

from schema_platform.config import CompilerSettings, PromptMode
from schema_platform.compiler.views import (
    is_date_node,
    project_guidance_view,
    project_structure_view,
)
from schema_platform.schemas.wire import (
    ArrayNode,
    ObjectNode,
    WireNode,
    WireTree,
    ordered_properties,
    parse_wire_tree,
)
from schema_platform.utils.helpers import TruncationEvent, truncate_text


logger = logging.getLogger(__name__)

GENERAL_INSTRUCTIONS_HEADER = "# General Instructions"
DATA_STRUCTURE_HEADER = "# Data Structure"
DATA_STRUCTURE_INTRO = "Extract data according to the following JSON schema structure:"
FIELD_GUIDANCE_HEADER = "# Field-Specific Extraction Guidance"
OBJECT_LIST_QUALIFIER = " (List of Objects)"
INSTRUCTIONS_MARKER = "**Extraction Instructions:**"
OBJECT_STRUCTURE_MARKER = "**Object Structure:**"
EXAMPLES_MARKER = "**Examples:**"


class PromptComposer:
    """Builds extraction prompts from compiled wire trees."""

    def __init__(self, settings: CompilerSettings | None = None):
        self.settings = settings or CompilerSettings()

    def compose(
        self,
        tree: WireTree | dict[str, Any],
        general_instructions: str | None = None,
        mode: PromptMode | str | None = None,
        events: list[TruncationEvent] | None = None,
    ) -> str:
        """Compose the extraction prompt.

        Args:
            tree: Wire tree of the compiled schema
            general_instructions: Optional schema-level instructions
            mode: Which view to embed (defaults to the settings' prompt mode)
            events: Optional list that receives truncation events

        Returns:
            The prompt text, lines joined with newlines
        """
        tree = parse_wire_tree(tree)
        mode = PromptMode(mode) if mode is not None else self.settings.prompt_mode

        parts: list[str] = []

        if general_instructions:
            parts.append(GENERAL_INSTRUCTIONS_HEADER)
            parts.append(self._cap(
                general_instructions,
                self.settings.general_instructions_char_limit,
                "general instructions",
                events,
            ))
            parts.append("")

        if mode == PromptMode.GUIDANCE:
            view = project_guidance_view(
                tree,
                self.settings.instruction_char_limit,
                self.settings.ellipsis,
                events,
            )
        else:
            view = project_structure_view(tree)

        parts.append(DATA_STRUCTURE_HEADER)
        parts.append(DATA_STRUCTURE_INTRO)
        parts.append("```json")
        parts.append(json.dumps(view, indent=2, ensure_ascii=False))
        parts.append("```")
        parts.append("")

        guided = [
            (name, node)
            for name, node in ordered_properties(tree)
            if node.extraction_instructions or node.examples
        ]

        if guided:
            parts.append(FIELD_GUIDANCE_HEADER)
            parts.append("")
            for name, node in guided:
                parts.extend(self._field_section(name, node, events))
                parts.append("")

        return "\n".join(parts)

    def _field_section(
        self,
        name: str,
        node: WireNode,
        events: list[TruncationEvent] | None,
    ) -> list[str]:
        lines: list[str] = []
        display_name = node.display_name or node.title or name
        object_items = node.items if isinstance(node, ArrayNode) and isinstance(node.items, ObjectNode) else None

        if object_items is not None:
            lines.append(f"## {display_name}{OBJECT_LIST_QUALIFIER}")
        else:
            lines.append(f"## {display_name}")

        if node.importance:
            lines.append(f"**Importance:** {node.importance.upper()}")

        if node.extraction_instructions:
            lines.append("")
            lines.append(INSTRUCTIONS_MARKER)
            lines.append(self._cap(
                node.extraction_instructions,
                self.settings.instruction_char_limit,
                f"field {name!r}",
                events,
            ))

        if object_items is not None:
            lines.append("")
            lines.append(OBJECT_STRUCTURE_MARKER)
            for child_name, child in ordered_properties(object_items):
                child_type = "date" if is_date_node(child) else child.type
                lines.append(f"- {child_name} ({child_type}): {child.description or ''}")

        if node.examples:
            lines.append("")
            lines.append(EXAMPLES_MARKER)
            for index, example in enumerate(node.examples, start=1):
                lines.extend(_format_example(index, name, example))

        return lines

    def _cap(
        self,
        text: str,
        limit: int,
        location: str,
        events: list[TruncationEvent] | None,
    ) -> str:
        capped, truncated = truncate_text(text, limit, self.settings.ellipsis)
        if truncated:
            logger.warning("Truncated %s in prompt from %d to %d chars", location, len(text), limit)
            if events is not None:
                events.append(
                    TruncationEvent(location=f"prompt:{location}", original_length=len(text), limit=limit)
                )
        return capped


def _format_example(index: int, field_name: str, example: dict[str, Any]) -> list[str]:
    lines = [f'{index}. Input: "{example.get("input", "")}"']
    output = _structured_output(example.get("output"))

    if isinstance(output, (dict, list)):
        lines.append(f"Output: {json.dumps(output, indent=2, ensure_ascii=False)}")
    else:
        # Scalar outputs are shown under the field name
        lines.append("Output:")
        lines.append(json.dumps({field_name: output}, indent=2, ensure_ascii=False))

    return lines


def _structured_output(output: Any) -> Any:
    """Decode structure-as-text outputs; leave everything else unchanged."""
    if isinstance(output, str):
        stripped = output.strip()
        if stripped.startswith(("{", "[")):
            try:
                return json.loads(stripped)
            except json.JSONDecodeError:
                return output
    return output


def generate_extraction_prompt(
    tree: WireTree | dict[str, Any],
    general_instructions: str | None = None,
    settings: CompilerSettings | None = None,
) -> str:
    """Convenience function to compose a prompt with default settings."""
    return PromptComposer(settings).compose(tree, general_instructions)
