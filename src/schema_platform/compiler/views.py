"""LLM view projector.

Derives two reduced views from a wire tree:

- the guidance view keeps shape plus capped per-field extraction
  instructions, for prompting;
- the structure-only view keeps nothing but shape, and is the exact output
  contract the extraction model must reproduce.

Both walks preserve array/object nesting and are idempotent.
"""

import logging
from typing import Any

from schema_platform.schemas.wire import (
    ArrayNode,
    ObjectNode,
    PrimitiveNode,
    WireNode,
    WireTree,
    parse_wire_tree,
)
from schema_platform.utils.helpers import TruncationEvent, truncate_text


logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTION_LIMIT = 500


class ViewProjector:
    """Projects wire trees into guidance or structure-only views."""

    def __init__(
        self,
        include_guidance: bool,
        instruction_limit: int = DEFAULT_INSTRUCTION_LIMIT,
        ellipsis: str = "...",
        events: list[TruncationEvent] | None = None,
    ):
        self.include_guidance = include_guidance
        self.instruction_limit = instruction_limit
        self.ellipsis = ellipsis
        self.events = events

    def project(self, tree: WireTree | dict[str, Any]) -> dict[str, Any]:
        return self._project_node(parse_wire_tree(tree), path="")

    def _project_node(self, node: WireNode, path: str) -> dict[str, Any]:
        view: dict[str, Any] = {"type": node.type}
        if node.title is not None:
            view["title"] = node.title

        if isinstance(node, ObjectNode):
            view["required"] = list(node.required)
            view["properties"] = {
                name: self._project_field(child, f"{path}.{name}" if path else name)
                for name, child in node.properties.items()
            }
        elif isinstance(node, ArrayNode):
            view["items"] = self._project_node(node.items, f"{path}[]")

        return view

    def _project_field(self, node: WireNode, path: str) -> dict[str, Any]:
        view: dict[str, Any] = {"type": node.type}
        if node.title is not None:
            view["title"] = node.title

        if self.include_guidance and node.extraction_instructions:
            view["extractionInstructions"] = self._cap(node.extraction_instructions, path)

        if isinstance(node, ArrayNode):
            view["items"] = self._project_node(node.items, f"{path}[]")
        elif isinstance(node, ObjectNode):
            view["required"] = list(node.required)
            view["properties"] = {
                name: self._project_field(child, f"{path}.{name}")
                for name, child in node.properties.items()
            }

        if node.enum is not None:
            view["enum"] = list(node.enum)

        return view

    def _cap(self, instructions: str, path: str) -> str:
        capped, truncated = truncate_text(instructions, self.instruction_limit, self.ellipsis)
        if truncated:
            logger.warning(
                "Truncated extractionInstructions for field %r from %d to %d chars",
                path,
                len(instructions),
                self.instruction_limit,
            )
            if self.events is not None:
                self.events.append(
                    TruncationEvent(
                        location=f"view:{path}",
                        original_length=len(instructions),
                        limit=self.instruction_limit,
                    )
                )
        return capped


def project_guidance_view(
    tree: WireTree | dict[str, Any],
    instruction_limit: int = DEFAULT_INSTRUCTION_LIMIT,
    ellipsis: str = "...",
    events: list[TruncationEvent] | None = None,
) -> dict[str, Any]:
    """Project the guidance view (shape plus capped instructions).

    Args:
        tree: Wire tree or wire dict
        instruction_limit: Character cap for extraction instructions
        ellipsis: Marker appended to capped instructions
        events: Optional list that receives a TruncationEvent per cap applied

    Returns:
        The guidance view dict
    """
    return ViewProjector(True, instruction_limit, ellipsis, events).project(tree)


def project_structure_view(tree: WireTree | dict[str, Any]) -> dict[str, Any]:
    """Project the structure-only view (no guidance fields at any depth)."""
    return ViewProjector(False).project(tree)


def is_date_node(node: WireNode) -> bool:
    return isinstance(node, PrimitiveNode) and node.is_date
