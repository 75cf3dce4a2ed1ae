"""Post-processing agent definitions.

Agents are named, ordered steps attached to a schema version. Validation is
fail-fast: the first violation is raised and stops the check. Sorting is a
separate step that never re-validates.
"""

from typing import Any

from pydantic import BaseModel, Field

from schema_platform.config import CompilerSettings
from schema_platform.errors import AgentListError


class AgentDefinition(BaseModel):
    """A validated post-processing agent."""

    name: str = Field(..., description="Agent name, unique within the schema")
    prompt: str = Field(..., description="Instructions the agent runs with")
    order: int = Field(..., gt=0, description="Execution position, unique within the schema")
    enabled: bool = Field(default=True, description="Whether the agent runs")
    description: str | None = Field(default=None, description="Optional summary")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class AgentListValidator:
    """Validates agent lists against the per-schema limits."""

    def __init__(self, settings: CompilerSettings | None = None):
        self.settings = settings or CompilerSettings()

    def validate(self, agents: Any) -> list[AgentDefinition]:
        """Validate an agent list.

        Args:
            agents: Arbitrary value claiming to be an agent list

        Returns:
            The validated agents, in their original order

        Raises:
            AgentListError: On the first violated constraint
        """
        if not isinstance(agents, list):
            raise AgentListError("Agents must be an array")

        if len(agents) > self.settings.max_agents:
            raise AgentListError(f"Maximum {self.settings.max_agents} agents allowed per schema")

        seen_names: set[str] = set()
        seen_orders: set[int] = set()
        validated: list[AgentDefinition] = []

        for i, agent in enumerate(agents):
            if not isinstance(agent, dict):
                raise AgentListError(f"Agent at index {i} must be an object")

            name = agent.get("name")
            prompt = agent.get("prompt")
            order = agent.get("order")
            enabled = agent.get("enabled")
            description = agent.get("description")

            if name is None:
                raise AgentListError(f"Agent at index {i} must have a name")
            if prompt is None:
                raise AgentListError(f"Agent at index {i} must have a prompt")
            if order is None:
                raise AgentListError(f"Agent at index {i} must have an order")

            self._check_name(name, i, seen_names)
            self._check_prompt(prompt, i)
            order = self._check_order(order, i, seen_orders)

            if enabled is not None and not isinstance(enabled, bool):
                raise AgentListError(f"Agent enabled at index {i} must be a boolean")

            if description is not None:
                if not isinstance(description, str):
                    raise AgentListError(f"Agent description at index {i} must be a string")
                if len(description) > self.settings.agent_description_max_length:
                    raise AgentListError(
                        f"Agent description must not exceed "
                        f"{self.settings.agent_description_max_length} characters"
                    )

            validated.append(
                AgentDefinition(
                    name=name,
                    prompt=prompt,
                    order=order,
                    enabled=True if enabled is None else enabled,
                    description=description,
                )
            )

        return validated

    def _check_name(self, name: Any, i: int, seen_names: set[str]) -> None:
        if not isinstance(name, str):
            raise AgentListError(f"Agent name at index {i} must be a string")
        if not name:
            raise AgentListError(f"Agent name at index {i} must not be empty")
        if len(name) > self.settings.agent_name_max_length:
            raise AgentListError(
                f"Agent name must not exceed {self.settings.agent_name_max_length} characters"
            )
        if name in seen_names:
            raise AgentListError(f"Agent names must be unique within schema (duplicate: {name!r})")
        seen_names.add(name)

    def _check_prompt(self, prompt: Any, i: int) -> None:
        if not isinstance(prompt, str):
            raise AgentListError(f"Agent prompt at index {i} must be a string")
        if not prompt:
            raise AgentListError(f"Agent prompt at index {i} must not be empty")
        if len(prompt) > self.settings.agent_prompt_max_length:
            raise AgentListError(
                f"Agent prompt must not exceed {self.settings.agent_prompt_max_length} characters"
            )

    def _check_order(self, order: Any, i: int, seen_orders: set[int]) -> int:
        # bool is a subclass of int
        if isinstance(order, bool) or not isinstance(order, (int, float)):
            raise AgentListError(f"Agent order at index {i} must be a number")
        if isinstance(order, float):
            if not order.is_integer():
                raise AgentListError("Agent order must be a positive integer")
            order = int(order)
        if order <= 0:
            raise AgentListError("Agent order must be a positive integer")
        if order in seen_orders:
            raise AgentListError(f"Agent order values must be unique within schema (duplicate: {order})")
        seen_orders.add(order)
        return order


def validate_agents(
    agents: Any,
    settings: CompilerSettings | None = None,
) -> list[AgentDefinition]:
    """Convenience function to validate an agent list.

    Raises:
        AgentListError: On the first violated constraint
    """
    return AgentListValidator(settings).validate(agents)


def sort_agents_by_order(agents: list[AgentDefinition]) -> list[AgentDefinition]:
    """Return enabled agents in ascending execution order.

    Returns a new list; the input is left untouched.
    """
    return sorted(
        (agent for agent in agents if agent.enabled is not False),
        key=lambda agent: agent.order,
    )
