"""Engine module - runtime steps around a compiled schema.

Contains:
- Agent List Validator: validates and orders post-processing agents
- Result Gate: screens extraction results before agents run
"""

from schema_platform.engine.agents import (
    AgentDefinition,
    AgentListValidator,
    sort_agents_by_order,
    validate_agents,
)
from schema_platform.engine.result_gate import (
    GateRejection,
    GateResult,
    ResultGate,
    generate_report,
)

__all__ = [
    "AgentDefinition",
    "AgentListValidator",
    "sort_agents_by_order",
    "validate_agents",
    "GateRejection",
    "GateResult",
    "ResultGate",
    "generate_report",
]
