"""
Schema Platform - compiles user-authored extraction schemas.

One author schema drives everything downstream of an LLM extraction: a record
validator, a guidance view and a structure-only view for the model, the
extraction prompt, the post-processing agent order and the result gate.
"""

__version__ = "0.1.0"

from schema_platform.config import CompilerSettings, PromptMode
from schema_platform.errors import (
    AgentListError,
    MalformedWireNode,
    SchemaPlatformError,
    SchemaShapeError,
)
from schema_platform.schemas.base import NestedProperty, Property
from schema_platform.schemas.converter import from_wire, to_wire
from schema_platform.compiler.compiled import CompiledSchema
from schema_platform.compiler.compiler import SchemaCompiler
from schema_platform.engine.agents import AgentDefinition, sort_agents_by_order, validate_agents
from schema_platform.engine.result_gate import ResultGate, generate_report

__all__ = [
    "CompilerSettings",
    "PromptMode",
    "AgentListError",
    "MalformedWireNode",
    "SchemaPlatformError",
    "SchemaShapeError",
    "NestedProperty",
    "Property",
    "from_wire",
    "to_wire",
    "CompiledSchema",
    "SchemaCompiler",
    "AgentDefinition",
    "sort_agents_by_order",
    "validate_agents",
    "ResultGate",
    "generate_report",
]
