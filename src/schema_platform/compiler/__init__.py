"""Compiler module - derived artifacts of a schema.

Contains:
- Validator Synthesizer: executable record validators
- View Projector: guidance and structure-only LLM views
- Prompt Composer: extraction prompt text
- Schema Compiler: bundles all of the above into a CompiledSchema
"""

from schema_platform.compiler.compiled import CompiledSchema
from schema_platform.compiler.compiler import SchemaCompiler
from schema_platform.compiler.prompt import PromptComposer, generate_extraction_prompt
from schema_platform.compiler.validator import (
    RecordValidationResult,
    RecordValidator,
    ValidatorMismatch,
    synthesize_validator,
)
from schema_platform.compiler.views import project_guidance_view, project_structure_view

__all__ = [
    "CompiledSchema",
    "SchemaCompiler",
    "PromptComposer",
    "generate_extraction_prompt",
    "RecordValidationResult",
    "RecordValidator",
    "ValidatorMismatch",
    "synthesize_validator",
    "project_guidance_view",
    "project_structure_view",
]
