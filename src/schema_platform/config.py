"""Compiler settings.

Limits applied by the compiler, prompt composer and agent validator. The
defaults are the platform contract; a YAML file can override them for local
experimentation.
"""

from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class PromptMode(str, Enum):
    """Which LLM view the prompt's data structure section embeds."""

    STRUCTURE = "structure"
    GUIDANCE = "guidance"


class CompilerSettings(BaseModel):
    """Configuration shared by every compiler component."""

    instruction_char_limit: int = Field(
        default=500, ge=1, description="Cap for per-field extraction instructions"
    )
    general_instructions_char_limit: int = Field(
        default=3000, ge=1, description="Cap for schema-level general instructions"
    )
    ellipsis: str = Field(default="...", description="Marker appended to truncated text")

    max_agents: int = Field(default=10, ge=0, description="Maximum agents per schema")
    agent_name_max_length: int = Field(default=100, ge=1)
    agent_prompt_max_length: int = Field(default=5000, ge=1)
    agent_description_max_length: int = Field(default=500, ge=0)

    max_schema_size_bytes: int = Field(
        default=100_000, ge=1, description="Maximum serialized size of an author schema"
    )
    prompt_mode: PromptMode = Field(
        default=PromptMode.STRUCTURE, description="Schema view embedded in prompts"
    )


def load_settings(path: Path | str) -> CompilerSettings:
    """Load compiler settings from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated CompilerSettings
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError("Settings file must contain a YAML mapping")

    return CompilerSettings.model_validate(data)
