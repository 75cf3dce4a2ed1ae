"""Tests for the schema compiler facade."""

import dataclasses

import pytest

from schema_platform import __version__
from schema_platform.compiler.compiled import CompiledSchema
from schema_platform.compiler.compiler import SchemaCompiler
from schema_platform.config import CompilerSettings, PromptMode
from schema_platform.errors import AgentListError, MalformedWireNode, SchemaShapeError
from schema_platform.schemas.converter import to_wire


@pytest.fixture
def compiler():
    """Create a compiler with default settings."""
    return SchemaCompiler()


@pytest.fixture
def shipment_properties():
    """Create a property list for a shipment notice."""
    return [
        {
            "name": "carrier",
            "type": "string",
            "required": True,
            "importance": "high",
            "extractionInstructions": "Name of the shipping company",
        },
        {"name": "shippedOn", "type": "date"},
        {
            "name": "parcels",
            "type": "list",
            "itemType": "object",
            "fields": [{"name": "weight", "type": "number", "required": True}],
        },
    ]


@pytest.fixture
def shipment_schema(shipment_properties):
    """Create the wire form of the shipment schema."""
    return to_wire(shipment_properties).to_dict()


class TestSchemaCompiler:
    """Tests for SchemaCompiler.compile."""

    def test_compile_produces_all_artifacts(self, compiler, shipment_schema):
        compiled = compiler.compile(shipment_schema, name="shipment", prompt="Read the notice.")

        assert isinstance(compiled, CompiledSchema)
        assert compiled.name == "shipment"
        assert compiled.prompt == "Read the notice."
        assert compiled.wire_tree == shipment_schema
        assert compiled.metadata == {"jsonSchema": shipment_schema}
        assert compiled.clean_view["properties"]["carrier"]["extractionInstructions"] == (
            "Name of the shipping company"
        )
        assert "extractionInstructions" not in compiled.output_view["properties"]["carrier"]
        assert compiled.agents == ()
        assert compiled.truncations == ()

    def test_wire_tree_is_a_copy(self, compiler, shipment_schema):
        compiled = compiler.compile(shipment_schema)
        shipment_schema["properties"]["carrier"]["title"] = "changed"

        assert compiled.wire_tree["properties"]["carrier"]["title"] == "carrier"

    def test_compiled_schema_is_frozen(self, compiler, shipment_schema):
        compiled = compiler.compile(shipment_schema)

        with pytest.raises(dataclasses.FrozenInstanceError):
            compiled.name = "other"

    def test_compile_validates_meta_schema(self, compiler):
        with pytest.raises(SchemaShapeError):
            compiler.compile({"type": "array"})

    def test_compile_rejects_empty_definition(self, compiler):
        with pytest.raises(SchemaShapeError, match="cannot be empty"):
            compiler.compile({})

    def test_compile_rejects_malformed_tree(self, compiler):
        with pytest.raises(MalformedWireNode):
            compiler.compile({"type": "object", "properties": {"tags": {"type": "array"}}})

    def test_compile_with_agents(self, compiler, shipment_schema):
        compiled = compiler.compile(shipment_schema, agents=[
            {"name": "verify", "order": 2, "prompt": "Verify the carrier"},
            {"name": "normalize", "order": 1, "prompt": "Normalize dates"},
            {"name": "off", "order": 3, "prompt": "Unused", "enabled": False},
        ])

        assert [a.name for a in compiled.agents] == ["normalize", "verify"]

    def test_compile_rejects_invalid_agents(self, compiler, shipment_schema):
        with pytest.raises(AgentListError):
            compiler.compile(shipment_schema, agents=[{"name": "a", "order": 0, "prompt": "x"}])

    def test_compile_records_truncations(self, compiler):
        compiled = compiler.compile_properties([
            {"name": "notes", "type": "string", "extractionInstructions": "n" * 600},
        ])

        assert len(compiled.truncations) == 1
        assert compiled.truncations[0].location == "view:notes"
        assert len(compiled.clean_view["properties"]["notes"]["extractionInstructions"]) == 503

    def test_compile_properties(self, compiler, shipment_properties, shipment_schema):
        compiled = compiler.compile_properties(shipment_properties)

        assert compiled.wire_tree == shipment_schema

    def test_compile_accepts_wire_tree_model(self, compiler, shipment_properties):
        compiled = compiler.compile(to_wire(shipment_properties))

        assert compiled.wire_tree["properties"]["shippedOn"]["format"] == "date"

    def test_to_dict(self, compiler, shipment_schema):
        data = compiler.compile(shipment_schema, agents=[{"name": "a", "order": 1, "prompt": "x"}]).to_dict()

        assert set(data) == {"name", "prompt", "wireTree", "cleanView", "outputView", "metadata", "agents"}
        assert data["agents"] == [{"name": "a", "prompt": "x", "order": 1, "enabled": True}]

    def test_settings_applied(self, shipment_schema):
        compiler = SchemaCompiler(CompilerSettings(instruction_char_limit=4))

        compiled = compiler.compile(shipment_schema)

        assert compiled.clean_view["properties"]["carrier"]["extractionInstructions"] == "Name..."

    def test_version(self):
        assert __version__ == "0.1.0"


class TestCompiledSchemaUsage:
    """Tests for validating data and composing prompts from a compiled schema."""

    def test_validate_data(self, compiler, shipment_schema):
        compiled = compiler.compile(shipment_schema)

        assert compiler.validate_data(compiled, {"carrier": "DHL", "parcels": [{"weight": 2}]}).valid
        result = compiler.validate_data(compiled, {"parcels": [{"weight": "heavy"}]})
        assert [m.path for m in result.mismatches] == ["carrier", "parcels[0].weight"]

    def test_compiled_validate_matches_validator(self, compiler, shipment_schema):
        compiled = compiler.compile(shipment_schema)
        record = {"carrier": "DHL", "shippedOn": "2024-1-1"}

        assert compiled.validate(record) == compiler.validate_data(compiled, record)
        assert not compiled.validate(record).valid

    def test_prompt_uses_stored_instructions(self, compiler, shipment_schema):
        compiled = compiler.compile(shipment_schema, prompt="Stored instructions")

        prompt = compiler.generate_extraction_prompt(compiled)

        assert prompt.startswith("# General Instructions\nStored instructions\n")

    def test_prompt_instructions_override(self, compiler, shipment_schema):
        compiled = compiler.compile(shipment_schema, prompt="Stored instructions")

        prompt = compiler.generate_extraction_prompt(compiled, "Override")

        assert "Override" in prompt
        assert "Stored instructions" not in prompt

    def test_prompt_mode(self, compiler, shipment_schema):
        compiled = compiler.compile(shipment_schema)

        structure = compiler.generate_extraction_prompt(compiled, mode=PromptMode.STRUCTURE)
        guidance = compiler.generate_extraction_prompt(compiled, mode="guidance")

        assert structure != guidance
        assert structure.count("Name of the shipping company") == 1
        assert guidance.count("Name of the shipping company") == 2

    def test_compiler_is_reusable(self, compiler, shipment_schema):
        first = compiler.compile(shipment_schema)
        second = compiler.compile(shipment_schema)

        assert first.to_dict() == second.to_dict()
