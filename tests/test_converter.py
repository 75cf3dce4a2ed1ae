"""Tests for the Property model, wire tree and converter."""

import warnings

import pytest
from pydantic import ValidationError

from schema_platform.errors import MalformedWireNode
from schema_platform.schemas.base import (
    Importance,
    ItemType,
    NestedProperty,
    Property,
    ScalarItemType,
    parse_properties,
)
from schema_platform.schemas.converter import ROOT_DESCRIPTION, ROOT_TITLE, from_wire, to_wire
from schema_platform.schemas.wire import (
    JSON_SCHEMA_DRAFT,
    ArrayNode,
    ObjectNode,
    OpaqueNode,
    PrimitiveNode,
    ordered_properties,
    parse_wire_tree,
)


@pytest.fixture
def invoice_properties():
    """Create a representative property list."""
    return [
        Property(
            name="invoiceNumber",
            type="string",
            title="Invoice Number",
            description="Number printed on the invoice",
            importance="high",
            required=True,
            extractionInstructions="Usually top right, prefixed with INV",
            examples=[{"id": "ex1", "input": "Invoice INV-001", "output": "INV-001"}],
        ),
        Property(name="total", type="number", required=True),
        Property(name="paid", type="boolean"),
        Property(name="issuedOn", type="date"),
        Property(name="tags", type="list"),
        Property(name="dueDates", type="list", itemType="date"),
        Property(
            name="lineItems",
            type="list",
            itemType="object",
            fields=[
                NestedProperty(name="sku", type="string", required=True),
                NestedProperty(name="qty", type="number"),
                NestedProperty(name="shippedOn", type="date"),
            ],
        ),
    ]


# =============================================================================
# Property Model Tests
# =============================================================================

class TestProperty:
    """Tests for the Property model."""

    def test_defaults(self):
        prop = Property(name="vendor", type="string")

        assert prop.title == "vendor"
        assert prop.description == ""
        assert prop.required is False
        assert prop.importance is None
        assert prop.priority == Importance.MEDIUM

    def test_priority_alias(self):
        prop = Property.model_validate({"name": "vendor", "type": "string", "priority": "high"})

        assert prop.importance == Importance.HIGH
        assert prop.priority == Importance.HIGH

    def test_list_defaults_to_string_items(self):
        prop = Property(name="tags", type="list")

        assert prop.item_type == ItemType.STRING
        assert not prop.is_object_list

    def test_object_list_requires_fields(self):
        with pytest.raises(ValidationError, match="at least one field"):
            Property(name="items", type="list", itemType="object")

    def test_object_list_rejects_duplicate_fields(self):
        with pytest.raises(ValidationError, match="duplicate field names: qty"):
            Property(
                name="items",
                type="list",
                itemType="object",
                fields=[
                    {"name": "qty", "type": "number"},
                    {"name": "qty", "type": "string"},
                ],
            )

    def test_item_type_only_on_lists(self):
        with pytest.raises(ValidationError, match="only valid on list properties"):
            Property(name="vendor", type="string", itemType="string")

    def test_nested_object_list_is_rejected(self):
        """Object lists cannot appear inside object lists."""
        with pytest.raises(ValidationError):
            Property(
                name="items",
                type="list",
                itemType="object",
                fields=[{"name": "parts", "type": "list", "itemType": "object"}],
            )

    def test_nested_fields_are_rejected(self):
        """A second level of fields is an error, not silently dropped."""
        with pytest.raises(ValidationError, match="nested one level deep"):
            Property.model_validate({
                "name": "lines",
                "type": "list",
                "itemType": "object",
                "fields": [{
                    "name": "sub",
                    "type": "list",
                    "fields": [{"name": "deep", "type": "string"}],
                }],
            })

    def test_nested_list_defaults_to_scalar_item_type(self):
        prop = Property.model_validate({
            "name": "lines",
            "type": "list",
            "itemType": "object",
            "fields": [{"name": "codes", "type": "list"}],
        })
        nested = prop.fields[0]

        assert isinstance(nested.item_type, ScalarItemType)
        assert nested.item_type == ScalarItemType.STRING
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert nested.to_dict()["itemType"] == "string"

    def test_to_dict_uses_camel_case(self):
        prop = Property(name="items", type="list", itemType="date", extractionInstructions="ISO dates")
        data = prop.to_dict()

        assert data["itemType"] == "date"
        assert data["extractionInstructions"] == "ISO dates"
        assert "item_type" not in data

    def test_parse_properties_rejects_duplicates(self):
        with pytest.raises(ValueError, match="Duplicate property names: total"):
            parse_properties([
                {"name": "total", "type": "number"},
                {"name": "total", "type": "string"},
            ])

    def test_parse_properties_requires_list(self):
        with pytest.raises(ValueError, match="must be a list"):
            parse_properties({"name": "total"})


# =============================================================================
# Wire Tree Tests
# =============================================================================

class TestWireTree:
    """Tests for wire tree parsing."""

    def test_parse_variants(self):
        tree = parse_wire_tree({
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "tags": {"type": "array", "items": {"type": "string"}},
                "address": {"type": "object", "properties": {"city": {"type": "string"}}},
                "location": {"type": "geo", "precision": 5},
            },
        })

        assert isinstance(tree.properties["name"], PrimitiveNode)
        assert isinstance(tree.properties["tags"], ArrayNode)
        assert isinstance(tree.properties["address"], ObjectNode)
        assert isinstance(tree.properties["location"], OpaqueNode)

    def test_opaque_node_round_trips_unchanged(self):
        node = {"type": "geo", "precision": 5, "title": "Location"}
        tree = parse_wire_tree({"type": "object", "properties": {"location": node}})

        assert tree.to_dict()["properties"]["location"] == node

    def test_root_must_be_object(self):
        with pytest.raises(MalformedWireNode, match="root must be an object"):
            parse_wire_tree({"type": "array", "items": {"type": "string"}})

    def test_array_without_items(self):
        with pytest.raises(MalformedWireNode, match="missing 'items'") as exc_info:
            parse_wire_tree({"type": "object", "properties": {"tags": {"type": "array"}}})

        assert exc_info.value.path == "$.properties.tags"

    def test_object_list_without_properties(self):
        with pytest.raises(MalformedWireNode, match="missing nested 'properties'"):
            parse_wire_tree({
                "type": "object",
                "properties": {"items": {"type": "array", "items": {"type": "object"}}},
            })

    def test_node_without_type(self):
        with pytest.raises(MalformedWireNode, match="missing 'type'"):
            parse_wire_tree({"type": "object", "properties": {"vendor": {"title": "Vendor"}}})

    def test_ordered_properties(self):
        tree = parse_wire_tree({
            "type": "object",
            "properties": {
                "c": {"type": "string"},
                "b": {"type": "string", "order": 1},
                "d": {"type": "string"},
                "a": {"type": "string", "order": 0},
            },
        })

        assert [name for name, _ in ordered_properties(tree)] == ["a", "b", "c", "d"]


# =============================================================================
# Converter Tests
# =============================================================================

class TestToWire:
    """Tests for Property list -> wire tree conversion."""

    def test_root_metadata(self, invoice_properties):
        data = to_wire(invoice_properties).to_dict()

        assert data["$schema"] == JSON_SCHEMA_DRAFT
        assert data["type"] == "object"
        assert data["title"] == ROOT_TITLE
        assert data["description"] == ROOT_DESCRIPTION
        assert data["required"] == ["invoiceNumber", "total"]

    def test_order_follows_list_position(self, invoice_properties):
        data = to_wire(invoice_properties).to_dict()

        orders = [node["order"] for node in data["properties"].values()]
        assert orders == list(range(len(invoice_properties)))

    def test_date_becomes_string_with_format(self):
        """A date property is a string node with format date."""
        data = to_wire([{"name": "deliveryDate", "type": "date", "required": False}]).to_dict()
        node = data["properties"]["deliveryDate"]

        assert node["type"] == "string"
        assert node["format"] == "date"
        assert "required" not in data

    def test_object_list(self):
        data = to_wire([{
            "name": "items",
            "type": "list",
            "itemType": "object",
            "fields": [{"name": "qty", "type": "number", "required": True}],
        }]).to_dict()
        node = data["properties"]["items"]

        assert node["type"] == "array"
        assert node["items"]["type"] == "object"
        assert node["items"]["properties"]["qty"]["type"] == "number"
        assert node["items"]["required"] == ["qty"]

    def test_guidance_metadata(self, invoice_properties):
        node = to_wire(invoice_properties).to_dict()["properties"]["invoiceNumber"]

        assert node["importance"] == "high"
        assert node["displayName"] == "Invoice Number"
        assert node["extractionInstructions"] == "Usually top right, prefixed with INV"
        assert node["examples"] == [{"id": "ex1", "input": "Invoice INV-001", "output": "INV-001"}]

    def test_unknown_type_is_opaque(self):
        tree = to_wire([{"name": "location", "type": "geo"}])

        assert isinstance(tree.properties["location"], OpaqueNode)
        assert tree.to_dict()["properties"]["location"]["type"] == "geo"


class TestFromWire:
    """Tests for wire tree -> Property list conversion."""

    def test_round_trip(self, invoice_properties):
        assert from_wire(to_wire(invoice_properties)) == invoice_properties

    def test_round_trip_through_dict(self, invoice_properties):
        assert from_wire(to_wire(invoice_properties).to_dict()) == invoice_properties

    def test_date_round_trip(self):
        original = Property.model_validate({"name": "deliveryDate", "type": "date", "required": False})

        assert from_wire(to_wire([original])) == [original]

    def test_object_list_round_trip(self):
        original = Property.model_validate({
            "name": "items",
            "type": "list",
            "itemType": "object",
            "fields": [{"name": "qty", "type": "number", "required": True}],
        })
        restored = from_wire(to_wire([original]))

        assert restored == [original]
        assert restored[0].fields[0].required is True

    def test_order_restored_from_shuffled_tree(self, invoice_properties):
        data = to_wire(invoice_properties).to_dict()
        shuffled = dict(reversed(list(data["properties"].items())))
        data["properties"] = shuffled

        names = [prop.name for prop in from_wire(data)]
        assert names == [prop.name for prop in invoice_properties]

    def test_unordered_nodes_follow_ordered_ones(self):
        props = from_wire({
            "type": "object",
            "properties": {
                "late": {"type": "string"},
                "first": {"type": "string", "order": 0},
            },
        })

        assert [prop.name for prop in props] == ["first", "late"]

    def test_integer_items_read_as_number(self):
        props = from_wire({
            "type": "object",
            "properties": {"counts": {"type": "array", "items": {"type": "integer"}}},
        })

        assert props[0].item_type == ItemType.NUMBER

    def test_object_list_nested_twice(self):
        with pytest.raises(MalformedWireNode, match="one level deep"):
            from_wire({
                "type": "object",
                "properties": {
                    "orders": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "lines": {
                                    "type": "array",
                                    "items": {"type": "object", "properties": {"qty": {"type": "number"}}},
                                },
                            },
                        },
                    },
                },
            })

    def test_unknown_type_passes_through(self):
        props = from_wire({"type": "object", "properties": {"location": {"type": "geo"}}})

        assert props[0].type == "geo"
