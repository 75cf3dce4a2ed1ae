"""Schema models, conversion and meta-schema validation.

Example usage:
    from schema_platform.schemas import Property, to_wire, from_wire

    tree = to_wire([Property(name="deliveryDate", type="date")])
    assert from_wire(tree) == [Property(name="deliveryDate", type="date")]
"""

from schema_platform.schemas.base import (
    Importance,
    ItemType,
    NestedProperty,
    Property,
    PropertyExample,
    PropertyType,
    ScalarItemType,
    parse_properties,
)
from schema_platform.schemas.wire import (
    ArrayNode,
    ObjectNode,
    OpaqueNode,
    PrimitiveNode,
    WireNode,
    WireTree,
    ordered_properties,
    parse_wire_tree,
)
from schema_platform.schemas.converter import from_wire, to_wire
from schema_platform.schemas.meta import MetaSchemaValidator, validate_author_schema
from schema_platform.schemas.loader import DocumentLoader, load_document

__all__ = [
    "Importance",
    "ItemType",
    "NestedProperty",
    "Property",
    "PropertyExample",
    "PropertyType",
    "ScalarItemType",
    "parse_properties",
    "ArrayNode",
    "ObjectNode",
    "OpaqueNode",
    "PrimitiveNode",
    "WireNode",
    "WireTree",
    "ordered_properties",
    "parse_wire_tree",
    "from_wire",
    "to_wire",
    "MetaSchemaValidator",
    "validate_author_schema",
    "DocumentLoader",
    "load_document",
]
