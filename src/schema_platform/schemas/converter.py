"""Property model converter.

Converts between the UI-facing Property list and the wire schema tree. The
two functions form a round-trip pair: ``from_wire(to_wire(props)) == props``.
"""

from typing import Any

from schema_platform.errors import MalformedWireNode
from schema_platform.schemas.base import (
    ItemType,
    NestedProperty,
    Property,
    PropertyType,
    parse_properties,
)
from schema_platform.schemas.wire import (
    DATE_FORMAT,
    JSON_SCHEMA_DRAFT,
    PRIMITIVE_TYPES,
    ArrayNode,
    ObjectNode,
    OpaqueNode,
    PrimitiveNode,
    WireNode,
    WireTree,
    ordered_properties,
    parse_wire_tree,
)


ROOT_TITLE = "Extraction Schema"
ROOT_DESCRIPTION = "Schema for extracting structured data from documents"

# Wire item types that map directly onto a list item type
_SCALAR_ITEM_TYPES = {"string": "string", "number": "number", "integer": "number", "boolean": "boolean"}


def to_wire(properties: list[Property] | list[dict[str, Any]]) -> WireTree:
    """Convert an ordered Property list into a wire schema tree.

    Each node's ``order`` is its position in the list. Dates become strings
    with ``format: date``; object lists become arrays of object nodes.

    Args:
        properties: Property models or their dict form

    Returns:
        The wire tree
    """
    props = parse_properties(properties)

    nodes, required = _convert_siblings(props)

    return WireTree(
        schema_uri=JSON_SCHEMA_DRAFT,
        type="object",
        title=ROOT_TITLE,
        description=ROOT_DESCRIPTION,
        properties=nodes,
        required=required,
    )


def from_wire(tree: WireTree | dict[str, Any]) -> list[Property]:
    """Convert a wire schema tree back into an ordered Property list.

    Properties come out sorted by their ``order``; nodes without an order
    follow in encounter order.

    Args:
        tree: Parsed tree or wire dict

    Returns:
        List of Property

    Raises:
        MalformedWireNode: If the tree is structurally broken
    """
    tree = parse_wire_tree(tree)

    return [
        Property.model_validate(
            _node_to_kwargs(name, node, tree.is_required(name), f"$.properties.{name}", nested=False)
        )
        for name, node in ordered_properties(tree)
    ]


def _convert_siblings(
    props: list[Property] | list[NestedProperty],
) -> tuple[dict[str, WireNode], list[str]]:
    nodes: dict[str, WireNode] = {}
    required: list[str] = []

    for index, prop in enumerate(props):
        nodes[prop.name] = _property_to_node(prop, index)
        if prop.required:
            required.append(prop.name)

    return nodes, required


def _property_to_node(prop: Property | NestedProperty, order: int) -> WireNode:
    metadata: dict[str, Any] = {
        "title": prop.title,
        "description": prop.description,
        "importance": prop.importance.value if prop.importance else None,
        "extraction_instructions": prop.extraction_instructions,
        "display_name": prop.title,
        "examples": [example.model_dump() for example in prop.examples] if prop.examples is not None else None,
        "order": order,
    }

    if prop.type == PropertyType.DATE:
        return PrimitiveNode(**metadata, type="string", format=DATE_FORMAT)

    if prop.type == PropertyType.LIST:
        if prop.item_type == ItemType.OBJECT:
            child_nodes, child_required = _convert_siblings(prop.fields or [])
            items: WireNode = ObjectNode(
                type="object",
                properties=child_nodes,
                required=child_required,
            )
        elif prop.item_type == ItemType.DATE:
            items = PrimitiveNode(type="string", format=DATE_FORMAT)
        else:
            items = PrimitiveNode(type=str(_enum_value(prop.item_type)))
        return ArrayNode(**metadata, type="array", items=items)

    node_type = str(_enum_value(prop.type))
    if node_type in PRIMITIVE_TYPES:
        return PrimitiveNode(**metadata, type=node_type)

    return OpaqueNode(**metadata, type=node_type)


def _node_to_kwargs(
    name: str,
    node: WireNode,
    required: bool,
    path: str,
    nested: bool,
) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "name": name,
        "title": node.title or name,
        "description": node.description or "",
        "importance": node.importance,
        "required": required,
        "extraction_instructions": node.extraction_instructions,
        "examples": node.examples,
    }

    if isinstance(node, PrimitiveNode):
        kwargs["type"] = PropertyType.DATE.value if node.is_date else node.type
        return kwargs

    if isinstance(node, ArrayNode):
        kwargs["type"] = PropertyType.LIST.value
        items = node.items

        if isinstance(items, ObjectNode):
            if nested:
                raise MalformedWireNode(path, "object lists may only be nested one level deep")
            kwargs["item_type"] = ItemType.OBJECT.value
            kwargs["fields"] = [
                NestedProperty.model_validate(
                    _node_to_kwargs(
                        child_name,
                        child,
                        items.is_required(child_name),
                        f"{path}.items.properties.{child_name}",
                        nested=True,
                    )
                )
                for child_name, child in ordered_properties(items)
            ]
        elif isinstance(items, PrimitiveNode) and items.is_date:
            kwargs["item_type"] = ItemType.DATE.value
        elif isinstance(items, PrimitiveNode):
            kwargs["item_type"] = _SCALAR_ITEM_TYPES.get(items.type, ItemType.STRING.value)
        else:
            kwargs["item_type"] = ItemType.STRING.value
        return kwargs

    # Plain objects and unknown kinds surface as opaque property types
    kwargs["type"] = node.type
    return kwargs


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)
