"""Wire schema tree.

The canonical nested serialization of a schema, used for storage and as the
compiler's working representation. Nodes form a closed set of variants
(primitive, array, object) plus an opaque passthrough for node types this
version does not know about. Consumers dispatch on the node class rather than
probing dicts for optional keys.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from schema_platform.errors import MalformedWireNode


JSON_SCHEMA_DRAFT = "https://json-schema.org/draft/2020-12/schema"

PRIMITIVE_TYPES = {"string", "number", "integer", "boolean"}

DATE_FORMAT = "date"

# Key order used when serializing presentation metadata
_METADATA_KEYS = (
    ("title", "title"),
    ("description", "description"),
    ("importance", "importance"),
    ("extraction_instructions", "extractionInstructions"),
    ("display_name", "displayName"),
    ("examples", "examples"),
    ("enum", "enum"),
    ("order", "order"),
)


class WireNode(BaseModel):
    """Presentation metadata carried by every node kind."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., description="Node type")
    title: str | None = Field(default=None, description="Field title")
    description: str | None = Field(default=None, description="Field description")
    importance: str | None = Field(default=None, description="high, medium or low")
    extraction_instructions: str | None = Field(default=None, alias="extractionInstructions")
    display_name: str | None = Field(default=None, alias="displayName")
    examples: list[dict[str, Any]] | None = Field(default=None, description="Input/output examples")
    enum: list[Any] | None = Field(default=None, description="Allowed literal values")
    order: int | None = Field(default=None, description="Position among siblings")

    def to_dict(self) -> dict[str, Any]:
        """Serialize the node back to its wire dict."""
        result: dict[str, Any] = {"type": self.type}
        self._add_metadata(result)
        return result

    def _add_metadata(self, result: dict[str, Any]) -> None:
        for attr, key in _METADATA_KEYS:
            value = getattr(self, attr)
            if value is not None:
                result[key] = value


class PrimitiveNode(WireNode):
    """A string, number, integer or boolean leaf."""

    format: str | None = Field(default=None, description="Only 'date' is meaningful, on strings")
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    minimum: int | float | None = Field(default=None)
    maximum: int | float | None = Field(default=None)

    @property
    def is_date(self) -> bool:
        return self.type == "string" and self.format == DATE_FORMAT

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        if self.format is not None:
            result["format"] = self.format
        self._add_metadata(result)
        for attr, key in (
            ("min_length", "minLength"),
            ("max_length", "maxLength"),
            ("minimum", "minimum"),
            ("maximum", "maximum"),
        ):
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        return result


class ArrayNode(WireNode):
    """An array whose elements all match ``items``."""

    items: WireNode = Field(..., description="Element schema")

    @property
    def is_object_list(self) -> bool:
        return isinstance(self.items, ObjectNode)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        self._add_metadata(result)
        result["items"] = self.items.to_dict()
        return result


class ObjectNode(WireNode):
    """An object with named properties."""

    properties: dict[str, WireNode] = Field(default_factory=dict, description="Named child nodes")
    required: list[str] = Field(default_factory=list, description="Names of required children")
    additional_properties: bool | None = Field(default=None, alias="additionalProperties")

    def is_required(self, name: str) -> bool:
        return name in self.required

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        self._add_metadata(result)
        result["properties"] = {name: node.to_dict() for name, node in self.properties.items()}
        if self.required:
            result["required"] = list(self.required)
        if self.additional_properties is not None:
            result["additionalProperties"] = self.additional_properties
        return result


class OpaqueNode(WireNode):
    """A node of a type this version does not understand.

    Keeps every key it was parsed from so it can be re-emitted unchanged.
    """

    raw: dict[str, Any] = Field(default_factory=dict, description="Original node dict")

    def to_dict(self) -> dict[str, Any]:
        result = dict(self.raw)
        result["type"] = self.type
        self._add_metadata(result)
        return result


class WireTree(ObjectNode):
    """Root object node of a schema."""

    schema_uri: str | None = Field(default=None, alias="$schema")

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.schema_uri is not None:
            result["$schema"] = self.schema_uri
        result.update(super().to_dict())
        return result


def ordered_properties(node: ObjectNode) -> list[tuple[str, WireNode]]:
    """Return an object's properties in display order.

    Properties are sorted by ``order``; nodes without one keep their
    encounter order after all ordered nodes.
    """
    entries = list(node.properties.items())
    return sorted(
        entries,
        key=lambda entry: (entry[1].order is None, entry[1].order or 0),
    )


def parse_wire_tree(data: dict[str, Any] | WireTree) -> WireTree:
    """Parse a wire schema dict into a typed tree.

    Args:
        data: Wire schema dict (root must be an object node)

    Returns:
        Parsed WireTree

    Raises:
        MalformedWireNode: If a node is structurally broken
    """
    if isinstance(data, WireTree):
        return data

    if not isinstance(data, dict):
        raise MalformedWireNode("$", "schema root must be a mapping")

    if data.get("type") != "object":
        raise MalformedWireNode("$", f"schema root must be an object node, got {data.get('type')!r}")

    properties, required = _parse_object_members(data, "$")

    return _build(
        WireTree,
        "$",
        **_metadata_kwargs(data),
        type="object",
        properties=properties,
        required=required,
        additional_properties=data.get("additionalProperties"),
        schema_uri=data.get("$schema"),
    )


def parse_node(data: Any, path: str) -> WireNode:
    """Parse a single wire node, dispatching on its ``type``.

    Args:
        data: Node dict
        path: Location of the node, used in error messages

    Returns:
        The typed node
    """
    if not isinstance(data, dict):
        raise MalformedWireNode(path, "node must be a mapping")

    node_type = data.get("type")
    if not isinstance(node_type, str) or not node_type:
        raise MalformedWireNode(path, "node is missing 'type'")

    metadata = _metadata_kwargs(data)

    if node_type in PRIMITIVE_TYPES:
        return _build(
            PrimitiveNode,
            path,
            **metadata,
            type=node_type,
            format=data.get("format"),
            min_length=data.get("minLength"),
            max_length=data.get("maxLength"),
            minimum=data.get("minimum"),
            maximum=data.get("maximum"),
        )

    if node_type == "array":
        if "items" not in data or data["items"] is None:
            raise MalformedWireNode(path, "array node is missing 'items'")
        items = data["items"]
        if isinstance(items, dict) and items.get("type") == "object" and "properties" not in items:
            raise MalformedWireNode(f"{path}.items", "object list is missing nested 'properties'")
        return _build(ArrayNode, path, **metadata, type="array", items=parse_node(items, f"{path}.items"))

    if node_type == "object":
        properties, required = _parse_object_members(data, path)
        return _build(
            ObjectNode,
            path,
            **metadata,
            type="object",
            properties=properties,
            required=required,
            additional_properties=data.get("additionalProperties"),
        )

    # Unknown kinds are passed through for forward compatibility
    return _build(OpaqueNode, path, **metadata, type=node_type, raw=dict(data))


def _build(node_class: type[WireNode], path: str, **kwargs: Any) -> Any:
    try:
        return node_class(**kwargs)
    except ValidationError as e:
        raise MalformedWireNode(path, str(e)) from e


def _parse_object_members(
    data: dict[str, Any],
    path: str,
) -> tuple[dict[str, WireNode], list[str]]:
    raw_properties = data.get("properties") or {}
    if not isinstance(raw_properties, dict):
        raise MalformedWireNode(f"{path}.properties", "properties must be a mapping")

    required = data.get("required") or []
    if not isinstance(required, list):
        raise MalformedWireNode(f"{path}.required", "required must be a list of names")

    properties = {
        name: parse_node(node, f"{path}.properties.{name}")
        for name, node in raw_properties.items()
    }
    return properties, list(required)


def _metadata_kwargs(data: dict[str, Any]) -> dict[str, Any]:
    return {
        attr: data.get(key)
        for attr, key in _METADATA_KEYS
    }
