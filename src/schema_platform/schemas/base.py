"""Base classes for the author-facing Property model.

A Property is one extraction field as edited in the schema UI or produced by
an upstream generator. Property lists are ordered; object lists nest exactly
one level deep.
"""

from enum import Enum
from typing import Any, ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class PropertyType(str, Enum):
    """Property types understood by the converter."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    LIST = "list"


class ItemType(str, Enum):
    """Element types of a list property."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OBJECT = "object"


class ScalarItemType(str, Enum):
    """Element types allowed inside an object list (no further nesting)."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


class Importance(str, Enum):
    """Field importance, shown to the extraction model."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PropertyExample(BaseModel):
    """An input/output example attached to a field."""

    id: str = Field(default="", description="Example identifier")
    input: str = Field(..., description="Source text the example is taken from")
    output: Any = Field(..., description="Expected value: scalar text or a structure")


class _PropertyFields(BaseModel):
    """Fields shared by top-level and nested properties."""

    model_config = ConfigDict(populate_by_name=True)

    item_type_enum: ClassVar[type[Enum]] = ItemType

    name: str = Field(..., min_length=1, description="Field name, unique among siblings")
    type: str = Field(..., description="Property type (string, number, boolean, date, list)")
    title: str | None = Field(default=None, description="Display title, defaults to name")
    description: str = Field(default="", description="Field description")
    importance: Importance | None = Field(
        default=None,
        validation_alias=AliasChoices("importance", "priority"),
        description="Field importance (priority is accepted as an alias)",
    )
    required: bool = Field(default=False, description="Whether the field is required")
    extraction_instructions: str | None = Field(
        default=None,
        alias="extractionInstructions",
        description="Free-text guidance for the extraction model",
    )
    examples: list[PropertyExample] | None = Field(default=None, description="Worked examples")

    @property
    def priority(self) -> Importance:
        return self.importance or Importance.MEDIUM

    @property
    def is_object_list(self) -> bool:
        return self.type == PropertyType.LIST and getattr(self, "item_type", None) == ItemType.OBJECT

    @model_validator(mode="after")
    def _check_shape(self) -> "_PropertyFields":
        if not self.title:
            self.title = self.name

        item_type = getattr(self, "item_type", None)
        fields = getattr(self, "fields", None)

        if self.type == PropertyType.LIST:
            if item_type is None:
                self.item_type = self.item_type_enum("string") if fields is None else ItemType.OBJECT
                item_type = self.item_type
            if item_type == ItemType.OBJECT:
                if not fields:
                    raise ValueError(f"List property '{self.name}' of objects must have at least one field")
                duplicates = find_duplicate_names(fields)
                if duplicates:
                    raise ValueError(
                        f"List property '{self.name}' has duplicate field names: {', '.join(duplicates)}"
                    )
            elif fields is not None:
                raise ValueError(f"Only object lists may define fields (property '{self.name}')")
        elif item_type is not None or fields is not None:
            raise ValueError(f"itemType and fields are only valid on list properties (property '{self.name}')")

        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase dict used on the wire and in files."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class NestedProperty(_PropertyFields):
    """A field of an object list.

    Its item type excludes ``object``, so object lists cannot nest further.
    """

    item_type_enum: ClassVar[type[Enum]] = ScalarItemType

    item_type: ScalarItemType | None = Field(
        default=None, alias="itemType", description="Element type when type is list"
    )

    @model_validator(mode="before")
    @classmethod
    def _reject_fields(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("fields") is not None:
            raise ValueError(
                f"Field '{data.get('name')}': object lists may only be nested one level deep"
            )
        return data


class Property(_PropertyFields):
    """A top-level extraction field."""

    item_type: ItemType | None = Field(
        default=None, alias="itemType", description="Element type when type is list"
    )
    fields: list[NestedProperty] | None = Field(
        default=None, description="Object fields when itemType is object"
    )


def find_duplicate_names(properties: list[_PropertyFields]) -> list[str]:
    """Return names that occur more than once, in first-seen order."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for prop in properties:
        if prop.name in seen and prop.name not in duplicates:
            duplicates.append(prop.name)
        seen.add(prop.name)
    return duplicates


def parse_properties(data: list[dict[str, Any] | Property]) -> list[Property]:
    """Validate a list of property dicts into Property models.

    Args:
        data: Property dicts (camelCase keys) or Property instances

    Returns:
        List of Property

    Raises:
        ValueError: If the input is not a list or names are duplicated
    """
    if not isinstance(data, list):
        raise ValueError("Properties must be a list")

    properties = [
        item if isinstance(item, Property) else Property.model_validate(item)
        for item in data
    ]

    duplicates = find_duplicate_names(properties)
    if duplicates:
        raise ValueError(f"Duplicate property names: {', '.join(duplicates)}")

    return properties
