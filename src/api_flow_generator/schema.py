"""JSON Schema model used by all generators.

A schema node is one variant of a closed union keyed on ``type``. Each variant
only carries the constraint fields that are meaningful for its type; a node
with an absent or unknown ``type`` becomes an ``OpaqueSchema``.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    model_validator,
)
from pydantic.alias_generators import to_camel

_KINDS = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
    "array": "array",
    "object": "object",
    "null": "null",
}


def _normalize_type(value: Any) -> Any:
    # OpenAPI 3.1 allows ["string", "null"]; the first non-null entry wins.
    if isinstance(value, list):
        non_null = [t for t in value if t != "null"]
        if non_null:
            return non_null[0]
        return "null" if value else None
    return value


class _SchemaNode(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    default: Any = None
    examples: list[Any] | None = None
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("type"), list):
            data = {**data, "type": _normalize_type(data["type"])}
        return data

    @property
    def has_default(self) -> bool:
        """True when the schema declares ``default``, even ``default: null``."""
        return "default" in self.model_fields_set


class StringSchema(_SchemaNode):
    type: Literal["string"] = "string"
    format: str | None = None
    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    enum: list[Any] | None = None


class NumberSchema(_SchemaNode):
    type: Literal["number", "integer"] = "number"
    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: bool | int | float | None = None
    exclusive_maximum: bool | int | float | None = None
    multiple_of: int | float | None = None
    enum: list[Any] | None = None


class BooleanSchema(_SchemaNode):
    type: Literal["boolean"] = "boolean"
    enum: list[Any] | None = None


class ArraySchema(_SchemaNode):
    type: Literal["array"] = "array"
    items: "JSONSchema | None" = None
    min_items: int | None = None
    max_items: int | None = None


class ObjectSchema(_SchemaNode):
    type: Literal["object"] = "object"
    properties: "dict[str, JSONSchema] | None" = None
    required: list[str] = Field(default_factory=list)


class NullSchema(_SchemaNode):
    type: Literal["null"] = "null"


class OpaqueSchema(_SchemaNode):
    """Schema node without a recognized ``type``."""

    type: Any = None


def _schema_kind(value: Any) -> str:
    if isinstance(value, dict):
        kind = _normalize_type(value.get("type"))
    else:
        kind = getattr(value, "type", None)
    if isinstance(kind, str):
        return _KINDS.get(kind, "opaque")
    return "opaque"


JSONSchema = Annotated[
    Union[
        Annotated[StringSchema, Tag("string")],
        Annotated[NumberSchema, Tag("number")],
        Annotated[BooleanSchema, Tag("boolean")],
        Annotated[ArraySchema, Tag("array")],
        Annotated[ObjectSchema, Tag("object")],
        Annotated[NullSchema, Tag("null")],
        Annotated[OpaqueSchema, Tag("opaque")],
    ],
    Discriminator(_schema_kind),
]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()

_adapter = TypeAdapter(JSONSchema)

SchemaNode = (
    StringSchema
    | NumberSchema
    | BooleanSchema
    | ArraySchema
    | ObjectSchema
    | NullSchema
    | OpaqueSchema
)


def parse_schema(data: Any) -> SchemaNode:
    """Build a schema node from a raw dict. ``None`` yields an opaque node.

    Raises ``pydantic.ValidationError`` when a constraint has the wrong type.
    """
    if isinstance(data, _SchemaNode):
        return data
    if data is None:
        return OpaqueSchema()
    return _adapter.validate_python(data)


def object_properties(schema: SchemaNode | None) -> dict[str, SchemaNode]:
    """Top-level properties of an object schema, or an empty dict."""
    if isinstance(schema, ObjectSchema) and schema.properties:
        return schema.properties
    return {}


def required_fields(schema: SchemaNode | None) -> list[str]:
    if isinstance(schema, ObjectSchema):
        return list(schema.required)
    return []
