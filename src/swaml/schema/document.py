"""Conversion between schema variants and JSON Schema dictionaries."""

from typing import Any

from .types import (
    AnyOfType,
    ArrayType,
    BoolType,
    EnumType,
    FloatType,
    IntType,
    LiteralType,
    MapType,
    NullType,
    ObjectType,
    OptionalType,
    ReferenceType,
    RefType,
    SchemaType,
    StringType,
)

DEFS_PREFIXES = ("#/$defs/", "#/definitions/")

_LITERAL_JSON_TYPES = {bool: "boolean", int: "integer", str: "string"}
_LITERAL_TAGS = {bool: "literal_bool", int: "literal_int", str: "literal_string"}


def to_dict(schema: SchemaType) -> dict[str, Any]:
    """Render a schema as a JSON-Schema-shaped dictionary.

    Objects default ``additionalProperties`` to ``false``. Optional types become
    ``anyOf`` with ``null``; literals become single-value typed enums.
    """
    if isinstance(schema, StringType):
        return {"type": "string"}
    if isinstance(schema, IntType):
        return {"type": "integer"}
    if isinstance(schema, FloatType):
        return {"type": "number"}
    if isinstance(schema, BoolType):
        return {"type": "boolean"}
    if isinstance(schema, NullType):
        return {"type": "null"}
    if isinstance(schema, ArrayType):
        return {"type": "array", "items": to_dict(schema.items)}
    if isinstance(schema, MapType):
        return {
            "type": "object",
            "properties": {},
            "additionalProperties": to_dict(schema.value),
        }
    if isinstance(schema, ObjectType):
        properties: dict[str, Any] = {}
        for name, prop in schema.properties.items():
            rendered = to_dict(prop)
            if name in schema.descriptions:
                rendered["description"] = schema.descriptions[name]
            properties[name] = rendered
        result: dict[str, Any] = {"type": "object", "properties": properties}
        if schema.required:
            result["required"] = list(schema.required)
        if schema.additional_properties is None:
            result["additionalProperties"] = False
        else:
            result["additionalProperties"] = to_dict(schema.additional_properties)
        return result
    if isinstance(schema, EnumType):
        return {"type": "string", "enum": list(schema.values)}
    if isinstance(schema, (RefType, ReferenceType)):
        return {"$ref": f"#/$defs/{schema.name}"}
    if isinstance(schema, AnyOfType):
        return {"anyOf": [to_dict(member) for member in schema.types]}
    if isinstance(schema, OptionalType):
        return {"anyOf": [to_dict(schema.inner), {"type": "null"}]}
    if isinstance(schema, LiteralType):
        return {
            "type": _LITERAL_JSON_TYPES[type(schema.value)],
            "enum": [schema.value],
        }
    raise TypeError(f"Unsupported schema type: {schema!r}")


def document(
    root: SchemaType, definitions: dict[str, SchemaType] | None = None
) -> dict[str, Any]:
    """Build a JSON Schema document with a ``$defs`` section."""
    result = to_dict(root)
    if definitions:
        result["$defs"] = {name: to_dict(definitions[name]) for name in definitions}
    return result


def _ref_name(ref: str) -> str:
    for prefix in DEFS_PREFIXES:
        if ref.startswith(prefix):
            return ref[len(prefix) :]
    return ref.rsplit("/", 1)[-1]


def _literal(value: Any) -> LiteralType:
    if not isinstance(value, tuple(_LITERAL_JSON_TYPES)):
        raise ValueError(f"Unsupported literal value: {value!r}")
    return LiteralType(value)


def _literal_or_enum(values: list[Any], declared_type: Any) -> SchemaType:
    if declared_type in (None, "string") and all(isinstance(v, str) for v in values):
        return EnumType(values)
    literals = [_literal(v) for v in values if v is not None]
    members: list[SchemaType] = list(literals)
    if None in values:
        members.append(NullType())
    if len(members) == 1:
        return members[0]
    return AnyOfType(members)


def _from_type_name(name: str, data: dict[str, Any]) -> SchemaType:
    if name == "string":
        return StringType()
    if name == "integer":
        return IntType()
    if name == "number":
        return FloatType()
    if name == "boolean":
        return BoolType()
    if name == "null":
        return NullType()
    if name == "array":
        items = data.get("items")
        if isinstance(items, dict):
            return ArrayType(from_dict(items))
        return ArrayType(ReferenceType("any"))
    if name == "object":
        return _object_from_dict(data)
    raise ValueError(f"Unsupported JSON Schema type: {name}")


def _object_from_dict(data: dict[str, Any]) -> SchemaType:
    properties = data.get("properties") or {}
    additional = data.get("additionalProperties")
    if not properties and isinstance(additional, dict):
        return MapType(StringType(), from_dict(additional))

    descriptions = {
        name: prop["description"]
        for name, prop in properties.items()
        if isinstance(prop, dict) and prop.get("description")
    }
    return ObjectType(
        properties={name: from_dict(prop) for name, prop in properties.items()},
        required=[name for name in data.get("required", []) if name in properties],
        additional_properties=from_dict(additional)
        if isinstance(additional, dict)
        else None,
        descriptions=descriptions,
    )


def _nullable(members: list[SchemaType]) -> SchemaType:
    non_null = [m for m in members if not isinstance(m, NullType)]
    if len(non_null) == len(members):
        return AnyOfType(members)
    if not non_null:
        return NullType()
    inner = non_null[0] if len(non_null) == 1 else AnyOfType(non_null)
    return OptionalType(inner)


def from_dict(data: dict[str, Any]) -> SchemaType:
    """Ingest a JSON Schema dictionary as a schema variant.

    Understands the output of pydantic's ``model_json_schema()``: ``$ref`` into
    ``$defs``, ``const``, nullable ``anyOf`` and property descriptions. A schema
    with no type information becomes an opaque ``ReferenceType("any")``.

    Args:
        data: JSON Schema dictionary

    Returns:
        The equivalent schema variant

    Raises:
        ValueError: If the dictionary uses an unsupported ``type``, or a
            ``const``/``enum`` value that is not a string, integer, boolean
            or null
    """
    if "$ref" in data:
        return RefType(_ref_name(data["$ref"]))
    if "const" in data:
        return _literal(data["const"]) if data["const"] is not None else NullType()
    if "enum" in data:
        return _literal_or_enum(list(data["enum"]), data.get("type"))
    for key in ("anyOf", "oneOf"):
        if key in data:
            return _nullable([from_dict(member) for member in data[key]])
    if "allOf" in data and len(data["allOf"]) == 1:
        return from_dict(data["allOf"][0])

    declared = data.get("type")
    if isinstance(declared, list):
        return _nullable([_from_type_name(name, data) for name in declared])
    if isinstance(declared, str):
        return _from_type_name(declared, data)
    if "properties" in data:
        return _object_from_dict(data)
    return ReferenceType("any")


class ObjectSchemaBuilder:
    """Fluent accumulator for ``ObjectType`` schemas."""

    def __init__(self) -> None:
        self._properties: dict[str, SchemaType] = {}
        self._required: list[str] = []
        self._descriptions: dict[str, str] = {}
        self._additional: SchemaType | None = None

    def property(
        self,
        name: str,
        schema: SchemaType,
        required: bool = True,
        description: str | None = None,
    ) -> "ObjectSchemaBuilder":
        """Declare a property; re-declaring a name replaces its schema."""
        self._properties[name] = schema
        if required and name not in self._required:
            self._required.append(name)
        elif not required and name in self._required:
            self._required.remove(name)
        if description:
            self._descriptions[name] = description
        return self

    def additional_properties(self, schema: SchemaType) -> "ObjectSchemaBuilder":
        self._additional = schema
        return self

    def build(self) -> ObjectType:
        return ObjectType(
            properties=self._properties,
            required=self._required,
            additional_properties=self._additional,
            descriptions=self._descriptions,
        )


def to_serializable(schema: SchemaType) -> dict[str, Any]:
    """Render a schema as compact type-tagged dictionaries for external runtimes."""
    if isinstance(schema, (StringType, IntType, FloatType, BoolType, NullType)):
        return {"type": schema.kind}
    if isinstance(schema, ArrayType):
        return {"type": "list", "inner": to_serializable(schema.items)}
    if isinstance(schema, MapType):
        return {
            "type": "map",
            "key": to_serializable(schema.key),
            "value": to_serializable(schema.value),
        }
    if isinstance(schema, ObjectType):
        return {
            "type": "object",
            "properties": [
                {
                    "name": name,
                    "type": to_serializable(prop),
                    "required": name in schema.required,
                }
                for name, prop in schema.properties.items()
            ],
        }
    if isinstance(schema, EnumType):
        return {"type": "enum", "values": list(schema.values)}
    if isinstance(schema, RefType):
        return {"type": "ref", "name": schema.name}
    if isinstance(schema, ReferenceType):
        return {"type": "reference", "name": schema.name}
    if isinstance(schema, AnyOfType):
        return {"type": "union", "options": [to_serializable(t) for t in schema.types]}
    if isinstance(schema, OptionalType):
        return {"type": "optional", "inner": to_serializable(schema.inner)}
    if isinstance(schema, LiteralType):
        return {"type": _LITERAL_TAGS[type(schema.value)], "value": schema.value}
    raise TypeError(f"Unsupported schema type: {schema!r}")
