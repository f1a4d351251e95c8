"""Render schemas as instruction text a language model can follow."""

import json
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from ..schema.typed import field_descriptions_of, schema_for
from ..schema.types import (
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

if TYPE_CHECKING:
    from ..schema.registry import SchemaRegistry

JSON_PREFIX = "Answer in JSON using this schema:"
ARRAY_PREFIX = "Answer with a JSON Array using this schema:"
CATEGORIES_PREFIX = "Answer with any of the categories:\n----"
UNKNOWN_CLASS = "Answer in JSON."

_SCALAR_INSTRUCTIONS = {
    StringType: "",
    IntType: "Answer as an int",
    FloatType: "Answer as a float",
    BoolType: "Answer as a bool",
    NullType: "Answer with null",
}

_SCALAR_NAMES = {
    StringType: "string",
    IntType: "int",
    FloatType: "float",
    BoolType: "bool",
    NullType: "null",
}


def _quoted(values: Any) -> str:
    return " | ".join(json.dumps(v, ensure_ascii=False) for v in values)


class PromptRenderer:
    """Turns a schema into the output-format section of a prompt.

    Object properties render in declaration order, optional ones with a ``?``
    marker and descriptions as ``//`` comments above them. ``ref`` names are
    expanded from the registry; a name already being expanded, or one the
    registry does not know, renders as the bare name.
    """

    def __init__(self, registry: "SchemaRegistry | None" = None) -> None:
        self.registry = registry

    def render(
        self, schema: SchemaType, descriptions: dict[str, str] | None = None
    ) -> str:
        """Render the full instruction for an answer of shape ``schema``.

        Args:
            schema: Expected answer shape
            descriptions: Extra property descriptions for a top-level object

        Returns:
            Instruction text; empty for a plain string answer
        """
        scalar = _SCALAR_INSTRUCTIONS.get(type(schema))
        if scalar is not None:
            return scalar
        if isinstance(schema, EnumType):
            return self._categories(schema.values)
        if isinstance(schema, ArrayType):
            return f"{ARRAY_PREFIX}\n{self._item(schema.items, 0, frozenset())}[]"
        if isinstance(schema, AnyOfType):
            return "Answer with one of: " + " | ".join(
                self.render_schema(member) for member in schema.types
            )
        if isinstance(schema, RefType):
            resolved = self._resolve(schema.name)
            if isinstance(resolved, EnumType):
                return self._categories(resolved.values)
            if isinstance(resolved, ObjectType):
                body = self._object(
                    resolved, descriptions, 0, frozenset({schema.name})
                )
                return f"{JSON_PREFIX}\n{body}"
        return f"{JSON_PREFIX}\n{self.render_schema(schema, descriptions)}"

    def render_schema(
        self,
        schema: SchemaType,
        descriptions: dict[str, str] | None = None,
        indent: int = 0,
    ) -> str:
        """Render the type expression of ``schema`` without an instruction prefix.

        Args:
            schema: Schema variant to render
            descriptions: Property comments for a top-level object
            indent: Nesting level; each level pads object bodies by two spaces
        """
        return self._expr(schema, descriptions, indent, frozenset())

    def render_class(self, name: str) -> str:
        """Render the instruction for a registered class or enum by name."""
        if self._resolve(name) is None:
            return UNKNOWN_CLASS
        return self.render(RefType(name))

    def render_for(self, typed: Any, include_descriptions: bool = True) -> str:
        """Render the instruction for a schema-describing class."""
        schema = schema_for(typed)
        if not include_descriptions:
            if isinstance(schema, ObjectType):
                schema = replace(schema, descriptions={})
            return self.render(schema)
        return self.render(schema, field_descriptions_of(typed))

    def render_document(
        self,
        root: SchemaType,
        definitions: dict[str, SchemaType] | None = None,
    ) -> str:
        """Render named definitions followed by the root schema.

        References to the named definitions render as bare names in the root.
        Enums from the registry are listed after the definitions.
        """
        definitions = definitions or {}
        expanding = frozenset(definitions)
        lines = []
        enums = self.registry.dynamic_enum_values() if self.registry else {}
        enums = {n: v for n, v in enums.items() if n not in definitions}
        if definitions or enums:
            lines.append("Type definitions:")
            for name in sorted(definitions):
                body = self._expr(definitions[name], None, 1, expanding)
                lines.append(f"  {name} = {body}")
            for name, values in enums.items():
                lines.append(f"  {name} = {_quoted(values) if values else 'string'}")
            lines.append("")
        lines.append(JSON_PREFIX)
        lines.append(self._expr(root, None, 0, expanding))
        return "\n".join(lines)

    def _resolve(self, name: str) -> EnumType | ObjectType | None:
        return self.registry.resolve(name) if self.registry is not None else None

    def _categories(self, values: Any) -> str:
        return CATEGORIES_PREFIX + "".join(f"\n- {v}" for v in values)

    def _item(
        self, schema: SchemaType, indent: int, expanding: frozenset[str]
    ) -> str:
        rendered = self._expr(schema, None, indent, expanding)
        if isinstance(schema, (AnyOfType, OptionalType)):
            return f"({rendered})"
        return rendered

    def _expr(
        self,
        schema: SchemaType,
        descriptions: dict[str, str] | None,
        indent: int,
        expanding: frozenset[str],
    ) -> str:
        name = _SCALAR_NAMES.get(type(schema))
        if name is not None:
            return name
        if isinstance(schema, ArrayType):
            return f"{self._item(schema.items, indent, expanding)}[]"
        if isinstance(schema, MapType):
            key = self._expr(schema.key, None, indent, expanding)
            value = self._expr(schema.value, None, indent, expanding)
            return f"map<{key}, {value}>"
        if isinstance(schema, ObjectType):
            return self._object(schema, descriptions, indent, expanding)
        if isinstance(schema, EnumType):
            return _quoted(schema.values) if schema.values else "string"
        if isinstance(schema, RefType):
            if schema.name in expanding:
                return schema.name
            resolved = self._resolve(schema.name)
            if isinstance(resolved, EnumType):
                return _quoted(resolved.values) if resolved.values else "string"
            if isinstance(resolved, ObjectType):
                return self._object(
                    resolved, None, indent, expanding | {schema.name}
                )
            return schema.name
        if isinstance(schema, ReferenceType):
            return schema.name
        if isinstance(schema, AnyOfType):
            return " | ".join(
                self._expr(member, None, indent, expanding) for member in schema.types
            )
        if isinstance(schema, OptionalType):
            return f"{self._expr(schema.inner, None, indent, expanding)} | null"
        if isinstance(schema, LiteralType):
            return json.dumps(schema.value)
        raise TypeError(f"Unsupported schema type: {schema!r}")

    def _object(
        self,
        schema: ObjectType,
        descriptions: dict[str, str] | None,
        indent: int,
        expanding: frozenset[str],
    ) -> str:
        if not schema.properties:
            return "{}"
        merged = {**schema.descriptions, **(descriptions or {})}
        pad = "  " * indent
        lines = ["{"]
        for name, prop in schema.properties.items():
            description = merged.get(name)
            if description:
                for line in description.splitlines():
                    lines.append(f"{pad}  // {line}")
            marker = "" if name in schema.required else "?"
            rendered = self._expr(prop, None, indent + 1, expanding)
            lines.append(f"{pad}  {name}{marker}: {rendered},")
        lines.append(f"{pad}}}")
        return "\n".join(lines)
