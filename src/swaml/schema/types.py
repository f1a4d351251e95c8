"""Schema type variants describing the expected shape of model output.

Every variant is a frozen dataclass tagged with a ``kind`` class attribute. The
union of the variants is exposed as ``SchemaType``; code dispatches on the
concrete class with ``isinstance`` rather than through virtual methods.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import ClassVar, TypeAlias


class _Chainable:
    """Modifier helpers shared by every schema variant."""

    kind: ClassVar[str] = ""

    def list(self) -> ArrayType:
        """Wrap this schema as the item type of an array."""
        return ArrayType(self)  # type: ignore[arg-type]

    def optional(self) -> OptionalType:
        """Wrap this schema so ``null`` is also accepted."""
        if isinstance(self, OptionalType):
            return self
        return OptionalType(self)  # type: ignore[arg-type]


@dataclass(frozen=True)
class StringType(_Chainable):
    kind: ClassVar[str] = "string"


@dataclass(frozen=True)
class IntType(_Chainable):
    kind: ClassVar[str] = "int"


@dataclass(frozen=True)
class FloatType(_Chainable):
    kind: ClassVar[str] = "float"


@dataclass(frozen=True)
class BoolType(_Chainable):
    kind: ClassVar[str] = "bool"


@dataclass(frozen=True)
class NullType(_Chainable):
    kind: ClassVar[str] = "null"


@dataclass(frozen=True)
class ArrayType(_Chainable):
    items: SchemaType
    kind: ClassVar[str] = "array"


@dataclass(frozen=True)
class MapType(_Chainable):
    key: SchemaType
    value: SchemaType
    kind: ClassVar[str] = "map"


@dataclass(frozen=True)
class ObjectType(_Chainable):
    """An object with declared properties, in declaration order.

    Attributes:
        properties: Property name to schema
        required: Names that must be present after coercion
        additional_properties: Schema for undeclared keys, or None when
            undeclared keys are passed through untouched
        descriptions: Property name to human description, used in prompts
    """

    properties: Mapping[str, SchemaType] = field(default_factory=dict)
    required: Sequence[str] = ()
    additional_properties: SchemaType | None = None
    descriptions: Mapping[str, str] = field(default_factory=dict)
    kind: ClassVar[str] = "object"

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", dict(self.properties))
        object.__setattr__(self, "required", tuple(self.required))
        object.__setattr__(self, "descriptions", dict(self.descriptions))


@dataclass(frozen=True)
class EnumType(_Chainable):
    """A closed set of string values.

    ``aliases`` maps an alternative spelling to its canonical value. An enum
    with no values accepts any string (a dynamic enum not yet populated).
    """

    values: Sequence[str] = ()
    aliases: Mapping[str, str] = field(default_factory=dict)
    kind: ClassVar[str] = "enum"

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))
        object.__setattr__(self, "aliases", dict(self.aliases))


@dataclass(frozen=True)
class RefType(_Chainable):
    """A named reference resolved against a ``SchemaRegistry``."""

    name: str
    kind: ClassVar[str] = "ref"


@dataclass(frozen=True)
class ReferenceType(_Chainable):
    """An opaque named type passed through without validation."""

    name: str
    kind: ClassVar[str] = "reference"


@dataclass(frozen=True)
class AnyOfType(_Chainable):
    types: Sequence[SchemaType]
    kind: ClassVar[str] = "anyOf"

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", tuple(self.types))


@dataclass(frozen=True)
class OptionalType(_Chainable):
    inner: SchemaType
    kind: ClassVar[str] = "optional"


@dataclass(frozen=True)
class LiteralType(_Chainable):
    value: str | int | bool
    kind: ClassVar[str] = "literal"


SchemaType: TypeAlias = (
    StringType
    | IntType
    | FloatType
    | BoolType
    | NullType
    | ArrayType
    | MapType
    | ObjectType
    | EnumType
    | RefType
    | ReferenceType
    | AnyOfType
    | OptionalType
    | LiteralType
)

STRING = StringType()
INT = IntType()
FLOAT = FloatType()
BOOL = BoolType()
NULL = NullType()

SCALAR_TYPES = (StringType, IntType, FloatType, BoolType, NullType)


def is_optional(schema: SchemaType) -> bool:
    """Return True when the schema accepts ``null``."""
    if isinstance(schema, (OptionalType, NullType)):
        return True
    if isinstance(schema, AnyOfType):
        return any(is_optional(member) for member in schema.types)
    return False


def describe(schema: SchemaType) -> str:
    """Give a short human name for a schema, used in error messages."""
    if isinstance(schema, SCALAR_TYPES):
        return schema.kind
    if isinstance(schema, ArrayType):
        return f"{describe(schema.items)}[]"
    if isinstance(schema, MapType):
        return f"map<{describe(schema.key)}, {describe(schema.value)}>"
    if isinstance(schema, (RefType, ReferenceType)):
        return schema.name
    if isinstance(schema, AnyOfType):
        return "union(" + " | ".join(describe(t) for t in schema.types) + ")"
    if isinstance(schema, OptionalType):
        return f"{describe(schema.inner)}?"
    if isinstance(schema, LiteralType):
        return json.dumps(schema.value)
    return schema.kind


def iter_refs(schema: SchemaType) -> Iterator[str]:
    """Yield the names of every ``RefType`` reachable inside a schema."""
    if isinstance(schema, RefType):
        yield schema.name
    elif isinstance(schema, ArrayType):
        yield from iter_refs(schema.items)
    elif isinstance(schema, MapType):
        yield from iter_refs(schema.key)
        yield from iter_refs(schema.value)
    elif isinstance(schema, ObjectType):
        for prop in schema.properties.values():
            yield from iter_refs(prop)
        if schema.additional_properties is not None:
            yield from iter_refs(schema.additional_properties)
    elif isinstance(schema, AnyOfType):
        for member in schema.types:
            yield from iter_refs(member)
    elif isinstance(schema, OptionalType):
        yield from iter_refs(schema.inner)
