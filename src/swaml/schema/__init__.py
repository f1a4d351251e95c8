"""Schema types, JSON Schema conversion, validation and the runtime registry.

This module provides:
- Schema variants (``SchemaType``) and the ``SchemaTyped`` protocol
- Conversion to and from JSON Schema dictionaries
- Post-coercion validation
- A thread-safe registry of named enums and classes extensible at runtime
"""

from .document import (
    ObjectSchemaBuilder,
    document,
    from_dict,
    to_dict,
    to_serializable,
)
from .registry import (
    ClassBuilder,
    ClassProperty,
    EnumBuilder,
    EnumValue,
    SchemaRegistry,
)
from .typed import SchemaTyped, field_descriptions_of, schema_for, schema_name_of
from .types import (
    BOOL,
    FLOAT,
    INT,
    NULL,
    STRING,
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
    describe,
    is_optional,
)
from .validators import SchemaValidationResult, SchemaValidator

__all__ = [
    # Types
    "SchemaType",
    "StringType",
    "IntType",
    "FloatType",
    "BoolType",
    "NullType",
    "ArrayType",
    "MapType",
    "ObjectType",
    "EnumType",
    "RefType",
    "ReferenceType",
    "AnyOfType",
    "OptionalType",
    "LiteralType",
    "STRING",
    "INT",
    "FLOAT",
    "BOOL",
    "NULL",
    "describe",
    "is_optional",
    # Documents
    "ObjectSchemaBuilder",
    "document",
    "from_dict",
    "to_dict",
    "to_serializable",
    # Typed classes
    "SchemaTyped",
    "field_descriptions_of",
    "schema_for",
    "schema_name_of",
    # Registry
    "SchemaRegistry",
    "EnumBuilder",
    "ClassBuilder",
    "EnumValue",
    "ClassProperty",
    # Validators
    "SchemaValidator",
    "SchemaValidationResult",
]
