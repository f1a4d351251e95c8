"""Classes that describe themselves as schemas.

A class satisfies ``SchemaTyped`` by declaring class attributes, typically as
``ClassVar`` on a pydantic model so the same class is both the schema source and
the decode target::

    class Sentiment(BaseModel):
        schema_name: ClassVar[str] = "Sentiment"
        schema_type: ClassVar[SchemaType] = EnumType(["positive", "negative"])
        is_dynamic: ClassVar[bool] = True

Plain pydantic models and ``Enum`` subclasses work without any declarations;
their schema is derived from ``model_json_schema()`` or the member values.
"""

from enum import Enum
from typing import Any, ClassVar, Protocol

from pydantic import BaseModel

from .document import from_dict
from .types import EnumType, ObjectType, SchemaType


class SchemaTyped(Protocol):
    """Protocol for classes carrying their own schema declaration."""

    schema_name: ClassVar[str]
    schema_type: ClassVar[SchemaType]
    is_dynamic: ClassVar[bool]
    field_descriptions: ClassVar[dict[str, str]]


def schema_name_of(typed: Any) -> str:
    """Return the declared schema name, falling back to the class name."""
    return getattr(typed, "schema_name", None) or typed.__name__


def is_dynamic(typed: Any) -> bool:
    return bool(getattr(typed, "is_dynamic", False))


def model_json_schema_of(typed: Any) -> dict[str, Any] | None:
    """Return pydantic's JSON Schema for a model class, or None."""
    if isinstance(typed, type) and issubclass(typed, BaseModel):
        return typed.model_json_schema()
    return None


def schema_for(typed: Any) -> SchemaType:
    """Resolve the schema a class describes.

    Args:
        typed: A ``SchemaTyped`` class, a pydantic model class or an ``Enum``

    Returns:
        The declared or derived schema

    Raises:
        TypeError: If no schema can be derived from the class
    """
    declared = getattr(typed, "schema_type", None)
    if declared is not None:
        return declared
    json_schema = model_json_schema_of(typed)
    if json_schema is not None:
        return from_dict(json_schema)
    if isinstance(typed, type) and issubclass(typed, Enum):
        return EnumType([str(member.value) for member in typed])
    raise TypeError(f"Cannot derive a schema from {typed!r}")


def field_descriptions_of(typed: Any) -> dict[str, str]:
    """Collect property descriptions declared on a class.

    Explicit ``field_descriptions`` win over pydantic ``Field(description=...)``.
    """
    descriptions: dict[str, str] = {}
    if isinstance(typed, type) and issubclass(typed, BaseModel):
        for name, info in typed.model_fields.items():
            if info.description:
                descriptions[info.alias or name] = info.description
    schema = getattr(typed, "schema_type", None)
    if isinstance(schema, ObjectType):
        descriptions.update(schema.descriptions)
    descriptions.update(getattr(typed, "field_descriptions", None) or {})
    return descriptions
