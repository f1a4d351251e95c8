"""Schema-driven coercion of loosely typed values.

Coercion is pure: it never mutates its input and returns new containers.
Values it cannot convert raise ``CoercionError``; values it can convert but
which may still violate the schema (a missing key, an unknown enum member) are
left for ``SchemaValidator``.
"""

import math
import re
from typing import TYPE_CHECKING, Any

from ..exceptions import CoercionError
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
    describe,
)
from ..schema.validators import child_path
from ..values import Value, value_kind

if TYPE_CHECKING:
    from ..schema.registry import SchemaRegistry

_INT_LITERAL = re.compile(r"[+-]?\d+")
_FLOAT_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

TRUE_STRINGS = frozenset({"true", "1", "yes"})
FALSE_STRINGS = frozenset({"false", "0", "no"})


class TypeCoercion:
    """Coerces a ``Value`` into the shape a ``SchemaType`` describes.

    ``ref`` names are resolved against the registry when one is given; an
    unresolved name passes its value through unchanged.
    """

    def __init__(self, registry: "SchemaRegistry | None" = None) -> None:
        self.registry = registry

    def coerce(self, value: Value, schema: SchemaType, path: str = "$") -> Value:
        """Coerce ``value`` to ``schema``.

        Args:
            value: Parsed JSON value
            schema: Target schema
            path: Location of ``value`` in the enclosing document

        Returns:
            A new value conforming to the schema's kinds

        Raises:
            CoercionError: If the value cannot be converted
        """
        if isinstance(schema, StringType):
            return self._to_string(value, schema, path)
        if isinstance(schema, IntType):
            return self._to_int(value, schema, path)
        if isinstance(schema, FloatType):
            return self._to_float(value, schema, path)
        if isinstance(schema, BoolType):
            return self._to_bool(value, schema, path)
        if isinstance(schema, NullType):
            if value is None:
                return None
            raise self._error(schema, value, path)
        if isinstance(schema, OptionalType):
            return None if value is None else self.coerce(value, schema.inner, path)
        if isinstance(schema, ArrayType):
            if not isinstance(value, list):
                raise self._error(schema, value, path)
            return [
                self.coerce(item, schema.items, child_path(path, index))
                for index, item in enumerate(value)
            ]
        if isinstance(schema, MapType):
            if not isinstance(value, dict):
                raise self._error(schema, value, path)
            return {
                key: self.coerce(item, schema.value, child_path(path, key))
                for key, item in value.items()
            }
        if isinstance(schema, ObjectType):
            return self._to_object(value, schema, path)
        if isinstance(schema, EnumType):
            return self._to_enum(value, schema, path)
        if isinstance(schema, RefType):
            resolved = self.registry.resolve(schema.name) if self.registry else None
            return value if resolved is None else self.coerce(value, resolved, path)
        if isinstance(schema, ReferenceType):
            return value
        if isinstance(schema, AnyOfType):
            for member in schema.types:
                try:
                    return self.coerce(value, member, path)
                except CoercionError:
                    continue
            raise self._error(schema, value, path)
        if isinstance(schema, LiteralType):
            return self._to_literal(value, schema, path)
        raise TypeError(f"Unsupported schema type: {schema!r}")

    @staticmethod
    def _error(schema: SchemaType, value: Any, path: str) -> CoercionError:
        return CoercionError(describe(schema), value_kind(value), path)

    def _to_string(self, value: Value, schema: SchemaType, path: str) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return repr(value)
        raise self._error(schema, value, path)

    def _to_int(self, value: Value, schema: SchemaType, path: str) -> int:
        if isinstance(value, bool):
            return 1 if value else 0
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise self._error(schema, value, path)
        if isinstance(value, str):
            text = value.strip()
            if _INT_LITERAL.fullmatch(text):
                return int(text)
            if _FLOAT_LITERAL.fullmatch(text):
                number = float(text)
                if number.is_integer():
                    return int(number)
        raise self._error(schema, value, path)

    def _to_float(self, value: Value, schema: SchemaType, path: str) -> float:
        # bool -> int is allowed, bool -> float never is
        if isinstance(value, bool):
            raise self._error(schema, value, path)
        number: float | None = None
        if isinstance(value, (int, float)):
            try:
                number = float(value)
            except OverflowError:
                raise self._error(schema, value, path) from None
        elif isinstance(value, str):
            text = value.strip()
            if _FLOAT_LITERAL.fullmatch(text):
                number = float(text)
        # out-of-range literals become inf, which has no JSON form
        if number is None or not math.isfinite(number):
            raise self._error(schema, value, path)
        return number

    def _to_bool(self, value: Value, schema: SchemaType, path: str) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            text = value.strip().lower()
            if text in TRUE_STRINGS:
                return True
            if text in FALSE_STRINGS:
                return False
        raise self._error(schema, value, path)

    def _to_object(
        self, value: Value, schema: ObjectType, path: str
    ) -> dict[str, Value]:
        if not isinstance(value, dict):
            raise self._error(schema, value, path)
        result: dict[str, Value] = {}
        for name, prop in schema.properties.items():
            if name in value:
                result[name] = self.coerce(value[name], prop, child_path(path, name))
        for key, item in value.items():
            if key in schema.properties:
                continue
            if schema.additional_properties is not None:
                item = self.coerce(
                    item, schema.additional_properties, child_path(path, key)
                )
            result[key] = item
        return result

    def _to_enum(self, value: Value, schema: EnumType, path: str) -> str:
        text = self._to_string(value, schema, path)
        if not schema.values or text in schema.values:
            return text
        if text in schema.aliases:
            return schema.aliases[text]
        folded = text.strip().casefold()
        for candidate in schema.values:
            if candidate.casefold() == folded:
                return candidate
        for alias, canonical in schema.aliases.items():
            if alias.casefold() == folded:
                return canonical
        return text

    def _to_literal(self, value: Value, schema: LiteralType, path: str) -> Value:
        expected = schema.value
        coerced: Value
        if isinstance(expected, bool):
            coerced = self._to_bool(value, schema, path)
        elif isinstance(expected, int):
            coerced = self._to_int(value, schema, path)
        else:
            coerced = self._to_string(value, schema, path)
            if coerced.strip().casefold() == expected.casefold():
                coerced = expected
        if coerced != expected:
            raise self._error(schema, value, path)
        return coerced
