"""Post-coercion validation of values against schema variants."""

import time
from typing import TYPE_CHECKING, Any

from ..exceptions import ValidationCategory, ValidationError
from ..values import value_kind
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
    describe,
)

if TYPE_CHECKING:
    from .registry import SchemaRegistry


def child_path(path: str, key: str | int) -> str:
    """Append an object key or array index to a JSON-path-like location."""
    if isinstance(key, int):
        return f"{path}[{key}]"
    if key.isidentifier():
        return f"{path}.{key}"
    return f'{path}["{key}"]'


class SchemaValidationResult:
    """Result of validating a value, for callers that prefer not to catch."""

    def __init__(
        self,
        success: bool,
        error: ValidationError | None = None,
        validation_time_ms: float = 0,
    ) -> None:
        """Initialize validation result.

        Args:
            success: Whether validation succeeded
            error: Validation error if validation failed
            validation_time_ms: Time taken for validation in milliseconds
        """
        self.success = success
        self.error = error
        self.validation_time_ms = validation_time_ms

    @property
    def error_category(self) -> str | None:
        return self.error.category.value if self.error is not None else None


class SchemaValidator:
    """Checks required keys, enum membership and kind agreement, recursively.

    Undeclared object keys are allowed. An enum with no values accepts any
    string. An int is a valid float; a bool is never a valid int or float.
    References resolved through the registry are validated; unresolved ones
    and opaque ``ReferenceType`` names pass.
    """

    def __init__(self, registry: "SchemaRegistry | None" = None) -> None:
        self.registry = registry

    def validate(self, value: Any, schema: SchemaType, path: str = "$") -> None:
        """Validate a coerced value.

        Raises:
            ValidationError: On the first disagreement found
        """
        if isinstance(schema, StringType):
            self._expect(isinstance(value, str), schema, value, path)
        elif isinstance(schema, IntType):
            self._expect(
                isinstance(value, int) and not isinstance(value, bool),
                schema,
                value,
                path,
            )
        elif isinstance(schema, FloatType):
            self._expect(
                isinstance(value, (int, float)) and not isinstance(value, bool),
                schema,
                value,
                path,
            )
        elif isinstance(schema, BoolType):
            self._expect(isinstance(value, bool), schema, value, path)
        elif isinstance(schema, NullType):
            self._expect(value is None, schema, value, path)
        elif isinstance(schema, OptionalType):
            if value is not None:
                self.validate(value, schema.inner, path)
        elif isinstance(schema, ArrayType):
            self._expect(isinstance(value, list), schema, value, path)
            for index, item in enumerate(value):
                self.validate(item, schema.items, child_path(path, index))
        elif isinstance(schema, MapType):
            self._expect(isinstance(value, dict), schema, value, path)
            for key, item in value.items():
                self.validate(item, schema.value, child_path(path, key))
        elif isinstance(schema, ObjectType):
            self._validate_object(value, schema, path)
        elif isinstance(schema, EnumType):
            self._validate_enum(value, schema, path)
        elif isinstance(schema, RefType):
            resolved = self.registry.resolve(schema.name) if self.registry else None
            if resolved is not None:
                self.validate(value, resolved, path)
        elif isinstance(schema, ReferenceType):
            return
        elif isinstance(schema, AnyOfType):
            self._validate_any_of(value, schema, path)
        elif isinstance(schema, LiteralType):
            self._expect(
                type(value) is type(schema.value) and value == schema.value,
                schema,
                value,
                path,
            )

    def check(self, value: Any, schema: SchemaType) -> SchemaValidationResult:
        """Validate without raising.

        Returns:
            Validation result with success status and the error, if any
        """
        start_time = time.time()
        try:
            self.validate(value, schema)
        except ValidationError as e:
            return SchemaValidationResult(
                success=False,
                error=e,
                validation_time_ms=(time.time() - start_time) * 1000,
            )
        return SchemaValidationResult(
            success=True, validation_time_ms=(time.time() - start_time) * 1000
        )

    def _expect(self, ok: bool, schema: SchemaType, value: Any, path: str) -> None:
        if not ok:
            raise ValidationError(
                f"Expected {describe(schema)}, got {value_kind(value)}",
                path=path,
                category=ValidationCategory.TYPE_MISMATCH,
            )

    def _validate_object(self, value: Any, schema: ObjectType, path: str) -> None:
        self._expect(isinstance(value, dict), schema, value, path)
        for name in schema.required:
            if name not in value:
                raise ValidationError(
                    f"Missing required property: {name}",
                    path=child_path(path, name),
                    category=ValidationCategory.MISSING_FIELD,
                )
        for key, item in value.items():
            if key in schema.properties:
                self.validate(item, schema.properties[key], child_path(path, key))
            elif schema.additional_properties is not None:
                self.validate(
                    item, schema.additional_properties, child_path(path, key)
                )

    def _validate_enum(self, value: Any, schema: EnumType, path: str) -> None:
        self._expect(isinstance(value, str), schema, value, path)
        if schema.values and value not in schema.values:
            raise ValidationError(
                f"Invalid enum value: {value}. "
                f"Expected one of: {', '.join(schema.values)}",
                path=path,
                category=ValidationCategory.ENUM_VALUE,
            )

    def _validate_any_of(self, value: Any, schema: AnyOfType, path: str) -> None:
        for member in schema.types:
            try:
                self.validate(value, member, path)
            except ValidationError:
                continue
            return
        self._expect(False, schema, value, path)
