"""Unit tests for SchemaValidator - post-coercion validation."""

import pytest

from swaml.exceptions import ValidationCategory, ValidationError
from swaml.schema import (
    BOOL,
    FLOAT,
    INT,
    STRING,
    AnyOfType,
    ArrayType,
    EnumType,
    LiteralType,
    ObjectType,
    OptionalType,
    ReferenceType,
    RefType,
    SchemaRegistry,
    SchemaValidationResult,
    SchemaValidator,
)


@pytest.mark.unit
class TestSchemaValidator:
    """Test cases for the SchemaValidator class."""

    def test_valid_object(self) -> None:
        """Test that a conforming object passes."""
        schema = ObjectType({"name": STRING, "age": INT}, required=["name", "age"])

        SchemaValidator().validate({"name": "Ann", "age": 3, "extra": 1}, schema)

    def test_missing_required_property(self) -> None:
        """Test the missing-field category and message."""
        schema = ObjectType({"name": STRING, "age": INT}, required=["name", "age"])

        with pytest.raises(ValidationError) as exc_info:
            SchemaValidator().validate({"name": "Ann"}, schema)

        assert str(exc_info.value) == "Missing required property: age"
        assert exc_info.value.category == ValidationCategory.MISSING_FIELD
        assert exc_info.value.path == "$.age"

    def test_invalid_enum_value(self) -> None:
        """Test the enum-value category and message."""
        with pytest.raises(ValidationError) as exc_info:
            SchemaValidator().validate("maybe", EnumType(["yes", "no"]))

        assert str(exc_info.value) == (
            "Invalid enum value: maybe. Expected one of: yes, no"
        )
        assert exc_info.value.category == ValidationCategory.ENUM_VALUE

    def test_empty_enum_accepts_any_string(self) -> None:
        """Test that an unpopulated dynamic enum does not reject values."""
        SchemaValidator().validate("anything", EnumType([]))

    def test_type_mismatch_message(self) -> None:
        """Test the type-mismatch category and message."""
        schema = ObjectType({"tags": ArrayType(STRING)})

        with pytest.raises(ValidationError) as exc_info:
            SchemaValidator().validate({"tags": ["a", 2]}, schema)

        assert str(exc_info.value) == "Expected string, got int"
        assert exc_info.value.path == "$.tags[1]"
        assert exc_info.value.category == ValidationCategory.TYPE_MISMATCH

    def test_numeric_kinds(self) -> None:
        """Test int-as-float acceptance and bool rejection."""
        validator = SchemaValidator()

        validator.validate(3, FLOAT)
        for value, schema in [(True, INT), (False, FLOAT), (1.5, INT), (1, BOOL)]:
            with pytest.raises(ValidationError):
                validator.validate(value, schema)

    def test_optional_union_literal_reference(self) -> None:
        """Test the remaining composite variants."""
        validator = SchemaValidator()

        validator.validate(None, OptionalType(INT))
        validator.validate("x", AnyOfType([INT, STRING]))
        validator.validate("on", LiteralType("on"))
        validator.validate({"free": "form"}, ReferenceType("Blob"))
        with pytest.raises(ValidationError):
            validator.validate(1.5, AnyOfType([INT, BOOL]))
        with pytest.raises(ValidationError):
            validator.validate(1, LiteralType(True))

    def test_ref_resolved_through_registry(self) -> None:
        """Test validation of registered classes and unresolved names."""
        registry = SchemaRegistry()
        registry.class_builder("Pet").add_property("name", STRING)
        validator = SchemaValidator(registry)

        validator.validate("whatever", RefType("Unknown"))
        with pytest.raises(ValidationError) as exc_info:
            validator.validate({}, RefType("Pet"))

        assert exc_info.value.category == ValidationCategory.MISSING_FIELD

    def test_check_returns_result(self) -> None:
        """Test the non-raising entry point."""
        validator = SchemaValidator()

        ok = validator.check(1, INT)
        failed = validator.check("1", INT)

        assert isinstance(ok, SchemaValidationResult)
        assert ok.success is True
        assert ok.error_category is None
        assert failed.success is False
        assert failed.error_category == "type_mismatch"
