"""Unit tests for TypeCoercion - schema-driven value conversion."""

import pytest

from swaml.exceptions import CoercionError
from swaml.parsing.coercion import TypeCoercion
from swaml.schema import (
    BOOL,
    FLOAT,
    INT,
    NULL,
    STRING,
    AnyOfType,
    ArrayType,
    EnumType,
    LiteralType,
    MapType,
    ObjectSchemaBuilder,
    ObjectType,
    OptionalType,
    ReferenceType,
    RefType,
    SchemaRegistry,
)


@pytest.mark.unit
class TestScalarCoercion:
    """Test coercion rules for scalar targets."""

    def test_string_from_scalars(self) -> None:
        """Test canonical text for scalar values."""
        coercion = TypeCoercion()

        assert coercion.coerce("hi", STRING) == "hi"
        assert coercion.coerce(42, STRING) == "42"
        assert coercion.coerce(1.5, STRING) == "1.5"
        assert coercion.coerce(True, STRING) == "true"
        assert coercion.coerce(False, STRING) == "false"

    def test_string_rejects_containers_and_null(self) -> None:
        """Test that null, arrays and maps are not strings."""
        coercion = TypeCoercion()

        for value, kind in [(None, "null"), ([1], "array"), ({"a": 1}, "map")]:
            with pytest.raises(CoercionError) as exc_info:
                coercion.coerce(value, STRING)
            assert exc_info.value.expected == "string"
            assert exc_info.value.actual == kind

    def test_int_from_integral_float(self) -> None:
        """Test that integral floats become ints and others fail."""
        coercion = TypeCoercion()

        assert coercion.coerce(42.0, INT) == 42
        assert isinstance(coercion.coerce(42.0, INT), int)
        with pytest.raises(CoercionError):
            coercion.coerce(42.5, INT)

    def test_int_from_string(self) -> None:
        """Test integer and integral decimal strings."""
        coercion = TypeCoercion()

        assert coercion.coerce("42", INT) == 42
        assert coercion.coerce(" -7 ", INT) == -7
        assert coercion.coerce("3.0", INT) == 3
        for text in ["3.5", "abc", "", "1e400x"]:
            with pytest.raises(CoercionError):
                coercion.coerce(text, INT)

    def test_int_from_bool(self) -> None:
        """Test that booleans map to 1 and 0."""
        coercion = TypeCoercion()

        assert coercion.coerce(True, INT) == 1
        assert coercion.coerce(False, INT) == 0

    def test_float_from_numbers_and_strings(self) -> None:
        """Test numeric widening and decimal strings."""
        coercion = TypeCoercion()

        assert coercion.coerce(3, FLOAT) == 3.0
        assert isinstance(coercion.coerce(3, FLOAT), float)
        assert coercion.coerce("2.5", FLOAT) == 2.5
        assert coercion.coerce("1e3", FLOAT) == 1000.0
        with pytest.raises(CoercionError):
            coercion.coerce("nan", FLOAT)

    def test_float_rejects_out_of_range_numbers(self) -> None:
        """Test that values with no finite float form raise CoercionError."""
        coercion = TypeCoercion()
        huge = 10**400

        for value in [huge, float("inf"), "1e400", "-1e400"]:
            with pytest.raises(CoercionError) as exc_info:
                coercion.coerce(value, FLOAT)
            assert exc_info.value.expected == "float"

    def test_int_rejects_out_of_range_decimal_string(self) -> None:
        """Test that an exponent overflowing to infinity is not an int."""
        with pytest.raises(CoercionError):
            TypeCoercion().coerce("1e400", INT)

    def test_float_rejects_bool(self) -> None:
        """Test that booleans never become floats, unlike ints."""
        coercion = TypeCoercion()

        with pytest.raises(CoercionError) as exc_info:
            coercion.coerce(True, FLOAT)

        assert exc_info.value.expected == "float"
        assert exc_info.value.actual == "bool"

    def test_bool_from_int(self) -> None:
        """Test that nonzero is true and zero is false."""
        coercion = TypeCoercion()

        assert coercion.coerce(5, BOOL) is True
        assert coercion.coerce(0, BOOL) is False

    def test_bool_from_string(self) -> None:
        """Test case-insensitive boolean words."""
        coercion = TypeCoercion()

        for text in ["true", "TRUE", "Yes", "1", " yes "]:
            assert coercion.coerce(text, BOOL) is True
        for text in ["false", "No", "0"]:
            assert coercion.coerce(text, BOOL) is False

    def test_bool_rejects_unknown_word(self) -> None:
        """Test that an unrecognized word is an error."""
        coercion = TypeCoercion()

        with pytest.raises(CoercionError) as exc_info:
            coercion.coerce("maybe", BOOL)

        assert exc_info.value.expected == "bool"
        assert exc_info.value.actual == "string"
        assert exc_info.value.path == "$"

    def test_bool_rejects_float(self) -> None:
        """Test that floats never become booleans."""
        with pytest.raises(CoercionError):
            TypeCoercion().coerce(1.0, BOOL)

    def test_null_only_accepts_null(self) -> None:
        """Test null passthrough and rejection of other values."""
        coercion = TypeCoercion()

        assert coercion.coerce(None, NULL) is None
        with pytest.raises(CoercionError):
            coercion.coerce(0, NULL)


@pytest.mark.unit
class TestCompositeCoercion:
    """Test coercion of containers, unions and references."""

    def test_optional(self) -> None:
        """Test that null passes and other values recurse."""
        coercion = TypeCoercion()

        assert coercion.coerce(None, OptionalType(INT)) is None
        assert coercion.coerce("5", OptionalType(INT)) == 5

    def test_array_elements_coerced(self) -> None:
        """Test per-element coercion."""
        assert TypeCoercion().coerce(["1", 2.0, True], ArrayType(INT)) == [1, 2, 1]

    def test_array_error_path(self) -> None:
        """Test that errors report the failing element's path."""
        schema = ObjectSchemaBuilder().property("items", ArrayType(INT)).build()

        with pytest.raises(CoercionError) as exc_info:
            TypeCoercion().coerce({"items": [1, "two"]}, schema)

        assert exc_info.value.path == "$.items[1]"

    def test_array_rejects_non_array(self) -> None:
        """Test that scalars are not wrapped into arrays."""
        with pytest.raises(CoercionError):
            TypeCoercion().coerce("a", ArrayType(STRING))

    def test_map_values_coerced(self) -> None:
        """Test per-value coercion of maps."""
        result = TypeCoercion().coerce({"a": "1", "b": 2}, MapType(STRING, INT))

        assert result == {"a": 1, "b": 2}

    def test_object_properties_and_extras(self) -> None:
        """Test that declared properties are coerced and extra keys kept."""
        schema = ObjectType({"age": INT}, required=["age"])
        value = {"age": "30", "extra": "kept"}

        result = TypeCoercion().coerce(value, schema)

        assert result == {"age": 30, "extra": "kept"}
        assert value == {"age": "30", "extra": "kept"}

    def test_object_missing_key_left_for_validation(self) -> None:
        """Test that coercion does not invent missing keys."""
        schema = ObjectType({"a": INT, "b": INT}, required=["a", "b"])

        assert TypeCoercion().coerce({"a": 1}, schema) == {"a": 1}

    def test_object_additional_properties_coerced(self) -> None:
        """Test coercion of undeclared keys with additional_properties."""
        schema = ObjectType({"a": STRING}, additional_properties=INT)

        assert TypeCoercion().coerce({"a": 1, "b": "2"}, schema) == {"a": "1", "b": 2}

    def test_enum_normalization(self) -> None:
        """Test exact, alias and case-insensitive enum matching."""
        schema = EnumType(["POSITIVE", "NEGATIVE"], aliases={"good": "POSITIVE"})
        coercion = TypeCoercion()

        assert coercion.coerce("POSITIVE", schema) == "POSITIVE"
        assert coercion.coerce("good", schema) == "POSITIVE"
        assert coercion.coerce("negative", schema) == "NEGATIVE"
        assert coercion.coerce("neutral", schema) == "neutral"

    def test_union_first_match_wins(self) -> None:
        """Test that union members are tried in declared order."""
        coercion = TypeCoercion()

        assert coercion.coerce("42", AnyOfType([INT, STRING])) == 42
        assert coercion.coerce("42", AnyOfType([STRING, INT])) == "42"
        assert coercion.coerce(42, AnyOfType([STRING, INT])) == "42"

    def test_union_failure_lists_members(self) -> None:
        """Test the error raised when no member accepts the value."""
        with pytest.raises(CoercionError) as exc_info:
            TypeCoercion().coerce({"a": 1}, AnyOfType([INT, BOOL]))

        assert exc_info.value.expected == "union(int | bool)"
        assert exc_info.value.actual == "map"

    def test_literal(self) -> None:
        """Test literal matching after same-kind coercion."""
        coercion = TypeCoercion()

        assert coercion.coerce("7", LiteralType(7)) == 7
        assert coercion.coerce("Yes", LiteralType(True)) is True
        assert coercion.coerce("DONE", LiteralType("done")) == "done"
        with pytest.raises(CoercionError):
            coercion.coerce("8", LiteralType(7))

    def test_reference_passes_through(self) -> None:
        """Test that opaque references are not coerced."""
        value = {"anything": [1, "x"]}

        assert TypeCoercion().coerce(value, ReferenceType("Blob")) is value

    def test_unresolved_ref_passes_through(self) -> None:
        """Test that unknown ref names leave the value alone."""
        assert TypeCoercion(SchemaRegistry()).coerce("x", RefType("Missing")) == "x"

    def test_ref_resolves_class_and_enum(self) -> None:
        """Test ref resolution against the registry."""
        registry = SchemaRegistry()
        registry.enum_builder("Color").add_value("RED", alias="crimson")
        registry.class_builder("Paint").add_property(
            "color", RefType("Color")
        ).add_property("litres", FLOAT)

        result = TypeCoercion(registry).coerce(
            {"color": "crimson", "litres": "2"}, RefType("Paint")
        )

        assert result == {"color": "RED", "litres": 2.0}

    def test_coercion_is_pure(self) -> None:
        """Test that nested input containers are not mutated."""
        value = {"items": ["1", "2"]}
        schema = ObjectType({"items": ArrayType(INT)})

        result = TypeCoercion().coerce(value, schema)

        assert result == {"items": [1, 2]}
        assert value == {"items": ["1", "2"]}
