"""Custom exceptions for SWAML."""

from enum import Enum
from typing import Any


class SwamlException(Exception):
    """Base exception for SWAML.

    All custom exceptions in this package should inherit from this base class.
    """

    pass


class ExtractionError(SwamlException):
    """Raised when no JSON document can be recovered from model output.

    This exception is raised when:
    - The text holds no parseable JSON, fenced block, or balanced span
    - Every repair candidate still fails strict parsing
    - Streaming completion is not allowed (``is_done=True``)

    Attributes:
        response_text: Preview of the text that could not be extracted
    """

    def __init__(self, message: str, response_text: str | None = None):
        super().__init__(message)
        self.response_text = response_text


class CoercionError(SwamlException):
    """Raised when a value cannot be coerced into the expected schema kind.

    Attributes:
        expected: Human name of the expected schema (``bool``, ``string[]``)
        actual: Kind of the observed value (``string``, ``map``)
        path: JSON-path-like location of the failing value
    """

    def __init__(self, expected: str, actual: str, path: str = "$"):
        super().__init__(f"Expected {expected}, got {actual} at {path}")
        self.expected = expected
        self.actual = actual
        self.path = path


class ValidationCategory(Enum):
    """Categories of post-coercion validation failures."""

    MISSING_FIELD = "missing_field"
    ENUM_VALUE = "enum_value"
    TYPE_MISMATCH = "type_mismatch"


class ValidationError(SwamlException):
    """Raised when a coerced value still disagrees with its schema.

    This exception is raised when:
    - A required object property is absent
    - A string is not a member of a non-empty enum
    - A value's kind does not match the schema kind

    Attributes:
        path: JSON-path-like location of the failing value
        category: Which kind of validation failed
    """

    def __init__(
        self,
        message: str,
        path: str = "$",
        category: ValidationCategory = ValidationCategory.TYPE_MISMATCH,
    ):
        super().__init__(message)
        self.path = path
        self.category = category


class TypeNotDynamicError(SwamlException):
    """Raised when a strict extension entry point targets a non-dynamic type.

    Attributes:
        name: Name of the type that was not registered as dynamic
    """

    def __init__(self, name: str):
        super().__init__(
            f"Type '{name}' is not marked dynamic. Register it with "
            f"register_dynamic_type('{name}') or set is_dynamic = True on its "
            "class before extending it at runtime."
        )
        self.name = name


class SchemaNotFoundError(SwamlException):
    """Raised when a requested schema name is not present in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Schema '{name}' is not registered")
        self.name = name


class DecodeError(SwamlException):
    """Raised when a validated value cannot be decoded into the destination type.

    Attributes:
        destination: The type that decoding targeted
        original_error: The error raised by the final decoding attempt
    """

    def __init__(
        self,
        message: str,
        destination: Any = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.destination = destination
        self.original_error = original_error


class ConfigurationException(SwamlException):
    """Raised when configuration errors occur.

    This exception is raised when:
    - An environment variable holds a value of the wrong type
    - Settings fail pydantic validation

    Attributes:
        config_key: The configuration key that caused the error
    """

    def __init__(self, message: str, config_key: str | None = None):
        super().__init__(message)
        self.config_key = config_key
