"""SWAML - Schema-aligned parsing of language model output."""

__version__ = "0.1.0"

# Custom exceptions
from .exceptions import (
    CoercionError,
    ConfigurationException,
    DecodeError,
    ExtractionError,
    SchemaNotFoundError,
    SwamlException,
    TypeNotDynamicError,
    ValidationCategory,
    ValidationError,
)

# Parsing pipeline
from .parsing import LenientExtractor, OutputParser, TypeCoercion

# Prompt rendering
from .prompt import PromptBuilder, PromptRenderer

# Schemas and registry
from .schema import (
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
    SchemaType,
    SchemaTyped,
    SchemaValidator,
)

# Configuration utilities
from .utils import ParserSettings, load_environment, load_parser_settings

__all__ = [
    "__version__",
    "LenientExtractor",
    "OutputParser",
    "TypeCoercion",
    "PromptBuilder",
    "PromptRenderer",
    "SchemaRegistry",
    "SchemaValidator",
    "ObjectSchemaBuilder",
    "SchemaType",
    "SchemaTyped",
    "AnyOfType",
    "ArrayType",
    "EnumType",
    "LiteralType",
    "MapType",
    "ObjectType",
    "OptionalType",
    "ReferenceType",
    "RefType",
    "STRING",
    "INT",
    "FLOAT",
    "BOOL",
    "NULL",
    "ParserSettings",
    "load_environment",
    "load_parser_settings",
    # Exceptions
    "SwamlException",
    "ExtractionError",
    "CoercionError",
    "ValidationError",
    "ValidationCategory",
    "TypeNotDynamicError",
    "SchemaNotFoundError",
    "DecodeError",
    "ConfigurationException",
]
