"""Orchestrates extraction, coercion, validation and decoding of model output."""

import logging
from typing import TYPE_CHECKING, Any

from ..exceptions import SwamlException
from ..schema.types import (
    BOOL,
    FLOAT,
    INT,
    SCALAR_TYPES,
    STRING,
    AnyOfType,
    EnumType,
    LiteralType,
    OptionalType,
    RefType,
    SchemaType,
)
from ..schema.validators import SchemaValidator
from ..utils.config import ParserSettings
from ..values import Value, parse_value
from .coercion import TypeCoercion
from .decoding import decode
from .extractor import LenientExtractor

if TYPE_CHECKING:
    from ..schema.registry import SchemaRegistry

logger = logging.getLogger(__name__)


class OutputParser:
    """Turns raw model text into a typed value.

    Pipeline: ``LenientExtractor`` -> parse -> ``TypeCoercion`` ->
    ``SchemaValidator`` -> pydantic decoding. Each stage is skipped when its
    input is absent: without a schema nothing is coerced or validated, and
    without a destination the coerced value is returned.

    Args:
        registry: Registry used to resolve ``ref`` names
        settings: Parser settings; defaults to ``ParserSettings()``

    Example::

        parser = OutputParser()
        person = parser.parse(text, destination=Person, schema=person_schema)
    """

    def __init__(
        self,
        registry: "SchemaRegistry | None" = None,
        settings: ParserSettings | None = None,
    ) -> None:
        self.registry = registry
        self.settings = settings or ParserSettings()
        self.extractor = LenientExtractor(
            preview_chars=self.settings.error_preview_chars
        )
        self.coercion = TypeCoercion(registry)
        self.validator = SchemaValidator(registry)

    def parse(
        self,
        text: str,
        destination: Any = None,
        schema: SchemaType | None = None,
        is_done: bool = True,
    ) -> Any:
        """Parse model output into ``destination``.

        Args:
            text: Raw model output
            destination: Pydantic model or other type to decode into; None
                returns the coerced value
            schema: Schema to coerce and validate against
            is_done: False when ``text`` may be a truncated stream

        Returns:
            The decoded value

        Raises:
            ExtractionError: If no JSON can be recovered
            CoercionError: If a value cannot be converted to the schema
            ValidationError: If the coerced value violates the schema
            DecodeError: If the value does not fit ``destination``
        """
        value = self.parse_to_value(text, schema=schema, is_done=is_done)
        return decode(
            value, destination, snake_case_keys=self.settings.snake_case_keys
        )

    def parse_to_value(
        self, text: str, schema: SchemaType | None = None, is_done: bool = True
    ) -> Value:
        """Run extraction, coercion and validation without decoding."""
        value = self._extract_value(text, schema, is_done)
        if schema is None:
            return value
        coerced = self.coercion.coerce(value, schema)
        if self.settings.validate_output:
            self.validator.validate(coerced, schema)
        return coerced

    def parse_with_repair(
        self,
        text: str,
        destination: Any = None,
        schema: SchemaType | None = None,
        is_done: bool = True,
    ) -> Any:
        """Parse, retrying once on the repaired text if the first attempt fails.

        The original error is raised when the text cannot be repaired or the
        retry fails too.
        """
        try:
            return self.parse(text, destination, schema, is_done)
        except SwamlException as error:
            repaired = self.extractor.repair(text)
            if repaired is None or repaired == text.strip():
                raise
            logger.info("Retrying parse on repaired output after: %s", error)
            try:
                return self.parse(repaired, destination, schema, is_done)
            except SwamlException:
                raise error from None

    def parse_string(self, text: str) -> str:
        return self.parse(text, schema=STRING)

    def parse_bool(self, text: str) -> bool:
        """Parse ``true``/``false``, ``yes``/``no`` or ``1``/``0`` in any case."""
        return self.parse(text, schema=BOOL)

    def parse_int(self, text: str) -> int:
        return self.parse(text, schema=INT)

    def parse_float(self, text: str) -> float:
        return self.parse(text, schema=FLOAT)

    def _is_scalar(self, schema: SchemaType) -> bool:
        if isinstance(schema, (*SCALAR_TYPES, EnumType, LiteralType)):
            return True
        if isinstance(schema, OptionalType):
            return self._is_scalar(schema.inner)
        if isinstance(schema, AnyOfType):
            return all(self._is_scalar(member) for member in schema.types)
        if isinstance(schema, RefType) and self.registry is not None:
            return isinstance(self.registry.resolve(schema.name), EnumType)
        return False

    def _extract_value(
        self, text: str, schema: SchemaType | None, is_done: bool
    ) -> Value:
        if schema is not None and self._is_scalar(schema):
            # bare answers such as `yes` or `POSITIVE` are not JSON
            fenced = self.extractor.fenced_blocks(text)
            trimmed = text.strip()
            for candidate in (trimmed, *fenced):
                try:
                    return parse_value(candidate)
                except ValueError:
                    continue
            return fenced[0] if fenced else trimmed
        return parse_value(self.extractor.extract(text, is_done=is_done))
