"""Configuration utilities for environment-based setup."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import ConfigurationException

ENV_VARS = {
    "snake_case_keys": "SWAML_SNAKE_CASE_KEYS",
    "validate_output": "SWAML_VALIDATE_OUTPUT",
    "error_preview_chars": "SWAML_ERROR_PREVIEW_CHARS",
}


class ParserSettings(BaseModel):
    """Tunable behavior of ``OutputParser``.

    Attributes:
        snake_case_keys: Try mapping keys onto model field names before
            decoding with the keys as given
        validate_output: Run ``SchemaValidator`` after coercion
        error_preview_chars: Characters of input kept on ``ExtractionError``
    """

    snake_case_keys: bool = True
    validate_output: bool = True
    error_preview_chars: int = Field(default=200, ge=0)


def load_environment() -> None:
    """Load environment variables from .env file if it exists."""
    load_dotenv()


def load_parser_settings() -> ParserSettings:
    """Build parser settings from ``SWAML_*`` environment variables.

    Unset variables keep their defaults.

    Returns:
        Validated settings

    Raises:
        ConfigurationException: If a variable holds an invalid value
    """
    load_environment()

    raw = {
        field_name: value
        for field_name, env_var in ENV_VARS.items()
        if (value := os.getenv(env_var)) is not None
    }
    try:
        return ParserSettings.model_validate(raw)
    except ValidationError as e:
        field_name = str(e.errors()[0]["loc"][0])
        env_var = ENV_VARS.get(field_name, field_name)
        raise ConfigurationException(
            f"Invalid value for {env_var}: {e.errors()[0]['msg']}",
            config_key=env_var,
        ) from e
