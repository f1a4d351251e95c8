"""Unit tests for configuration utilities."""

from typing import Any
from unittest.mock import patch

import pytest

from swaml.exceptions import ConfigurationException
from swaml.parsing import OutputParser
from swaml.utils.config import ParserSettings, load_environment, load_parser_settings


class TestConfigurationUtils:
    """Test configuration utility functions."""

    @pytest.mark.unit
    @patch("swaml.utils.config.load_dotenv")
    def test_load_environment(self, mock_load_dotenv: Any) -> None:
        """Test loading environment variables."""
        load_environment()
        mock_load_dotenv.assert_called_once()

    @pytest.mark.unit
    @patch("swaml.utils.config.os.getenv")
    @patch("swaml.utils.config.load_dotenv")
    def test_defaults_when_unset(self, mock_load_dotenv: Any, mock_getenv: Any) -> None:
        """Test that unset variables keep the defaults."""
        mock_getenv.return_value = None

        settings = load_parser_settings()

        assert settings == ParserSettings()
        assert settings.snake_case_keys is True
        assert settings.validate_output is True
        assert settings.error_preview_chars == 200
        mock_load_dotenv.assert_called_once()

    @pytest.mark.unit
    @patch("swaml.utils.config.load_dotenv")
    def test_values_from_environment(
        self, mock_load_dotenv: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test reading SWAML_* variables."""
        monkeypatch.setenv("SWAML_SNAKE_CASE_KEYS", "false")
        monkeypatch.setenv("SWAML_VALIDATE_OUTPUT", "0")
        monkeypatch.setenv("SWAML_ERROR_PREVIEW_CHARS", "50")

        settings = load_parser_settings()

        assert settings.snake_case_keys is False
        assert settings.validate_output is False
        assert settings.error_preview_chars == 50

    @pytest.mark.unit
    @patch("swaml.utils.config.load_dotenv")
    def test_invalid_value_raises(
        self, mock_load_dotenv: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test ConfigurationException for values of the wrong type."""
        monkeypatch.delenv("SWAML_SNAKE_CASE_KEYS", raising=False)
        monkeypatch.delenv("SWAML_VALIDATE_OUTPUT", raising=False)
        monkeypatch.setenv("SWAML_ERROR_PREVIEW_CHARS", "lots")

        with pytest.raises(ConfigurationException) as exc_info:
            load_parser_settings()

        assert exc_info.value.config_key == "SWAML_ERROR_PREVIEW_CHARS"

    @pytest.mark.unit
    def test_settings_reach_extractor(self) -> None:
        """Test that the preview length is passed to the extractor."""
        parser = OutputParser(settings=ParserSettings(error_preview_chars=5))

        assert parser.extractor.preview_chars == 5
