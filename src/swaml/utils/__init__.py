"""Utility functions for configuration."""

from .config import ParserSettings, load_environment, load_parser_settings

__all__ = [
    "ParserSettings",
    "load_environment",
    "load_parser_settings",
]
