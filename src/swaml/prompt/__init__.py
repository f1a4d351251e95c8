"""Prompt rendering of schemas and chat message templating."""

from .builder import (
    PromptBuilder,
    chat,
    inject_output_format,
    render_template,
    simple,
    with_output_format,
)
from .renderer import PromptRenderer

__all__ = [
    "PromptBuilder",
    "PromptRenderer",
    "chat",
    "inject_output_format",
    "render_template",
    "simple",
    "with_output_format",
]
