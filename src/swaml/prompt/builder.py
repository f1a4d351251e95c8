"""Chat message templating with an injected output-format section."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from ..schema.typed import field_descriptions_of, schema_for
from ..schema.types import SchemaType
from ..values import dump_value
from .renderer import PromptRenderer

if TYPE_CHECKING:
    from ..schema.registry import SchemaRegistry

OUTPUT_FORMAT_VARIABLE = "ctx.output_format"

_VARIABLE = re.compile(r"\{\{\s*([a-zA-Z_][a-zA-Z0-9_.]*)\s*\}\}")


def render_template(template: str, variables: Mapping[str, Any]) -> str:
    """Substitute ``{{ name }}`` placeholders; unknown names are left intact."""

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        value = variables[name]
        return value if isinstance(value, str) else dump_value(value)

    return _VARIABLE.sub(substitute, template)


@dataclass(frozen=True)
class PromptBuilder:
    """Immutable builder for ``[{"role": ..., "content": ...}]`` chat messages.

    Every setter returns a new builder. ``{{ ctx.output_format }}`` receives the
    rendered schema, ``{{ example }}`` the single example and ``{{ examples }}``
    all examples separated by blank lines.

    Example::

        messages = (
            PromptBuilder()
            .system("Extract people.\\n{{ ctx.output_format }}")
            .user("{{ text }}")
            .variable("text", document)
            .build(person_schema)
        )
    """

    system_template: str | None = None
    user_template: str | None = None
    values: Mapping[str, Any] = field(default_factory=dict)
    examples: tuple[Any, ...] = ()

    def system(self, template: str) -> PromptBuilder:
        return replace(self, system_template=template)

    def user(self, template: str) -> PromptBuilder:
        return replace(self, user_template=template)

    def variable(self, name: str, value: Any) -> PromptBuilder:
        return replace(self, values={**self.values, name: value})

    def variables(self, values: Mapping[str, Any]) -> PromptBuilder:
        return replace(self, values={**self.values, **values})

    def variable_json(self, name: str, value: Any) -> PromptBuilder:
        """Bind ``name`` to the pretty-printed JSON of ``value``."""
        return self.variable(name, dump_value(value, indent=2))

    def example(self, value: Any) -> PromptBuilder:
        return replace(self, examples=(*self.examples, value))

    def build(
        self,
        schema: SchemaType | None = None,
        registry: SchemaRegistry | None = None,
        descriptions: dict[str, str] | None = None,
    ) -> list[dict[str, str]]:
        """Render the messages, injecting ``schema`` as the output format."""
        output_format = None
        if schema is not None:
            output_format = PromptRenderer(registry).render(schema, descriptions)
        return self._messages(output_format)

    def build_for(
        self, typed: Any, registry: SchemaRegistry | None = None
    ) -> list[dict[str, str]]:
        """Render the messages for a schema-describing class."""
        return self.build(schema_for(typed), registry, field_descriptions_of(typed))

    def build_raw(self) -> list[dict[str, str]]:
        """Render the messages without an output format."""
        return self._messages(None)

    def _context(self, output_format: str | None) -> dict[str, Any]:
        context = dict(self.values)
        if output_format is not None:
            context[OUTPUT_FORMAT_VARIABLE] = output_format
        if self.examples:
            rendered = [
                e if isinstance(e, str) else dump_value(e, indent=2)
                for e in self.examples
            ]
            if len(rendered) == 1:
                context["example"] = rendered[0]
            context["examples"] = "\n\n".join(rendered)
        return context

    def _messages(self, output_format: str | None) -> list[dict[str, str]]:
        context = self._context(output_format)
        messages = []
        if self.system_template is not None:
            messages.append(
                {
                    "role": "system",
                    "content": render_template(self.system_template, context),
                }
            )
        if self.user_template is not None:
            messages.append(
                {
                    "role": "user",
                    "content": render_template(self.user_template, context),
                }
            )
        return messages


def with_output_format(
    prompt: str, schema: SchemaType, registry: SchemaRegistry | None = None
) -> str:
    """Append the rendered output format to ``prompt``."""
    output_format = PromptRenderer(registry).render(schema)
    if not output_format:
        return prompt
    return f"{prompt}\n\n{output_format}"


def simple(
    prompt: str,
    schema: SchemaType | None = None,
    registry: SchemaRegistry | None = None,
) -> list[dict[str, str]]:
    """Build a single user message, with the output format appended."""
    content = prompt if schema is None else with_output_format(prompt, schema, registry)
    return [{"role": "user", "content": content}]


def chat(
    system: str,
    user: str,
    schema: SchemaType | None = None,
    registry: SchemaRegistry | None = None,
) -> list[dict[str, str]]:
    """Build a system and user message pair.

    The output format is appended to the system message unless the system
    template already places it with ``{{ ctx.output_format }}``.
    """
    builder = PromptBuilder().system(system).user(user)
    if schema is not None and OUTPUT_FORMAT_VARIABLE not in system:
        builder = builder.system(with_output_format(system, schema, registry))
    return builder.build(schema, registry)


def inject_output_format(
    messages: list[dict[str, Any]],
    schema: SchemaType,
    registry: SchemaRegistry | None = None,
) -> list[dict[str, Any]]:
    """Add the output format to existing chat messages.

    The format is appended to the first system message, or inserted as a new
    system message at the beginning. The input list is not modified.

    Args:
        messages: Original chat messages
        schema: Expected answer shape
        registry: Registry used to resolve ``ref`` names

    Returns:
        Messages carrying the output format
    """
    output_format = PromptRenderer(registry).render(schema)
    enhanced = [dict(message) for message in messages]
    if not output_format:
        return enhanced

    for message in enhanced:
        if message.get("role") == "system":
            message["content"] = f"{message['content']}\n\n{output_format}"
            return enhanced

    enhanced.insert(0, {"role": "system", "content": output_format})
    return enhanced
