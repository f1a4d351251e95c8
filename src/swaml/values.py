"""JSON-like runtime values flowing through extraction, coercion and decoding."""

import json
from typing import Any, TypeAlias

JSONScalar: TypeAlias = None | bool | int | float | str
Value: TypeAlias = JSONScalar | list["Value"] | dict[str, "Value"]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_value(text: str) -> Value:
    """Parse strict JSON text into a Value.

    ``NaN`` and ``Infinity`` are rejected even though ``json.loads`` accepts them.

    Raises:
        ValueError: If the text is not strict JSON
    """
    return json.loads(text, parse_constant=_reject_constant)


def is_strict_json(text: str) -> bool:
    """Return True when ``text`` parses as strict JSON."""
    try:
        parse_value(text)
    except ValueError:
        return False
    return True


def dump_value(value: Value, indent: int | None = None) -> str:
    """Serialize a Value as JSON text."""
    return json.dumps(value, ensure_ascii=False, indent=indent)


def value_kind(value: Any) -> str:
    """Name the kind of a runtime value for error reporting."""
    if value is None:
        return "null"
    # bool is a subclass of int
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "map"
    return type(value).__name__
