"""Decode validated values into caller-supplied types with pydantic."""

import logging
import re
import types
from typing import Annotated, Any, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import DecodeError
from ..values import Value

logger = logging.getLogger(__name__)

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\s\-]+")


def to_snake_case(name: str) -> str:
    """Convert ``firstName``, ``First-Name`` or ``HTTPCode`` to snake case."""
    name = _SEPARATORS.sub("_", name.strip())
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _CAMEL_BOUNDARY.sub(r"\1_\2", name)
    return name.lower()


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _remap_annotation(value: Value, annotation: Any) -> Value:
    if _is_model(annotation):
        return remap_keys(value, annotation)
    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin is Annotated:
        return _remap_annotation(value, args[0])
    if origin in (Union, types.UnionType):
        models = [arg for arg in args if _is_model(arg)]
        return remap_keys(value, models[0]) if len(models) == 1 else value
    if origin in (list, set, frozenset, tuple) and isinstance(value, list) and args:
        return [_remap_annotation(item, args[0]) for item in value]
    if origin is dict and isinstance(value, dict) and len(args) == 2:
        return {key: _remap_annotation(item, args[1]) for key, item in value.items()}
    return value


def remap_keys(value: Value, model: type[BaseModel]) -> Value:
    """Rename object keys to the field names or aliases ``model`` validates by.

    Keys matching a field name or alias exactly win; the rest are matched by
    their snake case form. Nested model fields are remapped recursively and
    unmatched keys are kept.
    """
    if not isinstance(value, dict):
        return value

    exact: dict[str, str] = {}
    loose: dict[str, str] = {}
    annotations: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        target = info.alias or name
        annotations[target] = info.annotation
        for candidate in (name, info.alias):
            if candidate:
                exact.setdefault(candidate, target)
                loose.setdefault(to_snake_case(candidate), target)

    result: dict[str, Value] = {}
    for key, item in value.items():
        if key in exact:
            result[exact[key]] = item
    for key, item in value.items():
        if key in exact:
            continue
        target = loose.get(to_snake_case(key))
        if target is not None and target not in result:
            result[target] = item
        elif key not in result:
            result[key] = item

    return {
        key: _remap_annotation(item, annotations[key]) if key in annotations else item
        for key, item in result.items()
    }


def _validate(candidate: Value, destination: Any) -> Any:
    if _is_model(destination):
        return destination.model_validate(candidate)
    return TypeAdapter(destination).validate_python(candidate)


def decode(value: Value, destination: Any, snake_case_keys: bool = True) -> Any:
    """Decode a value into ``destination``.

    The first attempt renames keys to the destination's field names; the second
    uses the keys exactly as they are.

    Args:
        value: Coerced and validated value
        destination: A pydantic model or any type ``TypeAdapter`` accepts;
            None returns the value unchanged
        snake_case_keys: Whether to attempt the key-mapping pass

    Returns:
        The decoded instance

    Raises:
        DecodeError: If every attempt fails
    """
    if destination is None:
        return value

    attempts: list[Value] = []
    if snake_case_keys:
        attempts.append(_remap_annotation(value, destination))
    attempts.append(value)

    last_error: PydanticValidationError | None = None
    for candidate in attempts:
        try:
            return _validate(candidate, destination)
        except PydanticValidationError as e:
            logger.debug("Decode attempt failed: %s", e)
            last_error = e

    name = getattr(destination, "__name__", repr(destination))
    raise DecodeError(
        f"Could not decode value into {name}: {last_error}",
        destination=destination,
        original_error=last_error,
    )
