"""Extraction, coercion and decoding of model output."""

from .coercion import TypeCoercion
from .decoding import decode, remap_keys, to_snake_case
from .extractor import LenientExtractor
from .output_parser import OutputParser

__all__ = [
    "LenientExtractor",
    "OutputParser",
    "TypeCoercion",
    "decode",
    "remap_keys",
    "to_snake_case",
]
