"""Shared pytest configuration and fixtures for the test suite."""

import pytest
from pydantic import BaseModel

from swaml.parsing import OutputParser
from swaml.schema import (
    INT,
    STRING,
    ObjectSchemaBuilder,
    ObjectType,
    SchemaRegistry,
)


class Person(BaseModel):
    """Simple destination model used across tests."""

    name: str
    age: int


@pytest.fixture
def registry() -> SchemaRegistry:
    """Fresh, empty schema registry."""
    return SchemaRegistry()


@pytest.fixture
def parser(registry: SchemaRegistry) -> OutputParser:
    """Output parser bound to the test registry."""
    return OutputParser(registry=registry)


@pytest.fixture
def person_schema() -> ObjectType:
    """Object schema with required name and age."""
    return ObjectSchemaBuilder().property("name", STRING).property("age", INT).build()


@pytest.fixture
def person_model() -> type[Person]:
    """Pydantic model matching ``person_schema``."""
    return Person
