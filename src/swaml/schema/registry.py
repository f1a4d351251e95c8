"""Thread-safe registry of named enum and class schemas, extensible at runtime."""

import json
import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..exceptions import SchemaNotFoundError, TypeNotDynamicError
from .document import document, from_dict, to_serializable
from .typed import is_dynamic, model_json_schema_of, schema_for, schema_name_of
from .types import (
    EnumType,
    ObjectType,
    OptionalType,
    RefType,
    SchemaType,
    is_optional,
    iter_refs,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnumValue:
    """A single enum member with optional alias and description."""

    value: str
    alias: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class ClassProperty:
    """A single class property declaration."""

    name: str
    type: SchemaType
    description: str | None = None
    alias: str | None = None


class EnumBuilder:
    """Append-only handle on a registered enum.

    Values keep first-seen order and adding an existing value is a no-op. All
    mutation goes through the owning registry's lock.
    """

    def __init__(self, name: str, lock: threading.RLock) -> None:
        self.name = name
        self._lock = lock
        self._values: list[EnumValue] = []
        self._seen: set[str] = set()

    def add_value(
        self, value: str, alias: str | None = None, description: str | None = None
    ) -> "EnumBuilder":
        """Add a value unless it is already present.

        Args:
            value: Canonical enum value
            alias: Alternative spelling accepted during coercion
            description: Human description of the value

        Returns:
            This builder, for chaining
        """
        with self._lock:
            if value not in self._seen:
                self._seen.add(value)
                self._values.append(EnumValue(value, alias, description))
        return self

    @property
    def values(self) -> list[EnumValue]:
        with self._lock:
            return list(self._values)

    @property
    def all_values(self) -> list[str]:
        with self._lock:
            return [v.value for v in self._values]

    def has_value(self, value: str) -> bool:
        with self._lock:
            return value in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def type(self) -> RefType:
        return RefType(self.name)

    def build_schema(self) -> EnumType:
        with self._lock:
            return EnumType(
                values=[v.value for v in self._values],
                aliases={v.alias: v.value for v in self._values if v.alias},
            )


class ClassBuilder:
    """Append-only handle on a registered class.

    Re-adding a property name keeps the first declaration.
    """

    def __init__(self, name: str, lock: threading.RLock) -> None:
        self.name = name
        self._lock = lock
        self._properties: dict[str, ClassProperty] = {}

    def add_property(
        self,
        name: str,
        type: SchemaType,
        description: str | None = None,
        alias: str | None = None,
    ) -> "ClassBuilder":
        with self._lock:
            if name not in self._properties:
                self._properties[name] = ClassProperty(name, type, description, alias)
        return self

    def has_property(self, name: str) -> bool:
        with self._lock:
            return name in self._properties

    @property
    def property_names(self) -> list[str]:
        with self._lock:
            return list(self._properties)

    @property
    def properties(self) -> list[ClassProperty]:
        with self._lock:
            return list(self._properties.values())

    @property
    def descriptions(self) -> dict[str, str]:
        with self._lock:
            return {
                p.name: p.description
                for p in self._properties.values()
                if p.description
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._properties)

    def type(self) -> RefType:
        return RefType(self.name)

    def build_schema(self) -> ObjectType:
        """Snapshot the class as an object schema requiring non-optional fields."""
        with self._lock:
            props = list(self._properties.values())
        return ObjectType(
            properties={p.name: p.type for p in props},
            required=[p.name for p in props if not is_optional(p.type)],
            descriptions={p.name: p.description for p in props if p.description},
        )


class SchemaRegistry:
    """Stores named enum and class definitions that may grow at runtime.

    Builders are created on first request and returned unchanged afterwards.
    A name marked dynamic may additionally be extended through the strict
    ``extend_*`` and ``*_builder_for`` entry points, which refuse non-dynamic
    names with ``TypeNotDynamicError``.

    A single re-entrant lock guards the registry and every builder it hands
    out, so concurrent mutation never loses or duplicates values and read
    snapshots are consistent.
    """

    def __init__(self) -> None:
        """Initialize an empty SchemaRegistry."""
        self._lock = threading.RLock()
        self._enums: dict[str, EnumBuilder] = {}
        self._classes: dict[str, ClassBuilder] = {}
        self._dynamic: list[str] = []

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def enum_builder(self, name: str) -> EnumBuilder:
        """Return the enum builder for ``name``, creating it if needed.

        Raises:
            ValueError: If ``name`` is already registered as a class
        """
        with self._lock:
            if name in self._classes:
                raise ValueError(f"'{name}' is already registered as a class")
            builder = self._enums.get(name)
            if builder is None:
                builder = EnumBuilder(name, self._lock)
                self._enums[name] = builder
            return builder

    def class_builder(self, name: str) -> ClassBuilder:
        """Return the class builder for ``name``, creating it if needed.

        Raises:
            ValueError: If ``name`` is already registered as an enum
        """
        with self._lock:
            if name in self._enums:
                raise ValueError(f"'{name}' is already registered as an enum")
            builder = self._classes.get(name)
            if builder is None:
                builder = ClassBuilder(name, self._lock)
                self._classes[name] = builder
            return builder

    add_enum = enum_builder
    add_class = class_builder

    def register_schema(self, name: str, schema: SchemaType | dict[str, Any]) -> None:
        """Register an enum or object schema under ``name``.

        Args:
            name: Name to register the schema under
            schema: Schema variant or JSON Schema dictionary

        Raises:
            ValueError: If the schema is neither an enum nor an object
        """
        if isinstance(schema, dict):
            schema = from_dict(schema)
        if isinstance(schema, EnumType):
            builder = self.enum_builder(name)
            aliases = {value: alias for alias, value in schema.aliases.items()}
            for value in schema.values:
                builder.add_value(value, alias=aliases.get(value))
        elif isinstance(schema, ObjectType):
            cls = self.class_builder(name)
            for prop_name, prop in schema.properties.items():
                if prop_name not in schema.required and not is_optional(prop):
                    prop = OptionalType(prop)
                cls.add_property(
                    prop_name, prop, description=schema.descriptions.get(prop_name)
                )
        else:
            raise ValueError(
                f"Only enum and object schemas can be registered, got {schema.kind}"
            )

    def register_typed(self, typed: Any) -> str:
        """Register a schema-describing class and any pydantic ``$defs`` it carries.

        Returns:
            The name the class was registered under
        """
        name = schema_name_of(typed)
        json_schema = model_json_schema_of(typed)
        if json_schema is not None:
            self.ingest(json_schema)
        self.register_schema(name, schema_for(typed))
        if is_dynamic(typed):
            self.register_dynamic_type(name)
        return name

    def ingest(self, schema_document: dict[str, Any]) -> list[str]:
        """Load the ``$defs`` of a JSON Schema document into the registry.

        Object definitions become classes and string enums become enums; other
        definitions are skipped.

        Returns:
            Names that were registered
        """
        definitions = schema_document.get("$defs") or schema_document.get(
            "definitions", {}
        )
        registered = []
        for name, definition in definitions.items():
            schema = from_dict(definition)
            if isinstance(schema, (EnumType, ObjectType)):
                self.register_schema(name, schema)
                registered.append(name)
            else:
                logger.debug("Skipping definition %s of kind %s", name, schema.kind)
        return registered

    # ------------------------------------------------------------------
    # Dynamic types
    # ------------------------------------------------------------------

    def register_dynamic_type(self, name_or_typed: Any) -> None:
        """Mark a type as extensible at runtime.

        A class is only registered when its ``is_dynamic`` flag is set.
        """
        if isinstance(name_or_typed, str):
            name = name_or_typed
        elif is_dynamic(name_or_typed):
            name = schema_name_of(name_or_typed)
        else:
            return
        with self._lock:
            if name not in self._dynamic:
                self._dynamic.append(name)

    def is_dynamic_type(self, name: str) -> bool:
        with self._lock:
            return name in self._dynamic

    @property
    def registered_dynamic_types(self) -> list[str]:
        with self._lock:
            return list(self._dynamic)

    def _require_dynamic(self, name: str) -> None:
        if not self.is_dynamic_type(name):
            raise TypeNotDynamicError(name)

    def enum_builder_for(self, typed: Any) -> EnumBuilder:
        """Return the builder for a dynamic enum class, seeded with its static values.

        Raises:
            TypeNotDynamicError: If the class is not dynamic
        """
        name = schema_name_of(typed)
        self.register_dynamic_type(typed)
        self._require_dynamic(name)
        with self._lock:
            if name not in self._enums:
                self.register_schema(name, schema_for(typed))
            return self.enum_builder(name)

    def class_builder_for(self, typed: Any) -> ClassBuilder:
        """Return the builder for a dynamic class, seeded with its static properties.

        Raises:
            TypeNotDynamicError: If the class is not dynamic
        """
        name = schema_name_of(typed)
        self.register_dynamic_type(typed)
        self._require_dynamic(name)
        with self._lock:
            if name not in self._classes:
                self.register_typed(typed)
            return self.class_builder(name)

    def extend_enum(
        self, name: str, values: Iterable[str | EnumValue]
    ) -> EnumBuilder:
        """Add values to a dynamic enum.

        Raises:
            TypeNotDynamicError: If ``name`` is not registered as dynamic
        """
        self._require_dynamic(name)
        builder = self.enum_builder(name)
        with self._lock:
            for value in values:
                if isinstance(value, EnumValue):
                    builder.add_value(value.value, value.alias, value.description)
                else:
                    builder.add_value(value)
        return builder

    def extend_class(
        self,
        name: str,
        properties: Mapping[str, SchemaType] | Iterable[ClassProperty],
    ) -> ClassBuilder:
        """Add properties to a dynamic class.

        Raises:
            TypeNotDynamicError: If ``name`` is not registered as dynamic
        """
        self._require_dynamic(name)
        builder = self.class_builder(name)
        with self._lock:
            if isinstance(properties, Mapping):
                for prop_name, prop in properties.items():
                    builder.add_property(prop_name, prop)
            else:
                for prop in properties:
                    builder.add_property(
                        prop.name, prop.type, prop.description, prop.alias
                    )
        return builder

    # ------------------------------------------------------------------
    # Lookup and schema building
    # ------------------------------------------------------------------

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._enums or name in self._classes

    def list_available_schemas(self) -> list[str]:
        """List all registered enum and class names, sorted."""
        with self._lock:
            return sorted([*self._enums, *self._classes])

    def resolve(self, name: str) -> EnumType | ObjectType | None:
        """Snapshot the schema registered under ``name``, or None."""
        with self._lock:
            if name in self._enums:
                return self._enums[name].build_schema()
            if name in self._classes:
                return self._classes[name].build_schema()
        return None

    def build_class_schema(self, name: str) -> ObjectType | None:
        with self._lock:
            builder = self._classes.get(name)
            return builder.build_schema() if builder is not None else None

    def build_enum_schema(self, name: str) -> EnumType | None:
        """Snapshot a registered enum; None when unknown or still empty."""
        with self._lock:
            builder = self._enums.get(name)
            if builder is None or len(builder) == 0:
                return None
            return builder.build_schema()

    def definitions_for(self, root: SchemaType) -> dict[str, SchemaType]:
        """Resolve the transitive closure of registered names referenced by ``root``.

        Unregistered references are left out.
        """
        definitions: dict[str, SchemaType] = {}
        with self._lock:
            pending = list(iter_refs(root))
            while pending:
                name = pending.pop(0)
                if name in definitions:
                    continue
                resolved = self.resolve(name)
                if resolved is None:
                    continue
                definitions[name] = resolved
                pending.extend(iter_refs(resolved))
        return definitions

    def build_schema(self, root: str | SchemaType) -> dict[str, Any]:
        """Build a JSON Schema document whose ``$defs`` hold every reachable type.

        Args:
            root: Registered name or schema variant

        Returns:
            JSON Schema document

        Raises:
            SchemaNotFoundError: If ``root`` is a name that is not registered
        """
        with self._lock:
            if isinstance(root, str):
                resolved = self.resolve(root)
                if resolved is None:
                    raise SchemaNotFoundError(root)
                root_schema: SchemaType = resolved
            else:
                root_schema = root
            return document(root_schema, self.definitions_for(root_schema))

    def dynamic_enum_values(self) -> dict[str, list[str]]:
        """Snapshot the values of every enum, keyed by name in creation order."""
        with self._lock:
            return {name: builder.all_values for name, builder in self._enums.items()}

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_serializable(self) -> dict[str, Any]:
        with self._lock:
            return {
                "enums": [
                    {
                        "name": builder.name,
                        "values": [
                            {
                                "name": v.value,
                                "alias": v.alias,
                                "description": v.description,
                            }
                            for v in builder.values
                        ],
                    }
                    for builder in self._enums.values()
                ],
                "classes": [
                    {
                        "name": builder.name,
                        "properties": [
                            {
                                "name": p.name,
                                "type": to_serializable(p.type),
                                "description": p.description,
                            }
                            for p in builder.properties
                        ],
                    }
                    for builder in self._classes.values()
                ],
            }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_serializable(), indent=indent)

    def clear(self) -> None:
        """Remove every definition and dynamic mark."""
        with self._lock:
            self._enums.clear()
            self._classes.clear()
            self._dynamic.clear()
