"""Entity and field descriptors shared by introspection, schemas and generation."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Float32(float):
    """A float rounded to IEEE-754 single precision.

    Python has no native 32-bit float, so values that should be emitted with
    the ``f`` suffix are wrapped in this type.
    """

    def __new__(cls, value: Any = 0.0) -> Float32:
        packed = struct.pack("<f", float(value))
        return super().__new__(cls, struct.unpack("<f", packed)[0])

    def __repr__(self) -> str:
        return f"Float32({float(self)!r})"


class FieldKind(Enum):
    """How a field takes part in code generation."""

    VALUE = "value"
    REFERENCE = "reference"
    COLLECTION = "collection"


class PrimitiveType(Enum):
    """Scalar types a schema field can be declared with."""

    BOOL = "bool"
    INT = "int"
    GUID = "guid"
    STRING = "string"
    DATETIME = "datetime"
    DECIMAL = "decimal"
    DOUBLE = "double"
    FLOAT = "float"


@dataclass
class TypeDefinition:
    """A named type a field can be declared with."""

    name: str

    @property
    def kind(self) -> FieldKind:
        """Return how a field of this type is treated during generation."""
        return FieldKind.VALUE

    def resolve_base_type(self) -> TypeDefinition:
        """Return the type behind any chain of aliases."""
        return self


@dataclass
class PrimitiveTypeDefinition(TypeDefinition):
    """One of the built-in scalar types."""

    primitive: PrimitiveType


@dataclass
class AliasTypeDefinition(TypeDefinition):
    """A second name for another type, declared with ``define X as Y``."""

    base_type: TypeDefinition

    @property
    def kind(self) -> FieldKind:
        return self.base_type.kind

    def resolve_base_type(self) -> TypeDefinition:
        return self.base_type.resolve_base_type()


@dataclass
class ArrayTypeDefinition(TypeDefinition):
    """A collection type such as ``string[]``.

    Collections are never traversed or emitted.
    """

    element_type: TypeDefinition

    @property
    def kind(self) -> FieldKind:
        return FieldKind.COLLECTION


@dataclass
class ValueTypeDefinition(TypeDefinition):
    """A declared type with value semantics that has no schema counterpart.

    Used by introspection for Python annotations such as ``int`` or a frozen
    dataclass. ``python_type`` is None when the annotation is not a class.
    """

    python_type: type | None = None


@dataclass
class FieldDefinition:
    """One field of an entity type, with its generation markers."""

    name: str
    type_def: TypeDefinition
    is_key: bool = False
    discard: bool = False
    writable: bool = True

    @property
    def kind(self) -> FieldKind:
        return self.type_def.kind


@dataclass
class EntityTypeDefinition(TypeDefinition):
    """Type definition for entity types.

    Fields are kept in declaration order; generated assignments follow it.
    ``python_type`` is set for descriptors built from Python classes.
    """

    fields: list[FieldDefinition] = field(default_factory=list)
    python_type: type | None = None

    @property
    def kind(self) -> FieldKind:
        return FieldKind.REFERENCE

    @property
    def key_field(self) -> FieldDefinition | None:
        """Return the first key-marked field, if any."""
        return next((f for f in self.fields if f.is_key), None)

    def get_field(self, name: str) -> FieldDefinition | None:
        return next((f for f in self.fields if f.name == name), None)

    def emitted_fields(self, id_suffix: str = "Id") -> list[FieldDefinition]:
        """Return the fields that take part in generated assignments.

        Drops read-only, discard-marked and collection fields, and fields whose
        name ends with ``id_suffix`` unless they are the key.
        """
        result = []
        for f in self.fields:
            if not f.writable or f.discard:
                continue
            if f.kind is FieldKind.COLLECTION:
                continue
            if id_suffix and f.name.endswith(id_suffix) and not f.is_key:
                continue
            result.append(f)
        return result


class TypeRegistry:
    """Types known to a schema, by name, in declaration order.

    The built-in primitives are present from the start.
    """

    def __init__(self) -> None:
        self._by_name: dict[str, TypeDefinition] = {
            pt.value: PrimitiveTypeDefinition(name=pt.value, primitive=pt) for pt in PrimitiveType
        }

    def register(self, type_def: TypeDefinition) -> None:
        """Add a type, refusing to shadow an existing name."""
        if type_def.name in self._by_name:
            raise ValueError(f"Type '{type_def.name}' is already defined")
        self._by_name[type_def.name] = type_def

    def get_or_raise(self, name: str) -> TypeDefinition:
        """Return the named type.

        Raises:
            KeyError: If no type has that name yet.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"Type '{name}' not found") from None

    def get_entity(self, name: str) -> EntityTypeDefinition:
        """Return the named entity type, looking through aliases.

        Raises:
            KeyError: If no type has that name.
            TypeError: If the type is not an entity.
        """
        resolved = self.get_or_raise(name).resolve_base_type()
        if not isinstance(resolved, EntityTypeDefinition):
            raise TypeError(f"Type '{name}' is not an entity type")
        return resolved

    def array_of(self, element_name: str) -> ArrayTypeDefinition:
        """Return the ``element_name[]`` type, creating it on first use."""
        name = f"{element_name}[]"
        array = self._by_name.get(name)
        if array is None:
            array = ArrayTypeDefinition(name=name, element_type=self.get_or_raise(element_name))
            self._by_name[name] = array
        return array  # type: ignore[return-value]

    def register_stub(self, name: str) -> EntityTypeDefinition:
        """Reserve ``name`` for an entity whose fields are filled in later.

        Calling it again for a still-empty entity returns the same object, so
        fields can be attached after every entity name is known.
        """
        stub = self._by_name.setdefault(name, EntityTypeDefinition(name=name))
        if not isinstance(stub, EntityTypeDefinition) or stub.fields:
            raise ValueError(f"Type '{name}' is already defined")
        return stub

    def list_entities(self) -> list[EntityTypeDefinition]:
        """Return the entity types in declaration order."""
        return [t for t in self._by_name.values() if isinstance(t, EntityTypeDefinition)]
