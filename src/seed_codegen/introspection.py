"""Entity descriptors for Python classes.

Code generation never inspects objects directly: it asks for the
EntityTypeDefinition of a value and reads fields through it. Descriptors for
Schema records travel with the record; descriptors for Python classes are
built here once per class from dataclass fields or class annotations.

Key and discard markers can be given two ways::

    @dataclass
    class Customer:
        Id: int = key_field()
        Name: str = ""
        Password: str = discard_field(default="")

    class Order:
        Id: Annotated[int, Key]
        Customer: Customer
        Notes: Annotated[str, Discard]
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import logging
import numbers
import types
import typing
from datetime import date, time, timedelta
from enum import Enum
from typing import Annotated, Any, ClassVar
from uuid import UUID

from seed_codegen.records import Record
from seed_codegen.types import (
    ArrayTypeDefinition,
    EntityTypeDefinition,
    FieldDefinition,
    TypeDefinition,
    ValueTypeDefinition,
)

logger = logging.getLogger(__name__)

KEY_METADATA = "seed_codegen.key"
DISCARD_METADATA = "seed_codegen.discard"


class Marker:
    """A field marker usable inside ``typing.Annotated``."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return self.name


Key = Marker("Key")
Discard = Marker("Discard")


def key_field(**kwargs: Any) -> Any:
    """Declare a dataclass field as the entity key."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[KEY_METADATA] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def discard_field(**kwargs: Any) -> Any:
    """Declare a dataclass field that never appears in generated code."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[DISCARD_METADATA] = True
    return dataclasses.field(metadata=metadata, **kwargs)


# Classes whose instances have value semantics
_VALUE_BASES: tuple[type, ...] = (
    str,
    bytes,
    bytearray,
    numbers.Number,
    date,
    time,
    timedelta,
    UUID,
    Enum,
    tuple,
    type,
)

_DYNAMIC = ValueTypeDefinition(name="object")

# Descriptors built so far, including stubs still being populated
_DESCRIPTORS: dict[type, EntityTypeDefinition] = {}


def is_value_class(cls: type) -> bool:
    """Return whether instances of ``cls`` are value-shaped."""
    if issubclass(cls, _VALUE_BASES):
        return True
    if dataclasses.is_dataclass(cls) and cls.__dataclass_params__.frozen:  # type: ignore[attr-defined]
        return True
    return False


def _is_collection_class(cls: type) -> bool:
    if issubclass(cls, (str, bytes, bytearray)):
        return False
    # Named tuples are records, not lists
    if issubclass(cls, tuple) and hasattr(cls, "_fields"):
        return False
    return issubclass(cls, collections.abc.Collection)


def is_value_shaped(value: Any) -> bool:
    """Return whether a runtime value is a primitive or value-shaped object."""
    if value is None:
        return True
    if isinstance(value, Record):
        return False
    cls = type(value)
    return is_value_class(cls) or _is_collection_class(cls)


def is_entity(value: Any) -> bool:
    """Return whether a runtime value is treated as an entity instance."""
    return not is_value_shaped(value)


def is_collection(value: Any) -> bool:
    """Return whether a runtime value is a list, set, mapping or similar."""
    return not isinstance(value, Record) and _is_collection_class(type(value))


def describe(target: Any) -> EntityTypeDefinition:
    """Return the entity descriptor for a record, an object or a class."""
    if isinstance(target, Record):
        return target.type_def
    cls = target if isinstance(target, type) else type(target)
    return describe_class(cls)


def describe_class(cls: type) -> EntityTypeDefinition:
    """Build (or fetch) the descriptor for a Python class.

    A stub is registered before fields are resolved so that self-referential
    and mutually referential classes resolve.
    """
    existing = _DESCRIPTORS.get(cls)
    if existing is not None:
        return existing

    stub = EntityTypeDefinition(name=cls.__name__, fields=[], python_type=cls)
    _DESCRIPTORS[cls] = stub
    try:
        stub.fields = _build_fields(cls)
    except BaseException:
        del _DESCRIPTORS[cls]
        raise
    logger.debug("Described %s with %d fields", cls.__name__, len(stub.fields))
    return stub


def clear_cache() -> None:
    """Forget every descriptor built so far."""
    _DESCRIPTORS.clear()


def read_field(entity: Any, field_def: FieldDefinition) -> Any:
    """Return the current value of a field on an entity."""
    if isinstance(entity, Record):
        return entity.get(field_def.name)
    return getattr(entity, field_def.name, None)


def _resolve_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        # Forward references that cannot be resolved leave fields dynamic
        logger.debug("Cannot resolve annotations of %s: %s", cls.__name__, e)
        return {}


def _build_fields(cls: type) -> list[FieldDefinition]:
    hints = _resolve_hints(cls)

    if dataclasses.is_dataclass(cls):
        fields = []
        for f in dataclasses.fields(cls):
            hint = hints.get(f.name, f.type)
            type_def, markers = _type_def_for(hint)
            fields.append(FieldDefinition(
                name=f.name,
                type_def=type_def,
                is_key=bool(f.metadata.get(KEY_METADATA)) or Key in markers,
                discard=bool(f.metadata.get(DISCARD_METADATA)) or Discard in markers,
                writable=f.init and _is_public(cls, f.name),
            ))
        return fields

    fields = []
    seen: set[str] = set()
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, raw in inspect.get_annotations(klass).items():
            if name in seen:
                continue
            hint = hints.get(name, raw)
            if typing.get_origin(hint) is ClassVar or hint is ClassVar:
                continue
            seen.add(name)
            type_def, markers = _type_def_for(hint)
            fields.append(FieldDefinition(
                name=name,
                type_def=type_def,
                is_key=Key in markers,
                discard=Discard in markers,
                writable=_is_public(cls, name),
            ))
    return fields


def _is_public(cls: type, name: str) -> bool:
    if name.startswith("_"):
        return False
    attr = inspect.getattr_static(cls, name, None)
    if isinstance(attr, property) and attr.fset is None:
        return False
    return True


def _type_def_for(hint: Any) -> tuple[TypeDefinition, tuple[Any, ...]]:
    """Map an annotation to a type definition plus its Annotated markers."""
    markers: tuple[Any, ...] = ()
    if typing.get_origin(hint) is Annotated:
        markers = hint.__metadata__
        hint = typing.get_args(hint)[0]

    hint = _strip_optional(hint)
    if isinstance(hint, str) or hint is Any or hint is object:
        return _DYNAMIC, markers

    origin = typing.get_origin(hint)
    if origin is not None:
        if isinstance(origin, type) and _is_collection_class(origin):
            return ArrayTypeDefinition(name=str(hint), element_type=_DYNAMIC), markers
        return ValueTypeDefinition(name=str(hint)), markers

    if not isinstance(hint, type):
        return _DYNAMIC, markers
    if _is_collection_class(hint):
        return ArrayTypeDefinition(name=hint.__name__, element_type=_DYNAMIC), markers
    if is_value_class(hint):
        return ValueTypeDefinition(name=hint.__name__, python_type=hint), markers
    return describe_class(hint), markers


def _strip_optional(hint: Any) -> Any:
    """Turn ``X | None`` and ``Optional[X]`` into ``X``."""
    args = typing.get_args(hint)
    if args and _is_union(hint):
        non_null = [a for a in args if a is not type(None)]
        if len(non_null) == 1:
            return non_null[0]
    return hint


def _is_union(hint: Any) -> bool:
    origin = typing.get_origin(hint)
    return origin is typing.Union or origin is types.UnionType
