"""Entity identity: key lookup and variable naming."""

from __future__ import annotations

from typing import Any

from seed_codegen.errors import NoKeyError, UnencodableTypeError
from seed_codegen.introspection import describe, is_value_shaped, read_field


def identity_of(entity: Any) -> Any:
    """Return the value of the entity's key-marked field.

    Raises:
        UnencodableTypeError: If ``entity`` is a primitive or value-shaped.
        NoKeyError: If the entity's type declares no key field.
    """
    if is_value_shaped(entity):
        raise UnencodableTypeError(type(entity).__name__)
    type_def = describe(entity)
    key = type_def.key_field
    if key is None:
        raise NoKeyError(type_def.name)
    return read_field(entity, key)


def type_name_of(entity: Any) -> str:
    """Return the type name used in generated code for an entity."""
    return describe(entity).name


def variable_name(type_name: str, key_literal: str) -> str:
    """Format the variable name for an entity from its type and encoded key."""
    return f"{type_name.lower()}_{key_literal}"
