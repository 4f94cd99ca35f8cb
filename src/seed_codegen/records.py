"""Dynamic entity instances for schema-declared types."""

from __future__ import annotations

from typing import Any

from seed_codegen.types import EntityTypeDefinition


class Record:
    """An instance of an entity type declared in a schema.

    A Record stands in for a Python object of a class that does not exist:
    its fields are read from ``values`` and its descriptor is ``type_def``.
    Missing fields read as None.
    """

    __slots__ = ("type_def", "values")

    def __init__(self, type_def: EntityTypeDefinition, values: dict[str, Any] | None = None) -> None:
        self.type_def = type_def
        self.values: dict[str, Any] = dict(values or {})

    @property
    def type_name(self) -> str:
        return self.type_def.name

    def get(self, name: str) -> Any:
        """Return the value of a field, or None if it was never set."""
        return self.values.get(name)

    def __getattr__(self, name: str) -> Any:
        # Only called for names that are not slots
        try:
            values = object.__getattribute__(self, "values")
        except AttributeError:
            raise AttributeError(name) from None
        if name in values:
            return values[name]
        raise AttributeError(f"'{self.type_name}' record has no field '{name}'")

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.values.items() if not isinstance(v, Record))
        return f"Record({self.type_name!r}, {fields})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.type_name == other.type_name and self.values == other.values

    __hash__ = None  # type: ignore[assignment]
