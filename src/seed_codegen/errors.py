"""Exceptions raised by seed_codegen."""

from __future__ import annotations


class SeedCodegenError(Exception):
    """Base class for all seed_codegen errors."""


class NoKeyError(SeedCodegenError, LookupError):
    """An entity type declares no key-marked field."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Cannot find key for entity {type_name}")
        self.type_name = type_name


class UnencodableTypeError(SeedCodegenError, TypeError):
    """A value-shaped value matched none of the encoder rules."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f'Unknown primitive or value type "{type_name}".')
        self.type_name = type_name


class CyclicReferenceError(SeedCodegenError, ValueError):
    """An entity was reached again through its own references."""

    def __init__(self, path: list[str]) -> None:
        super().__init__(f"Cyclic reference: {' -> '.join(path)}")
        self.path = path


class SchemaError(SeedCodegenError, ValueError):
    """A schema could not be resolved."""


class DataLoadError(SeedCodegenError, ValueError):
    """A data document does not match its schema."""


class ConfigError(SeedCodegenError, ValueError):
    """Invalid generator configuration."""
