"""Seed Codegen - Generate seed data code from object graphs."""

from seed_codegen.config import GeneratorOptions, load_options
from seed_codegen.decomposer import Assignment, GraphDecomposer, Statement
from seed_codegen.encoder import ValueEncoder, encode, escape_verbatim, unescape_verbatim, variable_name_of
from seed_codegen.errors import (
    ConfigError,
    CyclicReferenceError,
    DataLoadError,
    NoKeyError,
    SchemaError,
    SeedCodegenError,
    UnencodableTypeError,
)
from seed_codegen.generator import SeedGenerator, generate, generate_code
from seed_codegen.identity import identity_of
from seed_codegen.introspection import Discard, Key, describe, discard_field, key_field, read_field
from seed_codegen.loader import DataLoader, load_records
from seed_codegen.parsing import SchemaParser, parse_schema
from seed_codegen.records import Record
from seed_codegen.types import (
    EntityTypeDefinition,
    FieldDefinition,
    FieldKind,
    Float32,
    TypeRegistry,
)

__all__ = [
    # Main API
    "SeedGenerator",
    "generate",
    "generate_code",
    "GeneratorOptions",
    "load_options",
    # Building blocks
    "GraphDecomposer",
    "Statement",
    "Assignment",
    "ValueEncoder",
    "encode",
    "escape_verbatim",
    "unescape_verbatim",
    "identity_of",
    "variable_name_of",
    # Describing entities
    "key_field",
    "discard_field",
    "Key",
    "Discard",
    "describe",
    "read_field",
    "Float32",
    "EntityTypeDefinition",
    "FieldDefinition",
    "FieldKind",
    "TypeRegistry",
    # Schemas and data
    "SchemaParser",
    "parse_schema",
    "DataLoader",
    "load_records",
    "Record",
    # Errors
    "SeedCodegenError",
    "NoKeyError",
    "UnencodableTypeError",
    "CyclicReferenceError",
    "SchemaError",
    "DataLoadError",
    "ConfigError",
]

__version__ = "0.1.0"
