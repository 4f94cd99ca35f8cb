"""Parsing module for the entity schema DSL."""

from seed_codegen.parsing.schema_lexer import SchemaLexer
from seed_codegen.parsing.schema_parser import SchemaParser, parse_schema

__all__ = [
    "SchemaLexer",
    "SchemaParser",
    "parse_schema",
]
