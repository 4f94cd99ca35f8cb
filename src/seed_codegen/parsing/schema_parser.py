"""Parser for the entity schema DSL.

Example::

    define code as string

    Customer {
        Id: int [key],
        Name: string,
        Orders: Order[],
        Password: string [discard],
    }

    Order {
        Id: guid [key],
        Customer: Customer,
        CustomerId: int,
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from seed_codegen.errors import SchemaError
from seed_codegen.parsing.schema_lexer import SchemaLexer, find_column
from seed_codegen.types import (
    AliasTypeDefinition,
    FieldDefinition,
    TypeDefinition,
    TypeRegistry,
)

FIELD_MARKERS = ("key", "discard", "readonly")


@dataclass
class TypeRef:
    """A type name as written in a field or alias, with its `[]` suffix."""

    name: str
    is_array: bool = False


@dataclass
class FieldSpec:
    """A parsed field whose type has not been looked up yet."""

    name: str
    type_expr: TypeRef
    markers: list[str] = field(default_factory=list)
    lineno: int = 0


@dataclass
class EntitySpec:
    """A parsed entity declaration."""

    name: str
    fields: list[FieldSpec]


@dataclass
class AliasSpec:
    """A parsed `define NAME as TYPE` declaration."""

    name: str
    target: TypeRef


class SchemaParser:
    """Parser for the entity schema DSL."""

    tokens = SchemaLexer.tokens

    def __init__(self) -> None:
        self.lexer = SchemaLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self.registry: TypeRegistry = TypeRegistry()
        self._specs: list[AliasSpec | EntitySpec] = []

    def p_schema(self, p: yacc.YaccProduction) -> None:
        """schema : declarations"""
        p[0] = p[1]

    def p_declarations_first(self, p: yacc.YaccProduction) -> None:
        """declarations : declaration"""
        p[0] = [p[1]]

    def p_declarations_more(self, p: yacc.YaccProduction) -> None:
        """declarations : declarations declaration"""
        p[0] = p[1]
        p[0].append(p[2])

    def p_declaration(self, p: yacc.YaccProduction) -> None:
        """declaration : alias_decl
                       | entity_decl"""
        p[0] = p[1]

    def p_alias_decl(self, p: yacc.YaccProduction) -> None:
        """alias_decl : DEFINE IDENTIFIER AS type_expr"""
        p[0] = AliasSpec(name=p[2], target=p[4])

    def p_entity_decl(self, p: yacc.YaccProduction) -> None:
        """entity_decl : IDENTIFIER LBRACE members RBRACE
                       | IDENTIFIER LBRACE members COMMA RBRACE"""
        p[0] = EntitySpec(name=p[1], fields=p[3])

    def p_entity_decl_empty(self, p: yacc.YaccProduction) -> None:
        """entity_decl : IDENTIFIER LBRACE RBRACE"""
        p[0] = EntitySpec(name=p[1], fields=[])

    def p_members_first(self, p: yacc.YaccProduction) -> None:
        """members : member"""
        p[0] = [p[1]]

    def p_members_more(self, p: yacc.YaccProduction) -> None:
        """members : members COMMA member"""
        p[0] = p[1] + [p[3]]

    def p_member(self, p: yacc.YaccProduction) -> None:
        """member : IDENTIFIER COLON type_expr"""
        p[0] = FieldSpec(name=p[1], type_expr=p[3], lineno=p.lineno(1))

    def p_member_with_markers(self, p: yacc.YaccProduction) -> None:
        """member : IDENTIFIER COLON type_expr LBRACKET markers RBRACKET"""
        p[0] = FieldSpec(name=p[1], type_expr=p[3], markers=p[5], lineno=p.lineno(1))

    def p_markers_first(self, p: yacc.YaccProduction) -> None:
        """markers : IDENTIFIER"""
        p[0] = [p[1]]

    def p_markers_more(self, p: yacc.YaccProduction) -> None:
        """markers : markers COMMA IDENTIFIER"""
        p[0] = p[1] + [p[3]]

    def p_type_expr_named(self, p: yacc.YaccProduction) -> None:
        """type_expr : IDENTIFIER"""
        p[0] = TypeRef(name=p[1], is_array=False)

    def p_type_expr_array(self, p: yacc.YaccProduction) -> None:
        """type_expr : IDENTIFIER ARRAY"""
        p[0] = TypeRef(name=p[1], is_array=True)

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p is None:
            raise SyntaxError("Syntax error at end of input")
        column = find_column(self.lexer.source, p.lexpos)
        raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno}, column {column})")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> TypeRegistry:
        """Parse schema text and return the registry of the types it declares."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.registry = TypeRegistry()
        # Comments and whitespace alone declare nothing
        if not self.lexer.tokenize(data):
            self._specs = []
            return self.registry

        self.lexer.lexer.lineno = 1
        self._specs = self.parser.parse(data, lexer=self.lexer.lexer)
        self._resolve_specs()
        return self.registry

    def _lookup(self, type_expr: TypeRef) -> TypeDefinition:
        """Return the type a reference names; KeyError if it is not known yet."""
        if type_expr.is_array:
            return self.registry.array_of(type_expr.name)
        return self.registry.get_or_raise(type_expr.name)

    def _build_field(self, entity_name: str, spec: FieldSpec) -> FieldDefinition:
        """Resolve one field spec, validating its markers."""
        unknown = [m for m in spec.markers if m not in FIELD_MARKERS]
        if unknown:
            raise SchemaError(
                f"Unknown marker '{unknown[0]}' on field '{entity_name}.{spec.name}' "
                f"(line {spec.lineno})"
            )
        return FieldDefinition(
            name=spec.name,
            type_def=self._lookup(spec.type_expr),
            is_key="key" in spec.markers,
            discard="discard" in spec.markers,
            writable="readonly" not in spec.markers,
        )

    def _check_entity_spec(self, spec: EntitySpec) -> None:
        names = [f.name for f in spec.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise SchemaError(f"Entity '{spec.name}' declares field '{duplicates[0]}' more than once")
        keys = [f.name for f in spec.fields if "key" in f.markers]
        if len(keys) > 1:
            raise SchemaError(f"Entity '{spec.name}' declares more than one key: {', '.join(keys)}")

    def _declare(self, spec: AliasSpec | EntitySpec) -> None:
        """Turn one spec into a registered type; KeyError if a name it uses is unknown."""
        if isinstance(spec, AliasSpec):
            self.registry.register(AliasTypeDefinition(name=spec.name, base_type=self._lookup(spec.target)))
            return
        fields = [self._build_field(spec.name, f) for f in spec.fields]
        self.registry.register_stub(spec.name).fields = fields

    def _resolve_specs(self) -> None:
        """Register every parsed spec, whatever order the schema declares them in.

        Entity names are reserved first so entities may refer to themselves,
        to each other and to entities declared further down. Aliases can only
        be registered once their target is, so specs are retried in rounds
        until a round registers nothing.
        """
        seen: set[str] = set()
        for spec in self._specs:
            if spec.name in seen:
                raise SchemaError(f"Type '{spec.name}' is already defined")
            seen.add(spec.name)
            if isinstance(spec, EntitySpec):
                self._check_entity_spec(spec)
                try:
                    self.registry.register_stub(spec.name)
                except ValueError as e:
                    raise SchemaError(str(e)) from e

        pending = list(self._specs)
        while pending:
            waiting = []
            for spec in pending:
                try:
                    self._declare(spec)
                except KeyError:
                    waiting.append(spec)
                except SchemaError:
                    raise
                except ValueError as e:
                    raise SchemaError(str(e)) from e
            if len(waiting) == len(pending):
                raise SchemaError(f"Cannot resolve types: {[s.name for s in waiting]}")
            pending = waiting


def parse_schema(text: str) -> TypeRegistry:
    """Parse schema text into a TypeRegistry."""
    return SchemaParser().parse(text)
