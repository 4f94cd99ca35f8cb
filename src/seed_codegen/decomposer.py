"""Decompose an object graph into ordered variable declarations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from seed_codegen.config import GeneratorOptions
from seed_codegen.encoder import ValueEncoder
from seed_codegen.errors import CyclicReferenceError
from seed_codegen.introspection import describe, is_collection, is_entity, read_field
from seed_codegen.types import FieldKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    """One ``Field = literal`` pair of an object initializer."""

    field_name: str
    literal: str
    is_reference: bool = False

    def render(self) -> str:
        return f"{self.field_name} = {self.literal}"


@dataclass
class Statement:
    """A ``var x = new T {...};`` declaration."""

    variable_name: str
    type_name: str
    assignments: list[Assignment] = field(default_factory=list)

    @property
    def references(self) -> list[str]:
        """Variable names this statement refers to, in assignment order."""
        return [a.literal for a in self.assignments if a.is_reference]

    def render(self) -> str:
        body = ", ".join(a.render() for a in self.assignments)
        return f"var {self.variable_name} = new {self.type_name} {{{body}}};"

    def __str__(self) -> str:
        return self.render()


def dedupe(statements: Iterable[Statement], seen: set[str] | None = None) -> list[Statement]:
    """Keep the first statement for each variable name, preserving order.

    Names already in ``seen`` are skipped; ``seen`` is updated in place.
    """
    if seen is None:
        seen = set()
    result = []
    for statement in statements:
        if statement.variable_name in seen:
            continue
        seen.add(statement.variable_name)
        result.append(statement)
    return result


class GraphDecomposer:
    """Walk an entity graph and order its declarations by dependency.

    Entities are visited depth-first in pre-order: a node's statement is
    recorded before any node it references, and each referenced subtree is
    finished before the next reference of the same node. Reversing that
    sequence places every entity after all of its dependencies. An entity
    reached twice is recorded twice; only its first occurrence in the
    reversed sequence is kept.

    The walk uses an explicit stack, so graph depth is not limited by the
    interpreter's recursion limit.
    """

    def __init__(
        self,
        options: GeneratorOptions | None = None,
        encoder: ValueEncoder | None = None,
    ) -> None:
        self.options = options or GeneratorOptions()
        self.encoder = encoder or ValueEncoder()

    def decompose(self, root: Any) -> list[Statement]:
        """Return the declarations needed to rebuild ``root``, dependencies first."""
        working: list[Statement] = []
        stack: list[tuple[Any, tuple[str, ...]]] = [(root, ())]

        while stack:
            entity, ancestors = stack.pop()
            statement, children = self._visit(entity)
            working.append(statement)

            lineage = ancestors + (statement.variable_name,)
            if self.options.detect_cycles:
                for _, child_name in children:
                    if child_name in lineage:
                        start = lineage.index(child_name)
                        raise CyclicReferenceError([*lineage[start:], child_name])
            for child in reversed(children):
                stack.append((child[0], lineage))

        working.reverse()
        result = dedupe(working)
        logger.debug(
            "Decomposed %s: %d visits, %d statements",
            result[-1].variable_name, len(working), len(result),
        )
        return result

    def decompose_all(self, roots: Iterable[Any]) -> list[Statement]:
        """Decompose each root in turn and merge, first declaration wins."""
        seen: set[str] = set()
        result: list[Statement] = []
        for root in roots:
            result.extend(dedupe(self.decompose(root), seen))
        return result

    def _visit(self, entity: Any) -> tuple[Statement, list[tuple[Any, str]]]:
        """Build the statement for one entity and list the entities it references."""
        variable_name = self.encoder.variable_name_of(entity)
        type_def = describe(entity)
        children: list[tuple[Any, str]] = []

        def on_entity(value: Any) -> str:
            name = self.encoder.variable_name_of(value)
            children.append((value, name))
            return name

        values: list[Assignment] = []
        references: list[Assignment] = []
        for f in type_def.emitted_fields(self.options.id_suffix):
            value = read_field(entity, f)
            if f.kind is FieldKind.REFERENCE:
                # Unset navigation fields are left out rather than set to null
                if value is None:
                    continue
                references.append(Assignment(f.name, on_entity(value), is_reference=True))
            elif is_collection(value):
                # Untyped fields are classified by what they hold
                continue
            elif is_entity(value):
                references.append(Assignment(f.name, on_entity(value), is_reference=True))
            else:
                values.append(Assignment(f.name, self.encoder.encode(value, on_entity)))

        statement = Statement(
            variable_name=variable_name,
            type_name=type_def.name,
            assignments=values + references,
        )
        return statement, children
