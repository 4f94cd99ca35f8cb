"""Public entry points for seed code generation."""

from __future__ import annotations

import logging
from typing import Any

from seed_codegen.config import GeneratorOptions
from seed_codegen.decomposer import GraphDecomposer, Statement

logger = logging.getLogger(__name__)


class SeedGenerator:
    """Generate seed statements for one object or a list of objects."""

    def __init__(self, options: GeneratorOptions | None = None) -> None:
        self.options = options or GeneratorOptions()
        self.decomposer = GraphDecomposer(self.options)

    def generate(self, target: Any) -> list[Statement]:
        """Return the statements that rebuild ``target``.

        A list (or tuple) is treated as several roots: each is generated in
        order and a variable already emitted for an earlier root is skipped.
        """
        if isinstance(target, (list, tuple)):
            return self.generate_many(target)
        statements = self.decomposer.decompose(target)
        logger.info("Generated %d statements", len(statements))
        return statements

    def generate_many(self, roots: list[Any] | tuple[Any, ...]) -> list[Statement]:
        """Return merged statements for several roots, first declaration wins."""
        statements = self.decomposer.decompose_all(roots)
        logger.info("Generated %d statements for %d roots", len(statements), len(roots))
        return statements

    def generate_code(self, target: Any) -> list[str]:
        """Return the rendered source lines for ``target``."""
        return [statement.render() for statement in self.generate(target)]


def generate(target: Any, options: GeneratorOptions | None = None) -> list[Statement]:
    """Generate statements for one object or a list of objects."""
    return SeedGenerator(options).generate(target)


def generate_code(target: Any, options: GeneratorOptions | None = None) -> list[str]:
    """Generate source lines for one object or a list of objects."""
    return SeedGenerator(options).generate_code(target)
