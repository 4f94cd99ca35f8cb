"""Render runtime values as C# literal text.

Values are matched against an ordered list of rules; the first rule whose
predicate accepts the value renders it. Order matters: ``bool`` is a subclass
of ``int`` and ``Float32`` a subclass of ``float``. Anything no rule accepts
is an entity reference and renders as the variable name of that entity.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable
from uuid import UUID

from seed_codegen.errors import UnencodableTypeError
from seed_codegen.identity import identity_of, type_name_of, variable_name
from seed_codegen.types import Float32

# Called with an entity; returns the variable name it is emitted under
EntityHandler = Callable[[Any], str]


@dataclass(frozen=True)
class EncodingRule:
    """A (predicate, renderer) pair."""

    name: str
    matches: Callable[[Any], bool]
    render: Callable[[Any], str]


def escape_verbatim(text: str) -> str:
    """Quote ``text`` as a verbatim string literal, doubling embedded quotes."""
    escaped = text.replace('"', '""')
    return f'@"{escaped}"'


def unescape_verbatim(literal: str) -> str:
    """Invert escape_verbatim."""
    if not (literal.startswith('@"') and literal.endswith('"') and len(literal) >= 3):
        raise ValueError(f"Not a verbatim string literal: {literal!r}")
    return literal[2:-1].replace('""', '"')


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def _format_int(value: int) -> str:
    return str(int(value))


def _format_guid(value: UUID) -> str:
    return f'new Guid("{value}")'


def _format_datetime(value: date) -> str:
    if isinstance(value, datetime):
        parts = (value.year, value.month, value.day, value.hour, value.minute, value.second)
    else:
        parts = (value.year, value.month, value.day, 0, 0, 0)
    return f"new DateTime({', '.join(str(p) for p in parts)})"


def _format_decimal(value: Decimal) -> str:
    # C# decimals have no NaN or infinity
    if not value.is_finite():
        raise UnencodableTypeError(f"Decimal {value}")
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}m"


def _non_finite(value: float, type_keyword: str) -> str:
    if math.isnan(value):
        return f"{type_keyword}.NaN"
    return f"{type_keyword}.PositiveInfinity" if value > 0 else f"{type_keyword}.NegativeInfinity"


def _format_double(value: float) -> str:
    if not math.isfinite(value):
        return _non_finite(value, "double")
    return repr(float(value))


def shortest_float32(value: float) -> str:
    """Return the shortest text that reads back as the same single-precision value."""
    target = struct.pack("<f", value)
    for precision in range(1, 10):
        text = f"{value:.{precision}g}"
        if struct.pack("<f", float(text)) == target:
            return text
    return repr(float(value))


def _format_float(value: Float32) -> str:
    if not math.isfinite(value):
        return _non_finite(value, "float")
    return f"{shortest_float32(value)}f"


def _format_null(value: None) -> str:
    return "null"


DEFAULT_RULES: tuple[EncodingRule, ...] = (
    EncodingRule("bool", lambda v: isinstance(v, bool), _format_bool),
    EncodingRule("int", lambda v: isinstance(v, int), _format_int),
    EncodingRule("guid", lambda v: isinstance(v, UUID), _format_guid),
    EncodingRule("string", lambda v: isinstance(v, str), escape_verbatim),
    EncodingRule("datetime", lambda v: isinstance(v, date), _format_datetime),
    EncodingRule("decimal", lambda v: isinstance(v, Decimal), _format_decimal),
    EncodingRule("double", lambda v: isinstance(v, float) and not isinstance(v, Float32), _format_double),
    EncodingRule("float", lambda v: isinstance(v, Float32), _format_float),
    EncodingRule("null", lambda v: v is None, _format_null),
)


class ValueEncoder:
    """Encode values by ordered rule dispatch."""

    def __init__(self, rules: tuple[EncodingRule, ...] = DEFAULT_RULES) -> None:
        self.rules = rules

    def encode(self, value: Any, on_entity: EntityHandler | None = None) -> str:
        """Return the literal text for ``value``.

        Entities are handed to ``on_entity``, which returns the variable name
        to reference. Without a handler the entity's variable name is
        computed directly.
        """
        for rule in self.rules:
            if rule.matches(value):
                return rule.render(value)
        if on_entity is not None:
            return on_entity(value)
        return self.variable_name_of(value)

    def variable_name_of(self, entity: Any) -> str:
        """Return the generated variable name for an entity."""
        key = identity_of(entity)
        return variable_name(type_name_of(entity), self.encode(key))


_default_encoder = ValueEncoder()


def encode(value: Any) -> str:
    """Encode a value with the default rules."""
    return _default_encoder.encode(value)


def variable_name_of(entity: Any) -> str:
    """Return the generated variable name for an entity with the default rules."""
    return _default_encoder.variable_name_of(entity)
