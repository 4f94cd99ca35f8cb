"""Load JSON data documents into Record graphs.

A document is a list of root objects, or an object with a ``roots`` list::

    {
      "roots": [
        {"$type": "Order", "Id": 1, "Customer": {"Id": 7, "Name": "Ann"}},
        {"$type": "Order", "Id": 2, "Customer": 7}
      ]
    }

Nested objects take the declared type of their field unless they carry their
own ``$type``. A scalar in an entity-typed field is the key of a record
declared elsewhere in the document; such references are resolved after the
whole document has been read.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any
from uuid import UUID

from seed_codegen.errors import DataLoadError
from seed_codegen.records import Record
from seed_codegen.types import (
    ArrayTypeDefinition,
    EntityTypeDefinition,
    Float32,
    PrimitiveType,
    PrimitiveTypeDefinition,
    TypeDefinition,
    TypeRegistry,
)

logger = logging.getLogger(__name__)

TYPE_KEY = "$type"


@dataclass
class PendingReference:
    """A key reference to patch once every record is known."""

    record: Record
    field_name: str
    target: EntityTypeDefinition
    key: Any
    where: str


class DataLoader:
    """Build Records for a parsed schema from JSON values."""

    def __init__(self, registry: TypeRegistry) -> None:
        self.registry = registry
        self._index: dict[tuple[str, Any], Record] = {}
        self._pending: list[PendingReference] = []

    def load_file(self, path: Path | str) -> list[Record]:
        """Read a JSON document from disk and return its root records."""
        data_path = Path(path)
        if not data_path.exists():
            raise DataLoadError(f"Data file not found: {data_path}")
        try:
            with open(data_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataLoadError(f"Invalid JSON in {data_path}: {e}") from e
        except UnicodeDecodeError as e:
            raise DataLoadError(f"{data_path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise DataLoadError(f"Cannot read {data_path}: {e}") from e
        return self.load(data)

    def load(self, data: Any) -> list[Record]:
        """Return the root records described by a parsed JSON document."""
        self._index = {}
        self._pending = []

        if isinstance(data, dict) and "roots" in data:
            data = data["roots"]
        if not isinstance(data, list):
            raise DataLoadError("Expected a list of root objects or an object with a 'roots' list")

        roots = []
        for i, item in enumerate(data):
            where = f"roots[{i}]"
            if not isinstance(item, dict):
                raise DataLoadError(f"{where}: expected an object, got {type(item).__name__}")
            if TYPE_KEY not in item:
                raise DataLoadError(f"{where}: root objects must name their type with '{TYPE_KEY}'")
            roots.append(self._build_record(item, None, where))

        self._resolve_pending()
        logger.info("Loaded %d root records (%d distinct keyed records)", len(roots), len(self._index))
        return roots

    def _entity_type(self, name: Any, where: str) -> EntityTypeDefinition:
        if not isinstance(name, str):
            raise DataLoadError(f"{where}: '{TYPE_KEY}' must be a string")
        try:
            return self.registry.get_entity(name)
        except KeyError:
            raise DataLoadError(f"{where}: unknown type '{name}'") from None
        except TypeError as e:
            raise DataLoadError(f"{where}: {e}") from None

    def _build_record(
        self, obj: dict[str, Any], declared: EntityTypeDefinition | None, where: str
    ) -> Record:
        """Convert one JSON object into a Record, recursing into nested entities."""
        if TYPE_KEY in obj:
            type_def = self._entity_type(obj[TYPE_KEY], where)
        elif declared is not None:
            type_def = declared
        else:
            raise DataLoadError(f"{where}: cannot determine the type of this object")

        record = Record(type_def)
        for name, raw in obj.items():
            if name == TYPE_KEY:
                continue
            field_def = type_def.get_field(name)
            if field_def is None:
                raise DataLoadError(f"{where}: type '{type_def.name}' has no field '{name}'")
            field_where = f"{where}.{name}"
            record.values[name] = self._convert(record, name, raw, field_def.type_def, field_where)

        key_field = type_def.key_field
        if key_field is not None:
            key = record.get(key_field.name)
            self._index.setdefault((type_def.name, key), record)
        return record

    def _convert(
        self, record: Record, name: str, raw: Any, type_def: TypeDefinition, where: str
    ) -> Any:
        """Convert a JSON value to the Python value of a field's declared type."""
        if raw is None:
            return None
        base = type_def.resolve_base_type()

        if isinstance(base, EntityTypeDefinition):
            if isinstance(raw, dict):
                return self._build_record(raw, base, where)
            if isinstance(raw, list):
                raise DataLoadError(f"{where}: expected an object or a key, got a list")
            target = base
            key_field = target.key_field
            if key_field is None:
                raise DataLoadError(f"{where}: type '{target.name}' has no key to reference")
            key = self._convert(record, name, raw, key_field.type_def, where)
            self._pending.append(PendingReference(record, name, target, key, where))
            return None

        if isinstance(base, ArrayTypeDefinition):
            if not isinstance(raw, list):
                raise DataLoadError(f"{where}: expected a list, got {type(raw).__name__}")
            # Collections are never emitted; keep the raw elements
            return list(raw)

        if isinstance(base, PrimitiveTypeDefinition):
            return convert_primitive(base.primitive, raw, where)

        raise DataLoadError(f"{where}: unsupported field type '{type_def.name}'")

    def _resolve_pending(self) -> None:
        """Patch key references now that every record is indexed."""
        for ref in self._pending:
            target = self._index.get((ref.target.name, ref.key))
            if target is None:
                raise DataLoadError(
                    f"{ref.where}: no '{ref.target.name}' record with key {ref.key!r}"
                )
            ref.record.values[ref.field_name] = target
        self._pending = []


def convert_primitive(primitive: PrimitiveType, raw: Any, where: str = "value") -> Any:
    """Convert a JSON scalar to the Python value of a primitive type."""
    try:
        if primitive is PrimitiveType.BOOL:
            if isinstance(raw, bool):
                return raw
        elif primitive is PrimitiveType.INT:
            if isinstance(raw, int) and not isinstance(raw, bool):
                return raw
        elif primitive is PrimitiveType.GUID:
            if isinstance(raw, str):
                return UUID(raw)
        elif primitive is PrimitiveType.STRING:
            if isinstance(raw, str):
                return raw
        elif primitive is PrimitiveType.DATETIME:
            if isinstance(raw, str):
                return datetime.fromisoformat(raw)
        elif primitive is PrimitiveType.DECIMAL:
            if isinstance(raw, (int, float, str)) and not isinstance(raw, bool):
                return Decimal(str(raw))
        elif primitive is PrimitiveType.DOUBLE:
            if isinstance(raw, (int, float)) and not isinstance(raw, bool):
                return float(raw)
        elif primitive is PrimitiveType.FLOAT:
            if isinstance(raw, (int, float)) and not isinstance(raw, bool):
                return Float32(raw)
    except (ValueError, InvalidOperation, OverflowError) as e:
        raise DataLoadError(f"{where}: invalid {primitive.value} value {raw!r}: {e}") from None
    raise DataLoadError(f"{where}: expected {primitive.value}, got {type(raw).__name__}")


def load_records(registry: TypeRegistry, path: Path | str) -> list[Record]:
    """Load the root records of a JSON document file."""
    return DataLoader(registry).load_file(path)
