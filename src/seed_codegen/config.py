"""Generator options and their YAML configuration file."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from seed_codegen.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratorOptions:
    """Options controlling code generation.

    Attributes:
        id_suffix: Fields whose name ends with this suffix are skipped, except
            the key field. An empty suffix disables the rule.
        detect_cycles: Raise CyclicReferenceError when an entity references
            itself, directly or through other entities. When disabled a cycle
            never terminates.
    """

    id_suffix: str = "Id"
    detect_cycles: bool = True

    def merged(self, overrides: dict[str, Any]) -> GeneratorOptions:
        """Return a copy with the non-None values of ``overrides`` applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


def options_from_mapping(data: dict[str, Any] | None) -> GeneratorOptions:
    """Build options from a mapping, rejecting unknown keys and bad types."""
    if not data:
        return GeneratorOptions()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping of options, got {type(data).__name__}")

    known = {f.name: f for f in fields(GeneratorOptions)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"Unknown option(s): {', '.join(unknown)}")

    if "id_suffix" in data and not isinstance(data["id_suffix"], str):
        raise ConfigError("Option 'id_suffix' must be a string")
    if "detect_cycles" in data and not isinstance(data["detect_cycles"], bool):
        raise ConfigError("Option 'detect_cycles' must be true or false")
    return GeneratorOptions(**data)


def load_options(path: Path | str) -> GeneratorOptions:
    """Load options from a YAML file.

    The file may hold the options at top level or under a ``seed_codegen``
    section.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"{config_path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    if isinstance(data, dict) and "seed_codegen" in data:
        data = data["seed_codegen"]
    logger.debug("Loaded options from %s: %s", config_path, data)
    return options_from_mapping(data)
