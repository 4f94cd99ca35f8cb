"""Command-line tool that turns a schema and a JSON document into seed code.

Usage:
    seed-codegen schema.seed data.json                 # prints to stdout
    seed-codegen schema.seed data.json -o Seed.cs      # writes to file
    seed-codegen schema.seed data.json --config seed.yaml --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from seed_codegen.config import GeneratorOptions, load_options
from seed_codegen.errors import SeedCodegenError
from seed_codegen.generator import SeedGenerator
from seed_codegen.loader import load_records
from seed_codegen.parsing import parse_schema

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Send seed_codegen log records to stderr at the given level."""
    log_level = getattr(logging, level.upper(), logging.WARNING)
    package_logger = logging.getLogger("seed_codegen")
    package_logger.setLevel(log_level)
    package_logger.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    package_logger.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seed-codegen",
        description="Generate C# seed data statements from a schema and a JSON document",
    )
    parser.add_argument("schema", type=Path, help="Schema file declaring the entity types")
    parser.add_argument("data", type=Path, help="JSON document with the root objects")
    parser.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    parser.add_argument("--config", type=Path, help="YAML file with generator options")
    parser.add_argument(
        "--id-suffix",
        default=None,
        help='Skip non-key fields whose name ends with this suffix (default: "Id")',
    )
    parser.add_argument(
        "--no-cycle-check",
        dest="detect_cycles",
        action="store_const",
        const=False,
        default=None,
        help="Do not check for reference cycles",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        options = load_options(args.config) if args.config else GeneratorOptions()
        options = options.merged({"id_suffix": args.id_suffix, "detect_cycles": args.detect_cycles})

        if not args.schema.exists():
            print(f"Error: Schema file not found: {args.schema}", file=sys.stderr)
            return 1
        try:
            schema_text = args.schema.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: Cannot read schema file {args.schema}: {e}", file=sys.stderr)
            return 1
        registry = parse_schema(schema_text)
        roots = load_records(registry, args.data)
        lines = SeedGenerator(options).generate_code(roots)
    except (SeedCodegenError, SyntaxError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output = "\n".join(lines)
    if args.output:
        try:
            args.output.write_text(output + "\n", encoding="utf-8")
        except OSError as e:
            print(f"Error: Cannot write {args.output}: {e}", file=sys.stderr)
            return 1
        print(f"Wrote {len(lines)} statements to {args.output}", file=sys.stderr)
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
