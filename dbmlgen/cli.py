# File: dbmlgen/cli.py
"""
dbmlgen - Command-Line Interface
================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Render to stdout
    python -m dbmlgen --schema schema.yaml

    # Render to a file, verbose
    python -m dbmlgen -s schema.json -o schema.dbml -v

    # Validate only (no output)
    python -m dbmlgen -s schema.yaml --validate-only

    # Render even if validation fails
    python -m dbmlgen -s schema.yaml --no-strict

Exit codes:
    0 - success
    1 - validation error
    2 - generation error
    3 - export error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dbmlgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the dbmlgen logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))

    root_logger: logging.Logger = logging.getLogger("dbmlgen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from dbmlgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="dbmlgen",
        description=(
            "dbmlgen - render database schema documents as DBML.\n\n"
            "Reads a schema description (JSON/YAML), checks it for "
            "structural consistency and writes a DBML document."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s schema.yaml\n"
            "  %(prog)s -s schema.json -o schema.dbml -v\n"
            "  %(prog)s -s schema.yaml --validate-only\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"dbmlgen v{__version__}",
    )

    parser.add_argument(
        "-s", "--schema",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the schema document (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="FILE",
        help="Write DBML to FILE instead of stdout.",
    )

    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the schema without generating DBML.",
    )

    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--no-strict",
        action="store_true",
        default=False,
        help="Generate DBML even if validation fails.",
    )
    behaviour_group.add_argument(
        "--default-schema",
        type=str,
        default=None,
        metavar="NAME",
        help="Schema name written without a qualifier (default: public).",
    )

    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except the DBML itself.",
    )

    return parser


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(schema_path: Path) -> int:
    """Load and validate a schema document. Returns the exit code."""
    from dbmlgen.serialize import load_schema_file, parse_raw_project
    from dbmlgen.validators import check_project

    logger.info("Running validation-only mode for: %s", schema_path)

    try:
        project = parse_raw_project(load_schema_file(schema_path))
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load schema: %s", exc)
        return EXIT_INPUT_ERROR

    error = check_project(project)
    if error is not None:
        print(f"invalid: {error}")
        return EXIT_VALIDATION_ERROR

    print(
        f"valid: project {project.name} "
        f"({len(project.tables)} tables, {len(project.enums)} enums, "
        f"{len(project.refs)} refs, {len(project.table_groups)} table groups)"
    )
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Generation mode
# ---------------------------------------------------------------------------


def _run_generation(
    schema_path: Path,
    output_path: Optional[Path],
    args: argparse.Namespace,
) -> int:
    """Run the full pipeline. Returns the exit code."""
    from dbmlgen.models import DEFAULT_SCHEMA
    from dbmlgen.pipeline import DBMLPipeline, PipelineReport

    pipeline: DBMLPipeline = DBMLPipeline(
        strict_validation=not args.no_strict,
        default_schema=args.default_schema or DEFAULT_SCHEMA,
    )
    report: PipelineReport = pipeline.run_from_file(schema_path, output_path)

    if output_path is None and report.dbml is not None and report.success:
        sys.stdout.write(report.dbml)
    elif output_path is not None and not args.quiet:
        print(report.summary(), file=sys.stderr)

    if not report.success:
        if report.input_errors:
            return EXIT_INPUT_ERROR
        if report.validation_errors:
            return EXIT_VALIDATION_ERROR
        if report.export_errors:
            return EXIT_EXPORT_ERROR
        return EXIT_GENERATION_ERROR

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).

    Returns:
        Process exit code.
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
        logging.disable(logging.NOTSET)

    _setup_logging(verbosity)

    schema_path: Path = Path(args.schema).resolve()
    if not schema_path.is_file():
        logger.error("Schema file not found: %s", schema_path)
        return EXIT_INPUT_ERROR

    if args.validate_only:
        return _run_validate_only(schema_path)

    output_path: Optional[Path] = Path(args.output).resolve() if args.output else None

    logger.info("Schema:  %s", schema_path)
    logger.info("Output:  %s", output_path or "<stdout>")
    logger.info("Strict:  %s", not args.no_strict)

    exit_code: int = _run_generation(schema_path, output_path, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    return exit_code


def main() -> None:
    """Console-script entry point."""
    sys.exit(cli_main())


__all__: List[str] = [
    "cli_main",
    "main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]
