# File: entitygen/cli.py
"""
EntityGen - Command-Line Interface
====================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Built-in catalog, current directory is the Laravel project
    python -m entitygen

    # Custom catalog against another project
    python -m entitygen -s catalog.yaml -p /srv/shop -v

    # Faithful mode: let artisan write the stubs, then patch them
    python -m entitygen -s catalog.yaml --strategy patch --model-migration

    # Validate only (no generator is run)
    python -m entitygen -s catalog.yaml --validate-only

    # Show the artisan calls without running them
    python -m entitygen --dry-run -v

Exit codes:
    0 — success
    1 — validation error
    2 — generation error (at least one entity failed)
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence, Tuple

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root entitygen logger based on verbosity level.

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

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    formatter: logging.Formatter = logging.Formatter(fmt, datefmt=datefmt)
    handler.setFormatter(formatter)

    root_logger: logging.Logger = logging.getLogger("entitygen")
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
    from entitygen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="entitygen",
        description=(
            "EntityGen — Laravel entity scaffolding.\n\n"
            "Runs artisan's make:migration, make:model, make:controller, "
            "make:request and make:resource for every entity of a catalog, "
            "with migration columns and the model's $fillable list filled in."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s\n"
            "  %(prog)s -s catalog.yaml -p /srv/shop -v\n"
            "  %(prog)s -s catalog.yaml --validate-only\n"
            "  %(prog)s -s catalog.yaml --strategy patch --model-migration\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"EntityGen v{__version__}",
    )

    # --- Input ---
    parser.add_argument(
        "-s", "--schema",
        type=str,
        default=None,
        metavar="PATH",
        help="Catalog file (JSON or YAML). Defaults to the built-in catalog.",
    )
    parser.add_argument(
        "-p", "--project",
        type=str,
        default=None,
        metavar="DIR",
        help="Laravel project root (default: the catalog's config or '.').",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the catalog and configuration.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Log the artisan calls and file writes without performing them.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--dialect",
        type=str,
        default=None,
        choices=["simple", "verbose"],
        help="Catalog dialect: framework tags or SQL-like descriptors.",
    )
    config_group.add_argument(
        "--strategy",
        type=str,
        default=None,
        choices=["render", "patch"],
        help=(
            "'render' writes migration and model files directly; "
            "'patch' runs artisan for them and edits the output."
        ),
    )
    config_group.add_argument(
        "--model-migration",
        action="store_true",
        default=None,
        help="Pass --migration to make:model (patch strategy).",
    )
    config_group.add_argument(
        "--on-collision",
        type=str,
        default=None,
        choices=["reject", "warn"],
        help="What to do when two entities derive the same class name.",
    )
    config_group.add_argument(
        "--php",
        type=str,
        default=None,
        metavar="BIN",
        help="PHP executable used to run artisan.",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--stop-on-error",
        action="store_true",
        default=False,
        help="Stop at the first failed entity instead of moving on.",
    )
    behaviour_group.add_argument(
        "--atomic",
        action="store_true",
        default=None,
        help="Write files through a temporary file and rename.",
    )

    # --- Verbosity ---
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
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, object]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, object] = {}

    if args.project is not None:
        overrides["project_dir"] = args.project

    if args.strategy is not None:
        overrides["strategy"] = args.strategy

    if args.model_migration is True:
        overrides["model_with_migration"] = True

    if args.on_collision is not None:
        overrides["collision_policy"] = args.on_collision

    if args.php is not None:
        overrides["php_binary"] = args.php

    if args.stop_on_error:
        overrides["continue_on_error"] = False

    if args.atomic is True:
        overrides["atomic_writes"] = True

    if args.dry_run:
        overrides["dry_run"] = True

    return overrides


# ---------------------------------------------------------------------------
# Input loading
# ---------------------------------------------------------------------------


def _load_inputs(args: argparse.Namespace) -> Tuple[Any, Any]:
    """
    Resolve the catalog and the generation config.

    Raises:
        FileNotFoundError / ValueError: Unreadable or invalid input.
    """
    from entitygen.catalog import build_catalog, DEFAULT_CATALOG, load_catalog
    from entitygen.generator import build_config

    config_data: Dict[str, Any] = {}
    if args.schema is None:
        dialect: str = args.dialect or "simple"
        logger.info("No catalog given; using the built-in catalog.")
        catalog = build_catalog(DEFAULT_CATALOG, dialect)
    else:
        catalog, config_data = load_catalog(Path(args.schema).resolve(), args.dialect)

    config = build_config(config_data, _build_config_overrides(args))
    return catalog, config


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(catalog: Any, config: Any) -> int:
    """
    Run validation only (no generator is invoked).

    Returns the appropriate exit code.
    """
    from entitygen.utils import Timer
    from entitygen.validators import validate_full

    with Timer("validation") as t:
        result = validate_full(catalog, config)

    print(f"\n{'='*50}")
    print("  Catalog Validation Report")
    print(f"{'='*50}")
    print(f"  Source:   {catalog.source_file or '<built-in>'}")
    print(f"  Entities: {len(catalog.entities)}")
    print(f"  Columns:  {catalog.total_columns}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({len(result.errors)}):")
        for err in result.errors:
            print(f"    ✗ {err}")

    if result.warnings:
        print(f"\n  Warnings ({len(result.warnings)}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")

    if result.is_valid and not result.warnings:
        print("\n  ✅ All validations passed!")

    print(f"{'='*50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _run_generation(catalog: Any, config: Any, quiet: bool) -> int:
    """
    Run the full generation pipeline.

    Returns the appropriate exit code.
    """
    from entitygen.generator import EntityGenerator, GenerationReport

    if config.dry_run:
        logger.info("Dry-run mode: artisan is not run and no file is written.")

    generator: EntityGenerator = EntityGenerator(
        config,
        progress=(lambda message: None) if quiet else print,
    )
    report: GenerationReport = generator.generate(catalog)

    if not quiet:
        print(report.summary())

    if not report.success:
        if report.validation_errors:
            return EXIT_VALIDATION_ERROR
        return EXIT_GENERATION_ERROR

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    # --- Verbosity ---
    if args.quiet:
        verbosity: int = -1
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)
    if args.quiet:
        logging.getLogger("entitygen").setLevel(logging.ERROR)

    # --- Inputs ---
    try:
        catalog, config = _load_inputs(args)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Invalid input: %s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    logger.info("Catalog:  %s", catalog.source_file or "<built-in>")
    logger.info("Project:  %s", Path(config.project_dir).resolve())
    logger.info("Strategy: %s", config.strategy)

    # --- Validate-only mode ---
    if args.validate_only:
        sys.exit(_run_validate_only(catalog, config))

    # --- Run generation ---
    exit_code: int = _run_generation(catalog, config, args.quiet)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("entitygen.cli loaded.")
