"""CLI argument parsing and main entry point."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path

from rich.console import Console
from rich.table import Table as RichTable

from . import __version__
from .config import GenerationConfig, load_config
from .db.schema import JsonSchemaProvider
from .dialects import get_dialect_handler
from .dialects.base import Dialect
from .dumper.sql_generator import SQLGenerator
from .dumper.writer import SQLWriter
from .generator.orchestrator import GenerationResult, InsertionOrchestrator
from .utils.exceptions import SqlSeedError
from .utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def read_query(args: argparse.Namespace) -> str:
    """Return the query text from --query or --query-file."""
    if args.query is not None:
        return str(args.query)
    return Path(args.query_file).read_text(encoding="utf-8")


def apply_overrides(
    config: GenerationConfig, args: argparse.Namespace
) -> GenerationConfig:
    """Overlay command line flags on the environment configuration."""
    overrides: dict[str, object] = {}
    if args.dialect:
        overrides["dialect"] = Dialect.parse(args.dialect)
    if args.rows is not None:
        overrides["record_count"] = args.rows
    if args.max_parallelism is not None:
        overrides["max_parallelism"] = args.max_parallelism
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.no_transaction:
        overrides["include_transaction"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level
    return replace(config, **overrides) if overrides else config


def print_summary(result: GenerationResult, console: Console) -> None:
    """Render per-table statement counts and any warnings."""
    summary = RichTable(title="Generated records", show_header=True)
    summary.add_column("Table", style="cyan", no_wrap=True)
    summary.add_column("Records", justify="right")
    summary.add_column("Depends on parents", justify="center")

    order = result.closure.insertion_order if result.closure else ()
    for table_name in order:
        statements = result.statements_for(table_name)
        has_parents = any(s.priority for s in statements)
        summary.add_row(table_name, str(len(statements)), "yes" if has_parents else "")

    console.print(summary)
    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    if result.failed_stage:
        console.print(
            f"[red]Failed during {result.failed_stage}:[/red] {result.error}"
        )
    if result.cancelled:
        console.print("[yellow]Generation was cancelled; output is partial[/yellow]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlseed",
        description="Generate INSERT statements so a SELECT query returns rows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ten rows per table for a MySQL query, script to stdout
  %(prog)s --schema schema.json --query "SELECT * FROM orders o JOIN customers c ON o.customer_id = c.id"

  # Oracle script written to a file
  %(prog)s --schema schema.json --query-file report.sql --dialect oracle --rows 50 -o seed.sql

  # Save into the configured output directory
  %(prog)s --schema schema.json --query-file report.sql --save
        """,
    )

    parser.add_argument(
        "--schema",
        required=True,
        help="JSON file describing tables, columns and foreign keys",
    )

    query_group = parser.add_mutually_exclusive_group(required=True)
    query_group.add_argument("--query", help="SELECT query text")
    query_group.add_argument("--query-file", help="File containing the query")

    generation_group = parser.add_argument_group("Generation")
    generation_group.add_argument(
        "--rows",
        type=int,
        help="Records per table (default: from .env or 10)",
    )
    generation_group.add_argument(
        "--dialect",
        help="Target dialect: mysql, oracle, postgresql, sqlserver (default: mysql)",
    )
    generation_group.add_argument(
        "--max-parallelism",
        type=int,
        help="Tables generated concurrently (default: from .env or 4)",
    )
    generation_group.add_argument(
        "--seed",
        type=int,
        help="Seed for reproducible values (default: 0)",
    )
    generation_group.add_argument(
        "--no-transaction",
        action="store_true",
        help="Do not wrap the script in a transaction",
    )

    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "--output",
        "-o",
        help="Output file path (default: stdout)",
    )
    output_group.add_argument(
        "--save",
        action="store_true",
        help="Write to a timestamped file in SQLSEED_OUTPUT_DIR",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (default: from .env or INFO)",
    )

    try:
        pkg_version = get_version("sqlseed")
    except PackageNotFoundError:
        pkg_version = __version__

    parser.add_argument(
        "--version",
        action="version",
        version=f"sqlseed {pkg_version}",
    )
    return parser


def main() -> int:
    """
    Main entry point for sqlseed CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    args = build_parser().parse_args()

    # Logs go to stderr so the script on stdout stays clean.
    setup_logging(args.log_level or "WARNING", stream=sys.stderr)
    console = Console(stderr=True)

    try:
        app_config = load_config()
        config = apply_overrides(app_config.generation, args)
        setup_logging(config.log_level, stream=sys.stderr)
        query = read_query(args)

        provider = JsonSchemaProvider(args.schema)
        orchestrator = InsertionOrchestrator(provider, config)
        result = orchestrator.run(query)

        print_summary(result, console)
        if result.failed_stage:
            return 1

        generator = SQLGenerator(get_dialect_handler(config.dialect))
        script = generator.generate_script(
            result.statements, include_transaction=config.include_transaction
        )

        if args.output:
            SQLWriter.write_to_file(script, args.output)
            console.print(f"Wrote {len(result.statements)} statements to {args.output}")
        elif args.save:
            main_table = result.closure.insertion_order[-1] if result.closure else "query"
            path = SQLWriter.get_default_output_path(
                config.output_dir, main_table, config.dialect.value
            )
            SQLWriter.write_to_file(script, path)
            console.print(f"Wrote {len(result.statements)} statements to {path}")
        else:
            SQLWriter.write_to_stdout(script)

        return 130 if result.cancelled else 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except SqlSeedError as e:
        logger.error(f"Application error: {e}")
        console.print(f"[red]Error:[/red] {e}")
        return 1

    except OSError as e:
        logger.error(f"I/O error: {e}")
        console.print(f"[red]Error:[/red] {e}")
        return 1

    except Exception:
        logger.exception("Unexpected error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
