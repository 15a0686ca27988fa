"""CLI entry point: export a database table to CSV."""

import logging
import time
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tabledump.config import DEFAULT_CONFIG_FILE, DEFAULT_OUTPUT_FILE, DatabaseConfig, load_config
from tabledump.db.connection import check_connection, get_engine
from tabledump.db.provider import SqlAlchemyProvider
from tabledump.definition import TableSelectionBuilder
from tabledump.definition.builder import split_table_name
from tabledump.errors import (
    ConfigError,
    ConsumerAborted,
    DatabaseError,
    TableDumpError,
    UnknownDataType,
)
from tabledump.export.pipeline import export_bulk, export_streaming
from tabledump.export.writer import CsvSink
from tabledump.utils.logging import level_for_verbosity, setup_logging

console = Console()
logger = logging.getLogger("tabledump")

# Exit statuses, one per failure category
EXIT_INPUT_UNREADABLE = 2
EXIT_CONFIG = 5
EXIT_CONNECTION = 10
EXIT_TABLE_NAME = 11
EXIT_DEFINITION = 12
EXIT_LOAD = 13
EXIT_OUTPUT_EXISTS = 14
EXIT_OUTPUT_CREATE = 15
EXIT_WRITER_ABORTED = 16


@click.group()
@click.option(
    "--config", "-c", "config_file", default=DEFAULT_CONFIG_FILE,
    type=click.Path(path_type=Path), help="Sets a custom config file.",
)
@click.option("-v", "verbose", count=True, help="Sets the level of verbosity (repeatable).")
@click.option(
    "--log-file", default=None, type=click.Path(path_type=Path),
    help="Also write debug logs to this file.",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Path, verbose: int, log_file: Path | None) -> None:
    """Export database table data into CSV."""
    setup_logging(level_for_verbosity(verbose), log_file)
    ctx.obj = {"config_file": config_file}


def read_column_file(path: Path, uppercase: bool = False) -> list[str]:
    """Read column names, one per line. Blank lines are skipped."""
    names = []
    for line in path.read_text(encoding="utf-8").splitlines():
        name = line.strip()
        if not name:
            continue
        names.append(name.upper() if uppercase else name)
    return names


def _load_config(config_file: Path) -> DatabaseConfig:
    console.print(f"Using configuration file [yellow]{config_file}[/yellow].")
    try:
        return load_config(config_file)
    except ConfigError as e:
        console.print(f"[red]Configuration file {config_file} failed to load: {e}[/red]")
        raise SystemExit(EXIT_CONFIG) from e


def _connect(config: DatabaseConfig) -> SqlAlchemyProvider:
    console.print("Attempting database connection.")
    try:
        engine = get_engine(config)
        check_connection(engine)
    except DatabaseError as e:
        console.print(f"[red]Database connection failed: {e}[/red]")
        raise SystemExit(EXIT_CONNECTION) from e
    console.print("Database connection [green]succeeded[/green].")
    return SqlAlchemyProvider(engine)


@cli.command()
@click.argument("input_file", metavar="INPUT", type=click.Path(path_type=Path))
@click.option(
    "--output", "-o", default=DEFAULT_OUTPUT_FILE, type=click.Path(path_type=Path),
    help="Sets output filename.",
)
@click.option("--quoteall", "-q", is_flag=True, help="Puts quotation marks around all values.")
@click.option("--force", "-f", is_flag=True, help="Overwrites existing output file.")
@click.option("--uppercase", "-u", is_flag=True, help="Uppercase all column names.")
@click.option(
    "--tablename", "-n", default=None,
    help="Overrides table name (default is input filename).",
)
@click.option("--bulk", is_flag=True, help="Load all rows before writing instead of streaming.")
@click.pass_obj
def dump(
    obj: dict,
    input_file: Path,
    output: Path,
    quoteall: bool,
    force: bool,
    uppercase: bool,
    tablename: str | None,
    bulk: bool,
) -> None:
    """Export the columns listed in INPUT from a table to CSV."""
    start = time.monotonic()
    config = _load_config(obj["config_file"])

    if output.exists() and not force:
        console.print(
            f"[red]Output file {output} exists but force flag not set. Will not overwrite.[/red]"
        )
        raise SystemExit(EXIT_OUTPUT_EXISTS)

    if not input_file.exists():
        console.print(f"[red]Input file {input_file} not found.[/red]")
        raise SystemExit(EXIT_CONFIG)

    console.print(f"Loading input file [yellow]{input_file}[/yellow].")
    try:
        column_names = read_column_file(input_file, uppercase)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Reading input file {input_file} failed: {e}[/red]")
        raise SystemExit(EXIT_INPUT_UNREADABLE) from e

    if not column_names:
        console.print(f"[red]Input file {input_file} requests no columns.[/red]")
        raise SystemExit(EXIT_INPUT_UNREADABLE)

    console.print(f"Input file requests [blue]{len(column_names)}[/blue] columns:")
    for name in column_names:
        console.print(f"  * [blue]{name}[/blue]")

    table_name = tablename or input_file.stem
    if not table_name:
        console.print(f"[red]Failed to extract table name from file name {input_file}.[/red]")
        raise SystemExit(EXIT_TABLE_NAME)

    provider = _connect(config)
    try:
        console.print(f"Attempting to read table definition for [blue]{table_name}[/blue].")
        try:
            definition = TableSelectionBuilder(table_name).with_columns(column_names).build(provider)
        except TableDumpError as e:
            console.print(f"[red]Failed to read table definition for table {table_name}: {e}[/red]")
            raise SystemExit(EXIT_DEFINITION) from e
        console.print(f"[green]Successfully[/green] read table definition for table {table_name}.")

        try:
            sink = CsvSink.open(output, quote_all=quoteall, force=force)
        except OSError as e:
            console.print(f"[red]Failed to create CSV output file {output}: {e}[/red]")
            raise SystemExit(EXIT_OUTPUT_CREATE) from e

        with sink:
            try:
                if bulk:
                    rows = export_bulk(definition, provider, sink)
                else:
                    rows = export_streaming(definition, provider, sink)
            except ConsumerAborted as e:
                console.print(f"[red]Writer thread aborted: {e}[/red]")
                raise SystemExit(EXIT_WRITER_ABORTED) from e
            except TableDumpError as e:
                console.print(f"[red]Failed to read data for table {table_name}: {e}[/red]")
                raise SystemExit(EXIT_LOAD) from e
    finally:
        provider.engine.dispose()

    console.print(f"[green]Successfully[/green] completed writing [green]{rows}[/green] rows.")
    console.print(f"Task completed in {time.monotonic() - start:.0f} seconds.")


@cli.command()
@click.argument("table_name")
@click.pass_obj
def columns(obj: dict, table_name: str) -> None:
    """Show the catalog columns of TABLE_NAME (optionally OWNER.TABLE)."""
    config = _load_config(obj["config_file"])
    provider = _connect(config)

    owner, table = split_table_name(table_name)
    try:
        catalog = provider.query_columns(table, owner)
    except DatabaseError as e:
        console.print(f"[red]Failed to read catalog for {table_name}: {e}[/red]")
        raise SystemExit(EXIT_DEFINITION) from e
    finally:
        provider.engine.dispose()

    if not catalog:
        console.print(f"[yellow]No columns found for {table_name}.[/yellow]")
        return

    view = Table(title=f"Columns of {table_name} ({len(catalog)} total)")
    view.add_column("Name")
    view.add_column("Type")
    view.add_column("Length", justify="right")
    view.add_column("Precision", justify="right")
    view.add_column("Null", width=5)
    view.add_column("Kind")

    for col in sorted(catalog, key=lambda c: c.name):
        try:
            kind = type(col.to_definition().kind).__name__
        except UnknownDataType:
            kind = "[red]unsupported[/red]"
        view.add_row(
            col.name,
            col.native_type,
            "" if col.length is None else str(col.length),
            "" if col.precision is None else str(col.precision),
            "yes" if col.nullable else "no",
            kind,
        )

    console.print(view)


if __name__ == "__main__":
    cli()
