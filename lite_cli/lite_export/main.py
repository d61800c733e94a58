"""lite-export CLI entrypoint."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO

import click

from lite_cli.lite_export import export_query, infer_format, stream_export_table
from lite_cli.shared.cli import (
    CLIContext,
    common_cli_options,
    handle_cli_errors,
    pass_cli_context,
)
from lite_cli.shared.database import connect

FORMAT_CHOICES = ("json", "csv")


@click.group(help="Stream query results or table data as JSON or CSV.")
@common_cli_options
@handle_cli_errors
def cli(cli_ctx: CLIContext) -> None:
    cli_ctx.logger.debug(f"lite-export using database {cli_ctx.db_path}")


@cli.command("query")
@click.argument("sql", type=str)
@click.option("--page", type=int, default=1, show_default=True, help="Page to export.")
@click.option("--size", type=int, default=0, show_default=True, help="Rows per page; 0 exports every row.")
@click.option(
    "--format",
    "export_format",
    type=click.Choice(FORMAT_CHOICES),
    help="Output format (defaults to the --output suffix, else csv).",
)
@click.option("--output", type=click.Path(path_type=str), help="Output file path (default stdout).")
@pass_cli_context
@handle_cli_errors
def export_query_command(
    cli_ctx: CLIContext,
    sql: str,
    page: int,
    size: int,
    export_format: str | None,
    output: str | None,
) -> None:
    """Export one page (or all rows) of a SELECT statement."""
    output_path = Path(output).expanduser() if output else None
    format_choice = infer_format(output_path, export_format)

    with connect(cli_ctx.config) as connection, _open_sink(output_path) as sink:
        count = export_query(
            connection,
            sql,
            page=page,
            size=size,
            fmt=format_choice,
            sink=sink,
            logger=cli_ctx.logger,
            bom=cli_ctx.config.transfer.csv_bom,
        )
    _report(cli_ctx, count, format_choice, output_path)


@cli.command("table")
@click.argument("table", type=str)
@click.option("--columns", type=str, help="Comma-separated columns to export (default all).")
@click.option(
    "--format",
    "export_format",
    type=click.Choice(FORMAT_CHOICES),
    help="Output format (defaults to the --output suffix, else csv).",
)
@click.option("--output", type=click.Path(path_type=str), help="Output file path (default stdout).")
@pass_cli_context
@handle_cli_errors
def export_table_command(
    cli_ctx: CLIContext,
    table: str,
    columns: str | None,
    export_format: str | None,
    output: str | None,
) -> None:
    """Export a whole table, optionally limited to some columns."""
    output_path = Path(output).expanduser() if output else None
    format_choice = infer_format(output_path, export_format)

    with connect(cli_ctx.config) as connection, _open_sink(output_path) as sink:
        count = stream_export_table(
            connection,
            table,
            _parse_columns(columns),
            format_choice,
            sink,
            logger=cli_ctx.logger,
            bom=cli_ctx.config.transfer.csv_bom,
        )
    _report(cli_ctx, count, format_choice, output_path)


def main() -> None:
    """Entry point for console_scripts."""
    cli()


def _parse_columns(raw: str | None) -> list[str]:
    if raw is None:
        return []
    return [segment.strip() for segment in raw.split(",") if segment.strip()]


@contextmanager
def _open_sink(path: Path | None) -> Iterator[TextIO]:
    if path is None:
        yield sys.stdout
        sys.stdout.flush()
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        yield handle


def _report(cli_ctx: CLIContext, count: int, format_choice: str, path: Path | None) -> None:
    if path:
        cli_ctx.logger.success(f"Exported {count} row(s) ({format_choice}) → {path}")
    else:
        cli_ctx.logger.debug(f"Exported {count} row(s) ({format_choice}) → stdout")


if __name__ == "__main__":  # pragma: no cover
    main()
