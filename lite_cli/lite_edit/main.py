"""lite-edit CLI: explicit row mutations keyed by primary key.

Default behaviour is dry-run (preview only). Use --apply to perform writes.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import click
from rich import box
from rich.table import Table

from lite_cli.shared.cli import (
    CLIContext,
    common_cli_options,
    handle_cli_errors,
    pass_cli_context,
)
from lite_cli.shared.database import connect
from lite_cli.shared.values import format_cell

from . import rows
from .rows import PlannedWrite

VALUE_HELP = "Assign COLUMN=VALUE (repeatable). Values are text unless --json-values is set."


def _parse_assignments(pairs: Iterable[str], nulls: Iterable[str], json_values: bool) -> dict[str, Any]:
    """Convert COLUMN=VALUE options into a dictionary."""
    parsed: dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.ClickException(f"Assignment '{pair}' must be in COLUMN=VALUE format.")
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise click.ClickException("Column names cannot be empty.")
        if json_values:
            try:
                parsed[key] = json.loads(value)
            except json.JSONDecodeError as exc:
                raise click.ClickException(f"Value for '{key}' is not valid JSON: {exc}") from exc
        else:
            parsed[key] = value
    for name in nulls:
        parsed[name.strip()] = None
    return parsed


def _preview(cli_ctx: CLIContext, planned: PlannedWrite) -> None:
    cli_ctx.logger.info("[dry-run] Would execute:")
    click.echo(planned.sql)
    click.echo(json.dumps(planned.params, indent=2, default=str))
    cli_ctx.logger.info("Re-run with --apply to write the change.")


@click.group(help="Browse and edit table rows.")
@common_cli_options
@handle_cli_errors
def cli(cli_ctx: CLIContext) -> None:
    cli_ctx.logger.debug(f"lite-edit using database {cli_ctx.db_path}")


@cli.command("rows")
@click.argument("table", type=str)
@click.option("--page", type=int, default=1, show_default=True, help="Page number (1-based).")
@click.option("--limit", type=int, default=rows.DEFAULT_ROW_LIMIT, show_default=True, help="Rows per page.")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table", show_default=True)
@pass_cli_context
@handle_cli_errors
def show_rows(cli_ctx: CLIContext, table: str, page: int, limit: int, output_format: str) -> None:
    """Show one page of TABLE."""
    if page < 1:
        raise click.ClickException("--page must be at least 1.")
    with connect(cli_ctx.config) as connection:
        result = rows.get_table_rows(connection, table, limit=limit, offset=(page - 1) * limit)

    if output_format == "json":
        payload = {
            "rows": list(result.rows),
            "total": result.total,
            "page": result.page,
            "limit": result.limit,
            "totalPages": result.total_pages,
        }
        click.echo(json.dumps(payload, indent=2, default=str))
        return

    if not result.rows:
        cli_ctx.logger.info(f"No rows on page {result.page} of '{table}'.")
        return
    grid = Table(box=box.SIMPLE_HEAVY, show_header=True, header_style="bold")
    columns = list(result.rows[0].keys())
    for column in columns:
        grid.add_column(column)
    for row in result.rows:
        grid.add_row(*[format_cell(row.get(column)) for column in columns])
    cli_ctx.logger.console.print(grid)
    cli_ctx.logger.info(f"Page {result.page} of {result.total_pages} ({result.total} rows).")


@cli.command("insert")
@click.argument("table", type=str)
@click.option("--set", "assignments", multiple=True, metavar="COLUMN=VALUE", help=VALUE_HELP)
@click.option("--null", "nulls", multiple=True, metavar="COLUMN", help="Set COLUMN to NULL.")
@click.option("--json-values", is_flag=True, help="Parse each VALUE as JSON (numbers, true/false, null).")
@click.option("--apply", is_flag=True, help="Apply the insert (default is preview only).")
@pass_cli_context
@handle_cli_errors
def insert(
    cli_ctx: CLIContext,
    table: str,
    assignments: tuple[str, ...],
    nulls: tuple[str, ...],
    json_values: bool,
    apply: bool,
) -> None:
    """Insert one row into TABLE."""
    data = _parse_assignments(assignments, nulls, json_values)
    with connect(cli_ctx.config) as connection:
        if not apply:
            _preview(cli_ctx, rows.plan_insert(connection, table, data))
            return
        row_id = rows.insert_row(connection, table, data)
    cli_ctx.logger.success(f"Inserted row into '{table}' (id={row_id}).")


@cli.command("update")
@click.argument("table", type=str)
@click.option("--set", "assignments", multiple=True, metavar="COLUMN=VALUE", help=VALUE_HELP)
@click.option("--null", "nulls", multiple=True, metavar="COLUMN", help="Set COLUMN to NULL.")
@click.option("--json-values", is_flag=True, help="Parse each VALUE as JSON (numbers, true/false, null).")
@click.option("--apply", is_flag=True, help="Apply the update (default is preview only).")
@pass_cli_context
@handle_cli_errors
def update(
    cli_ctx: CLIContext,
    table: str,
    assignments: tuple[str, ...],
    nulls: tuple[str, ...],
    json_values: bool,
    apply: bool,
) -> None:
    """Update the row of TABLE picked by its primary key values.

    Primary key columns go in --set alongside the columns to change.
    """
    data = _parse_assignments(assignments, nulls, json_values)
    with connect(cli_ctx.config) as connection:
        if not apply:
            _preview(cli_ctx, rows.plan_update(connection, table, data))
            return
        affected = rows.update_row(connection, table, data)
    cli_ctx.logger.success(f"Updated {affected} row(s) in '{table}'.")


@cli.command("delete")
@click.argument("table", type=str)
@click.option("--key", "keys", multiple=True, metavar="COLUMN=VALUE", help="Primary key value (repeatable).")
@click.option("--json-values", is_flag=True, help="Parse each VALUE as JSON.")
@click.option("--apply", is_flag=True, help="Apply the delete (default is preview only).")
@pass_cli_context
@handle_cli_errors
def delete(
    cli_ctx: CLIContext,
    table: str,
    keys: tuple[str, ...],
    json_values: bool,
    apply: bool,
) -> None:
    """Delete the row of TABLE matching every primary key column."""
    key_values = _parse_assignments(keys, (), json_values)
    with connect(cli_ctx.config) as connection:
        if not apply:
            _preview(cli_ctx, rows.plan_delete(connection, table, key_values))
            return
        affected = rows.delete_row(connection, table, key_values)
    cli_ctx.logger.success(f"Deleted {affected} row(s) from '{table}'.")


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
