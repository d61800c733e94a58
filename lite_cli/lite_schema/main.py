"""lite-schema CLI entrypoint."""

from __future__ import annotations

import click

from lite_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors, pass_cli_context
from lite_cli.shared.database import connect

from . import ddl, introspect, render
from .types import ColumnDefinition, IndexDefinition


@click.group(help="Inspect and change table structure.")
@common_cli_options
@handle_cli_errors
def cli(cli_ctx: CLIContext) -> None:
    cli_ctx.logger.debug(f"lite-schema using database {cli_ctx.db_path}")


@cli.command("show")
@click.argument("table", type=str)
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table", show_default=True)
@pass_cli_context
@handle_cli_errors
def show(cli_ctx: CLIContext, table: str, output_format: str) -> None:
    """Show columns, indexes and triggers of TABLE."""
    with connect(cli_ctx.config) as connection:
        schema = introspect.get_table_info(connection, table)
    render.render_table_schema(schema, output_format=output_format, logger=cli_ctx.logger)


@cli.command("create-table")
@click.argument("table", type=str)
@pass_cli_context
@handle_cli_errors
def create_table(cli_ctx: CLIContext, table: str) -> None:
    """Create TABLE with an auto-incrementing id column."""
    with connect(cli_ctx.config) as connection:
        ddl.create_table(connection, table)
    cli_ctx.logger.success(f"Created table '{table}'.")


@cli.command("drop-table")
@click.argument("table", type=str)
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@pass_cli_context
@handle_cli_errors
def drop_table(cli_ctx: CLIContext, table: str, yes: bool) -> None:
    """Drop TABLE and all of its rows."""
    if not yes:
        click.confirm(f"Drop table '{table}' and all of its rows?", abort=True)
    with connect(cli_ctx.config) as connection:
        ddl.drop_table(connection, table)
    cli_ctx.logger.success(f"Dropped table '{table}'.")


@cli.command("add-column")
@click.argument("table", type=str)
@click.argument("column", type=str)
@click.option("--type", "column_type", default="TEXT", show_default=True, help="Declared column type.")
@click.option("--not-null", is_flag=True, help="Add a NOT NULL constraint.")
@click.option("--default", "default", type=str, help="Default value (emitted as a quoted literal).")
@click.option("--primary", is_flag=True, help="Declare the column PRIMARY KEY.")
@click.option("--auto-increment", is_flag=True, help="Add AUTOINCREMENT (INTEGER primary keys only).")
@pass_cli_context
@handle_cli_errors
def add_column(
    cli_ctx: CLIContext,
    table: str,
    column: str,
    column_type: str,
    not_null: bool,
    default: str | None,
    primary: bool,
    auto_increment: bool,
) -> None:
    """Add COLUMN to TABLE."""
    definition = ColumnDefinition(
        name=column,
        type=column_type,
        not_null=not_null,
        default=default,
        primary=primary,
        auto_increment=auto_increment,
    )
    cli_ctx.logger.sql("ddl", ddl.build_add_column_sql(table, definition))
    with connect(cli_ctx.config) as connection:
        ddl.add_column(connection, table, definition)
    cli_ctx.logger.success(f"Added column '{column}' to '{table}'.")


@cli.command("drop-column")
@click.argument("table", type=str)
@click.argument("column", type=str)
@pass_cli_context
@handle_cli_errors
def drop_column(cli_ctx: CLIContext, table: str, column: str) -> None:
    """Drop COLUMN from TABLE."""
    with connect(cli_ctx.config) as connection:
        ddl.drop_column(connection, table, column)
    cli_ctx.logger.success(f"Dropped column '{column}' from '{table}'.")


@cli.command("rename-column")
@click.argument("table", type=str)
@click.argument("old_name", type=str)
@click.argument("new_name", type=str)
@pass_cli_context
@handle_cli_errors
def rename_column(cli_ctx: CLIContext, table: str, old_name: str, new_name: str) -> None:
    """Rename OLD_NAME to NEW_NAME in TABLE."""
    with connect(cli_ctx.config) as connection:
        ddl.rename_column(connection, table, old_name, new_name)
    cli_ctx.logger.success(f"Renamed column '{old_name}' to '{new_name}' in '{table}'.")


@cli.command("add-index")
@click.argument("table", type=str)
@click.argument("index_name", type=str)
@click.option("--column", "columns", multiple=True, required=True, help="Indexed column (repeatable, in key order).")
@click.option("--unique", is_flag=True, help="Create a UNIQUE index.")
@pass_cli_context
@handle_cli_errors
def add_index(cli_ctx: CLIContext, table: str, index_name: str, columns: tuple[str, ...], unique: bool) -> None:
    """Create INDEX_NAME on TABLE."""
    with connect(cli_ctx.config) as connection:
        ddl.create_index(connection, table, IndexDefinition(name=index_name, columns=columns, unique=unique))
    cli_ctx.logger.success(f"Created index '{index_name}' on '{table}'.")


@cli.command("drop-index")
@click.argument("table", type=str)
@click.argument("index_name", type=str)
@pass_cli_context
@handle_cli_errors
def drop_index(cli_ctx: CLIContext, table: str, index_name: str) -> None:
    """Drop INDEX_NAME if it exists."""
    with connect(cli_ctx.config) as connection:
        ddl.drop_index(connection, table, index_name)
    cli_ctx.logger.success(f"Dropped index '{index_name}'.")


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
