"""lite-query CLI entrypoint."""

from __future__ import annotations

import click

from lite_cli.lite_schema import introspect
from lite_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors, pass_cli_context
from lite_cli.shared.database import connect

from . import executor, render, sqltext

OUTPUT_FORMAT_CHOICES = ("table", "tsv", "csv", "json")
LISTING_FORMAT_CHOICES = ("table", "json")


@click.group(help="Run ad-hoc SQL and browse a SQLite database.")
@common_cli_options
@handle_cli_errors
def cli(cli_ctx: CLIContext) -> None:
    """Primary Click group for lite-query commands."""
    cli_ctx.logger.debug(f"lite-query using database {cli_ctx.db_path}")


@cli.command("sql")
@click.argument("query", type=str)
@click.option("--page", type=int, help="Page number (1-based).")
@click.option("--size", type=int, help="Rows per page (capped at query.max_page_size).")
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(OUTPUT_FORMAT_CHOICES),
)
@pass_cli_context
@handle_cli_errors
def run_sql(
    cli_ctx: CLIContext,
    query: str,
    page: int | None,
    size: int | None,
    output_format: str,
) -> None:
    """Execute ad-hoc SQL against the database.

    SELECT statements are paginated; a LIMIT/OFFSET in the query picks the page
    when --page and --size are both omitted.
    """
    if not query.strip():
        raise click.ClickException("Query text must not be empty.")

    max_size = cli_ctx.config.query.max_page_size
    if size is not None and size > max_size:
        cli_ctx.logger.warning(f"Page size {size} exceeds the maximum; using {max_size}.")
        size = max_size
    if (page is not None or size is not None) and sqltext.has_pagination(query):
        cli_ctx.logger.debug("Replacing the query's own LIMIT/OFFSET with --page/--size.")

    with connect(cli_ctx.config) as connection:
        result = executor.execute_sql(
            connection,
            query,
            page=page,
            size=size,
            default_size=max_size,
            logger=cli_ctx.logger,
        )

    if not result.ok:
        if output_format == "json":
            render.render_query_result(result, output_format=output_format, logger=cli_ctx.logger)
        raise click.ClickException(result.error or "Query failed.")

    render.render_query_result(result, output_format=output_format, logger=cli_ctx.logger)


@cli.command("tables")
@pass_cli_context
@handle_cli_errors
def list_tables(cli_ctx: CLIContext) -> None:
    """List user tables."""
    with connect(cli_ctx.config) as connection:
        names = introspect.list_tables(connection)
    render.render_table_names(names, logger=cli_ctx.logger)


@cli.command("views")
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(LISTING_FORMAT_CHOICES),
)
@pass_cli_context
@handle_cli_errors
def list_views(cli_ctx: CLIContext, output_format: str) -> None:
    """List views with their definitions."""
    with connect(cli_ctx.config) as connection:
        views = introspect.list_views(connection)
    render.render_views(views, output_format=output_format, logger=cli_ctx.logger)


@cli.command("triggers")
@click.option("--name", "trigger_name", type=str, help="Show a single trigger.")
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(LISTING_FORMAT_CHOICES),
)
@pass_cli_context
@handle_cli_errors
def list_triggers(cli_ctx: CLIContext, trigger_name: str | None, output_format: str) -> None:
    """List triggers across all tables."""
    with connect(cli_ctx.config) as connection:
        if trigger_name:
            triggers = [introspect.get_trigger(connection, trigger_name)]
        else:
            triggers = introspect.list_triggers(connection)
    render.render_triggers(triggers, output_format=output_format, logger=cli_ctx.logger)


@cli.command("info")
@click.option(
    "--format",
    "output_format",
    default="table",
    show_default=True,
    type=click.Choice(LISTING_FORMAT_CHOICES),
)
@pass_cli_context
@handle_cli_errors
def database_info(cli_ctx: CLIContext, output_format: str) -> None:
    """Show file size, timestamps and SQLite version."""
    with connect(cli_ctx.config) as connection:
        info = introspect.describe_database(connection)
    render.render_database_info(info, output_format=output_format)


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
