"""lite-import CLI entrypoint."""

from __future__ import annotations

import json
from pathlib import Path

import click

from lite_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors
from lite_cli.shared.database import connect

from .importer import import_to_table
from .parsers import SUPPORTED_KINDS, infer_file_kind


@click.command(help="Import JSON or CSV records into an existing table.")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--table", "table", required=True, type=str, help="Target table name.")
@click.option(
    "--format",
    "file_kind",
    type=click.Choice(SUPPORTED_KINDS),
    help="Input format (defaults to the file suffix).",
)
@click.option(
    "--create-columns/--no-create-columns",
    "create_columns",
    default=None,
    help="Add missing columns as TEXT before inserting (default from config).",
)
@click.option(
    "--rollback/--no-rollback",
    "rollback",
    default=None,
    help="Roll back every row when any record fails (default from config).",
)
@click.option("--json", "as_json", is_flag=True, help="Print the import result as JSON.")
@common_cli_options
@handle_cli_errors
def cli(
    file: Path,
    table: str,
    file_kind: str | None,
    create_columns: bool | None,
    rollback: bool | None,
    as_json: bool,
    cli_ctx: CLIContext,
) -> None:
    """Import records from FILE into --table."""
    settings = cli_ctx.config.transfer
    kind = file_kind or infer_file_kind(file.name)
    try:
        content = file.read_bytes()
    except OSError as exc:  # pragma: no cover - surfaced via Click
        raise click.ClickException(f"Unable to read file '{file}': {exc}") from exc

    cli_ctx.logger.debug(f"Importing {file} ({kind}) into '{table}'")
    with connect(cli_ctx.config) as connection:
        result = import_to_table(
            connection,
            content,
            kind,
            table,
            create_new_columns=settings.create_new_columns if create_columns is None else create_columns,
            rollback_on_failure=settings.rollback_on_failure if rollback is None else rollback,
            max_errors=settings.max_import_errors,
            logger=cli_ctx.logger,
        )

    if as_json:
        click.echo(json.dumps(result.to_payload(), indent=2))
    if result.failed_count:
        for message in result.errors:
            cli_ctx.logger.warning(message)
    cli_ctx.logger.success(
        f"Imported {result.success_count} row(s) into '{table}' ({result.failed_count} failed)."
    )


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
