"""Output rendering helpers for lite-query."""

from __future__ import annotations

import csv
import json
import sys
from typing import IO, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from lite_cli.lite_schema.types import DatabaseInfo, TriggerDescriptor, ViewDescriptor
from lite_cli.shared.logging import Logger
from lite_cli.shared.values import TIMESTAMP_FORMAT, format_cell

from .types import QueryResult


def render_query_result(
    result: QueryResult,
    *,
    output_format: str,
    logger: Logger,
    stream=None,
) -> None:
    """Render a query result to the desired format."""
    output_stream = stream or sys.stdout
    fmt = (output_format or "table").lower()

    if fmt == "json":
        json.dump(result.to_payload(), output_stream, indent=2, default=str)
        output_stream.write("\n")
        return
    if result.kind != "query":
        print(result.message, file=output_stream)
        return

    if fmt == "table":
        _render_table(result, logger=logger, stream=output_stream)
    elif fmt == "csv":
        _render_delimited(result, stream=output_stream, delimiter=",")
    elif fmt == "tsv":
        _render_delimited(result, stream=output_stream, delimiter="\t")
    else:  # pragma: no cover - Click validation should prevent this
        raise ValueError(f"Unsupported output format '{output_format}'.")

    if result.has_next:
        next_page = (result.page or 1) + 1
        logger.warning(f"More rows available. Re-run with --page {next_page} to continue.")


def render_table_names(names: Sequence[str], *, logger: Logger, stream=None) -> None:
    output_stream = stream or sys.stdout
    if not names:
        logger.info("No tables found.")
        return
    for name in names:
        print(name, file=output_stream)


def render_views(views: Sequence[ViewDescriptor], *, output_format: str, logger: Logger, stream=None) -> None:
    output_stream = stream or sys.stdout
    if output_format == "json":
        json.dump([{"name": view.name, "sql": view.sql} for view in views], output_stream, indent=2)
        output_stream.write("\n")
        return
    if not views:
        logger.info("No views found.")
        return
    console = Console(file=output_stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    table.add_column("Definition")
    for view in views:
        table.add_row(view.name, view.sql)
    console.print(table)


def render_triggers(
    triggers: Sequence[TriggerDescriptor],
    *,
    output_format: str,
    logger: Logger,
    stream=None,
) -> None:
    output_stream = stream or sys.stdout
    if output_format == "json":
        payload = [
            {
                "name": trigger.name,
                "table": trigger.table,
                "event": trigger.event,
                "timing": trigger.timing,
                "definition": trigger.definition,
                "sql": trigger.sql,
            }
            for trigger in triggers
        ]
        json.dump(payload, output_stream, indent=2)
        output_stream.write("\n")
        return
    if not triggers:
        logger.info("No triggers found.")
        return
    console = Console(file=output_stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    table.add_column("Table")
    table.add_column("Timing")
    table.add_column("Event")
    table.add_column("Definition")
    for trigger in triggers:
        table.add_row(trigger.name, trigger.table, trigger.timing, trigger.event, trigger.definition)
    console.print(table)


def render_database_info(info: DatabaseInfo, *, output_format: str, stream=None) -> None:
    output_stream = stream or sys.stdout
    payload = {
        "path": str(info.path),
        "size": info.size_bytes,
        "created": info.created_at.strftime(TIMESTAMP_FORMAT),
        "modified": info.modified_at.strftime(TIMESTAMP_FORMAT),
        "sqliteVersion": info.sqlite_version,
    }
    if output_format == "json":
        json.dump(payload, output_stream, indent=2)
        output_stream.write("\n")
        return
    console = Console(file=output_stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in payload.items():
        table.add_row(key, str(value))
    console.print(table)


def _render_table(result: QueryResult, *, logger: Logger, stream: IO[str]) -> None:
    console = Console(file=stream, highlight=False, force_terminal=False)
    table = Table(box=box.SIMPLE_HEAVY, show_header=bool(result.columns), header_style="bold")
    for column in result.columns:
        table.add_column(column or "")

    if result.rows:
        for row in result.rows:
            table.add_row(*[format_cell(row.get(column)) for column in result.columns])
    else:
        logger.info("Query returned zero rows.")

    console.print(table)
    logger.info(_page_summary(result))


def _render_delimited(result: QueryResult, *, stream: IO[str], delimiter: str) -> None:
    writer = csv.writer(stream, delimiter=delimiter, lineterminator="\n")
    if result.columns:
        writer.writerow(result.columns)
    for row in result.rows:
        writer.writerow(format_cell(row.get(column)) for column in result.columns)


def _page_summary(result: QueryResult) -> str:
    total = "unknown" if result.total is None else str(result.total)
    return f"{result.message} (page {result.page}, size {result.size}, total {total}, {result.duration_ms} ms)"
