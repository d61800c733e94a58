"""Output rendering helpers for lite-schema."""

from __future__ import annotations

import json
import sys
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table

from lite_cli.shared.logging import Logger

from .types import TableSchema


def schema_payload(schema: TableSchema) -> dict[str, Any]:
    return {
        "name": schema.name,
        "columns": [
            {
                "cid": column.cid,
                "name": column.name,
                "type": column.type,
                "notNull": column.not_null,
                "default": column.default,
                "primary": column.primary,
                "unique": column.unique,
                "autoIncrement": column.auto_increment,
            }
            for column in schema.columns
        ],
        "indexes": [
            {"name": index.name, "unique": index.unique, "sql": index.sql, "columns": list(index.columns)}
            for index in schema.indexes
        ],
        "triggers": [
            {
                "name": trigger.name,
                "event": trigger.event,
                "timing": trigger.timing,
                "definition": trigger.definition,
                "sql": trigger.sql,
            }
            for trigger in schema.triggers
        ],
    }


def render_table_schema(
    schema: TableSchema,
    *,
    output_format: str,
    logger: Logger,
    stream=None,
) -> None:
    """Render columns, indexes and triggers of one table."""
    output_stream = stream or sys.stdout
    if output_format == "json":
        json.dump(schema_payload(schema), output_stream, indent=2)
        output_stream.write("\n")
        return

    console = Console(file=output_stream, highlight=False, force_terminal=False)
    console.print(f"[bold]{schema.name}[/bold]")
    column_table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    for heading in ("Column", "Type", "Not Null", "Default", "PK", "Unique", "Auto Inc"):
        column_table.add_column(heading)
    for column in schema.columns:
        column_table.add_row(
            column.name,
            column.type,
            "✅" if column.not_null else "",
            column.default if column.default is not None else "",
            "✅" if column.primary else "",
            "✅" if column.unique else "",
            "✅" if column.auto_increment else "",
        )
    console.print(column_table)

    if schema.indexes:
        index_table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        index_table.add_column("Index")
        index_table.add_column("Columns")
        index_table.add_column("Unique")
        for index in schema.indexes:
            index_table.add_row(index.name, ", ".join(index.columns), "✅" if index.unique else "")
        console.print(index_table)

    if schema.triggers:
        trigger_table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        trigger_table.add_column("Trigger")
        trigger_table.add_column("Timing")
        trigger_table.add_column("Event")
        trigger_table.add_column("Definition")
        for trigger in schema.triggers:
            trigger_table.add_row(trigger.name, trigger.timing, trigger.event, trigger.definition)
        console.print(trigger_table)
    elif not schema.indexes:
        logger.debug(f"Table '{schema.name}' has no indexes or triggers.")
