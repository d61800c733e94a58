"""Query and table exports streamed through the row encoder."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any, Iterator, Sequence, TextIO

from lite_cli.lite_query import executor, sqltext
from lite_cli.lite_query.types import Pagination
from lite_cli.lite_schema import introspect
from lite_cli.shared.exceptions import ExecutionError, ValidationError
from lite_cli.shared.identifiers import quote_identifier, require_identifiers
from lite_cli.shared.logging import Logger

from .encoder import SUPPORTED_FORMATS, write_rows

FETCH_BATCH_SIZE = 500


def export_query(
    connection: sqlite3.Connection,
    sql: str,
    *,
    page: int = 1,
    size: int = 0,
    fmt: str,
    sink: TextIO,
    cancel_event: threading.Event | None = None,
    logger: Logger | None = None,
    bom: bool = True,
) -> int:
    """Stream one page of a SELECT to ``sink`` and return the row count.

    Columns come from a zero-row dry run so an empty page still gets a CSV
    header. ``size`` of zero or less exports every row.
    """
    fmt = _require_format(fmt)
    cleaned = sqltext.clean_sql(sql)
    if not cleaned:
        raise ValidationError("SQL is empty")
    columns = executor.query_columns(connection, cleaned)

    if size > 0:
        statement = sqltext.window(cleaned, Pagination(page=max(page, 1), size=size))
    else:
        statement = cleaned
    if logger:
        logger.sql("export", statement)

    cursor = _open_cursor(connection, statement, action="run export query")
    try:
        return write_rows(fmt, _iter_rows(cursor), columns, sink, cancel_event, bom=bom)
    finally:
        cursor.close()


def stream_export_table(
    connection: sqlite3.Connection,
    table: str,
    columns: Sequence[str],
    fmt: str,
    sink: TextIO,
    *,
    cancel_event: threading.Event | None = None,
    logger: Logger | None = None,
    bom: bool = True,
) -> int:
    """Stream selected columns of ``table``; all columns when none are given."""
    fmt = _require_format(fmt)
    quoted_table = quote_identifier(table, "table")
    selected = require_identifiers(columns, "column")
    if not selected:
        selected = [column.name for column in introspect.get_columns(connection, table)]

    statement = f"SELECT {', '.join(quote_identifier(name, 'column') for name in selected)} FROM {quoted_table}"
    if logger:
        logger.sql("export", statement)

    cursor = _open_cursor(connection, statement, action=f"export table '{table}'")
    try:
        return write_rows(fmt, _iter_rows(cursor), tuple(selected), sink, cancel_event, bom=bom)
    finally:
        cursor.close()


def infer_format(output_path: Path | None, explicit: str | None) -> str:
    """Pick the export format from an explicit choice or the output suffix."""
    if explicit:
        return _require_format(explicit)
    if output_path is not None:
        suffix = output_path.suffix.lower().lstrip(".")
        if suffix in SUPPORTED_FORMATS:
            return suffix
    return "csv"


def _require_format(fmt: str) -> str:
    normalized = (fmt or "").lower()
    if normalized not in SUPPORTED_FORMATS:
        raise ValidationError(f"Unsupported export format '{fmt}'. Expected one of: {', '.join(SUPPORTED_FORMATS)}")
    return normalized


def _open_cursor(connection: sqlite3.Connection, statement: str, *, action: str) -> sqlite3.Cursor:
    try:
        return connection.execute(statement)
    except sqlite3.Error as exc:
        raise ExecutionError(f"Failed to {action}: {exc}") from exc


def _iter_rows(cursor: sqlite3.Cursor) -> Iterator[dict[str, Any]]:
    columns = tuple(column[0] for column in cursor.description or ())
    while True:
        try:
            batch = cursor.fetchmany(FETCH_BATCH_SIZE)
        except sqlite3.Error as exc:
            raise ExecutionError(f"Failed to read export rows: {exc}") from exc
        if not batch:
            return
        for row in batch:
            yield executor.row_to_mapping(columns, row)
