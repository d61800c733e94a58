"""Schema introspection built on SQLite's catalog and pragma functions.

SQLite exposes schema facts piecemeal: ``sqlite_master`` rows carry the
defining SQL, ``pragma_table_xinfo`` lists columns, ``pragma_index_list`` and
``pragma_index_info`` describe indexes. This module stitches them into
``TableSchema`` values and derives the facts none of them report directly
(column uniqueness, AUTOINCREMENT, trigger event/timing).

Nothing is cached; every call re-reads the catalog because DDL may have run in
between.
"""

from __future__ import annotations

import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from lite_cli.shared.database import run_statement
from lite_cli.shared.exceptions import DatabaseError, NotFoundError
from lite_cli.shared.identifiers import require_identifier

from .types import (
    ColumnDescriptor,
    DatabaseInfo,
    IndexDescriptor,
    TableSchema,
    TriggerDescriptor,
    ViewDescriptor,
)

TRIGGER_DEFINITION_LIMIT = 100

_AUTOINCREMENT_RE = re.compile(r"\bAUTOINCREMENT\b", re.IGNORECASE)
_CLOSING_QUOTES = {"'": "'", '"': '"', "`": "`", "[": "]"}


def list_tables(connection: sqlite3.Connection) -> list[str]:
    """Return user table names, skipping SQLite's internal tables."""
    rows = _fetch(
        connection,
        "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name",
        action="list tables",
    )
    return [row["name"] for row in rows]


def list_views(connection: sqlite3.Connection) -> list[ViewDescriptor]:
    rows = _fetch(
        connection,
        "SELECT name, sql FROM sqlite_master WHERE type='view' ORDER BY name",
        action="list views",
    )
    return [ViewDescriptor(name=row["name"], sql=row["sql"] or "") for row in rows]


def table_exists(connection: sqlite3.Connection, table: str) -> bool:
    require_identifier(table, "table")
    row = _fetch(
        connection,
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name = ? COLLATE NOCASE",
        (table,),
        action="check table",
    )
    return bool(row)


def get_columns(connection: sqlite3.Connection, table: str) -> tuple[ColumnDescriptor, ...]:
    """Return the table's columns with uniqueness and AUTOINCREMENT derived."""
    require_identifier(table, "table")
    pragma_rows = _fetch(
        connection,
        "SELECT * FROM pragma_table_xinfo(?) ORDER BY cid",
        (table,),
        action=f"read columns of '{table}'",
    )
    if not pragma_rows:
        raise NotFoundError(f"Table '{table}' not found or has no columns")

    create_sql = _table_sql(connection, table)
    definitions = _column_definitions(create_sql)
    unique_columns = _single_column_unique(get_indexes(connection, table))
    pk_columns = [row["name"] for row in pragma_rows if row["pk"]]
    sole_pk = pk_columns[0] if len(pk_columns) == 1 else None

    columns: list[ColumnDescriptor] = []
    for row in pragma_rows:
        name = row["name"]
        is_sole_pk = name == sole_pk
        definition = definitions.get(name.lower(), "")
        columns.append(
            ColumnDescriptor(
                cid=int(row["cid"]),
                name=name,
                type=row["type"] or "",
                not_null=bool(row["notnull"]),
                default=row["dflt_value"],
                primary=bool(row["pk"]),
                unique=is_sole_pk or name in unique_columns,
                auto_increment=is_sole_pk and bool(_AUTOINCREMENT_RE.search(definition)),
            )
        )
    return tuple(columns)


def get_indexes(connection: sqlite3.Connection, table: str) -> tuple[IndexDescriptor, ...]:
    """Return every index on the table with its SQL and ordered key columns."""
    require_identifier(table, "table")
    index_rows = _fetch(
        connection,
        "SELECT name, \"unique\" FROM pragma_index_list(?)",
        (table,),
        action=f"list indexes of '{table}'",
    )
    indexes: list[IndexDescriptor] = []
    for row in index_rows:
        index_name = row["name"]
        sql_row = _fetch(
            connection,
            "SELECT sql FROM sqlite_master WHERE type='index' AND name = ?",
            (index_name,),
            action=f"read index '{index_name}'",
        )
        member_rows = _fetch(
            connection,
            "SELECT name FROM pragma_index_info(?) ORDER BY seqno",
            (index_name,),
            action=f"read columns of index '{index_name}'",
        )
        indexes.append(
            IndexDescriptor(
                name=index_name,
                unique=bool(row["unique"]),
                sql=(sql_row[0]["sql"] or "") if sql_row else "",
                # expression indexes report no column name
                columns=tuple(member["name"] or "" for member in member_rows),
            )
        )
    return tuple(indexes)


def get_triggers(connection: sqlite3.Connection, table: str) -> tuple[TriggerDescriptor, ...]:
    require_identifier(table, "table")
    rows = _fetch(
        connection,
        """
        SELECT name, tbl_name, sql
        FROM sqlite_master
        WHERE type = 'trigger' AND tbl_name = ? COLLATE NOCASE
        ORDER BY name
        """,
        (table,),
        action=f"list triggers of '{table}'",
    )
    return tuple(_trigger_from_row(row) for row in rows)


def list_triggers(connection: sqlite3.Connection) -> list[TriggerDescriptor]:
    """Return every trigger in the database."""
    rows = _fetch(
        connection,
        """
        SELECT name, tbl_name, sql
        FROM sqlite_master
        WHERE type = 'trigger' AND name NOT LIKE 'sqlite_%'
        ORDER BY name
        """,
        action="list triggers",
    )
    return [_trigger_from_row(row) for row in rows]


def get_trigger(connection: sqlite3.Connection, name: str) -> TriggerDescriptor:
    require_identifier(name, "trigger")
    rows = _fetch(
        connection,
        "SELECT name, tbl_name, sql FROM sqlite_master WHERE type = 'trigger' AND name = ?",
        (name,),
        action=f"read trigger '{name}'",
    )
    if not rows:
        raise NotFoundError(f"Trigger '{name}' does not exist")
    return _trigger_from_row(rows[0])


def get_table_info(connection: sqlite3.Connection, table: str) -> TableSchema:
    """Return columns, indexes and triggers for one table."""
    columns = get_columns(connection, table)
    return TableSchema(
        name=table,
        columns=columns,
        indexes=get_indexes(connection, table),
        triggers=get_triggers(connection, table),
    )


def describe_database(connection: sqlite3.Connection) -> DatabaseInfo:
    """Report file size, timestamps and engine version of the main database."""
    rows = _fetch(
        connection,
        "SELECT file FROM pragma_database_list WHERE name = 'main'",
        action="locate database file",
    )
    file_name = rows[0]["file"] if rows else ""
    if not file_name:
        raise DatabaseError("The main database is in-memory and has no backing file")

    path = Path(file_name)
    try:
        stat = path.stat()
    except OSError as exc:
        raise DatabaseError(f"Unable to stat database file {path}: {exc}") from exc

    version = _fetch(connection, "SELECT sqlite_version() AS version", action="read version")
    # st_birthtime is only exposed on macOS/BSD and recent Windows builds.
    created_ts = getattr(stat, "st_birthtime", None) or stat.st_mtime
    return DatabaseInfo(
        path=path,
        size_bytes=stat.st_size,
        created_at=datetime.fromtimestamp(created_ts, tz=timezone.utc),
        modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        sqlite_version=version[0]["version"],
    )


def parse_trigger_event_timing(sql: str) -> tuple[str, str]:
    """Approximate a trigger's event and timing from its CREATE TRIGGER text.

    Only the header before ``BEGIN`` is searched, so statements in the trigger
    body do not decide the event. Unrecognised text resolves to
    ``("UNKNOWN", "AFTER")``.
    """
    header = f" {' '.join((sql or '').upper().split())} "
    begin = header.find(" BEGIN ")
    if begin >= 0:
        header = header[: begin + 1]

    if " INSTEAD OF " in header:
        timing = "INSTEAD OF"
    elif " BEFORE " in header:
        timing = "BEFORE"
    else:
        timing = "AFTER"

    for event in ("INSERT", "UPDATE", "DELETE"):
        if f" {event} " in header:
            return event, timing
    return "UNKNOWN", timing


def summarize_trigger_sql(sql: str) -> str:
    if len(sql) > TRIGGER_DEFINITION_LIMIT:
        return sql[:TRIGGER_DEFINITION_LIMIT] + "..."
    return sql


# ---------------------------------------------------------------------------
# Internal helpers


def _fetch(
    connection: sqlite3.Connection,
    sql: str,
    params: Sequence[Any] = (),
    *,
    action: str,
) -> list[sqlite3.Row]:
    return run_statement(connection, sql, params, action=action).fetchall()


def _table_sql(connection: sqlite3.Connection, table: str) -> str:
    rows = _fetch(
        connection,
        "SELECT sql FROM sqlite_master WHERE type='table' AND name = ? COLLATE NOCASE",
        (table,),
        action=f"read definition of '{table}'",
    )
    return (rows[0]["sql"] or "") if rows else ""


def _single_column_unique(indexes: Sequence[IndexDescriptor]) -> set[str]:
    return {index.columns[0] for index in indexes if index.unique and len(index.columns) == 1}


def _trigger_from_row(row: sqlite3.Row) -> TriggerDescriptor:
    sql = row["sql"] or ""
    event, timing = parse_trigger_event_timing(sql)
    return TriggerDescriptor(
        name=row["name"],
        table=row["tbl_name"] or "",
        event=event,
        timing=timing,
        definition=summarize_trigger_sql(sql),
        sql=sql,
    )


def _column_definitions(create_sql: str) -> dict[str, str]:
    """Split a CREATE TABLE body into per-column definition text keyed by lower-case name."""
    start = create_sql.find("(")
    if start < 0:
        return {}

    parts: list[str] = []
    current: list[str] = []
    depth = 0
    closing: str | None = None
    body = create_sql[start + 1 :]
    index = 0
    while index < len(body):
        char = body[index]
        index += 1
        if closing is not None:
            current.append(char)
            if char == closing:
                closing = None
            continue
        if body.startswith("--", index - 1):
            newline = body.find("\n", index)
            index = len(body) if newline < 0 else newline
            continue
        if body.startswith("/*", index - 1):
            end = body.find("*/", index + 1)
            index = len(body) if end < 0 else end + 2
            current.append(" ")
            continue
        if char in _CLOSING_QUOTES:
            closing = _CLOSING_QUOTES[char]
        elif char == "(":
            depth += 1
        elif char == ")":
            if depth == 0:
                break
            depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))

    definitions: dict[str, str] = {}
    for part in parts:
        text = part.strip()
        name = _leading_name(text)
        if name:
            definitions.setdefault(name.lower(), text)
    return definitions


def _leading_name(definition: str) -> str:
    if not definition:
        return ""
    opener = definition[0]
    if opener in _CLOSING_QUOTES:
        end = definition.find(_CLOSING_QUOTES[opener], 1)
        return definition[1:end] if end > 0 else ""
    return definition.split()[0]
