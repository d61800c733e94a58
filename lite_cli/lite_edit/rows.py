"""Row-level reads and writes keyed by a table's primary key."""

from __future__ import annotations

import math
import sqlite3
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from lite_cli.lite_query.executor import row_to_mapping
from lite_cli.lite_schema import introspect
from lite_cli.lite_schema.types import ColumnDescriptor
from lite_cli.shared.database import run_statement
from lite_cli.shared.exceptions import NotFoundError, ValidationError
from lite_cli.shared.identifiers import quote_identifier, require_identifier

DEFAULT_ROW_LIMIT = 50


@dataclass(frozen=True, slots=True)
class TableRows:
    rows: tuple[dict[str, Any], ...]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True, slots=True)
class PlannedWrite:
    """A validated row statement and its named parameters."""

    sql: str
    params: dict[str, Any]


def get_table_rows(
    connection: sqlite3.Connection,
    table: str,
    limit: int = DEFAULT_ROW_LIMIT,
    offset: int = 0,
) -> TableRows:
    """Return one window of ``table`` plus its total row count."""
    quoted = quote_identifier(table, "table")
    if limit < 1:
        raise ValidationError("limit must be at least 1")
    if offset < 0:
        raise ValidationError("offset cannot be negative")
    if not introspect.table_exists(connection, table):
        raise NotFoundError(f"Table '{table}' does not exist")

    total_row = run_statement(
        connection, f"SELECT COUNT(*) FROM {quoted}", action=f"count rows of '{table}'"
    ).fetchone()
    cursor = run_statement(
        connection,
        f"SELECT * FROM {quoted} LIMIT ? OFFSET ?",
        (limit, offset),
        action=f"read rows of '{table}'",
    )
    columns = tuple(column[0] for column in cursor.description or ())
    rows = tuple(row_to_mapping(columns, row) for row in cursor.fetchall())
    return TableRows(rows=rows, total=int(total_row[0]), page=offset // limit + 1, limit=limit)


def plan_insert(connection: sqlite3.Connection, table: str, data: Mapping[str, Any]) -> PlannedWrite:
    columns = _columns_by_name(connection, table)
    if not data:
        raise ValidationError("No data provided for insertion")
    names: list[str] = []
    for name, value in data.items():
        column = _require_column(columns, name, table)
        if value is None and column.not_null:
            raise ValidationError(f"Column '{name}' cannot be null")
        names.append(name)
    column_list = ", ".join(quote_identifier(name, "column") for name in names)
    placeholders = ", ".join(f":{name}" for name in names)
    return PlannedWrite(
        sql=f"INSERT INTO {quote_identifier(table, 'table')} ({column_list}) VALUES ({placeholders})",
        params={name: data[name] for name in names},
    )


def plan_update(connection: sqlite3.Connection, table: str, data: Mapping[str, Any]) -> PlannedWrite:
    """Build an UPDATE that sets every non-key column in ``data``.

    ``data`` must carry a value for each primary key column; those values pick
    the row and are never assigned.
    """
    columns = _columns_by_name(connection, table)
    if not data:
        raise ValidationError("No data provided for update")
    primary_keys = _primary_keys(columns.values(), table, "update")
    for name in data:
        _require_column(columns, name, table)

    assignments: list[str] = []
    params: dict[str, Any] = {}
    for name, value in data.items():
        if name in primary_keys:
            continue
        assignments.append(f"{quote_identifier(name, 'column')} = :set_{name}")
        params[f"set_{name}"] = value
    where, where_params = _key_filter(primary_keys, data, prefix="where", action="update")
    if not assignments:
        raise ValidationError("No columns to update")
    params.update(where_params)
    return PlannedWrite(
        sql=f"UPDATE {quote_identifier(table, 'table')} SET {', '.join(assignments)} WHERE {where}",
        params=params,
    )


def plan_delete(connection: sqlite3.Connection, table: str, keys: Mapping[str, Any]) -> PlannedWrite:
    columns = _columns_by_name(connection, table)
    if not keys:
        raise ValidationError("No data provided for deletion")
    primary_keys = _primary_keys(columns.values(), table, "delete")
    where, params = _key_filter(primary_keys, keys, prefix="pk", action="delete")
    return PlannedWrite(sql=f"DELETE FROM {quote_identifier(table, 'table')} WHERE {where}", params=params)


def insert_row(connection: sqlite3.Connection, table: str, data: Mapping[str, Any]) -> int:
    """Insert one row and return its rowid."""
    planned = plan_insert(connection, table, data)
    cursor = run_statement(connection, planned.sql, planned.params, action=f"insert row into '{table}'")
    return int(cursor.lastrowid or 0)


def update_row(connection: sqlite3.Connection, table: str, data: Mapping[str, Any]) -> int:
    planned = plan_update(connection, table, data)
    cursor = run_statement(connection, planned.sql, planned.params, action=f"update row in '{table}'")
    return max(cursor.rowcount, 0)


def delete_row(connection: sqlite3.Connection, table: str, keys: Mapping[str, Any]) -> int:
    planned = plan_delete(connection, table, keys)
    cursor = run_statement(connection, planned.sql, planned.params, action=f"delete row from '{table}'")
    return max(cursor.rowcount, 0)


def _columns_by_name(connection: sqlite3.Connection, table: str) -> dict[str, ColumnDescriptor]:
    require_identifier(table, "table")
    return {column.name: column for column in introspect.get_columns(connection, table)}


def _require_column(columns: Mapping[str, ColumnDescriptor], name: str, table: str) -> ColumnDescriptor:
    require_identifier(name, "column")
    if name not in columns:
        raise ValidationError(f"Column '{name}' does not exist in table '{table}'")
    return columns[name]


def _primary_keys(columns: Iterable[ColumnDescriptor], table: str, action: str) -> list[str]:
    keys = [column.name for column in columns if column.primary]
    if not keys:
        raise ValidationError(f"Table '{table}' has no primary key, cannot {action}")
    return keys


def _key_filter(
    primary_keys: Sequence[str],
    values: Mapping[str, Any],
    *,
    prefix: str,
    action: str,
) -> tuple[str, dict[str, Any]]:
    clauses: list[str] = []
    params: dict[str, Any] = {}
    for name in primary_keys:
        if name not in values:
            raise ValidationError(f"Primary key column '{name}' must be provided to {action}")
        clauses.append(f"{quote_identifier(name, 'column')} = :{prefix}_{name}")
        params[f"{prefix}_{name}"] = values[name]
    return " AND ".join(clauses), params
