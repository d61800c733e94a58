"""Structural changes: tables, columns and indexes.

Every name is validated before it is interpolated. Engine failures surface as
``ExecutionError`` so callers see a hard failure for structural work.
"""

from __future__ import annotations

import re
import sqlite3

from lite_cli.shared.database import run_statement
from lite_cli.shared.exceptions import NotFoundError, ValidationError
from lite_cli.shared.identifiers import quote_identifier, require_identifier

from . import introspect
from .types import ColumnDefinition, IndexDefinition

# TEXT, VARCHAR(20), DECIMAL(10, 2), UNSIGNED BIG INT
_TYPE_NAME_RE = re.compile(
    r"[A-Za-z][A-Za-z0-9_]*(?: [A-Za-z][A-Za-z0-9_]*)*(?:\s*\(\s*\d+\s*(?:,\s*\d+\s*)?\))?",
    re.ASCII,
)


def create_table(connection: sqlite3.Connection, table: str) -> None:
    """Create an empty table with an auto-incrementing ``id`` key."""
    quoted = quote_identifier(table, "table")
    if introspect.table_exists(connection, table):
        raise ValidationError(f"Table '{table}' already exists")
    run_statement(
        connection,
        f'CREATE TABLE {quoted} ("id" INTEGER PRIMARY KEY AUTOINCREMENT)',
        action=f"create table '{table}'",
    )


def drop_table(connection: sqlite3.Connection, table: str) -> None:
    quoted = quote_identifier(table, "table")
    if not introspect.table_exists(connection, table):
        raise NotFoundError(f"Table '{table}' does not exist")
    run_statement(connection, f"DROP TABLE {quoted}", action=f"drop table '{table}'")


def add_column(connection: sqlite3.Connection, table: str, column: ColumnDefinition) -> None:
    """Add a column with ALTER TABLE ADD COLUMN."""
    run_statement(
        connection,
        build_add_column_sql(table, column),
        action=f"add column '{column.name}' to '{table}'",
    )


def build_add_column_sql(table: str, column: ColumnDefinition) -> str:
    quoted_table = quote_identifier(table, "table")
    quoted_column = quote_identifier(column.name, "column")
    column_type = normalise_type_name(column.type)

    parts = [f"ALTER TABLE {quoted_table} ADD COLUMN {quoted_column} {column_type}"]
    if column.not_null:
        parts.append("NOT NULL")
    if column.default is not None and column.default != "":
        escaped = column.default.replace("'", "''")
        parts.append(f"DEFAULT '{escaped}'")
    if column.primary:
        parts.append("PRIMARY KEY")
        if column.auto_increment and column_type.upper() == "INTEGER":
            parts.append("AUTOINCREMENT")
    return " ".join(parts)


def drop_column(connection: sqlite3.Connection, table: str, column: str) -> None:
    quoted_table = quote_identifier(table, "table")
    quoted_column = quote_identifier(column, "column")
    run_statement(
        connection,
        f"ALTER TABLE {quoted_table} DROP COLUMN {quoted_column}",
        action=f"drop column '{column}' from '{table}'",
    )


def rename_column(connection: sqlite3.Connection, table: str, old_name: str, new_name: str) -> None:
    quoted_table = quote_identifier(table, "table")
    quoted_old = quote_identifier(old_name, "column")
    quoted_new = quote_identifier(new_name, "column")
    run_statement(
        connection,
        f"ALTER TABLE {quoted_table} RENAME COLUMN {quoted_old} TO {quoted_new}",
        action=f"rename column '{old_name}' of '{table}'",
    )


def create_index(connection: sqlite3.Connection, table: str, index: IndexDefinition) -> None:
    quoted_table = quote_identifier(table, "table")
    quoted_index = quote_identifier(index.name, "index")
    if not index.columns:
        raise ValidationError(f"Index '{index.name}' needs at least one column")
    column_list = ", ".join(quote_identifier(name, "column") for name in index.columns)
    unique = "UNIQUE " if index.unique else ""
    run_statement(
        connection,
        f"CREATE {unique}INDEX {quoted_index} ON {quoted_table} ({column_list})",
        action=f"create index '{index.name}' on '{table}'",
    )


def drop_index(connection: sqlite3.Connection, table: str, index_name: str) -> None:
    require_identifier(table, "table")
    quoted_index = quote_identifier(index_name, "index")
    run_statement(connection, f"DROP INDEX IF EXISTS {quoted_index}", action=f"drop index '{index_name}'")


def normalise_type_name(type_name: str) -> str:
    cleaned = " ".join((type_name or "").split())
    if not cleaned or _TYPE_NAME_RE.fullmatch(cleaned) is None:
        raise ValidationError(f"Invalid column type: {type_name!r}")
    return cleaned
