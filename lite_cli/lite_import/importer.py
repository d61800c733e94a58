"""Transactional bulk import of JSON/CSV records into an existing table.

An import ends one of three ways:

* every record inserted: the transaction commits;
* some records failed and ``rollback_on_failure`` is set: the transaction rolls
  back and :class:`ImportRolledBack` is raised carrying the result;
* some records failed without the flag: the successful rows commit and the
  result (with its failure count and messages) is returned normally.

Columns missing from the table are added before the insert transaction opens.
SQLite commits DDL on its own, so those columns stay even when the rows are
rolled back.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any, Mapping, Sequence

from lite_cli.lite_schema import ddl, introspect
from lite_cli.lite_schema.types import ColumnDefinition
from lite_cli.shared.database import transaction
from lite_cli.shared.exceptions import ImportRolledBack, NotFoundError
from lite_cli.shared.identifiers import quote_identifier, require_identifier, require_identifiers
from lite_cli.shared.logging import Logger

from .parsers import parse_records
from .types import ImportResult, ImportVerdict

DEFAULT_MAX_ERRORS = 5
NEW_COLUMN_TYPE = "TEXT"


def import_to_table(
    connection: sqlite3.Connection,
    content: str | bytes,
    file_kind: str,
    table: str,
    *,
    create_new_columns: bool = True,
    rollback_on_failure: bool = False,
    max_errors: int = DEFAULT_MAX_ERRORS,
    logger: Logger | None = None,
) -> ImportResult:
    """Parse ``content`` and insert every record into ``table``."""
    require_identifier(table, "table")
    records = parse_records(content, file_kind)
    if not records:
        if logger:
            logger.info(f"No records to import into '{table}'.")
        return ImportResult(table=table)

    columns = require_identifiers(records[0].keys(), "column")
    if not introspect.table_exists(connection, table):
        raise NotFoundError(f"Table '{table}' does not exist")

    if create_new_columns:
        added = add_missing_columns(connection, table, columns)
        if added and logger:
            logger.info(f"Added column(s) to '{table}': {', '.join(added)}")

    statement = build_insert_sql(table, columns)
    if logger:
        logger.sql("import", statement)

    with transaction(connection):
        success_count, failed_count, errors = _insert_records(
            connection, statement, columns, records, max_errors=max_errors
        )
        if failed_count and rollback_on_failure:
            result = ImportResult(
                table=table,
                success_count=0,
                failed_count=failed_count,
                errors=tuple(errors),
                verdict=ImportVerdict.ROLLED_BACK,
            )
            raise ImportRolledBack(
                f"Import into '{table}' failed for some records; all rows were rolled back",
                result,
            )

    if logger and failed_count:
        logger.warning(f"{failed_count} record(s) failed; {success_count} committed to '{table}'.")
    return ImportResult(
        table=table,
        success_count=success_count,
        failed_count=failed_count,
        errors=tuple(errors),
        verdict=ImportVerdict.COMMITTED,
    )


def add_missing_columns(connection: sqlite3.Connection, table: str, columns: Sequence[str]) -> list[str]:
    """Add nullable TEXT columns for names the table does not have yet."""
    existing = {column.name.lower() for column in introspect.get_columns(connection, table)}
    added: list[str] = []
    for name in columns:
        if name.lower() in existing:
            continue
        ddl.add_column(connection, table, ColumnDefinition(name=name, type=NEW_COLUMN_TYPE))
        existing.add(name.lower())
        added.append(name)
    return added


def build_insert_sql(table: str, columns: Sequence[str]) -> str:
    column_list = ", ".join(quote_identifier(name, "column") for name in columns)
    placeholders = ", ".join(f":{name}" for name in columns)
    return f"INSERT INTO {quote_identifier(table, 'table')} ({column_list}) VALUES ({placeholders})"


def bind_record(record: Mapping[str, Any], columns: Sequence[str]) -> dict[str, Any]:
    """Return named parameters for one record; absent keys bind NULL."""
    params: dict[str, Any] = {}
    for name in columns:
        value = record.get(name)
        if isinstance(value, (dict, list)):
            value = json.dumps(value, ensure_ascii=False)
        params[name] = value
    return params


def _insert_records(
    connection: sqlite3.Connection,
    statement: str,
    columns: Sequence[str],
    records: Sequence[Mapping[str, Any]],
    *,
    max_errors: int,
) -> tuple[int, int, list[str]]:
    success_count = 0
    failed_count = 0
    errors: list[str] = []
    for position, record in enumerate(records, start=1):
        # integers outside 64 bits raise OverflowError while binding
        try:
            connection.execute(statement, bind_record(record, columns))
        except (sqlite3.Error, OverflowError) as exc:
            failed_count += 1
            if len(errors) < max_errors:
                errors.append(f"record {position}: {exc}")
        else:
            success_count += 1
    return success_count, failed_count, errors
