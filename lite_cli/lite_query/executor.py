"""Query execution helpers for lite-query."""

from __future__ import annotations

import sqlite3
import threading
import time
from dataclasses import replace
from typing import Any

from lite_cli.shared.exceptions import ExecutionError, OperationCancelled
from lite_cli.shared.logging import Logger
from lite_cli.shared.values import to_transport

from . import sqltext
from .types import Pagination, QueryResult, StatementKind

FETCH_BATCH_SIZE = 200


def execute_sql(
    connection: sqlite3.Connection,
    sql: str,
    *,
    page: int | None = None,
    size: int | None = None,
    default_size: int = sqltext.DEFAULT_PAGE_SIZE,
    cancel_event: threading.Event | None = None,
    logger: Logger | None = None,
) -> QueryResult:
    """Execute ad-hoc SQL and always return a structured result.

    SELECT statements are paginated (see :mod:`sqltext`); everything else runs
    directly and reports the affected row count. Errors never propagate: they
    are captured in ``QueryResult.error``.
    """
    started = time.perf_counter()
    try:
        result = _dispatch(
            connection,
            sql,
            page=page,
            size=size,
            default_size=default_size,
            cancel_event=cancel_event,
            logger=logger,
        )
    except (sqlite3.Error, OperationCancelled) as exc:
        if sqltext.classify(sql) is StatementKind.SELECT:
            result = QueryResult(kind="query", page=page, size=size, error=f"execute failed: {exc}")
        else:
            result = QueryResult(kind="exec", error=f"execute failed: {exc}")
    return replace(result, duration_ms=_elapsed_ms(started))


def query_columns(connection: sqlite3.Connection, sql: str) -> tuple[str, ...]:
    """Discover the result columns of ``sql`` with a zero-row dry run."""
    try:
        cursor = connection.execute(sqltext.dry_run_sql(sql))
    except sqlite3.Error as exc:
        raise ExecutionError(f"dry run failed: {exc}") from exc
    try:
        return tuple(column[0] for column in cursor.description or ())
    finally:
        cursor.close()


def count_rows(connection: sqlite3.Connection, sql: str, *, logger: Logger | None = None) -> int | None:
    """Count the rows ``sql`` would return without paging; ``None`` when counting fails."""
    statement = sqltext.count_sql(sql)
    if logger:
        logger.sql("count", statement)
    try:
        row = connection.execute(statement).fetchone()
    except sqlite3.Error as exc:
        if logger:
            logger.debug(f"Row count unavailable: {exc}")
        return None
    return int(row[0]) if row else None


def row_to_mapping(columns: tuple[str, ...], row: sqlite3.Row | tuple[Any, ...]) -> dict[str, Any]:
    return {column: to_transport(value) for column, value in zip(columns, row)}


def raise_if_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelled("Operation cancelled by caller")


# ---------------------------------------------------------------------------
# Internal helpers


def _dispatch(
    connection: sqlite3.Connection,
    sql: str,
    *,
    page: int | None,
    size: int | None,
    default_size: int,
    cancel_event: threading.Event | None,
    logger: Logger | None,
) -> QueryResult:
    cleaned = sqltext.clean_sql(sql)
    if not cleaned:
        return QueryResult(kind="query", page=page, size=size, error="SQL is empty")
    kind = sqltext.classify(cleaned)
    if logger:
        logger.debug(f"Classified statement as {kind.value}")
    if kind is StatementKind.SELECT:
        pagination = sqltext.resolve_pagination(page, size, cleaned, default_size)
        return _execute_select(connection, cleaned, pagination, cancel_event, logger)
    raise_if_cancelled(cancel_event)
    return _execute_statement(connection, cleaned, kind, logger)


def _execute_select(
    connection: sqlite3.Connection,
    sql: str,
    pagination: Pagination,
    cancel_event: threading.Event | None,
    logger: Logger | None,
) -> QueryResult:
    base = QueryResult(kind="query", page=pagination.page, size=pagination.size)
    total = count_rows(connection, sql, logger=logger)
    statement = sqltext.paginate(sql, pagination)
    if logger:
        logger.sql("paginated", statement)

    raise_if_cancelled(cancel_event)
    try:
        cursor = connection.execute(statement)
    except sqlite3.Error as exc:
        return replace(base, total=total, error=f"execute failed: {exc}")

    try:
        columns = tuple(column[0] for column in cursor.description or ())
        rows: list[dict[str, Any]] = []
        wanted = pagination.size + 1
        while len(rows) < wanted:
            raise_if_cancelled(cancel_event)
            batch = cursor.fetchmany(min(FETCH_BATCH_SIZE, wanted - len(rows)))
            if not batch:
                break
            rows.extend(row_to_mapping(columns, row) for row in batch)
    except OperationCancelled as exc:
        return replace(base, total=total, error=str(exc))
    except sqlite3.Error as exc:
        return replace(base, total=total, error=f"fetch failed: {exc}")
    finally:
        cursor.close()

    has_next = len(rows) > pagination.size
    if has_next:
        rows = rows[: pagination.size]
    return replace(
        base,
        columns=columns,
        rows=tuple(rows),
        total=total,
        has_next=has_next,
        message=f"{len(rows)} rows returned",
    )


def _execute_statement(
    connection: sqlite3.Connection,
    sql: str,
    kind: StatementKind,
    logger: Logger | None,
) -> QueryResult:
    if logger:
        logger.sql("exec", sql)
    try:
        cursor = connection.execute(sql)
    except sqlite3.Error as exc:
        return QueryResult(kind="exec", error=f"execute failed: {exc}")
    try:
        affected = max(cursor.rowcount, 0)
        if kind is StatementKind.INSERT:
            last_id = cursor.lastrowid
            return QueryResult(
                kind="exec",
                affected=affected,
                last_insert_id=last_id,
                message=(
                    f"inserted, ID={last_id}"
                    if last_id is not None
                    else f"inserted successfully, {affected} rows affected"
                ),
            )
        return QueryResult(
            kind="exec",
            affected=affected,
            message=f"executed successfully, {affected} rows affected",
        )
    finally:
        cursor.close()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)
