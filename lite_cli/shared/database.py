"""SQLite connection handling.

A connection is opened once by the caller and passed explicitly to every core
function. Connections run in autocommit mode; multi-statement work opens its own
transaction through :func:`transaction`.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, Sequence

from .config import AppConfig
from .exceptions import DatabaseError, ExecutionError


def open_connection(path: str | Path, *, read_only: bool = False) -> sqlite3.Connection:
    """Open a SQLite connection usable from worker threads."""
    db_path = Path(path)
    if read_only:
        if not db_path.exists():
            raise DatabaseError(f"Database file does not exist: {db_path}")
        conn = sqlite3.connect(
            f"{db_path.resolve().as_uri()}?mode=ro",
            uri=True,
            isolation_level=None,
            check_same_thread=False,
        )
    else:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@contextmanager
def connect(config: AppConfig, *, read_only: bool | None = None) -> Iterator[sqlite3.Connection]:
    """Yield a SQLite connection for the configured database."""
    effective_read_only = config.database.read_only if read_only is None else read_only
    try:
        connection = open_connection(config.database.path, read_only=effective_read_only)
    except sqlite3.Error as exc:
        raise DatabaseError(f"Unable to open database {config.database.path}: {exc}") from exc
    try:
        yield connection
    finally:
        connection.close()


@contextmanager
def transaction(connection: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the block inside BEGIN/COMMIT, rolling back if it raises."""
    connection.execute("BEGIN")
    try:
        yield connection
    except BaseException:
        connection.execute("ROLLBACK")
        raise
    connection.execute("COMMIT")


def run_statement(
    connection: sqlite3.Connection,
    sql: str,
    params: Sequence[Any] | Mapping[str, Any] = (),
    *,
    action: str,
) -> sqlite3.Cursor:
    """Execute a structural or row statement, wrapping engine errors."""
    try:
        return connection.execute(sql, params)
    except sqlite3.Error as exc:
        raise ExecutionError(f"Failed to {action}: {exc}") from exc
