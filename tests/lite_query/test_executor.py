from __future__ import annotations

import sqlite3
import threading

import pytest

from lite_cli.lite_query import executor
from lite_cli.lite_query.types import QueryResult
from lite_cli.shared.exceptions import ExecutionError


def test_select_first_page_reports_has_next_and_total(people: sqlite3.Connection) -> None:
    result = executor.execute_sql(people, "SELECT * FROM people", page=1, size=2)

    assert isinstance(result, QueryResult)
    assert result.ok, result.error
    assert result.kind == "query"
    assert result.columns == ("id", "name", "city")
    assert [row["name"] for row in result.rows] == ["Ada", "Brian"]
    assert result.has_next is True
    assert result.total == 5
    assert (result.page, result.size) == (1, 2)
    assert result.message == "2 rows returned"
    assert result.duration_ms >= 0


def test_last_page_has_no_next(people: sqlite3.Connection) -> None:
    result = executor.execute_sql(people, "SELECT * FROM people ORDER BY id", page=3, size=2)
    assert [row["id"] for row in result.rows] == [5]
    assert result.has_next is False


def test_embedded_limit_offset_selects_the_page(people: sqlite3.Connection) -> None:
    result = executor.execute_sql(people, "SELECT id FROM people ORDER BY id LIMIT 2 OFFSET 2;")
    assert (result.page, result.size) == (2, 2)
    assert [row["id"] for row in result.rows] == [3, 4]
    assert result.has_next is True
    assert result.total == 5


def test_default_page_size_applies_without_pagination(people: sqlite3.Connection) -> None:
    result = executor.execute_sql(people, "SELECT id FROM people", default_size=3)
    assert result.size == 3
    assert len(result.rows) == 3
    assert result.has_next is True


def test_comment_prefixed_select_is_classified_as_query(people: sqlite3.Connection) -> None:
    result = executor.execute_sql(people, "-- who lives where\nSELECT name, city FROM people WHERE id = 1")
    assert result.kind == "query"
    assert list(result.rows) == [{"name": "Ada", "city": "London"}]


def test_insert_reports_last_insert_id(people: sqlite3.Connection) -> None:
    result = executor.execute_sql(people, "INSERT INTO people (name) VALUES ('Fay')")
    assert result.kind == "exec"
    assert result.affected == 1
    assert result.last_insert_id == 6
    assert result.message == "inserted, ID=6"
    assert people.execute("SELECT COUNT(*) FROM people").fetchone()[0] == 6


def test_update_reports_affected_rows(people: sqlite3.Connection) -> None:
    result = executor.execute_sql(people, "UPDATE people SET city = 'Paris' WHERE id <= 2")
    assert result.affected == 2
    assert result.last_insert_id is None
    assert result.message == "executed successfully, 2 rows affected"


def test_ddl_reports_zero_affected(connection: sqlite3.Connection) -> None:
    result = executor.execute_sql(connection, "CREATE TABLE notes (body TEXT)")
    assert result.ok
    assert result.affected == 0


def test_engine_errors_are_captured_not_raised(connection: sqlite3.Connection) -> None:
    result = executor.execute_sql(connection, "SELECT * FROM nowhere")
    assert not result.ok
    assert "no such table" in (result.error or "")
    assert result.total is None


def test_empty_sql_is_an_error(connection: sqlite3.Connection) -> None:
    result = executor.execute_sql(connection, "  -- nothing here\n ;")
    assert result.error == "SQL is empty"


def test_blob_values_are_decoded_as_text(connection: sqlite3.Connection) -> None:
    connection.execute("CREATE TABLE files (data BLOB)")
    connection.execute("INSERT INTO files VALUES (?)", (b"hello",))
    result = executor.execute_sql(connection, "SELECT data FROM files")
    assert list(result.rows) == [{"data": "hello"}]


def test_cancelled_select_reports_error(people: sqlite3.Connection) -> None:
    event = threading.Event()
    event.set()
    result = executor.execute_sql(people, "SELECT * FROM people", cancel_event=event)
    assert not result.ok
    assert "cancelled" in (result.error or "")


def test_query_columns_uses_dry_run(people: sqlite3.Connection) -> None:
    assert executor.query_columns(people, "SELECT name AS who, city FROM people") == ("who", "city")
    with pytest.raises(ExecutionError):
        executor.query_columns(people, "SELECT * FROM nowhere")


def test_count_rows_returns_none_on_failure(people: sqlite3.Connection) -> None:
    assert executor.count_rows(people, "SELECT * FROM people LIMIT 1") == 5
    assert executor.count_rows(people, "SELECT * FROM nowhere") is None


def test_payload_uses_transport_field_names(people: sqlite3.Connection) -> None:
    payload = executor.execute_sql(people, "SELECT id FROM people", page=1, size=4).to_payload()
    assert payload["type"] == "query"
    assert payload["hasNext"] is True
    assert payload["total"] == 5
    assert len(payload["rows"]) == 4

    insert = executor.execute_sql(people, "INSERT INTO people (name) VALUES ('Gus')").to_payload()
    assert insert["type"] == "exec"
    assert insert["lastInsertId"] == 6
    assert "rows" not in insert


def test_cancelled_statement_keeps_exec_kind(people: sqlite3.Connection) -> None:
    event = threading.Event()
    event.set()
    result = executor.execute_sql(people, "DELETE FROM people", cancel_event=event)
    assert result.kind == "exec"
    assert "cancelled" in (result.error or "")
    assert people.execute("SELECT COUNT(*) FROM people").fetchone()[0] == 5


def test_deeply_nested_select_errors_come_from_sqlite(people: sqlite3.Connection) -> None:
    sql = "SELECT * FROM nowhere WHERE " + "(" * 300 + "1" + ")" * 300
    result = executor.execute_sql(people, sql)
    assert result.kind == "query"
    assert result.error is not None
    assert "no such table" in result.error or "parser stack overflow" in result.error
