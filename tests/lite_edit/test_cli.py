from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest
from click.testing import CliRunner

from lite_cli.lite_edit.main import cli
from lite_cli.shared import paths
from lite_cli.shared.database import open_connection


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.setenv(paths.CONFIG_DIR_ENV, str(tmp_path / "config"))
    return CliRunner()


@pytest.fixture
def db(tmp_path: Path) -> Path:
    db_path = tmp_path / "edit.db"
    conn = open_connection(db_path)
    try:
        conn.execute("CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT NOT NULL, age INTEGER)")
        conn.execute("INSERT INTO people (name, age) VALUES ('Ada', 36), ('Brian', 41)")
    finally:
        conn.close()
    return db_path


def _fetch(db: Path, sql: str) -> list[sqlite3.Row]:
    conn = open_connection(db)
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


def test_rows_json_output(runner: CliRunner, db: Path) -> None:
    result = runner.invoke(cli, ["--db", str(db), "rows", "people", "--limit", "1", "--page", "2", "--format", "json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["rows"] == [{"id": 2, "name": "Brian", "age": 41}]
    assert payload["total"] == 2
    assert payload["totalPages"] == 2


def test_insert_previews_without_apply(runner: CliRunner, db: Path) -> None:
    result = runner.invoke(cli, ["--db", str(db), "insert", "people", "--set", "name=Chen"])
    assert result.exit_code == 0, result.output
    assert 'INSERT INTO "people"' in result.output
    assert len(_fetch(db, "SELECT id FROM people")) == 2


def test_insert_with_apply_and_json_values(runner: CliRunner, db: Path) -> None:
    result = runner.invoke(
        cli,
        ["--db", str(db), "insert", "people", "--set", 'name="Chen"', "--set", "age=29", "--json-values", "--apply"],
    )
    assert result.exit_code == 0, result.output
    row = _fetch(db, "SELECT name, age, typeof(age) AS kind FROM people WHERE id = 3")[0]
    assert (row["name"], row["age"], row["kind"]) == ("Chen", 29, "integer")


def test_update_and_delete_with_apply(runner: CliRunner, db: Path) -> None:
    updated = runner.invoke(
        cli, ["--db", str(db), "update", "people", "--set", "id=1", "--null", "age", "--apply"]
    )
    assert updated.exit_code == 0, updated.output
    assert _fetch(db, "SELECT age FROM people WHERE id = 1")[0]["age"] is None

    deleted = runner.invoke(cli, ["--db", str(db), "delete", "people", "--key", "id=2", "--apply"])
    assert deleted.exit_code == 0, deleted.output
    assert [row["id"] for row in _fetch(db, "SELECT id FROM people")] == [1]


def test_update_without_key_fails(runner: CliRunner, db: Path) -> None:
    result = runner.invoke(cli, ["--db", str(db), "update", "people", "--set", "name=Zed", "--apply"])
    assert result.exit_code == 1
    assert "Primary key column 'id'" in result.output


def test_malformed_assignment_fails(runner: CliRunner, db: Path) -> None:
    result = runner.invoke(cli, ["--db", str(db), "insert", "people", "--set", "name"])
    assert result.exit_code == 1
    assert "COLUMN=VALUE" in result.output
