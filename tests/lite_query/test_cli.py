from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from lite_cli.lite_query.main import cli
from lite_cli.shared import paths
from lite_cli.shared.database import open_connection


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.setenv(paths.CONFIG_DIR_ENV, str(tmp_path / "config"))
    return CliRunner()


def _prepare_database(tmp_path: Path) -> str:
    db_path = tmp_path / "cli-query.db"
    conn = open_connection(db_path)
    try:
        conn.execute("CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
        conn.executemany(
            "INSERT INTO people (name) VALUES (?)",
            [("Ada",), ("Brian",), ("Chen",), ("Dana",), ("Emil",)],
        )
        conn.execute("CREATE VIEW short_names AS SELECT name FROM people WHERE length(name) <= 4")
        conn.execute(
            """
            CREATE TRIGGER people_touch AFTER UPDATE ON people
            BEGIN
                SELECT 1;
            END
            """
        )
    finally:
        conn.close()
    return str(db_path)


def test_sql_json_output_pages_results(runner: CliRunner, tmp_path: Path) -> None:
    db = _prepare_database(tmp_path)
    result = runner.invoke(
        cli,
        ["--db", db, "sql", "SELECT id, name FROM people ORDER BY id", "--page", "2", "--size", "2", "--format", "json"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["type"] == "query"
    assert [row["name"] for row in payload["rows"]] == ["Chen", "Dana"]
    assert payload["hasNext"] is True
    assert payload["total"] == 5
    assert payload["page"] == 2


def test_sql_csv_output(runner: CliRunner, tmp_path: Path) -> None:
    db = _prepare_database(tmp_path)
    result = runner.invoke(cli, ["--db", db, "sql", "SELECT id, name FROM people WHERE id < 3", "--format", "csv"])

    assert result.exit_code == 0, result.output
    assert "id,name\n1,Ada\n2,Brian\n" in result.stdout


def test_sql_exec_statement_reports_message(runner: CliRunner, tmp_path: Path) -> None:
    db = _prepare_database(tmp_path)
    result = runner.invoke(cli, ["--db", db, "sql", "DELETE FROM people WHERE id > 3"])

    assert result.exit_code == 0, result.output
    assert "executed successfully, 2 rows affected" in result.output


def test_sql_error_exits_non_zero(runner: CliRunner, tmp_path: Path) -> None:
    db = _prepare_database(tmp_path)
    result = runner.invoke(cli, ["--db", db, "sql", "SELECT * FROM missing"])

    assert result.exit_code == 1
    assert "no such table" in result.output


def test_read_only_flag_blocks_writes(runner: CliRunner, tmp_path: Path) -> None:
    db = _prepare_database(tmp_path)
    result = runner.invoke(cli, ["--db", db, "--read-only", "sql", "DELETE FROM people"])

    assert result.exit_code == 1
    assert "readonly" in result.output.replace("-", "")


def test_tables_views_and_triggers(runner: CliRunner, tmp_path: Path) -> None:
    db = _prepare_database(tmp_path)

    tables = runner.invoke(cli, ["--db", db, "tables"])
    assert tables.exit_code == 0, tables.output
    assert "people" in tables.output

    views = runner.invoke(cli, ["--db", db, "views", "--format", "json"])
    assert views.exit_code == 0, views.output
    assert json.loads(views.output)[0]["name"] == "short_names"

    triggers = runner.invoke(cli, ["--db", db, "triggers", "--format", "json"])
    assert triggers.exit_code == 0, triggers.output
    trigger = json.loads(triggers.output)[0]
    assert (trigger["name"], trigger["table"], trigger["event"], trigger["timing"]) == (
        "people_touch",
        "people",
        "UPDATE",
        "AFTER",
    )


def test_missing_trigger_is_reported(runner: CliRunner, tmp_path: Path) -> None:
    db = _prepare_database(tmp_path)
    result = runner.invoke(cli, ["--db", db, "triggers", "--name", "ghost"])

    assert result.exit_code == 1
    assert "Not found" in result.output


def test_info_reports_file_facts(runner: CliRunner, tmp_path: Path) -> None:
    db = _prepare_database(tmp_path)
    result = runner.invoke(cli, ["--db", db, "info", "--format", "json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert Path(payload["path"]).name == "cli-query.db"
    assert payload["size"] > 0
    assert payload["sqliteVersion"]
