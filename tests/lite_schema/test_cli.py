from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from lite_cli.lite_schema.main import cli
from lite_cli.shared import paths


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.setenv(paths.CONFIG_DIR_ENV, str(tmp_path / "config"))
    return CliRunner()


def _invoke(runner: CliRunner, db: Path, *args: str):
    result = runner.invoke(cli, ["--db", str(db), *args])
    assert result.exit_code == 0, result.output
    return result


def test_schema_workflow(runner: CliRunner, tmp_path: Path) -> None:
    db = tmp_path / "schema.db"
    _invoke(runner, db, "create-table", "orders")
    _invoke(runner, db, "add-column", "orders", "sku", "--type", "VARCHAR(20)", "--not-null", "--default", "none")
    _invoke(runner, db, "add-column", "orders", "qty", "--type", "INTEGER")
    _invoke(runner, db, "rename-column", "orders", "qty", "quantity")
    _invoke(runner, db, "add-index", "orders", "idx_orders_sku", "--column", "sku", "--unique")

    shown = _invoke(runner, db, "show", "orders", "--format", "json")
    payload = json.loads(shown.output)
    columns = {column["name"]: column for column in payload["columns"]}
    assert list(columns) == ["id", "sku", "quantity"]
    assert columns["id"]["autoIncrement"] is True
    assert columns["sku"]["notNull"] is True
    assert columns["sku"]["default"] == "'none'"
    assert columns["sku"]["unique"] is True
    assert payload["indexes"][0]["columns"] == ["sku"]

    _invoke(runner, db, "drop-index", "orders", "idx_orders_sku")
    _invoke(runner, db, "drop-column", "orders", "quantity")
    shown = _invoke(runner, db, "show", "orders", "--format", "json")
    assert [column["name"] for column in json.loads(shown.output)["columns"]] == ["id", "sku"]


def test_show_table_renders_rich_table(runner: CliRunner, tmp_path: Path) -> None:
    db = tmp_path / "schema.db"
    _invoke(runner, db, "create-table", "orders")
    result = _invoke(runner, db, "show", "orders")
    assert "orders" in result.output
    assert "INTEGER" in result.output


def test_drop_table_requires_confirmation(runner: CliRunner, tmp_path: Path) -> None:
    db = tmp_path / "schema.db"
    _invoke(runner, db, "create-table", "orders")

    aborted = runner.invoke(cli, ["--db", str(db), "drop-table", "orders"], input="n\n")
    assert aborted.exit_code == 1

    _invoke(runner, db, "drop-table", "orders", "--yes")
    missing = runner.invoke(cli, ["--db", str(db), "show", "orders"])
    assert missing.exit_code == 1
    assert "Not found" in missing.output


def test_invalid_type_is_rejected(runner: CliRunner, tmp_path: Path) -> None:
    db = tmp_path / "schema.db"
    _invoke(runner, db, "create-table", "orders")
    result = runner.invoke(cli, ["--db", str(db), "add-column", "orders", "x", "--type", "TEXT); DROP TABLE orders; --"])
    assert result.exit_code == 1
    assert "Invalid input" in result.output
