"""Shared pytest fixtures: a temp-file database and an open connection to it."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from lite_cli.shared import paths
from lite_cli.shared.config import AppConfig, load_config
from lite_cli.shared.database import connect


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    """Return an AppConfig pointing at a fresh SQLite file under tmp_path."""

    env = {
        paths.DATABASE_PATH_ENV: str(tmp_path / "lite-admin.db"),
        paths.CONFIG_DIR_ENV: str(tmp_path / "config"),
    }
    return load_config(env=env)


@pytest.fixture()
def connection(app_config: AppConfig) -> Iterator[sqlite3.Connection]:
    with connect(app_config) as conn:
        yield conn


@pytest.fixture()
def people(connection: sqlite3.Connection) -> sqlite3.Connection:
    """Seed a ``people`` table with five rows (ids 1-5)."""

    connection.execute(
        "CREATE TABLE people (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, city TEXT)"
    )
    connection.executemany(
        "INSERT INTO people (name, city) VALUES (?, ?)",
        [
            ("Ada", "London"),
            ("Brian", "Toronto"),
            ("Chen", None),
            ("Dana", "Lisbon"),
            ("Emil", "Oslo"),
        ],
    )
    return connection
