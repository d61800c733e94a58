"""Utilities for resolving and managing application paths."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

DEFAULT_CONFIG_DIR = "~/.liteadmin"
DEFAULT_DATABASE_PATH = "~/.liteadmin/data.db"
DEFAULT_CONFIG_FILE = "config.yaml"

CONFIG_DIR_ENV = "LITEADMIN_CONFIG_DIR"
CONFIG_FILE_ENV = "LITEADMIN_CONFIG_PATH"
DATABASE_PATH_ENV = "LITEADMIN_DATABASE_PATH"


def _expand(path_str: str) -> Path:
    """Return a Path with user and environment variables expanded."""
    return Path(os.path.expandvars(path_str)).expanduser()


def get_config_dir(create: bool = False, env: Mapping[str, str] | None = None) -> Path:
    """Return the configuration directory, optionally creating it."""
    env = env or os.environ
    path = _expand(env.get(CONFIG_DIR_ENV, DEFAULT_CONFIG_DIR))
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Return the config file path, honouring the explicit override first."""
    env = env or os.environ
    override = env.get(CONFIG_FILE_ENV)
    if override:
        return _expand(override)
    return get_config_dir(env=env) / DEFAULT_CONFIG_FILE


def default_database_path(env: Mapping[str, str] | None = None) -> Path:
    """Return the default SQLite file path."""
    env = env or os.environ
    override = env.get(DATABASE_PATH_ENV)
    return _expand(override) if override else _expand(DEFAULT_DATABASE_PATH)


def resolve_path(path_str: str | Path) -> Path:
    """Expand user and environment variables for arbitrary paths."""
    return _expand(str(path_str))
