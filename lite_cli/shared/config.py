"""Configuration loading utilities for the lite-admin CLI suite."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from . import paths
from .exceptions import ConfigurationError


@dataclass(frozen=True, slots=True)
class DatabaseSettings:
    """Database-related configuration."""

    path: Path
    read_only: bool


@dataclass(frozen=True, slots=True)
class QuerySettings:
    """Pagination defaults for ad-hoc SQL."""

    max_page_size: int  # lite-query page size default and clamp


@dataclass(frozen=True, slots=True)
class TransferSettings:
    """Bulk import and export behaviour."""

    create_new_columns: bool
    rollback_on_failure: bool
    max_import_errors: int
    csv_bom: bool


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Top-level application configuration."""

    source_path: Path
    database: DatabaseSettings
    query: QuerySettings
    transfer: TransferSettings

    def with_database_path(self, new_path: str | Path) -> AppConfig:
        """Return a copy with an updated database path."""
        new_db = replace(self.database, path=paths.resolve_path(new_path))
        return replace(self, database=new_db)

    def with_read_only(self, read_only: bool = True) -> AppConfig:
        """Return a copy with the read-only flag replaced."""
        return replace(self, database=replace(self.database, read_only=read_only))


def _default_config(env: Mapping[str, str]) -> dict[str, Any]:
    return {
        "database": {
            "path": str(paths.default_database_path(env=env)),
            "read_only": False,
        },
        "query": {
            "max_page_size": 1000,
        },
        "transfer": {
            "create_new_columns": True,
            "rollback_on_failure": False,
            "max_import_errors": 5,
            "csv_bom": True,
        },
    }


ENV_OVERRIDE_SPEC: dict[str, tuple[str, type]] = {
    "database.path": (paths.DATABASE_PATH_ENV, str),
    "database.read_only": ("LITEADMIN_READ_ONLY", bool),
    "query.max_page_size": ("LITEADMIN_MAX_PAGE_SIZE", int),
    "transfer.create_new_columns": ("LITEADMIN_IMPORT_CREATE_COLUMNS", bool),
    "transfer.rollback_on_failure": ("LITEADMIN_IMPORT_ROLLBACK", bool),
    "transfer.max_import_errors": ("LITEADMIN_IMPORT_MAX_ERRORS", int),
    "transfer.csv_bom": ("LITEADMIN_CSV_BOM", bool),
}


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from defaults, YAML file, and env overrides."""
    env = dict(env or os.environ)
    resolved_config_path = _resolve_config_path(config_path, env)
    file_data = _load_yaml(resolved_config_path)
    merged: dict[str, Any] = _deep_merge(_default_config(env), file_data)
    merged = _apply_env_overrides(merged, env)
    return _build_config(merged, resolved_config_path)


def _resolve_config_path(config_path: str | Path | None, env: Mapping[str, str]) -> Path:
    if config_path:
        return paths.resolve_path(config_path)
    return paths.default_config_path(env=env)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
        if not isinstance(data, MutableMapping):
            raise ConfigurationError(f"Config file at {path} must define a mapping root object.")
        return dict(data)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    config_copy = _deep_merge(config, {})
    for dotted_key, (env_key, expected_type) in ENV_OVERRIDE_SPEC.items():
        if env_key not in env:
            continue
        raw_value = env[env_key]
        try:
            value = _coerce_env_value(raw_value, expected_type)
        except ValueError as exc:
            raise ConfigurationError(
                f"Environment override {env_key} has invalid value '{raw_value}': {exc}"
            ) from exc
        _assign_nested(config_copy, dotted_key.split("."), value)
    return config_copy


def _coerce_env_value(raw: str, expected_type: type) -> Any:
    cleaned = raw.strip()
    if expected_type is bool:
        lowered = cleaned.lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError("expected boolean (true/false)")
    if expected_type is int:
        return int(cleaned)
    return cleaned


def _assign_nested(target: MutableMapping[str, Any], keys: list[str], value: Any) -> None:
    current = target
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], MutableMapping):
            current[key] = {}
        current = current[key]  # type: ignore[assignment]
    current[keys[-1]] = value


def _positive_int(value: Any, field: str) -> int:
    number = int(value)
    if number < 1:
        raise ValueError(f"{field} must be at least 1")
    return number


def _build_config(data: Mapping[str, Any], source_path: Path) -> AppConfig:
    try:
        database = DatabaseSettings(
            path=paths.resolve_path(data["database"]["path"]),
            read_only=bool(data["database"]["read_only"]),
        )
        query_cfg = data["query"]
        query = QuerySettings(
            max_page_size=_positive_int(query_cfg["max_page_size"], "query.max_page_size"),
        )
        transfer_cfg = data["transfer"]
        transfer = TransferSettings(
            create_new_columns=bool(transfer_cfg["create_new_columns"]),
            rollback_on_failure=bool(transfer_cfg["rollback_on_failure"]),
            max_import_errors=_positive_int(
                transfer_cfg["max_import_errors"], "transfer.max_import_errors"
            ),
            csv_bom=bool(transfer_cfg["csv_bom"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration structure: {exc}") from exc

    return AppConfig(
        source_path=source_path,
        database=database,
        query=query,
        transfer=transfer,
    )
