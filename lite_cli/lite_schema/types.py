"""Data structures shared across lite-schema modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """One column of a table as reported by ``pragma_table_xinfo``."""

    cid: int
    name: str
    type: str  # declared type, free-form
    not_null: bool
    default: str | None
    primary: bool
    unique: bool
    auto_increment: bool


@dataclass(frozen=True, slots=True)
class IndexDescriptor:
    name: str
    unique: bool
    sql: str  # empty for indexes SQLite creates for constraints
    columns: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TriggerDescriptor:
    name: str
    table: str
    event: str  # INSERT / UPDATE / DELETE / UNKNOWN
    timing: str  # BEFORE / AFTER / INSTEAD OF
    definition: str
    sql: str


@dataclass(frozen=True, slots=True)
class TableSchema:
    """Columns, indexes and triggers of a single table."""

    name: str
    columns: tuple[ColumnDescriptor, ...]
    indexes: tuple[IndexDescriptor, ...]
    triggers: tuple[TriggerDescriptor, ...]

    @property
    def primary_keys(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns if column.primary)


@dataclass(frozen=True, slots=True)
class ViewDescriptor:
    name: str
    sql: str


@dataclass(frozen=True, slots=True)
class DatabaseInfo:
    """File-level facts about the open database."""

    path: Path
    size_bytes: int
    created_at: datetime
    modified_at: datetime
    sqlite_version: str


@dataclass(frozen=True, slots=True)
class ColumnDefinition:
    """Requested shape of a column added with ALTER TABLE."""

    name: str
    type: str
    not_null: bool = False
    default: str | None = None
    primary: bool = False
    auto_increment: bool = False


@dataclass(frozen=True, slots=True)
class IndexDefinition:
    name: str
    columns: tuple[str, ...] = field(default_factory=tuple)
    unique: bool = False
