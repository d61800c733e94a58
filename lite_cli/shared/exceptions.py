"""Project-wide custom exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from lite_cli.lite_import.types import ImportResult


class LiteAdminError(Exception):
    """Base exception for the lite-admin CLI suite."""


class ConfigurationError(LiteAdminError):
    """Raised when configuration loading or validation fails."""


class ValidationError(LiteAdminError):
    """Raised when caller input is rejected before touching the database."""


class NotFoundError(LiteAdminError):
    """Raised when a table, column, index or trigger does not exist."""


class DatabaseError(LiteAdminError):
    """Raised for database-related issues."""


class ExecutionError(DatabaseError):
    """Raised when SQLite rejects a structural or row-level statement."""


class OperationCancelled(DatabaseError):
    """Raised when a caller cancels a long-running fetch or stream."""


class ImportFailure(LiteAdminError):
    """Raised when a bulk import cannot complete as requested."""


class ImportRolledBack(ImportFailure):
    """Raised when failed rows forced the import transaction to roll back."""

    def __init__(self, message: str, result: ImportResult) -> None:
        super().__init__(message)
        self.result = result
