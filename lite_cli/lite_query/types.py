"""Data structures shared across lite-query modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence


class StatementKind(str, Enum):
    """Leading keyword class of an ad-hoc statement."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    EXEC = "EXEC"


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int
    size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Structured outcome of one ad-hoc statement.

    ``kind`` is ``"query"`` for SELECT statements and ``"exec"`` for everything
    else. Failures are reported through ``error``; the executor never raises for
    operator SQL.
    """

    kind: str
    columns: tuple[str, ...] = ()
    rows: Sequence[Mapping[str, Any]] = field(default_factory=tuple)
    total: int | None = None
    has_next: bool = False
    page: int | None = None
    size: int | None = None
    affected: int | None = None
    last_insert_id: int | None = None
    message: str = ""
    duration_ms: float = 0.0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-ready mapping, omitting fields that do not apply."""
        payload: dict[str, Any] = {"type": self.kind, "duration": self.duration_ms}
        if self.kind == "query":
            payload.update(
                columns=list(self.columns),
                rows=[dict(row) for row in self.rows],
                total=self.total,
                hasNext=self.has_next,
                page=self.page,
                size=self.size,
            )
        else:
            payload["affected"] = self.affected
            if self.last_insert_id is not None:
                payload["lastInsertId"] = self.last_insert_id
        if self.message:
            payload["message"] = self.message
        if self.error is not None:
            payload["error"] = self.error
        return payload
