"""Data structures shared across lite-import modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ImportVerdict(str, Enum):
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of one bulk import.

    ``errors`` holds at most the configured number of messages even when more
    rows failed; ``failed_count`` is always the full count. A rolled-back import
    reports ``success_count`` of zero because nothing was kept.
    """

    table: str
    success_count: int = 0
    failed_count: int = 0
    errors: tuple[str, ...] = ()
    verdict: ImportVerdict = ImportVerdict.COMMITTED

    @property
    def committed(self) -> bool:
        return self.verdict is ImportVerdict.COMMITTED

    def to_payload(self) -> dict[str, object]:
        return {
            "tableName": self.table,
            "successCount": self.success_count,
            "failedCount": self.failed_count,
            "errors": list(self.errors),
            "verdict": self.verdict.value,
        }
