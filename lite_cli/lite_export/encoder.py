"""Streaming JSON and CSV writers for row sets.

Rows are consumed one at a time from any iterable and written straight to the
sink, so an export never holds more than the current row in memory.
"""

from __future__ import annotations

import csv
import json
import threading
from typing import Any, Iterable, Mapping, Sequence, TextIO

from lite_cli.shared.exceptions import OperationCancelled, ValidationError
from lite_cli.shared.values import format_cell, to_transport

UTF8_BOM = "\ufeff"
SUPPORTED_FORMATS = ("json", "csv")


def write_json(
    rows: Iterable[Mapping[str, Any]],
    columns: Sequence[str],
    sink: TextIO,
    cancel_event: threading.Event | None = None,
) -> int:
    """Write ``rows`` as a JSON array, one object per line.

    Only ``columns`` are emitted, in that order; a column missing from a row is
    left out of that row's object.
    """
    count = 0
    sink.write("[")
    for row in rows:
        _check_cancelled(cancel_event)
        if count:
            sink.write(",")
        record = {column: to_transport(row[column]) for column in columns if column in row}
        sink.write(json.dumps(record, ensure_ascii=False, separators=(",", ":"), default=str))
        sink.write("\n")
        count += 1
    sink.write("]")
    return count


def write_csv(
    rows: Iterable[Mapping[str, Any]],
    columns: Sequence[str],
    sink: TextIO,
    cancel_event: threading.Event | None = None,
    bom: bool = True,
) -> int:
    """Write ``rows`` as CSV with a header line and ``\\n`` record terminators."""
    if bom:
        sink.write(UTF8_BOM)
    writer = csv.writer(sink, lineterminator="\n")
    writer.writerow(columns)
    count = 0
    for row in rows:
        _check_cancelled(cancel_event)
        writer.writerow([format_cell(row[column]) if column in row else "" for column in columns])
        count += 1
    return count


def write_rows(
    fmt: str,
    rows: Iterable[Mapping[str, Any]],
    columns: Sequence[str],
    sink: TextIO,
    cancel_event: threading.Event | None = None,
    bom: bool = True,
) -> int:
    normalized = (fmt or "").lower()
    if normalized == "json":
        return write_json(rows, columns, sink, cancel_event)
    if normalized == "csv":
        return write_csv(rows, columns, sink, cancel_event, bom=bom)
    raise ValidationError(f"Unsupported export format '{fmt}'. Expected one of: {', '.join(SUPPORTED_FORMATS)}")


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelled("Export cancelled by caller")
