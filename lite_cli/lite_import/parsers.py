"""JSON and CSV record parsing for bulk imports."""

from __future__ import annotations

import csv
import io
import json
from pathlib import PurePath
from typing import Any

from lite_cli.shared.exceptions import ValidationError

SUPPORTED_KINDS = ("json", "csv")


def infer_file_kind(filename: str) -> str:
    """Map a file name to ``json`` or ``csv`` by its (case-insensitive) suffix."""
    suffix = PurePath(filename or "").suffix.lower().lstrip(".")
    if suffix not in SUPPORTED_KINDS:
        raise ValidationError(f"Unsupported file type '{filename}'. Use a .json or .csv file.")
    return suffix


def parse_records(content: str | bytes, file_kind: str) -> list[dict[str, Any]]:
    kind = (file_kind or "").lower().lstrip(".")
    if kind == "json":
        return parse_json(content)
    if kind == "csv":
        return parse_csv(content)
    raise ValidationError(f"Unsupported file type '{file_kind}'. Expected one of: {', '.join(SUPPORTED_KINDS)}")


def parse_json(content: str | bytes) -> list[dict[str, Any]]:
    """Decode a JSON array of objects."""
    text = _decode(content)
    if not text.strip():
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Import file is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ValidationError("JSON import must be an array of objects")
    for position, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            raise ValidationError(f"JSON import record {position} is not an object")
    return data


def parse_csv(content: str | bytes) -> list[dict[str, Any]]:
    """Read a header line plus data rows; short rows fill trailing fields with None.

    A file without at least one data row yields no records. Fields beyond the
    header are ignored.
    """
    reader = csv.reader(io.StringIO(_decode(content), newline=""))
    try:
        lines = [line for line in reader if line]
    except csv.Error as exc:
        raise ValidationError(f"Import file is not valid CSV: {exc}") from exc
    if len(lines) < 2:
        return []

    headers = lines[0]
    records: list[dict[str, Any]] = []
    for line in lines[1:]:
        records.append(
            {header: line[index] if index < len(line) else None for index, header in enumerate(headers)}
        )
    return records


def _decode(content: str | bytes) -> str:
    if isinstance(content, bytes):
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ValidationError(f"Import file is not UTF-8 text: {exc}") from exc
    return content[1:] if content.startswith("\ufeff") else content
