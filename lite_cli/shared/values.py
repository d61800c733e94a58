"""Conversions for SQLite's dynamically typed cell values.

A cell may hold text, an integer, a float, a blob or NULL (plus booleans and
timestamps when values come from Python callers). Transport and text
formatting follow one fixed table so every export renders a value the same way.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_transport(value: Any) -> Any:
    """Return a JSON-friendly value, decoding blobs as UTF-8 text."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, datetime):
        return value.strftime(TIMESTAMP_FORMAT)
    if isinstance(value, date):
        return value.isoformat()
    return value


def format_cell(value: Any) -> str:
    """Render a value as CSV text.

    ``None`` becomes an empty string, booleans ``true``/``false``, integers
    decimal, floats via :func:`format_float` and timestamps
    ``YYYY-MM-DD HH:MM:SS``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, str):
        return value
    transported = to_transport(value)
    return transported if isinstance(transported, str) else str(transported)


def format_float(value: float) -> str:
    """Render the shortest digits that round-trip, in ``%g`` layout.

    Exponent form is used when the decimal exponent is below -4 or at least 6,
    so ``3.0`` becomes ``3`` and ``123456789.0`` becomes ``1.23456789e+08``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(digit) for digit in digit_tuple)
    prefix = "-" if sign else ""
    point = len(digits) + exponent
    exp = point - 1
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
        return f"{prefix}{mantissa}e{exp:+03d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{prefix}{digits}{'0' * (point - len(digits))}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"
