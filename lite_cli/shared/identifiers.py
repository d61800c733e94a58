"""Identifier validation for names that must be interpolated into SQL text.

SQLite cannot bind table, column or index names as parameters, so every
structural name passes through here before it reaches a statement.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .exceptions import ValidationError

MAX_IDENTIFIER_LENGTH = 128

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*", re.ASCII)


def is_valid_identifier(name: object) -> bool:
    """Return True for ASCII names like ``user_2`` of at most 128 characters."""
    if not isinstance(name, str) or not name:
        return False
    if len(name) > MAX_IDENTIFIER_LENGTH:
        return False
    return _IDENTIFIER_RE.fullmatch(name) is not None


def require_identifier(name: object, kind: str = "table") -> str:
    """Return ``name`` unchanged or raise a ValidationError naming it."""
    if not is_valid_identifier(name):
        raise ValidationError(f"Invalid {kind} name: {name!r}")
    return name  # type: ignore[return-value]


def require_identifiers(names: Iterable[object], kind: str = "column") -> list[str]:
    return [require_identifier(name, kind) for name in names]


def quote_identifier(name: object, kind: str = "table") -> str:
    """Validate and double-quote a name for interpolation."""
    return f'"{require_identifier(name, kind)}"'
