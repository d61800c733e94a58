from __future__ import annotations

import pytest

from lite_cli.shared.exceptions import ValidationError
from lite_cli.shared.identifiers import (
    MAX_IDENTIFIER_LENGTH,
    is_valid_identifier,
    quote_identifier,
    require_identifier,
    require_identifiers,
)


@pytest.mark.parametrize("name", ["users", "_private", "user_2", "A", "x" * MAX_IDENTIFIER_LENGTH])
def test_valid_identifiers(name: str) -> None:
    assert is_valid_identifier(name)


@pytest.mark.parametrize(
    "name",
    [
        "",
        "2users",
        "user-name",
        "user name",
        'users"; DROP TABLE x; --',
        "café",
        "x" * (MAX_IDENTIFIER_LENGTH + 1),
        None,
        42,
    ],
)
def test_invalid_identifiers(name: object) -> None:
    assert not is_valid_identifier(name)


def test_require_identifier_names_kind_and_value() -> None:
    with pytest.raises(ValidationError, match="Invalid column name: 'bad name'"):
        require_identifier("bad name", "column")


def test_require_identifiers_stops_at_first_bad_name() -> None:
    assert require_identifiers(["a", "b"]) == ["a", "b"]
    with pytest.raises(ValidationError):
        require_identifiers(["a", "1b"])


def test_quote_identifier_wraps_in_double_quotes() -> None:
    assert quote_identifier("orders", "table") == '"orders"'
    with pytest.raises(ValidationError):
        quote_identifier('or"ders', "table")
