from __future__ import annotations

import pytest

from lite_cli.lite_import.parsers import infer_file_kind, parse_csv, parse_json, parse_records
from lite_cli.shared.exceptions import ValidationError


def test_infer_file_kind_by_suffix() -> None:
    assert infer_file_kind("people.JSON") == "json"
    assert infer_file_kind("exports/people.csv") == "csv"
    with pytest.raises(ValidationError, match="Unsupported file type"):
        infer_file_kind("people.xlsx")


def test_parse_json_array_of_objects() -> None:
    records = parse_json(b'[{"name": "Ada", "tags": ["x"]}, {"name": "Brian"}]')
    assert records == [{"name": "Ada", "tags": ["x"]}, {"name": "Brian"}]


@pytest.mark.parametrize(
    "content",
    ['{"name": "Ada"}', "[1, 2]", "[{\"name\": ", "not json"],
)
def test_parse_json_rejects_other_shapes(content: str) -> None:
    with pytest.raises(ValidationError):
        parse_json(content)


def test_parse_json_blank_input_has_no_records() -> None:
    assert parse_json("  \n") == []


def test_parse_csv_header_short_rows_and_extra_fields() -> None:
    content = "name,city,age\nAda,London,36\nBrian\n\nChen,Paris,41,extra\n"
    assert parse_csv(content) == [
        {"name": "Ada", "city": "London", "age": "36"},
        {"name": "Brian", "city": None, "age": None},
        {"name": "Chen", "city": "Paris", "age": "41"},
    ]


def test_parse_csv_strips_bom_and_handles_quoted_fields() -> None:
    content = '\ufeffname,note\n"Dana","said ""hi"", then left"\n'.encode("utf-8")
    assert parse_csv(content) == [{"name": "Dana", "note": 'said "hi", then left'}]


def test_parse_csv_header_only_has_no_records() -> None:
    assert parse_csv("name,city\n") == []
    assert parse_csv("") == []


def test_parse_records_dispatch() -> None:
    assert parse_records("[]", ".json") == []
    assert parse_records("a\n1\n", "CSV") == [{"a": "1"}]
    with pytest.raises(ValidationError):
        parse_records("", "xml")


def test_undecodable_bytes_are_rejected() -> None:
    with pytest.raises(ValidationError, match="UTF-8"):
        parse_csv(b"name\n\xff\xfe\n")
