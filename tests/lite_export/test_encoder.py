from __future__ import annotations

import io
import json
import threading
from datetime import datetime

import pytest

from lite_cli.lite_export import UTF8_BOM, write_csv, write_json, write_rows
from lite_cli.shared.exceptions import OperationCancelled, ValidationError

ROWS = [
    {"id": 1, "name": "Ada", "score": 0.5, "active": True},
    {"id": 2, "name": "Brian, Jr.", "score": None, "active": False},
    {"id": 3, "score": 2.0},
]
COLUMNS = ["id", "name", "score"]


def test_write_json_layout_and_projection() -> None:
    sink = io.StringIO()
    count = write_json(ROWS, COLUMNS, sink)

    assert count == 3
    assert sink.getvalue() == (
        '[{"id":1,"name":"Ada","score":0.5}\n'
        ',{"id":2,"name":"Brian, Jr.","score":null}\n'
        ',{"id":3,"score":2.0}\n'
        "]"
    )
    assert json.loads(sink.getvalue())[2] == {"id": 3, "score": 2.0}


def test_write_json_empty_is_an_empty_array() -> None:
    sink = io.StringIO()
    assert write_json([], COLUMNS, sink) == 0
    assert sink.getvalue() == "[]"


def test_write_csv_bom_header_and_formatting() -> None:
    sink = io.StringIO()
    count = write_csv(ROWS, ["id", "name", "score", "active"], sink)

    assert count == 3
    assert sink.getvalue() == (
        UTF8_BOM
        + "id,name,score,active\n"
        + "1,Ada,0.5,true\n"
        + '2,"Brian, Jr.",,false\n'
        + "3,,2,\n"
    )


def test_write_csv_without_bom_and_special_values() -> None:
    sink = io.StringIO()
    rows = [{"blob": b"bytes", "at": datetime(2024, 5, 6, 7, 8, 9)}]
    write_csv(rows, ["blob", "at"], sink, bom=False)
    assert sink.getvalue() == "blob,at\nbytes,2024-05-06 07:08:09\n"


def test_write_json_decodes_blobs_and_timestamps() -> None:
    sink = io.StringIO()
    write_json([{"blob": b"hi", "at": datetime(2024, 5, 6, 7, 8, 9)}], ["blob", "at"], sink)
    assert json.loads(sink.getvalue()) == [{"blob": "hi", "at": "2024-05-06 07:08:09"}]


def test_rows_are_consumed_lazily_and_cancellation_stops_the_stream() -> None:
    event = threading.Event()
    produced: list[int] = []

    def generate():
        for number in range(1, 100):
            produced.append(number)
            if number == 2:
                event.set()
            yield {"n": number}

    sink = io.StringIO()
    with pytest.raises(OperationCancelled):
        write_csv(generate(), ["n"], sink, cancel_event=event, bom=False)
    assert produced == [1, 2]
    assert sink.getvalue() == "n\n1\n"


def test_write_rows_dispatches_by_format() -> None:
    json_sink = io.StringIO()
    csv_sink = io.StringIO()
    assert write_rows("JSON", ROWS[:1], ["id"], json_sink) == 1
    assert write_rows("csv", ROWS[:1], ["id"], csv_sink, bom=False) == 1
    assert json_sink.getvalue() == '[{"id":1}\n]'
    assert csv_sink.getvalue() == "id\n1\n"

    with pytest.raises(ValidationError):
        write_rows("xml", ROWS, ["id"], io.StringIO())
