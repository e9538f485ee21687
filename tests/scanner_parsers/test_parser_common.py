"""Tests for value coercion and JSONL reading shared by the scanners."""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from usage_scanner.errors import ParseError
from usage_scanner.parsers.common import (
    JsonlCursor,
    cost_value,
    decode_object,
    first_raw_string,
    iter_jsonl_records,
    token_count,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (12, 12),
        (-5, 0),
        (3.0, 3),
        (3.5, 0),
        (-2.0, 0),
        (math.inf, 0),
        (math.nan, 0),
        ("42", 42),
        (" 42 ", 42),
        ("-3", 0),
        ("1e3", 0),
        ("４２", 0),
        (True, 0),
        (None, 0),
        ([1], 0),
    ],
)
def test_token_count_coercion(value: object, expected: int) -> None:
    assert token_count(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.25, 0.25),
        (2, 2.0),
        ("0.5", 0.5),
        (-0.1, 0.0),
        ("-1", 0.0),
        (math.nan, 0.0),
        ("nan", 0.0),
        ("free", 0.0),
        (False, 0.0),
        ({"usd": 1}, 0.0),
    ],
)
def test_cost_value_coercion(value: object, expected: float) -> None:
    assert cost_value(value) == expected


def test_first_raw_string_keeps_source_text() -> None:
    record = {"message": {"model": 7}, "model": " claude-3-opus "}

    assert first_raw_string(record, (("message", "model"), ("model",))) == " claude-3-opus "
    assert first_raw_string(record, (("missing",),)) is None


def test_decode_object_reports_byte_offset(tmp_path: Path) -> None:
    with pytest.raises(ParseError, match="at byte 128"):
        decode_object(b"{oops", tmp_path / "a.jsonl", 128)


def test_iter_jsonl_records_resumes_mid_file(tmp_path: Path) -> None:
    log_file = tmp_path / "a.jsonl"
    first = b'{"n": 1}\n'
    log_file.write_bytes(first + b"not json\n" + b'{"n": 2}\n')
    cursor = JsonlCursor(0)

    records = list(iter_jsonl_records(log_file, len(first), cursor))

    assert records == [{"n": 2}]
    assert cursor.offset == log_file.stat().st_size
