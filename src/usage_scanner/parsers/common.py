"""Helpers shared by the per-tool log scanners."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
import logging
import math
from pathlib import Path
from typing import Any

import orjson

from ..errors import ParseError

LOGGER = logging.getLogger(__name__)

# A key path into nested JSON objects, e.g. ("payload", "info", "model").
KeyPath = tuple[str, ...]

_MISSING = object()


def lookup(payload: Any, path: KeyPath) -> Any:
    """Follow `path` through nested objects; returns `_MISSING` when any step is absent."""
    current = payload
    for key in path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def first_present(payload: Any, chain: Sequence[KeyPath]) -> Any | None:
    """Value at the first path in `chain` that exists and is not null."""
    for path in chain:
        value = lookup(payload, path)
        if value is not _MISSING and value is not None:
            return value
    return None


def first_string(payload: Any, chain: Sequence[KeyPath]) -> str | None:
    """First non-blank string found along `chain`, stripped."""
    for path in chain:
        value = lookup(payload, path)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def first_raw_string(payload: Any, chain: Sequence[KeyPath]) -> str | None:
    """First string found along `chain`, exactly as the source wrote it."""
    for path in chain:
        value = lookup(payload, path)
        if isinstance(value, str):
            return value
    return None


def first_object(payload: Any, chain: Sequence[KeyPath]) -> dict[str, Any] | None:
    for path in chain:
        value = lookup(payload, path)
        if isinstance(value, dict):
            return value
    return None


def token_count(value: Any) -> int:
    """Coerce a token field into a non-negative int; unusable values count as 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if math.isfinite(value) and value >= 0 and value.is_integer():
            return int(value)
        return 0
    if isinstance(value, str):
        text = value.strip()
        return int(text) if text.isascii() and text.isdigit() else 0
    return 0


def cost_value(value: Any) -> float:
    """Coerce a reported cost into a non-negative float."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, int | float):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


def decode_object(raw: bytes, source: Path, byte_offset: int | None = None) -> dict[str, Any]:
    """Decode one JSON object or raise `ParseError` with location context."""
    location = f"{source} at byte {byte_offset}" if byte_offset is not None else str(source)
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ParseError(f"Malformed JSON in {location}: {exc}.") from exc
    if not isinstance(payload, dict):
        raise ParseError(f"Expected JSON object in {location}, got {type(payload).__name__}.")
    return payload


@dataclass
class JsonlCursor:
    """Byte position reached while reading a JSONL file."""

    offset: int


def iter_jsonl_records(path: Path, start_offset: int, cursor: JsonlCursor) -> Iterator[dict[str, Any]]:
    """Yield JSON objects appended after `start_offset`, advancing `cursor` per consumed line.

    Malformed lines are skipped. A final line without a newline that does not
    decode is not consumed, so a line still being written is picked up whole
    on the next scan.
    """
    cursor.offset = start_offset
    with path.open("rb") as handle:
        if start_offset:
            handle.seek(start_offset)
        for raw_line in handle:
            complete = raw_line.endswith(b"\n")
            if not raw_line.strip():
                cursor.offset += len(raw_line)
                continue
            try:
                record = decode_object(raw_line, path, cursor.offset)
            except ParseError as exc:
                if not complete:
                    LOGGER.debug("Leaving partial trailing line in %s for the next scan.", path)
                    return
                cursor.offset += len(raw_line)
                LOGGER.debug("Skipping record: %s", exc)
                continue
            cursor.offset += len(raw_line)
            yield record
