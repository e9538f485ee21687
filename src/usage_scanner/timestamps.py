"""Timestamp normalization for heterogeneous log timestamp fields."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
MILLISECONDS_THRESHOLD = 10**12


def normalize_timestamp(value: Any) -> str | None:
    """Coerce a log timestamp into an ISO-8601 UTC string.

    Strings are tried as RFC3339 first, then as a digit-only epoch; anything
    else is returned trimmed but otherwise untouched. Numbers are epochs.
    Epochs at or above 10**12 in magnitude are read as milliseconds.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        parsed = _parse_rfc3339(text)
        if parsed is not None:
            try:
                return _render(parsed)
            except OverflowError:
                # Offset pushes the instant past the representable range.
                return text
        if text.isascii() and text.isdigit():
            try:
                from_epoch = normalize_epoch(int(text))
            except ValueError:
                from_epoch = None
            if from_epoch is not None:
                return from_epoch
        return text
    if isinstance(value, int):
        return normalize_epoch(value)
    if isinstance(value, float):
        try:
            return normalize_epoch(int(value))
        except (OverflowError, ValueError):
            return None
    return None


def normalize_epoch(epoch: int) -> str | None:
    """Render seconds or milliseconds since the epoch; None when out of range."""
    try:
        if abs(epoch) >= MILLISECONDS_THRESHOLD:
            moment = EPOCH + timedelta(milliseconds=epoch)
        else:
            moment = EPOCH + timedelta(seconds=epoch)
    except OverflowError:
        return None
    return _render(moment)


def file_mtime_timestamp(path: Path) -> str:
    """Last-modified time of `path`, used when a record carries no usable timestamp."""
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return ""
    return _render(datetime.fromtimestamp(mtime, tz=UTC))


def _parse_rfc3339(text: str) -> datetime | None:
    """Parse a date-time with an explicit offset; date-only or naive values are rejected."""
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def _render(moment: datetime) -> str:
    return moment.astimezone(UTC).isoformat()
