"""Codex session (JSONL) scanner.

Codex logs attribute usage to a model through `turn_context` records that
precede the `token_count` events, and token counts arrive either as per-event
deltas (`last_token_usage`) or as running totals (`total_token_usage`).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from model_pricing import PricingTable

from ..schemas import FileScanResult, TokenSnapshot, Tool, UsageEntry
from ..timestamps import file_mtime_timestamp, normalize_timestamp
from .common import (
    KeyPath,
    JsonlCursor,
    first_object,
    first_present,
    first_string,
    iter_jsonl_records,
    lookup,
    token_count,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-5"
MODEL_CHAIN: tuple[KeyPath, ...] = (
    ("payload", "info", "model"),
    ("payload", "info", "model_name"),
    ("payload", "info", "metadata", "model"),
    ("payload", "model"),
    ("payload", "metadata", "model"),
)
TIMESTAMP_CHAIN: tuple[KeyPath, ...] = (
    ("timestamp",),
    ("time",),
    ("created_at",),
    ("payload", "info", "time"),
    ("payload", "time"),
)
LAST_USAGE_PATH: KeyPath = ("payload", "info", "last_token_usage")
TOTAL_USAGE_PATH: KeyPath = ("payload", "info", "total_token_usage")
CACHED_FIELDS: tuple[KeyPath, ...] = (("cached_input_tokens",), ("cache_read_input_tokens",))


def scan_file(
    path: Path,
    start_offset: int,
    pricing: PricingTable,
    current_model: str | None = None,
    previous_total: TokenSnapshot | None = None,
) -> FileScanResult:
    """Parse token_count events appended after `start_offset`.

    `current_model` and `previous_total` carry the model context and the last
    cumulative snapshot over from an earlier scan of the same file.
    """
    fallback_timestamp = file_mtime_timestamp(path)
    cursor = JsonlCursor(start_offset)
    entries: list[UsageEntry] = []

    for record in iter_jsonl_records(path, start_offset, cursor):
        record_type = record.get("type")

        if record_type == "turn_context":
            current_model = first_string(record, MODEL_CHAIN) or current_model
            continue

        if record_type != "event_msg" or lookup(record, ("payload", "type")) != "token_count":
            continue

        last_usage = first_object(record, (LAST_USAGE_PATH,))
        if last_usage is not None:
            usage = _snapshot(last_usage)
        else:
            total_usage = first_object(record, (TOTAL_USAGE_PATH,))
            if total_usage is None:
                continue
            snapshot = _snapshot(total_usage)
            usage = snapshot.delta_since(previous_total)
            previous_total = snapshot

        if usage.input_tokens == usage.output_tokens == usage.cached_input_tokens == 0:
            continue

        inline_model = first_string(record, MODEL_CHAIN)
        model = inline_model or current_model or DEFAULT_MODEL
        if inline_model is not None:
            current_model = inline_model

        entries.append(
            UsageEntry(
                timestamp=normalize_timestamp(first_present(record, TIMESTAMP_CHAIN)) or fallback_timestamp,
                tool=Tool.CODEX,
                model=model,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                cache_read_tokens=usage.cached_input_tokens,
                cache_write_tokens=0,
                cost=pricing.estimate_cost(model, usage.input_tokens, usage.output_tokens, usage.cached_input_tokens, 0),
            )
        )

    LOGGER.debug("Parsed %d Codex entries from %s (offset %d -> %d)", len(entries), path, start_offset, cursor.offset)
    return FileScanResult(
        entries=entries,
        offset=cursor.offset,
        model=current_model,
        last_snapshot=previous_total,
    )


def _snapshot(usage: dict[str, Any]) -> TokenSnapshot:
    return TokenSnapshot(
        input_tokens=token_count(usage.get("input_tokens")),
        output_tokens=token_count(usage.get("output_tokens")),
        cached_input_tokens=token_count(first_present(usage, CACHED_FIELDS)),
    )
