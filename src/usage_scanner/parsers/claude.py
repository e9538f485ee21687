"""Claude transcript (JSONL) scanner."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from model_pricing import PricingTable

from ..schemas import FileScanResult, Tool, UsageEntry
from ..timestamps import file_mtime_timestamp, normalize_timestamp
from .common import KeyPath, JsonlCursor, cost_value, first_object, first_raw_string, iter_jsonl_records, token_count

LOGGER = logging.getLogger(__name__)

UNKNOWN_MODEL = "unknown"
USAGE_CHAIN: tuple[KeyPath, ...] = (("message", "usage"),)
MODEL_CHAIN: tuple[KeyPath, ...] = (("message", "model"), ("model",))


def scan_file(path: Path, start_offset: int, pricing: PricingTable) -> FileScanResult:
    """Parse Claude usage records appended after `start_offset`."""
    fallback_timestamp = file_mtime_timestamp(path)
    cursor = JsonlCursor(start_offset)
    entries: list[UsageEntry] = []

    for record in iter_jsonl_records(path, start_offset, cursor):
        entry = parse_record(record, fallback_timestamp, pricing)
        if entry is not None:
            entries.append(entry)

    LOGGER.debug("Parsed %d Claude entries from %s (offset %d -> %d)", len(entries), path, start_offset, cursor.offset)
    return FileScanResult(entries=entries, offset=cursor.offset)


def parse_record(record: dict[str, Any], fallback_timestamp: str, pricing: PricingTable) -> UsageEntry | None:
    """Build an entry from one transcript line, or None when it carries no usage."""
    usage = first_object(record, USAGE_CHAIN) or {}
    input_tokens = token_count(usage.get("input_tokens"))
    output_tokens = token_count(usage.get("output_tokens"))
    cache_write_tokens = token_count(usage.get("cache_creation_input_tokens"))
    cache_read_tokens = token_count(usage.get("cache_read_input_tokens"))
    cost = cost_value(record.get("costUSD"))

    if input_tokens == output_tokens == cache_write_tokens == cache_read_tokens == 0 and cost == 0:
        return None

    model = _model(record)
    if cost == 0 and model != UNKNOWN_MODEL:
        cost = pricing.estimate_cost(model, input_tokens, output_tokens, cache_read_tokens, cache_write_tokens)

    return UsageEntry(
        timestamp=normalize_timestamp(record.get("timestamp")) or fallback_timestamp,
        tool=Tool.CLAUDE,
        model=model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cache_read_tokens=cache_read_tokens,
        cache_write_tokens=cache_write_tokens,
        cost=cost,
    )


def _model(record: dict[str, Any]) -> str:
    # A literal "unknown" on the message still defers to the top-level field.
    for path in MODEL_CHAIN:
        model = first_raw_string(record, (path,))
        if model is not None and model != UNKNOWN_MODEL:
            return model
    return UNKNOWN_MODEL
