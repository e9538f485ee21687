"""OpenCode per-message JSON scanner."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from model_pricing import PricingTable

from ..errors import ParseError
from ..schemas import FileScanResult, Tool, UsageEntry
from ..timestamps import file_mtime_timestamp, normalize_timestamp
from .common import cost_value, decode_object, first_present, first_raw_string, token_count

LOGGER = logging.getLogger(__name__)

UNKNOWN_MODEL = "unknown"


def scan_file(path: Path, pricing: PricingTable) -> FileScanResult:
    """Parse one whole-file message record.

    The returned offset is the file size that was read; whole-file sources are
    re-read in full whenever that size changes.
    """
    fallback_timestamp = file_mtime_timestamp(path)
    raw = path.read_bytes()
    try:
        record = decode_object(raw, path)
    except ParseError as exc:
        LOGGER.debug("Skipping message file: %s", exc)
        return FileScanResult(entries=[], offset=len(raw))

    entry = parse_message(record, fallback_timestamp, pricing)
    return FileScanResult(entries=[entry] if entry is not None else [], offset=len(raw))


def parse_message(record: dict[str, Any], fallback_timestamp: str, pricing: PricingTable) -> UsageEntry | None:
    input_tokens = token_count(first_present(record, (("tokens", "input"),)))
    output_tokens = token_count(first_present(record, (("tokens", "output"),)))
    cache_read_tokens = token_count(first_present(record, (("tokens", "cache", "read"),)))
    cache_write_tokens = token_count(first_present(record, (("tokens", "cache", "write"),)))
    cost = cost_value(record.get("cost"))

    if input_tokens == output_tokens == cache_read_tokens == cache_write_tokens == 0 and cost == 0:
        return None

    model = first_raw_string(record, (("modelID",),))
    if model is None:
        model = UNKNOWN_MODEL
    if cost == 0 and model != UNKNOWN_MODEL:
        cost = pricing.estimate_cost(model, input_tokens, output_tokens, cache_read_tokens, cache_write_tokens)

    return UsageEntry(
        timestamp=normalize_timestamp(first_present(record, (("time", "created"),))) or fallback_timestamp,
        tool=Tool.OPENCODE,
        model=model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cache_read_tokens=cache_read_tokens,
        cache_write_tokens=cache_write_tokens,
        cost=cost,
    )
