"""Model name to price resolution and cost estimation."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
import logging
import math
import threading
from typing import Any

from .price_spec import PriceSpecConfig, get_price_spec

LOGGER = logging.getLogger(__name__)

TIERED_THRESHOLD = 200_000
PROVIDER_PREFIXES: tuple[str, ...] = ("anthropic/", "openai/", "azure/", "google/", "vertex_ai/", "gemini/")
QUALITY_SUFFIXES: tuple[str, ...] = ("-high", "-low", "-medium")
THINKING_SUFFIX = "-thinking"


@dataclass(frozen=True)
class PricingInfo:
    """Per-token USD rates for one model.

    Each `*_above_200k` rate applies to the tokens beyond the first 200k of a
    category; zero means the model has no higher tier for that category.
    """

    input_cost_per_token: float = 0.0
    output_cost_per_token: float = 0.0
    cache_read_cost: float = 0.0
    cache_write_cost: float = 0.0
    input_cost_above_200k: float = 0.0
    output_cost_above_200k: float = 0.0
    cache_read_cost_above_200k: float = 0.0
    cache_write_cost_above_200k: float = 0.0


def tiered_cost(tokens: int, base_price: float, above_price: float) -> float:
    """Cost of `tokens` at `base_price`, switching to `above_price` past the threshold."""
    if tokens == 0:
        return 0.0
    if above_price > 0 and tokens > TIERED_THRESHOLD:
        return TIERED_THRESHOLD * base_price + (tokens - TIERED_THRESHOLD) * above_price
    return tokens * base_price


def parse_pricing_table(raw_spec: Mapping[str, Any]) -> dict[str, PricingInfo]:
    """Convert a LiteLLM-style price table into `PricingInfo` records.

    Entries without an input or output rate (embeddings, image models, the
    `sample_spec` placeholder) are dropped.
    """
    table: dict[str, PricingInfo] = {}
    for model_key, raw_entry in raw_spec.items():
        if not isinstance(raw_entry, dict):
            continue
        info = PricingInfo(
            input_cost_per_token=_rate(raw_entry, "input_cost_per_token"),
            output_cost_per_token=_rate(raw_entry, "output_cost_per_token"),
            cache_read_cost=_rate(raw_entry, "cache_read_input_token_cost"),
            cache_write_cost=_rate(raw_entry, "cache_creation_input_token_cost"),
            input_cost_above_200k=_rate(raw_entry, "input_cost_per_token_above_200k_tokens"),
            output_cost_above_200k=_rate(raw_entry, "output_cost_per_token_above_200k_tokens"),
            cache_read_cost_above_200k=_rate(raw_entry, "cache_read_input_token_cost_above_200k_tokens"),
            cache_write_cost_above_200k=_rate(raw_entry, "cache_creation_input_token_cost_above_200k_tokens"),
        )
        if info.input_cost_per_token == 0 and info.output_cost_per_token == 0:
            continue
        table[model_key] = info
    return table


def load_pricing(config: PriceSpecConfig | None = None) -> dict[str, PricingInfo]:
    """Fetch the price table; any failure yields an empty mapping."""
    try:
        raw_spec = get_price_spec(config)
    except RuntimeError as exc:
        LOGGER.warning("Pricing unavailable, costs will only come from logs: %s", exc)
        return {}
    table = parse_pricing_table(raw_spec)
    LOGGER.info("Loaded pricing for %d models.", len(table))
    return table


class PricingTable:
    """Resolves free-form model names to `PricingInfo` records."""

    def __init__(self, prices: Mapping[str, PricingInfo] | None = None) -> None:
        self._prices: dict[str, PricingInfo] = dict(prices or {})

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, model_key: object) -> bool:
        return model_key in self._prices

    def resolve(self, model_name: str) -> PricingInfo | None:
        """Find pricing for `model_name`, progressively normalizing the name.

        The substring fallback returns the first key in table order that
        contains (or is contained in) the name. When several keys qualify the
        winner depends on that order, so callers should treat it as a
        best-effort match.
        """
        if not model_name:
            return None
        for candidate in _name_candidates(model_name):
            found = self._lookup(candidate)
            if found is not None:
                return found
        LOGGER.debug("No pricing found for model %r.", model_name)
        return None

    def estimate_cost(
        self,
        model_name: str,
        input_tokens: int,
        output_tokens: int,
        cache_read_tokens: int,
        cache_write_tokens: int,
    ) -> float:
        """Estimated USD cost; 0.0 when the model cannot be priced.

        Input tokens are billed in full; cache reads are not subtracted.
        """
        pricing = self.resolve(model_name)
        if pricing is None:
            return 0.0
        return (
            tiered_cost(input_tokens, pricing.input_cost_per_token, pricing.input_cost_above_200k)
            + tiered_cost(output_tokens, pricing.output_cost_per_token, pricing.output_cost_above_200k)
            + tiered_cost(cache_read_tokens, pricing.cache_read_cost, pricing.cache_read_cost_above_200k)
            + tiered_cost(cache_write_tokens, pricing.cache_write_cost, pricing.cache_write_cost_above_200k)
        )

    def _lookup(self, name: str) -> PricingInfo | None:
        exact = self._prices.get(name)
        if exact is not None:
            return exact
        for prefix in PROVIDER_PREFIXES:
            prefixed = self._prices.get(f"{prefix}{name}")
            if prefixed is not None:
                return prefixed
        lowered = name.lower()
        for key, pricing in self._prices.items():
            key_lowered = key.lower()
            if lowered in key_lowered or key_lowered in lowered:
                return pricing
        return None


def _name_candidates(model_name: str) -> Iterator[str]:
    """Yield the raw name followed by its normalized variants, in lookup order."""
    yield model_name

    without_thinking = _strip_suffix(model_name, THINKING_SUFFIX)
    if without_thinking is not None:
        yield without_thinking
        without_thinking_or_date = _strip_date_suffix(without_thinking)
        if without_thinking_or_date is not None:
            yield without_thinking_or_date

    # "-thinking" may also sit in front of the date: "...-thinking-20250918".
    without_date = _strip_date_suffix(model_name)
    if without_date is not None:
        yield without_date
        without_date_or_thinking = _strip_suffix(without_date, THINKING_SUFFIX)
        if without_date_or_thinking is not None:
            yield without_date_or_thinking

    for suffix in QUALITY_SUFFIXES:
        without_quality = _strip_suffix(model_name, suffix)
        if without_quality is not None:
            yield without_quality


def _strip_suffix(name: str, suffix: str) -> str | None:
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return None


def _strip_date_suffix(name: str) -> str | None:
    """Drop a trailing `-YYYYMMDD` version, if present."""
    base, separator, suffix = name.rpartition("-")
    if separator and len(suffix) == 8 and suffix.isascii() and suffix.isdigit():
        return base
    return None


def _rate(raw_entry: dict[str, Any], field_name: str) -> float:
    value = raw_entry.get(field_name)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0.0
    rate = float(value)
    return rate if math.isfinite(rate) else 0.0


_DEFAULT_TABLE: PricingTable | None = None
_DEFAULT_TABLE_LOCK = threading.Lock()


def get_default_pricing(config: PriceSpecConfig | None = None) -> PricingTable:
    """Return the process-wide pricing table, loading it on first use."""
    global _DEFAULT_TABLE
    with _DEFAULT_TABLE_LOCK:
        if _DEFAULT_TABLE is None:
            _DEFAULT_TABLE = PricingTable(load_pricing(config))
        return _DEFAULT_TABLE
