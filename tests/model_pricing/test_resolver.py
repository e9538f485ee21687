"""Tests for model name resolution and tiered cost estimation."""

from __future__ import annotations

import pytest

from model_pricing import PricingInfo, PricingTable, load_pricing, parse_pricing_table, tiered_cost
from model_pricing import resolver as resolver_module


def test_tiered_cost_splits_tokens_above_threshold() -> None:
    """Tokens past 200k should be billed at the higher rate."""
    assert tiered_cost(250_000, 1e-6, 2e-6) == pytest.approx(200_000 * 1e-6 + 50_000 * 2e-6)


def test_tiered_cost_threshold_is_inclusive_of_base_rate() -> None:
    """Exactly 200k tokens stay entirely at the base rate."""
    assert tiered_cost(200_000, 1e-6, 2e-6) == pytest.approx(200_000 * 1e-6)


def test_tiered_cost_without_higher_tier_uses_base_rate() -> None:
    assert tiered_cost(300_000, 1e-6, 0.0) == pytest.approx(300_000 * 1e-6)
    assert tiered_cost(0, 1e-6, 2e-6) == 0.0


def test_resolve_strips_date_suffix() -> None:
    """Dated and undated names should both resolve against an undated key."""
    gpt4 = PricingInfo(input_cost_per_token=3e-5, output_cost_per_token=6e-5)
    table = PricingTable({"gpt-4": gpt4})

    assert table.resolve("gpt-4-20240101") is gpt4
    assert table.resolve("gpt-4") is gpt4


def test_resolve_tries_provider_prefixes() -> None:
    pricing = PricingInfo(input_cost_per_token=1e-6)
    table = PricingTable({"vertex_ai/claude-sonnet-4": pricing})

    assert table.resolve("claude-sonnet-4") is pricing


def test_resolve_strips_thinking_suffix() -> None:
    """The raw name matches nothing; the name without -thinking does."""
    pricing = PricingInfo(input_cost_per_token=1e-6)
    table = PricingTable({"claude-opus-4-1": pricing})

    assert table.resolve("claude-opus-4-thinking") is pricing


def test_resolve_strips_thinking_in_front_of_date() -> None:
    pricing = PricingInfo(input_cost_per_token=1e-6)
    table = PricingTable({"claude-x-v2": pricing})

    assert table.resolve("claude-x-thinking-20250918") is pricing


def test_resolve_strips_quality_suffix() -> None:
    pricing = PricingInfo(input_cost_per_token=1e-6)
    table = PricingTable({"gemini/gemini-3-pro-preview": pricing})

    assert table.resolve("gemini-3-pro-high") is pricing


def test_resolve_fuzzy_match_returns_one_of_the_candidates() -> None:
    """With several substring candidates only the fact of a match is guaranteed."""
    first = PricingInfo(input_cost_per_token=1e-6)
    second = PricingInfo(input_cost_per_token=2e-6)
    table = PricingTable({"openrouter/gpt-5-codex": first, "azure/gpt-5-codex-mini": second})

    assert table.resolve("GPT-5-CODEX") in (first, second)


def test_resolve_returns_none_for_unknown_or_empty_names() -> None:
    table = PricingTable({"gpt-4": PricingInfo(input_cost_per_token=1e-6)})

    assert table.resolve("mystery-model") is None
    assert table.resolve("") is None
    assert table.estimate_cost("mystery-model", 100, 100, 100, 100) == 0.0


def test_estimate_cost_bills_full_input_alongside_cache_reads() -> None:
    """Cache reads are priced separately and never subtracted from input."""
    table = PricingTable(
        {
            "claude-3-opus": PricingInfo(
                input_cost_per_token=1e-6,
                output_cost_per_token=5e-6,
                cache_read_cost=1e-7,
                cache_write_cost=2e-6,
            )
        }
    )

    cost = table.estimate_cost("claude-3-opus", 1000, 10, 400, 50)

    assert cost == pytest.approx(1000 * 1e-6 + 10 * 5e-6 + 400 * 1e-7 + 50 * 2e-6)


def test_estimate_cost_applies_each_category_tier_independently() -> None:
    table = PricingTable(
        {
            "claude-sonnet-4": PricingInfo(
                input_cost_per_token=3e-6,
                output_cost_per_token=1.5e-5,
                input_cost_above_200k=6e-6,
                output_cost_above_200k=2.25e-5,
            )
        }
    )

    cost = table.estimate_cost("claude-sonnet-4", 250_000, 1_000, 0, 0)

    assert cost == pytest.approx(200_000 * 3e-6 + 50_000 * 6e-6 + 1_000 * 1.5e-5)


def test_parse_pricing_table_keeps_only_priced_chat_models() -> None:
    raw_spec = {
        "sample_spec": {"input_cost_per_token": "0.0", "max_tokens": "LEGACY"},
        "text-embedding-3-small": {"input_cost_per_token": 0, "output_cost_per_token": 0},
        "claude-sonnet-4": {
            "input_cost_per_token": 3e-6,
            "output_cost_per_token": 1.5e-5,
            "cache_read_input_token_cost": 3e-7,
            "cache_creation_input_token_cost": 3.75e-6,
            "input_cost_per_token_above_200k_tokens": 6e-6,
            "cache_creation_input_token_cost_above_200k_tokens": 7.5e-6,
        },
        "broken": "not-an-object",
    }

    table = parse_pricing_table(raw_spec)

    assert list(table) == ["claude-sonnet-4"]
    pricing = table["claude-sonnet-4"]
    assert pricing.cache_read_cost == pytest.approx(3e-7)
    assert pricing.cache_write_cost == pytest.approx(3.75e-6)
    assert pricing.input_cost_above_200k == pytest.approx(6e-6)
    assert pricing.output_cost_above_200k == 0.0
    assert pricing.cache_write_cost_above_200k == pytest.approx(7.5e-6)


def test_load_pricing_degrades_to_empty_mapping(monkeypatch: pytest.MonkeyPatch) -> None:
    """An unreachable price feed must not be fatal."""

    def _failing_get_price_spec(_config=None):
        raise RuntimeError("offline")

    monkeypatch.setattr(resolver_module, "get_price_spec", _failing_get_price_spec)

    assert load_pricing() == {}
