"""Shared model pricing utilities."""

from .price_spec import DEFAULT_PRICE_SPEC_URL, PriceSpecConfig, default_price_cache_path, get_price_spec
from .resolver import (
    PricingInfo,
    PricingTable,
    get_default_pricing,
    load_pricing,
    parse_pricing_table,
    tiered_cost,
)

__all__ = [
    "DEFAULT_PRICE_SPEC_URL",
    "PriceSpecConfig",
    "PricingInfo",
    "PricingTable",
    "default_price_cache_path",
    "get_default_pricing",
    "get_price_spec",
    "load_pricing",
    "parse_pricing_table",
    "tiered_cost",
]
