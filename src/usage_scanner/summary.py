"""Aggregation of usage entries for the CLI summary."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .schemas import UsageEntry


@dataclass
class UsageStats:
    """Accumulates token usage and cost statistics."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_write_tokens: int = 0
    count: int = 0
    cost: float = 0.0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens + self.cache_read_tokens + self.cache_write_tokens

    def add_entry(self, entry: UsageEntry) -> None:
        self.input_tokens += entry.input_tokens
        self.output_tokens += entry.output_tokens
        self.cache_read_tokens += entry.cache_read_tokens
        self.cache_write_tokens += entry.cache_write_tokens
        self.count += 1
        self.cost += entry.cost

    def __iadd__(self, other: "UsageStats") -> "UsageStats":
        """Mutate this object by adding stats in-place."""
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens
        self.cache_read_tokens += other.cache_read_tokens
        self.cache_write_tokens += other.cache_write_tokens
        self.count += other.count
        self.cost += other.cost
        return self


@dataclass(frozen=True)
class UsageSummary:
    """Usage grouped by (tool, model) and cost grouped by day."""

    usage_by_tool_model: dict[tuple[str, str], UsageStats]
    daily_costs: dict[str, float]
    total_entries: int


def summarize_entries(entries: Iterable[UsageEntry]) -> UsageSummary:
    usage_by_tool_model: dict[tuple[str, str], UsageStats] = defaultdict(UsageStats)
    daily_costs: dict[str, float] = defaultdict(float)
    total_entries = 0

    for entry in entries:
        usage_by_tool_model[(entry.tool.value, entry.model)].add_entry(entry)
        daily_costs[entry_day(entry)] += entry.cost
        total_entries += 1

    return UsageSummary(
        usage_by_tool_model=dict(usage_by_tool_model),
        daily_costs=dict(daily_costs),
        total_entries=total_entries,
    )


def entry_day(entry: UsageEntry) -> str:
    """UTC calendar day of an entry; unparseable timestamps are grouped as "unknown"."""
    try:
        return datetime.fromisoformat(entry.timestamp).date().isoformat()
    except ValueError:
        return "unknown"
