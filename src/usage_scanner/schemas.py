"""Typed schemas shared by the scanners and the scan coordinator."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any


class Tool(StrEnum):
    """Coding assistants whose logs are scanned."""

    CLAUDE = "Claude"
    CODEX = "Codex"
    OPENCODE = "OpenCode"


@dataclass(frozen=True)
class UsageEntry:
    """One observed token-usage event.

    `timestamp` is ISO-8601 in UTC when the source value could be normalized,
    otherwise the raw source string.
    """

    timestamp: str
    tool: Tool
    model: str
    input_tokens: int
    output_tokens: int
    cache_read_tokens: int
    cache_write_tokens: int
    cost: float

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens + self.cache_read_tokens + self.cache_write_tokens

    def to_dict(self) -> dict[str, Any]:
        """Return the plain mapping handed to consumers."""
        payload = asdict(self)
        payload["tool"] = self.tool.value
        return payload


@dataclass(frozen=True)
class TokenSnapshot:
    """Cumulative Codex counters from one `total_token_usage` record."""

    input_tokens: int
    output_tokens: int
    cached_input_tokens: int

    def delta_since(self, previous: TokenSnapshot | None) -> TokenSnapshot:
        """Per-field growth since `previous`; a decrease counts as zero."""
        if previous is None:
            return self
        return TokenSnapshot(
            input_tokens=max(self.input_tokens - previous.input_tokens, 0),
            output_tokens=max(self.output_tokens - previous.output_tokens, 0),
            cached_input_tokens=max(self.cached_input_tokens - previous.cached_input_tokens, 0),
        )


@dataclass(frozen=True)
class FileScanResult:
    """Scanner output for one file."""

    entries: list[UsageEntry]
    offset: int
    model: str | None = None
    last_snapshot: TokenSnapshot | None = None


@dataclass
class ScanState:
    """Incremental scan bookkeeping, keyed by file path string.

    For whole-file JSON sources `file_offsets` holds the last seen file size.
    """

    file_offsets: dict[str, int] = field(default_factory=dict)
    codex_file_models: dict[str, str] = field(default_factory=dict)
    codex_file_totals: dict[str, TokenSnapshot] = field(default_factory=dict)
    cached_entries: list[UsageEntry] = field(default_factory=list)

    def forget(self, path_key: str) -> None:
        """Drop everything tracked for one file."""
        self.file_offsets.pop(path_key, None)
        self.codex_file_models.pop(path_key, None)
        self.codex_file_totals.pop(path_key, None)
