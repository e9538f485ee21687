"""Log file discovery under the user's home directory."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from pathlib import Path

from .schemas import Tool

LOGGER = logging.getLogger(__name__)

DEFAULT_PATTERNS: dict[Tool, tuple[str, ...]] = {
    Tool.CLAUDE: (
        ".config/claude/projects/**/*.jsonl",
        ".claude/projects/**/*.jsonl",
    ),
    Tool.CODEX: (".codex/sessions/**/*.jsonl",),
    Tool.OPENCODE: (".local/share/opencode/storage/message/**/*.json",),
}


@dataclass(frozen=True)
class ScanConfig:
    """Where each tool's logs are looked up.

    Attributes:
        home: Directory the patterns are relative to. `None` uses the current
            user's home directory.
        claude_patterns: Glob patterns for Claude JSONL transcripts.
        codex_patterns: Glob patterns for Codex session JSONL files.
        opencode_patterns: Glob patterns for OpenCode per-message JSON files.
    """

    home: Path | None = None
    claude_patterns: tuple[str, ...] = DEFAULT_PATTERNS[Tool.CLAUDE]
    codex_patterns: tuple[str, ...] = DEFAULT_PATTERNS[Tool.CODEX]
    opencode_patterns: tuple[str, ...] = DEFAULT_PATTERNS[Tool.OPENCODE]

    def patterns_for(self, tool: Tool) -> tuple[str, ...]:
        if tool is Tool.CLAUDE:
            return self.claude_patterns
        if tool is Tool.CODEX:
            return self.codex_patterns
        return self.opencode_patterns


def resolve_home(home: Path | None = None) -> Path | None:
    """Return `home` or the current user's home directory, if resolvable."""
    if home is not None:
        return home
    try:
        return Path.home()
    except RuntimeError:
        LOGGER.warning("Could not determine the home directory; no logs will be scanned.")
        return None


def discover_files(patterns: Iterable[str], home: Path | None = None) -> list[Path]:
    """Expand home-relative glob patterns into a deduplicated file list.

    Order follows the patterns; matches of one pattern are sorted by path.
    """
    base = resolve_home(home)
    if base is None:
        return []

    discovered: list[Path] = []
    seen: set[str] = set()
    for pattern in patterns:
        try:
            matches = sorted(base.glob(pattern))
        except (ValueError, NotImplementedError, OSError) as exc:
            LOGGER.debug("Invalid glob pattern %r: %s", pattern, exc)
            continue

        for path in matches:
            try:
                if not path.is_file():
                    continue
            except OSError as exc:
                LOGGER.debug("Glob error for pattern %r at %s: %s", pattern, path, exc)
                continue
            key = str(path)
            if key in seen:
                continue
            seen.add(key)
            discovered.append(path)

    return discovered
