"""Per-tool usage log scanners."""

from . import claude, codex, opencode

__all__ = ["claude", "codex", "opencode"]
