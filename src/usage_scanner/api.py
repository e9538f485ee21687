"""Boundary operations for a host application.

Each function is safe to call repeatedly and never raises: unexpected
failures are logged and an empty list is returned.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import logging
import threading

import orjson

from .schemas import Tool, UsageEntry
from .service import ScanCoordinator

LOGGER = logging.getLogger(__name__)

_DEFAULT_COORDINATOR: ScanCoordinator | None = None
_DEFAULT_COORDINATOR_LOCK = threading.Lock()


def get_default_coordinator() -> ScanCoordinator:
    """Return the process-wide coordinator used when none is passed in."""
    global _DEFAULT_COORDINATOR
    with _DEFAULT_COORDINATOR_LOCK:
        if _DEFAULT_COORDINATOR is None:
            _DEFAULT_COORDINATOR = ScanCoordinator()
        return _DEFAULT_COORDINATOR


def scan_claude_usage(coordinator: ScanCoordinator | None = None) -> list[UsageEntry]:
    return _guarded("scan_claude_usage", lambda c: c.scan_tool(Tool.CLAUDE), coordinator)


def scan_codex_usage(coordinator: ScanCoordinator | None = None) -> list[UsageEntry]:
    return _guarded("scan_codex_usage", lambda c: c.scan_tool(Tool.CODEX), coordinator)


def scan_opencode_usage(coordinator: ScanCoordinator | None = None) -> list[UsageEntry]:
    return _guarded("scan_opencode_usage", lambda c: c.scan_tool(Tool.OPENCODE), coordinator)


def scan_all_usage(coordinator: ScanCoordinator | None = None) -> list[UsageEntry]:
    """Full scan across all tools; resets the coordinator's incremental state."""
    return _guarded("scan_all_usage", lambda c: c.scan_all(), coordinator)


def scan_all_usage_incremental(coordinator: ScanCoordinator | None = None) -> list[UsageEntry]:
    """Every entry seen so far, including those appended since the previous call."""
    return _guarded("scan_all_usage_incremental", lambda c: c.scan_incremental(), coordinator)


def serialize_entries(entries: Iterable[UsageEntry]) -> bytes:
    """Encode entries as a JSON array of plain objects."""
    return orjson.dumps([entry.to_dict() for entry in entries])


def _guarded(
    operation: str,
    action: Callable[[ScanCoordinator], list[UsageEntry]],
    coordinator: ScanCoordinator | None,
) -> list[UsageEntry]:
    try:
        return action(coordinator or get_default_coordinator())
    except Exception:
        LOGGER.exception("%s failed; returning no usage.", operation)
        return []
