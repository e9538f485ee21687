"""Token usage and cost scanning for coding-assistant logs."""

from .api import (
    get_default_coordinator,
    scan_all_usage,
    scan_all_usage_incremental,
    scan_claude_usage,
    scan_codex_usage,
    scan_opencode_usage,
    serialize_entries,
)
from .discovery import ScanConfig, discover_files
from .schemas import ScanState, Tool, UsageEntry
from .service import ScanCoordinator
from .timestamps import normalize_timestamp

__all__ = [
    "ScanConfig",
    "ScanCoordinator",
    "ScanState",
    "Tool",
    "UsageEntry",
    "discover_files",
    "get_default_coordinator",
    "normalize_timestamp",
    "scan_all_usage",
    "scan_all_usage_incremental",
    "scan_claude_usage",
    "scan_codex_usage",
    "scan_opencode_usage",
    "serialize_entries",
]
