"""Scan orchestration with per-file incremental offsets."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from pathlib import Path
import threading

from model_pricing import PricingTable, get_default_pricing

from .discovery import ScanConfig, discover_files
from .parsers import claude, codex, opencode
from .schemas import FileScanResult, ScanState, Tool, UsageEntry

LOGGER = logging.getLogger(__name__)

TOOL_ORDER: tuple[Tool, ...] = (Tool.CLAUDE, Tool.CODEX, Tool.OPENCODE)


class ScanCoordinator:
    """Owns the incremental scan state and runs full or incremental scans.

    Every scan cycle holds one lock for its whole duration, so full and
    incremental scans on the same coordinator never interleave.
    """

    def __init__(self, config: ScanConfig | None = None, pricing: PricingTable | None = None) -> None:
        self._config = config or ScanConfig()
        self._pricing = pricing
        self._state = ScanState()
        self._lock = threading.Lock()

    @property
    def pricing(self) -> PricingTable:
        if self._pricing is None:
            self._pricing = get_default_pricing()
        return self._pricing

    @property
    def cached_entries(self) -> list[UsageEntry]:
        with self._lock:
            return list(self._state.cached_entries)

    def reset(self) -> None:
        """Forget all offsets, model context, and cached entries."""
        with self._lock:
            self._state = ScanState()

    def scan_tool(self, tool: Tool) -> list[UsageEntry]:
        """Full scan of one tool's logs; the coordinator state is left untouched."""
        return scan_tool_logs(tool, ScanState(), self._config, self.pricing)

    def scan_all(self) -> list[UsageEntry]:
        """Full scan of every tool.

        Tracked state is replaced: offsets are re-baselined to where this scan
        stopped and the cache holds exactly the returned entries.
        """
        with self._lock:
            state = ScanState()
            entries = self._run_cycle(state)
            state.cached_entries = list(entries)
            self._state = state
        LOGGER.info("Full scan found %d usage entries.", len(entries))
        return entries

    def scan_new_entries(self) -> list[UsageEntry]:
        """Scan only data appended since the last scan and return just those entries."""
        with self._lock:
            new_entries = self._run_cycle(self._state)
            self._state.cached_entries.extend(new_entries)
        LOGGER.info("Incremental scan found %d new usage entries.", len(new_entries))
        return new_entries

    def scan_incremental(self) -> list[UsageEntry]:
        """Scan appended data and return the complete cache including it."""
        with self._lock:
            new_entries = self._run_cycle(self._state)
            self._state.cached_entries.extend(new_entries)
            cached = list(self._state.cached_entries)
        LOGGER.info("Incremental scan found %d new usage entries (%d cached).", len(new_entries), len(cached))
        return cached

    def _run_cycle(self, state: ScanState) -> list[UsageEntry]:
        """Scan all tools in parallel; results are concatenated in `TOOL_ORDER`."""
        pricing = self.pricing
        with ThreadPoolExecutor(max_workers=len(TOOL_ORDER), thread_name_prefix="usage-scan") as executor:
            futures = [
                executor.submit(scan_tool_logs, tool, state, self._config, pricing) for tool in TOOL_ORDER
            ]
            entries: list[UsageEntry] = []
            for tool, future in zip(TOOL_ORDER, futures):
                try:
                    entries.extend(future.result())
                except Exception:
                    LOGGER.exception("Scanning %s logs failed.", tool.value)
        return entries


def scan_tool_logs(tool: Tool, state: ScanState, config: ScanConfig, pricing: PricingTable) -> list[UsageEntry]:
    """Scan one tool's files, reading only what `state` has not seen yet."""
    entries: list[UsageEntry] = []
    for path in discover_files(config.patterns_for(tool), config.home):
        try:
            entries.extend(_scan_path(tool, path, state, pricing))
        except OSError as exc:
            LOGGER.warning("Failed to read %s: %s", path, exc)
        except Exception:
            # The file's offset is left as it was, so it is retried next cycle.
            LOGGER.exception("Failed to scan %s; skipping it.", path)
    return entries


def _scan_path(tool: Tool, path: Path, state: ScanState, pricing: PricingTable) -> list[UsageEntry]:
    key = str(path)
    file_size = path.stat().st_size

    if tool is Tool.OPENCODE:
        previous_size = state.file_offsets.get(key)
        if previous_size is not None and previous_size == file_size:
            return []
        result = opencode.scan_file(path, pricing)
        state.file_offsets[key] = result.offset
        return result.entries

    start_offset = _start_offset(state, key, file_size)
    if start_offset is None:
        return []

    if tool is Tool.CLAUDE:
        result = claude.scan_file(path, start_offset, pricing)
    else:
        result = codex.scan_file(
            path,
            start_offset,
            pricing,
            current_model=state.codex_file_models.get(key),
            previous_total=state.codex_file_totals.get(key),
        )
    _record_result(state, key, result)
    return result.entries


def _start_offset(state: ScanState, key: str, file_size: int) -> int | None:
    """Offset to resume from, or None when the file has not changed."""
    previous_offset = state.file_offsets.get(key, 0)
    if previous_offset == 0 or file_size > previous_offset:
        return previous_offset
    if file_size == previous_offset:
        return None
    LOGGER.info("File %s shrank from %d to %d bytes; rescanning from the start.", key, previous_offset, file_size)
    state.forget(key)
    return 0


def _record_result(state: ScanState, key: str, result: FileScanResult) -> None:
    state.file_offsets[key] = result.offset
    if result.model is not None:
        state.codex_file_models[key] = result.model
    if result.last_snapshot is not None:
        state.codex_file_totals[key] = result.last_snapshot
