"""CLI entrypoints for coding-agent usage scanning."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from model_pricing import PricingTable

from .api import serialize_entries
from .discovery import ScanConfig
from .render import render_usage_summary
from .schemas import Tool, UsageEntry
from .service import ScanCoordinator
from .summary import summarize_entries

LOGGER = logging.getLogger(__name__)
TOOL_CHOICES = ("all", "claude", "codex", "opencode")

TYPER_APP = typer.Typer(help="Token usage and cost scanning for Claude, Codex, and OpenCode logs.")


@TYPER_APP.callback()
def main() -> None:
    """Root CLI callback."""


@TYPER_APP.command("scan")
def scan_command(
    tool: str = typer.Option("all", "--tool", "-t", help="Which tool's logs to scan: all, claude, codex, opencode."),
    home: Path | None = typer.Option(
        None,
        "--home",
        help="Directory to look for tool logs under. Defaults to the current user's home.",
    ),
    offline: bool = typer.Option(False, "--offline", help="Skip the price feed; only costs reported in logs are used."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable info-level logging."),
) -> None:
    """Print usage entries as a JSON array."""
    _configure_logging(verbose)
    entries = _collect_entries(tool=tool, home=home, offline=offline)
    typer.echo(serialize_entries(entries).decode("utf-8"))


@TYPER_APP.command("summary")
def summary_command(
    tool: str = typer.Option("all", "--tool", "-t", help="Which tool's logs to scan: all, claude, codex, opencode."),
    home: Path | None = typer.Option(
        None,
        "--home",
        help="Directory to look for tool logs under. Defaults to the current user's home.",
    ),
    offline: bool = typer.Option(False, "--offline", help="Skip the price feed; only costs reported in logs are used."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable info-level logging."),
) -> None:
    """Aggregate usage per tool and model and print summary tables."""
    _configure_logging(verbose)
    entries = _collect_entries(tool=tool, home=home, offline=offline)
    render_usage_summary(summarize_entries(entries), Console())


def _collect_entries(tool: str, home: Path | None, offline: bool) -> list[UsageEntry]:
    selected = _parse_tool(tool)
    if home is not None and not home.is_dir():
        raise typer.BadParameter(f"Home directory not found: {home}")

    coordinator = ScanCoordinator(
        config=ScanConfig(home=home),
        pricing=PricingTable() if offline else None,
    )
    LOGGER.info("Start scanning usage logs.")
    entries = coordinator.scan_all() if selected is None else coordinator.scan_tool(selected)
    LOGGER.info("Finished scanning usage logs: %d entries.", len(entries))
    return entries


def _parse_tool(tool: str) -> Tool | None:
    """Map the `--tool` option to a Tool; None means all tools."""
    normalized = tool.strip().lower()
    if normalized not in TOOL_CHOICES:
        raise typer.BadParameter(f"Invalid --tool value: {tool}. Expected one of: {', '.join(TOOL_CHOICES)}.")
    if normalized == "all":
        return None
    return {"claude": Tool.CLAUDE, "codex": Tool.CODEX, "opencode": Tool.OPENCODE}[normalized]


def _configure_logging(verbose: bool) -> None:
    """Initialize default logging for CLI usage."""
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
    )


def module_cli_entry_point() -> None:
    TYPER_APP()
