"""Rich rendering helpers for usage summaries."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from .summary import UsageStats, UsageSummary

TABLE_ROW_STYLES = ["white", "yellow"]


def render_usage_summary(summary: UsageSummary, console: Console) -> None:
    """Render the per-model usage table followed by daily costs."""
    if summary.total_entries == 0:
        console.print("No token usage entries found.")
        return

    table = Table(title="Token Usage by Tool and Model", show_footer=True, footer_style="bold", title_justify="left")
    table.add_column("Tool", footer="Grand Total", justify="left")
    table.add_column("Model", justify="left")
    table.add_column("Requests", justify="right")
    table.add_column("Input Tokens", justify="right")
    table.add_column("Output Tokens", justify="right")
    table.add_column("Cache Read Tokens", justify="right")
    table.add_column("Cache Write Tokens", justify="right")
    table.add_column("Total Tokens", justify="right")
    table.add_column("Cost ($)", justify="right")

    totals = UsageStats()
    last_tool: str | None = None
    style_index = 0
    for (tool, model), stats in sorted(summary.usage_by_tool_model.items()):
        totals += stats
        if last_tool is not None and tool != last_tool:
            style_index = (style_index + 1) % len(TABLE_ROW_STYLES)
        last_tool = tool
        table.add_row(
            tool,
            model,
            str(stats.count),
            f"{stats.input_tokens:,}",
            f"{stats.output_tokens:,}",
            f"{stats.cache_read_tokens:,}",
            f"{stats.cache_write_tokens:,}",
            f"{stats.total_tokens:,}",
            f"{stats.cost:,.6f}",
            style=TABLE_ROW_STYLES[style_index],
        )

    table.columns[2].footer = str(totals.count)
    table.columns[3].footer = f"{totals.input_tokens:,}"
    table.columns[4].footer = f"{totals.output_tokens:,}"
    table.columns[5].footer = f"{totals.cache_read_tokens:,}"
    table.columns[6].footer = f"{totals.cache_write_tokens:,}"
    table.columns[7].footer = f"{totals.total_tokens:,}"
    table.columns[8].footer = f"{totals.cost:,.6f}"
    console.print(table)
    console.print("\n")

    cost_table = Table(title="Daily Costs", show_footer=True, title_justify="left")
    cost_table.add_column("Date", justify="left")
    cost_table.add_column("Cost ($)", justify="right", footer_style="bold")
    total_cost = 0.0
    for index, day in enumerate(sorted(summary.daily_costs)):
        day_cost = summary.daily_costs[day]
        total_cost += day_cost
        cost_table.add_row(day, f"{day_cost:,.6f}", style=TABLE_ROW_STYLES[index % len(TABLE_ROW_STYLES)])
    cost_table.columns[1].footer = f"{total_cost:,.6f}"
    console.print(cost_table)
