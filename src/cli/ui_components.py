"""CLI UI components (Rich).

Tables and panels live here so commands only orchestrate.
"""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.services.catalog_pipeline import CrawlResult, EntryState


def build_entries_table(result: CrawlResult) -> Table:
    """One row per catalog entry with its enrichment outcome."""

    table = Table(title=f"Catalog page {result.page}")
    table.add_column("#", style="dim", no_wrap=True)
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Author", style="magenta")
    table.add_column("Chapters", style="green", no_wrap=True)
    table.add_column("Status", no_wrap=True)

    for report in result.reports:
        entry = report.entry
        skipped = EntryState.ENRICHMENT_SKIPPED in report.history
        status = Text("skipped", style="red") if skipped else Text("ok", style="green")
        if skipped and report.skip_reason is not None:
            status.append(f" ({report.skip_reason.value})", style="dim")
        table.add_row(
            str(report.index),
            entry.id or "-",
            entry.title,
            entry.author or "-",
            f"{report.chapters_ok}/{len(entry.chapters)}",
            status,
        )
    return table


def build_warnings_panel(warnings: list[str]) -> Panel:
    body = Text()
    for warning in warnings:
        body.append(f"- {warning}\n")
    return Panel(body, title=Text("Warnings", style="bold yellow"), border_style="yellow")
