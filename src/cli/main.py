"""CLI entry point (Typer).

Commands:
- `crawl`: one crawl request; prints `{"results": [...]}` (or writes it to
  `--output`). If the catalog page itself fails, prints `{"error": ...}` and
  exits with code 1.
- `doctor`: configuration and connectivity checks.

Stdout only ever carries the JSON payload; tables and logs go to stderr.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from adapters.json_exporter import export_payload_json, render_payload_json
from cli import doctor
from cli.logging_setup import configure_logging
from cli.ui_components import build_entries_table, build_warnings_panel
from core.config import AppSettings
from core.errors import BatchError
from core.services.catalog_pipeline import CrawlRequest, build_error_payload, crawl_catalog

app = typer.Typer(
    no_args_is_help=True,
    help="Crawl a paginated catalog and its chapters with bounded concurrency.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console(stderr=True)


def _emit(payload: dict[str, Any], output: Path | None) -> None:
    if output is None:
        typer.echo(render_payload_json(payload), nl=False)
        return
    path = export_payload_json(payload=payload, output_path=output)
    _console.print(f"[dim]Wrote {path}[/dim]")


@app.command()
def crawl(
    page: int = typer.Option(1, "--page", "-p", min=1, help="Catalog page number (1-based)."),
    num_chapters: Optional[int] = typer.Option(
        None,
        "--num-chapters",
        "-n",
        min=0,
        help="Chapters fetched per entry (default: CATALOG_CRAWL_DEFAULT_NUM_CHAPTERS or 5).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the JSON payload to this file instead of stdout.",
    ),
    summary: bool = typer.Option(True, "--summary/--no-summary", help="Print a summary table on stderr."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override CATALOG_CRAWL_LOG_LEVEL."),
) -> None:
    """Crawl one catalog page and its entries' chapters."""

    settings = AppSettings()
    configure_logging(log_level or settings.log_level, console=_console)

    request = CrawlRequest(
        page=page,
        num_chapters=settings.default_num_chapters if num_chapters is None else num_chapters,
    )

    try:
        result = asyncio.run(crawl_catalog(settings=settings, request=request))
    except BatchError as exc:
        _emit(build_error_payload(exc), output)
        _console.print(f"[red]Crawl failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    _emit(result.to_payload(), output)

    if summary:
        _console.print(build_entries_table(result))
        if result.warnings:
            _console.print(build_warnings_panel(result.warnings))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
