"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, get_user_env_file

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings, url: str) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return response.is_success, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Show effective settings and check connectivity to the origin."""

    settings = AppSettings()

    table = Table(title="catalog-crawl Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "OPTIONAL", str(env_file))
    table.add_row("Base URL", "OK", settings.base_url)
    table.add_row(
        "Fan-out",
        "OK",
        f"{settings.entry_concurrency} entries x {settings.chapter_concurrency} chapters "
        f"= {settings.entry_concurrency * settings.chapter_concurrency} max in flight",
    )
    table.add_row(
        "HTTP pool",
        "OK",
        f"timeout {settings.http_timeout_seconds}s, "
        f"{settings.max_connections} connections ({settings.keepalive_connections} keep-alive)",
    )

    ok_http, detail_http = asyncio.run(_check_http(settings, settings.base_url))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] `crawl` needs the catalog page to load; "
            "check CATALOG_CRAWL_BASE_URL and network access."
        )
        raise typer.Exit(code=1)
