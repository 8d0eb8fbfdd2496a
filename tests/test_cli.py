from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler
from typer.testing import CliRunner

from cli import main as cli_main
from cli.logging_setup import configure_logging
from core.services.catalog_pipeline import crawl_catalog

from conftest import BASE_URL, FakeFetcher

runner = CliRunner()


@pytest.fixture
def fake_origin(monkeypatch, site):
    """Point the CLI at an in-memory site instead of the network."""

    monkeypatch.setenv("CATALOG_CRAWL_BASE_URL", BASE_URL)
    monkeypatch.setattr(cli_main, "configure_logging", lambda *args, **kwargs: None)
    fetchers: list[FakeFetcher] = []

    def install(**fetcher_kwargs):
        fetcher = FakeFetcher(site.pages, **fetcher_kwargs)
        fetchers.append(fetcher)

        async def crawl_with_fake(*, settings, request):
            return await crawl_catalog(settings=settings, request=request, fetcher=fetcher)

        monkeypatch.setattr(cli_main, "crawl_catalog", crawl_with_fake)
        return fetcher

    return install


def test_crawl_writes_results_payload(tmp_path, site, fake_origin):
    site.build(entries=3, chapters=3)
    fake_origin()
    out = tmp_path / "page1.json"

    result = runner.invoke(
        cli_main.app,
        ["crawl", "--page", "1", "--num-chapters", "2", "--output", str(out), "--no-summary"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert set(payload) == {"results"}
    assert len(payload["results"]) == 3
    assert all(len(entry["chapters"]) == 2 for entry in payload["results"])
    assert "source_url" not in out.read_text(encoding="utf-8")


def test_crawl_uses_default_chapter_count(tmp_path, site, fake_origin, monkeypatch):
    monkeypatch.setenv("CATALOG_CRAWL_DEFAULT_NUM_CHAPTERS", "1")
    site.build(entries=1, chapters=3)
    fake_origin()
    out = tmp_path / "out.json"

    result = runner.invoke(cli_main.app, ["crawl", "-o", str(out), "--no-summary"])

    assert result.exit_code == 0, result.output
    assert len(json.loads(out.read_text(encoding="utf-8"))["results"][0]["chapters"]) == 1


def test_catalog_failure_writes_error_payload_and_exits_1(tmp_path, site, fake_origin):
    site.build(entries=2, chapters=1)
    fake_origin(failures={site.catalog_url(1)})
    out = tmp_path / "err.json"

    result = runner.invoke(cli_main.app, ["crawl", "--output", str(out), "--no-summary"])

    assert result.exit_code == 1
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert list(payload) == ["error"]
    assert "results" not in payload


@pytest.mark.parametrize("args", [["crawl", "--page", "0"], ["crawl", "--num-chapters", "-1"]])
def test_invalid_request_parameters_are_rejected(args, fake_origin):
    fake_origin()
    result = runner.invoke(cli_main.app, args)
    assert result.exit_code == 2


def test_configure_logging_installs_rich_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("debug")
        assert root.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in root.handlers)
        assert logging.getLogger("httpx").level == logging.WARNING
        with pytest.raises(ValueError):
            configure_logging("chatty")
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        logging.getLogger("httpx").setLevel(logging.NOTSET)
