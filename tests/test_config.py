from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import AppSettings, get_user_config_dir


def _clear_env(monkeypatch, keys):
    for key in keys:
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch):
    _clear_env(
        monkeypatch,
        ["CATALOG_CRAWL_ENTRY_CONCURRENCY", "CATALOG_CRAWL_CHAPTER_CONCURRENCY", "CATALOG_CRAWL_BASE_URL"],
    )
    cfg = AppSettings(_env_file=None)
    assert cfg.base_url == "https://www.writerworking.net"
    assert cfg.entry_concurrency == 10
    assert cfg.chapter_concurrency == 10
    assert cfg.default_num_chapters == 5
    assert cfg.catalog_max_entries is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CATALOG_CRAWL_ENTRY_CONCURRENCY", "4")
    monkeypatch.setenv("catalog_crawl_chapter_concurrency", "3")
    monkeypatch.setenv("CATALOG_CRAWL_CATALOG_MAX_ENTRIES", "20")
    cfg = AppSettings(_env_file=None)
    assert (cfg.entry_concurrency, cfg.chapter_concurrency, cfg.catalog_max_entries) == (4, 3, 20)


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("CATALOG_CRAWL_ENTRY_CONCURRENCY", "0"),
        ("CATALOG_CRAWL_CHAPTER_CONCURRENCY", "-2"),
        ("CATALOG_CRAWL_HTTP_TIMEOUT_SECONDS", "0"),
        ("CATALOG_CRAWL_CATALOG_MAX_ENTRIES", "0"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None)


def test_user_config_dir_honours_xdg(monkeypatch, tmp_path):
    monkeypatch.setattr("sys.platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert get_user_config_dir() == tmp_path / "catalog-crawl"
