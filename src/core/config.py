"""Core configuration.

Where it lives:
- Centralizes environment variables (pydantic-settings) away from the CLI.
- Adapters (HTTP client) and services (pipeline limits) read the same object.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "catalog-crawl"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "catalog-crawl"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "catalog-crawl"
    return Path.home() / ".config" / "catalog-crawl"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Application-wide settings.

    - Typed and validated at the edge (env vars / `.env`).
    - A single configuration contract for the CLI, the HTTP adapter and the
      crawl pipeline.
    """

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_CRAWL_",
        extra="ignore",
        case_sensitive=False,
        # Project `.env` first (dev), then the per-user config file.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str = Field(
        default="https://www.writerworking.net",
        min_length=8,
        description="Origin site the catalog is crawled from.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Per-request timeout (seconds).",
    )
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        min_length=1,
        description="User-Agent sent with every request.",
    )
    keepalive_connections: int = Field(
        default=20,
        ge=0,
        le=1000,
        description="Idle keep-alive connections kept in the shared pool.",
    )
    max_connections: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Upper bound of open connections in the shared pool.",
    )

    entry_concurrency: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Catalog entries enriched concurrently (outer tier).",
    )
    chapter_concurrency: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Sub-documents fetched concurrently per entry (inner tier).",
    )
    default_num_chapters: int = Field(
        default=5,
        ge=0,
        description="Sub-documents fetched per entry when the caller does not say.",
    )
    catalog_max_entries: int | None = Field(
        default=None,
        ge=1,
        description="Maximum catalog entries taken from one listing page (None = all).",
    )

    log_level: str = Field(
        default="WARNING",
        min_length=1,
        description="Logging level for the CLI (DEBUG, INFO, WARNING, ...).",
    )
