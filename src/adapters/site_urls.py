"""URL patterns of the origin site.

One builder per fetch kind. Links found in pages are resolved against the
configured base URL, so relative and absolute hrefs behave the same.
"""

from __future__ import annotations

from urllib.parse import urljoin


def _base(base_url: str) -> str:
    return base_url.rstrip("/") + "/"


def catalog_page_url(base_url: str, page: int) -> str:
    return urljoin(_base(base_url), f"ben/all/{page}/")


def sub_list_url(base_url: str, entry_id: str) -> str:
    return urljoin(_base(base_url), f"xs/{entry_id}/1/")


def resolve_link(base_url: str, href: str) -> str:
    return urljoin(_base(base_url), href.strip())
