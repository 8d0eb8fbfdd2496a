from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest

from core.config import AppSettings
from core.errors import FetchError

BASE_URL = "https://books.example"


class FakeFetcher:
    """In-memory `PageFetcher` that records calls and concurrent in-flight fetches."""

    def __init__(
        self,
        pages: dict[str, str],
        *,
        failures: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.pages = pages
        self.failures = set(failures or ())
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if url in self.failures:
                raise FetchError(url, "HTTP 500", status_code=500)
            if url not in self.pages:
                raise FetchError(url, "HTTP 404", status_code=404)
            return self.pages[url]
        finally:
            self.in_flight -= 1


def catalog_html(entries: list[dict[str, str]], *, sidebar: bool = True) -> str:
    blocks = []
    for e in entries:
        blocks.append(
            "<dl>"
            f'<dt><a href="{e["href"]}" title="{e["title"]}">{e["title"]}</a></dt>'
            f'<a class="cover" href="{e["href"]}"><img data-src="{e["cover"]}" src="/lazy.gif"></a>'
            f"<dd>\n  {e['description']}  \n</dd>"
            "</dl>"
        )
    side = ""
    if sidebar:
        side = (
            '<div class="right hidden-xs"><dl>'
            '<dt><a href="/kanshu/999/" title="Sidebar pick">Sidebar pick</a></dt>'
            "</dl></div>"
        )
    return f"<html><body><div class='left'>{''.join(blocks)}</div>{side}</body></html>"


def detail_html(author: str, genre: str) -> str:
    return (
        "<html><body>"
        '<ol class="container"><li><a href="/">首页</a></li>'
        f'<li><a href="/ben/1/">{genre}</a></li><li>current</li></ol>'
        f'<p><b>作者：</b><a href="/author/1/">{author}</a></p>'
        "<p><b>状态：</b>连载</p>"
        "</body></html>"
    )


def sub_list_html(paths: list[str]) -> str:
    items = "".join(
        f'<li><a href="javascript:;" onclick="location.href=\'{path}\'">第{i + 1}章</a></li>'
        for i, path in enumerate(paths)
    )
    return f'<html><body><div class="all"><ul>{items}</ul></div></body></html>'


def chapter_html(title: str, paragraphs: list[str]) -> str:
    body = "".join(f"<p> {p} </p>" for p in paragraphs)
    return (
        f"<html><head><title>{title}_书站</title></head><body>"
        f"<h1>{title}（求收藏）</h1>"
        f'<div id="booktxthtml">{body}</div>'
        "</body></html>"
    )


@dataclass
class FakeSite:
    """A consistent origin site: catalog page 1 with numbered entries and chapters."""

    base_url: str = BASE_URL
    pages: dict[str, str] = field(default_factory=dict)
    entry_ids: list[str | None] = field(default_factory=list)

    def catalog_url(self, page: int = 1) -> str:
        return f"{self.base_url}/ben/all/{page}/"

    def detail_url(self, entry_id: str) -> str:
        return f"{self.base_url}/kanshu/{entry_id}/"

    def sub_list_url(self, entry_id: str) -> str:
        return f"{self.base_url}/xs/{entry_id}/1/"

    def chapter_url(self, entry_id: str, number: int) -> str:
        return f"{self.base_url}/xs/{entry_id}/{number}.html"

    def build(self, *, entries: int = 3, chapters: int = 4, without_id: set[int] | None = None) -> "FakeSite":
        without_id = without_id or set()
        listing = []
        for index in range(entries):
            if index in without_id:
                listing.append(
                    {
                        "href": f"/special/{index}.html",
                        "title": f"Special {index}",
                        "cover": f"/covers/special-{index}.jpg",
                        "description": f"special description {index}",
                    }
                )
                self.entry_ids.append(None)
                continue

            entry_id = str(101 + index)
            self.entry_ids.append(entry_id)
            listing.append(
                {
                    "href": f"/kanshu/{entry_id}/",
                    "title": f"Book {entry_id}",
                    "cover": f"/covers/{entry_id}.jpg",
                    "description": f"description of {entry_id}",
                }
            )
            self.pages[self.detail_url(entry_id)] = detail_html(f"Author {entry_id}", f"Genre {entry_id}")
            paths = [f"/xs/{entry_id}/{n}.html" for n in range(1, chapters + 1)]
            self.pages[self.sub_list_url(entry_id)] = sub_list_html(paths)
            for n in range(1, chapters + 1):
                self.pages[self.chapter_url(entry_id, n)] = chapter_html(
                    f"Chapter {n} of {entry_id}",
                    [f"line one of {entry_id}/{n}", f"line two of {entry_id}/{n}"],
                )

        self.pages[self.catalog_url(1)] = catalog_html(listing)
        return self


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        base_url=BASE_URL,
        entry_concurrency=3,
        chapter_concurrency=2,
    )


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def fetcher_factory():
    def factory(pages: dict[str, str], **kwargs) -> FakeFetcher:
        return FakeFetcher(pages, **kwargs)

    return factory
