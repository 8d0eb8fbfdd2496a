"""HTML extraction per page kind (BeautifulSoup).

Every function here is pure: same body in, same fields out, no I/O. A page
that lacks the anchor its kind depends on raises `ExtractionError`.

Anchors:
- catalog list: listing `<dl>` elements outside the `div.right.hidden-xs` sidebar
- entry detail: the `作者：` paragraph or the `ol.container` section list
- sub list: `div.all ul`
- sub document: `#booktxthtml`
"""

from __future__ import annotations

import re
from typing import Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from adapters.site_urls import resolve_link
from core.domain.models import (
    CatalogListItem,
    EntryDetail,
    SubDocumentFields,
    SubListItem,
)
from core.domain.page_kind import PageKind
from core.errors import ExtractionError

Fields = Union[list[CatalogListItem], EntryDetail, list[SubListItem], SubDocumentFields]

_ENTRY_ID_RE = re.compile(r"/kanshu/(\d+)/")
_ONCLICK_RE = re.compile(r"location\.href\s*=\s*['\"](.*?)['\"]")
# ASCII or full-width parentheses, mixed pairs included.
_PARENTHETICAL_RE = re.compile(r"[(（].*?[)）]")

_AUTHOR_LABEL = "作者："
# Position of the genre in `ol.container`; index 0 is the site root.
GENRE_SECTION_INDEX = 1


def _soup(raw_body: str) -> BeautifulSoup:
    return BeautifulSoup(raw_body or "", "html.parser")


def _text(node: Tag | None) -> str:
    if node is None:
        return ""
    return node.get_text().strip()


def parse_entry_id(url: str | None) -> str | None:
    """Numeric entry id from a `/kanshu/<id>/` link, or None."""

    if not url:
        return None
    match = _ENTRY_ID_RE.search(url)
    return match.group(1) if match else None


def _in_sidebar(node: Tag) -> bool:
    for parent in node.parents:
        if parent.name != "div":
            continue
        classes = set(parent.get("class") or [])
        if {"right", "hidden-xs"} <= classes:
            return True
    return False


def extract_catalog_list(
    raw_body: str,
    *,
    base_url: str,
    max_items: int | None = None,
) -> list[CatalogListItem]:
    soup = _soup(raw_body)
    listings = [dl for dl in soup.find_all("dl") if not _in_sidebar(dl)]
    if not listings:
        raise ExtractionError(PageKind.CATALOG_LIST.value, "no listing <dl> found")

    items: list[CatalogListItem] = []
    for dl in listings:
        if max_items is not None and len(items) >= max_items:
            break

        link = dl.select_one("dt a")
        href = link.get("href") if link is not None else None
        if not href:
            # Not an entry (ad block or malformed markup).
            continue

        url = resolve_link(base_url, str(href))
        img = dl.select_one("a.cover img")
        cover = ""
        if img is not None:
            cover = str(img.get("data-src") or img.get("src") or "")

        items.append(
            CatalogListItem(
                source_url=url,
                identifier_hint=parse_entry_id(url),
                title=str(link.get("title") or "").strip() or _text(link),
                cover_image=cover.strip(),
                description=_text(dl.find("dd")),
            )
        )
    return items


def extract_entry_detail(raw_body: str) -> EntryDetail:
    soup = _soup(raw_body)

    author: str | None = None
    for p in soup.find_all("p"):
        label = p.find("b")
        if label is not None and _text(label) == _AUTHOR_LABEL:
            author = _text(p.find("a"))
            break

    sections = soup.select("ol.container")
    if author is None and not sections:
        raise ExtractionError(PageKind.ENTRY_DETAIL.value, "no author paragraph or section list")

    genres: tuple[str, ...] = ()
    section_items = soup.select("ol.container li")
    if len(section_items) > GENRE_SECTION_INDEX:
        genre = _text(section_items[GENRE_SECTION_INDEX])
        if genre:
            genres = (genre,)

    return EntryDetail(author=author or "", genres=genres)


def extract_sub_list(raw_body: str, *, base_url: str, cap: int | None) -> list[SubListItem]:
    """First `cap` chapter links (None = all); links without a target are dropped."""

    soup = _soup(raw_body)
    if soup.select_one("div.all ul") is None:
        raise ExtractionError(PageKind.SUB_LIST.value, "no chapter list container")
    if cap is not None and cap <= 0:
        return []

    items: list[SubListItem] = []
    for li in soup.select("div.all ul li")[:cap]:
        link = li.find("a")
        onclick = str(link.get("onclick") or "") if link is not None else ""
        match = _ONCLICK_RE.search(onclick)
        if not match or not match.group(1).strip():
            continue
        items.append(SubListItem(source_url=resolve_link(base_url, match.group(1))))
    return items


def clean_title(title: str) -> str:
    return _PARENTHETICAL_RE.sub("", title).strip()


def extract_sub_document(raw_body: str) -> SubDocumentFields:
    soup = _soup(raw_body)
    container = soup.select_one("#booktxthtml")
    if container is None:
        raise ExtractionError(PageKind.SUB_DOCUMENT.value, "no #booktxthtml content container")

    content = "\n".join(_text(p) for p in container.find_all("p"))

    title = "".join(h1.get_text() for h1 in soup.find_all("h1")).strip()
    if not title:
        title = _text(soup.title)

    return SubDocumentFields(title=clean_title(title), content=content)


def extract(
    raw_body: str,
    page_kind: PageKind,
    *,
    base_url: str = "",
    cap: int | None = None,
) -> Fields:
    """Dispatch on `page_kind`.

    `cap` is the catalog per-page maximum for `CATALOG_LIST` (None = all) and
    the chapter count for `SUB_LIST` (None = all).
    """

    if page_kind is PageKind.CATALOG_LIST:
        return extract_catalog_list(raw_body, base_url=base_url, max_items=cap)
    if page_kind is PageKind.ENTRY_DETAIL:
        return extract_entry_detail(raw_body)
    if page_kind is PageKind.SUB_LIST:
        return extract_sub_list(raw_body, base_url=base_url, cap=cap)
    if page_kind is PageKind.SUB_DOCUMENT:
        return extract_sub_document(raw_body)
    raise ValueError(f"unknown page kind: {page_kind!r}")
