"""Error taxonomy of the crawl.

- `FetchError`: network failure, timeout or non-2xx status for one URL.
- `ExtractionError`: a page is missing the structure its kind requires.
- `BatchError`: the catalog page itself could not be obtained; ends the request.

Per-item errors never travel past the bounded runner (they become
`Outcome` values); only `BatchError` reaches the request boundary.
"""

from __future__ import annotations


class CrawlError(Exception):
    """Base class for every error raised by the crawl."""


class FetchError(CrawlError):
    def __init__(self, url: str, reason: str, *, status_code: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{url}: {reason}")


class ExtractionError(CrawlError):
    def __init__(self, page_kind: str, reason: str) -> None:
        self.page_kind = page_kind
        self.reason = reason
        super().__init__(f"{page_kind}: {reason}")


class BatchError(CrawlError):
    """The catalog page failed, so there is nothing to enrich."""

    def __init__(self, page: int, reason: str) -> None:
        self.page = page
        self.reason = reason
        super().__init__(f"catalog page {page} unavailable: {reason}")
