"""Catalog crawl orchestration.

One request crawls one catalog page:

1. fetch + extract the listing page (a failure here is a `BatchError`);
2. outer tier: per entry, the detail page and the chapter list are fetched
   concurrently;
3. inner tier: per entry, every listed chapter is fetched and extracted;
4. detail and chapter results are merged into a new `CatalogEntry` in a single
   assembly step.

Everything below the catalog page degrades per item: a failed detail leaves
`author`/`genres` empty, a failed chapter list leaves `chapters` empty, a
failed chapter stays in its slot as `None`. The CLI (or any other entry point)
only deals with `CrawlResult` and `BatchError`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from adapters.extractors import (
    extract_catalog_list,
    extract_entry_detail,
    extract_sub_document,
    extract_sub_list,
)
from adapters.http_client import HttpPageFetcher
from adapters.site_urls import catalog_page_url, sub_list_url
from core.config import AppSettings
from core.domain.models import (
    CatalogEntry,
    EntryDetail,
    SubDocument,
    SubDocumentFields,
    SubListItem,
)
from core.domain.outcome import ErrorKind, Outcome
from core.errors import BatchError, ExtractionError, FetchError
from core.interfaces.fetcher import PageFetcher
from core.services.bounded import FanOutScheduler, TierStats, capture

logger = logging.getLogger(__name__)


class EntryState(str, Enum):
    SKELETON = "skeleton"
    ENRICHING = "enriching"
    ENRICHED = "enriched"
    ENRICHMENT_SKIPPED = "enrichment_skipped"
    EMITTED = "emitted"


@dataclass
class CrawlRequest:
    """Resolved inputs of one crawl request."""

    page: int = 1
    num_chapters: int = 5

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1 (got {self.page})")
        if self.num_chapters < 0:
            raise ValueError(f"num_chapters must be >= 0 (got {self.num_chapters})")


@dataclass
class EntryReport:
    """What happened to one catalog entry during the crawl."""

    index: int
    entry: CatalogEntry
    history: list[EntryState] = field(default_factory=lambda: [EntryState.SKELETON])
    skip_reason: ErrorKind | None = None
    detail: Outcome[EntryDetail] | None = None
    sub_list: Outcome[list[SubListItem]] | None = None
    chapters: list[Outcome[SubDocumentFields]] = field(default_factory=list)

    @property
    def state(self) -> EntryState:
        return self.history[-1]

    @property
    def enriched(self) -> bool:
        return EntryState.ENRICHED in self.history

    @property
    def chapters_ok(self) -> int:
        return sum(1 for outcome in self.chapters if outcome.ok)

    def advance(self, state: EntryState) -> None:
        self.history.append(state)


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    warning: Callable[[str], None] | None = None
    entry_done: Callable[[int, EntryReport], None] | None = None


@dataclass
class CrawlResult:
    """Output of a crawl invocation."""

    page: int
    entries: list[CatalogEntry]
    reports: list[EntryReport]
    warnings: list[str] = field(default_factory=list)
    outer_stats: TierStats | None = None
    inner_stats: TierStats | None = None

    def to_payload(self) -> dict[str, Any]:
        """Response body: `{"results": [...]}` without any locator field."""

        return {"results": [entry.model_dump(mode="json") for entry in self.entries]}


def build_error_payload(exc: BaseException) -> dict[str, str]:
    return {"error": str(exc)}


def _assemble(
    entry: CatalogEntry,
    detail: Outcome[EntryDetail],
    sub_list: Outcome[list[SubListItem]],
    chapters: list[Outcome[SubDocumentFields]],
) -> CatalogEntry:
    update: dict[str, Any] = {}
    if detail.ok and detail.value is not None:
        update["author"] = detail.value.author
        update["genres"] = list(detail.value.genres)
    if sub_list.ok and sub_list.value is not None:
        update["chapters"] = [
            SubDocument.from_fields(item, outcome.value)
            if outcome.ok and outcome.value is not None
            else None
            for item, outcome in zip(sub_list.value, chapters)
        ]
    return entry.model_copy(update=update)


class _CatalogCrawl:
    """State of one request; never shared between requests."""

    def __init__(
        self,
        *,
        settings: AppSettings,
        request: CrawlRequest,
        fetcher: PageFetcher,
        hooks: PipelineHooks,
    ) -> None:
        self._settings = settings
        self._request = request
        self._fetcher = fetcher
        self._hooks = hooks
        self._scheduler = FanOutScheduler(
            outer_limit=settings.entry_concurrency,
            inner_limit=settings.chapter_concurrency,
        )
        self.warnings: list[str] = []

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        if self._hooks.warning:
            self._hooks.warning(message)

    async def _load_catalog(self) -> list[CatalogEntry]:
        page = self._request.page
        url = catalog_page_url(self._settings.base_url, page)
        try:
            raw = await self._fetcher.fetch(url)
            listing = extract_catalog_list(
                raw,
                base_url=self._settings.base_url,
                max_items=self._settings.catalog_max_entries,
            )
        except (FetchError, ExtractionError) as exc:
            raise BatchError(page, str(exc)) from exc

        logger.info("catalog page %d: %d entries", page, len(listing))
        return [CatalogEntry.from_listing(item) for item in listing]

    async def _load_detail(self, entry: CatalogEntry) -> EntryDetail:
        raw = await self._fetcher.fetch(entry.source_url)
        return extract_entry_detail(raw)

    async def _load_sub_list(self, entry_id: str) -> list[SubListItem]:
        url = sub_list_url(self._settings.base_url, entry_id)
        raw = await self._fetcher.fetch(url)
        return extract_sub_list(raw, base_url=self._settings.base_url, cap=self._request.num_chapters)

    async def _load_chapter(self, item: SubListItem) -> SubDocumentFields:
        raw = await self._fetcher.fetch(item.source_url)
        return extract_sub_document(raw)

    async def _load_chapters(
        self, entry_id: str
    ) -> tuple[Outcome[list[SubListItem]], list[Outcome[SubDocumentFields]]]:
        if self._request.num_chapters == 0:
            return Outcome.success([]), []

        sub_list = await capture(self._load_sub_list, entry_id)
        if not sub_list.ok or not sub_list.value:
            return sub_list, []
        return sub_list, await self._scheduler.inner(sub_list.value, self._load_chapter)

    async def _enrich(self, report: EntryReport) -> EntryReport:
        entry = report.entry
        if not entry.id:
            report.skip_reason = ErrorKind.MISSING_IDENTIFIER
            report.advance(EntryState.ENRICHMENT_SKIPPED)
            self._warn(f"entry {report.index} ({entry.title!r}) has no identifier; not enriched")
            return report

        report.advance(EntryState.ENRICHING)
        detail, (sub_list, chapters) = await asyncio.gather(
            capture(self._load_detail, entry),
            self._load_chapters(entry.id),
        )
        report.detail = detail
        report.sub_list = sub_list
        report.chapters = chapters
        report.entry = _assemble(entry, detail, sub_list, chapters)

        if not detail.ok and not sub_list.ok:
            report.skip_reason = detail.error
            report.advance(EntryState.ENRICHMENT_SKIPPED)
            self._warn(f"entry {entry.id}: detail and chapter list both failed")
        else:
            report.advance(EntryState.ENRICHED)
            if not detail.ok:
                self._warn(f"entry {entry.id}: detail unavailable ({detail.message})")
            if not sub_list.ok:
                self._warn(f"entry {entry.id}: chapter list unavailable ({sub_list.message})")
            failed = len(chapters) - report.chapters_ok
            if failed:
                self._warn(f"entry {entry.id}: {failed} of {len(chapters)} chapters failed")
        return report

    async def _enrich_and_notify(self, report: EntryReport) -> EntryReport:
        report = await self._enrich(report)
        if self._hooks.entry_done:
            self._hooks.entry_done(report.index, report)
        return report

    async def run(self) -> CrawlResult:
        skeletons = await self._load_catalog()
        reports = [EntryReport(index=i, entry=entry) for i, entry in enumerate(skeletons)]

        outcomes = await self._scheduler.outer(reports, self._enrich_and_notify)
        for report, outcome in zip(reports, outcomes):
            if outcome.ok:
                continue
            # The entry keeps whatever it had when the failure happened.
            report.skip_reason = outcome.error
            if report.state is not EntryState.ENRICHMENT_SKIPPED:
                report.advance(EntryState.ENRICHMENT_SKIPPED)
            self._warn(f"entry {report.index}: enrichment aborted ({outcome.message})")

        for report in reports:
            report.advance(EntryState.EMITTED)

        logger.debug(
            "fan-out stats: outer peak %d/%d, inner peak %d/%d (bound %d)",
            self._scheduler.outer_stats.peak_in_flight,
            self._scheduler.outer_limit,
            self._scheduler.inner_stats.peak_in_flight,
            self._scheduler.inner_limit,
            self._scheduler.max_in_flight,
        )

        return CrawlResult(
            page=self._request.page,
            entries=[report.entry for report in reports],
            reports=reports,
            warnings=self.warnings,
            outer_stats=self._scheduler.outer_stats,
            inner_stats=self._scheduler.inner_stats,
        )


async def crawl_catalog(
    *,
    settings: AppSettings,
    request: CrawlRequest,
    fetcher: PageFetcher | None = None,
    hooks: PipelineHooks | None = None,
) -> CrawlResult:
    """Crawl one catalog page and enrich its entries.

    Raises `BatchError` when the catalog page itself cannot be fetched or
    parsed. When `fetcher` is None, an `HttpPageFetcher` is built from
    `settings` and closed before returning.
    """

    hooks = hooks or PipelineHooks()
    if fetcher is not None:
        return await _CatalogCrawl(settings=settings, request=request, fetcher=fetcher, hooks=hooks).run()

    async with HttpPageFetcher(settings) as owned:
        return await _CatalogCrawl(settings=settings, request=request, fetcher=owned, hooks=hooks).run()
