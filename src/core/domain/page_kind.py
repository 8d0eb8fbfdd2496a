"""Page kinds understood by the extraction stage.

Kept in the domain layer so both the pipeline (which decides what to fetch)
and the extractors (which decide how to read it) share one vocabulary without
importing each other.
"""

from __future__ import annotations

from enum import Enum


class PageKind(str, Enum):
    """The four document shapes fetched while crawling one catalog page."""

    CATALOG_LIST = "catalog_list"
    ENTRY_DETAIL = "entry_detail"
    SUB_LIST = "sub_list"
    SUB_DOCUMENT = "sub_document"
