"""Domain models (Pydantic v2).

Two families live here:
- The emitted tree: `CatalogEntry` and `SubDocument`.
- Frozen field records produced by the extraction stage, one per page kind.

Locator fields (`source_url`) drive follow-up fetches only; they are declared
with `exclude=True`, so no serialization of the tree can emit them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class CatalogListItem(BaseModel):
    """One `<dl>` of the catalog listing, as extracted."""

    model_config = ConfigDict(frozen=True)

    source_url: str = Field(..., min_length=1, description="Absolute link to the entry detail page.")
    identifier_hint: str | None = Field(
        default=None,
        description="Numeric entry id parsed from the link (None when unresolvable).",
    )
    title: str = ""
    cover_image: str = ""
    description: str = ""


class EntryDetail(BaseModel):
    """Metadata read from an entry detail page."""

    model_config = ConfigDict(frozen=True)

    author: str = ""
    genres: tuple[str, ...] = ()


class SubListItem(BaseModel):
    """One sub-document link of an entry's chapter list."""

    model_config = ConfigDict(frozen=True)

    source_url: str = Field(..., min_length=1)


class SubDocumentFields(BaseModel):
    """Title and text of one sub-document page."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    content: str = ""


class SubDocument(BaseModel):
    """A chapter belonging to a catalog entry."""

    source_url: str = Field(
        default="",
        exclude=True,
        description="Internal: where the chapter was fetched from.",
    )
    title: str = Field(default="", description="Chapter heading without parenthetical suffixes.")
    content: str = Field(default="", description="Paragraph text joined with newlines.")

    @classmethod
    def from_fields(cls, item: SubListItem, fields: SubDocumentFields) -> "SubDocument":
        return cls(source_url=item.source_url, title=fields.title, content=fields.content)


class CatalogEntry(BaseModel):
    """A work listed in the catalog, enriched with detail and chapters.

    `chapters` keeps one slot per chapter link that was attempted; a chapter
    whose fetch failed stays in place as `None`.
    """

    id: str | None = Field(default=None, description="Numeric entry id from the catalog link.")
    source_url: str = Field(
        default="",
        exclude=True,
        description="Internal: the entry detail page.",
    )
    title: str = ""
    cover_image: str = ""
    description: str = ""
    author: str = ""
    genres: list[str] = Field(default_factory=list)
    chapters: list[SubDocument | None] = Field(default_factory=list)

    @classmethod
    def from_listing(cls, item: CatalogListItem) -> "CatalogEntry":
        """Skeleton entry: catalog-level fields only."""

        return cls(
            id=item.identifier_hint,
            source_url=item.source_url,
            title=item.title,
            cover_image=item.cover_image,
            description=item.description,
        )
