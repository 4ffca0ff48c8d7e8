"""Pydantic models for the Hoarder API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class HoarderTag(BaseModel):
    """Tag attached to a bookmark, either by the user or by AI tagging."""

    id: str | None = None
    name: str
    attached_by: Literal["ai", "human"] = Field(default="human", alias="attachedBy")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class HoarderBookmarkContent(BaseModel):
    """Crawled content of a bookmark. Only link bookmarks carry a URL."""

    type: str = "link"
    url: str | None = None
    title: str | None = None
    description: str | None = None
    full_page_archive_asset_id: str | None = Field(default=None, alias="fullPageArchiveAssetId")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class HoarderBookmark(BaseModel):
    """Hoarder bookmark model."""

    id: str
    created_at: str = Field(alias="createdAt")
    title: str | None = None
    summary: str | None = None
    tags: list[HoarderTag] = Field(default_factory=list)
    content: HoarderBookmarkContent = Field(default_factory=HoarderBookmarkContent)

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @property
    def url(self) -> str | None:
        return self.content.url or None

    @property
    def display_title(self) -> str | None:
        """Content title when present, else the user-set title."""
        return self.content.title or self.title or None


class HoarderBookmarkPage(BaseModel):
    """One page of bookmarks plus the cursor of the next page."""

    bookmarks: list[HoarderBookmark] = Field(default_factory=list)
    next_cursor: str | None = Field(default=None, alias="nextCursor")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class SyncResult(BaseModel):
    """Result of one sync run."""

    mode: str  # 'full', 'incremental' or 'test'
    pages: int = 0
    items_synced: int = 0
    items_skipped: int = 0
    items_failed: int = 0
    errors: list[str] = Field(default_factory=list)
    next_cursor: str | None = None
    duration_seconds: float = 0.0
