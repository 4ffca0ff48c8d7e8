"""Map Hoarder bookmarks to Tana Article nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from hoarder_sync.adapters.hoarder.sync.constants import (
    AI_TAGS_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    UNTITLED_BOOKMARK,
)
from hoarder_sync.adapters.tana.models import FieldNode, PlainNode, Supertag, UrlNode
from hoarder_sync.core.text_utils import clean_text

if TYPE_CHECKING:
    from collections.abc import Callable

    from hoarder_sync.adapters.hoarder.models import HoarderBookmark


@dataclass(frozen=True)
class ArticleSchema:
    """Supertag and field attribute ids of the Article type in Tana."""

    supertag_id: str = "Jv6WSsH6CO7u"
    bookmark_id_field: str = "1IJSCbcJ-4x6"
    title_field: str = "TAuNkyKd4gv4"
    description_field: str = "kmEPGZ9RM0hA"
    ai_tags_field: str = "aosg60mUhj0s"
    url_field: str = "1Q0LdvnE7q7a"
    archive_id_field: str = "zENeYHbvA6f4"
    archive_url_field: str = "jO0i0yhryT7J"
    created_field: str = "hrTDjcwTMcyo"


def bookmark_title(bookmark: HoarderBookmark) -> str:
    """Content title, then user title, then a placeholder; cleaned and capped."""
    for candidate in (bookmark.content.title, bookmark.title):
        title = clean_text(candidate, TITLE_MAX_LENGTH)
        if title:
            return title
    return UNTITLED_BOOKMARK


def bookmark_description(bookmark: HoarderBookmark) -> str:
    return clean_text(
        bookmark.content.description or bookmark.summary, DESCRIPTION_MAX_LENGTH
    )


def ai_tag_names(bookmark: HoarderBookmark) -> str:
    """Comma-joined names of AI-attached tags; user tags are left out."""
    names = [tag.name for tag in bookmark.tags if tag.attached_by == "ai"]
    return clean_text(", ".join(names), AI_TAGS_MAX_LENGTH)


def _text_field(attribute_id: str, value: str) -> FieldNode:
    return FieldNode(attribute_id=attribute_id, children=[PlainNode(name=value)])


def _url_field(attribute_id: str, value: str) -> FieldNode:
    return FieldNode(attribute_id=attribute_id, children=[UrlNode(name=value)])


class BookmarkMapper:
    """Build the Article node for a bookmark.

    Every node carries the same eight fields in a fixed order; missing values
    become empty strings so the Article layout stays uniform in Tana.
    """

    def __init__(
        self,
        archive_url_for: Callable[[str], str],
        schema: ArticleSchema | None = None,
    ) -> None:
        self._archive_url_for = archive_url_for
        self.schema = schema or ArticleSchema()

    def __call__(self, bookmark: HoarderBookmark) -> PlainNode:
        return self.map(bookmark)

    def map(self, bookmark: HoarderBookmark) -> PlainNode:
        schema = self.schema
        title = bookmark_title(bookmark)
        archive_id = bookmark.content.full_page_archive_asset_id or ""
        archive_url = self._archive_url_for(archive_id) if archive_id else ""

        fields = [
            _text_field(schema.bookmark_id_field, bookmark.id),
            _text_field(schema.title_field, title),
            _text_field(schema.description_field, bookmark_description(bookmark)),
            _text_field(schema.ai_tags_field, ai_tag_names(bookmark)),
            _url_field(schema.url_field, bookmark.url or ""),
            _text_field(schema.archive_id_field, archive_id),
            _url_field(schema.archive_url_field, archive_url),
            # Raw createdAt timestamp as a plain node
            _text_field(schema.created_field, bookmark.created_at),
        ]
        return PlainNode(
            name=title,
            supertags=[Supertag(id=schema.supertag_id)],
            children=fields,
        )
