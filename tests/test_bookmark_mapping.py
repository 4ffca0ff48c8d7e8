"""Tests for mapping Hoarder bookmarks onto Tana Article nodes."""

from __future__ import annotations

from conftest import make_bookmark
from hoarder_sync.adapters.hoarder.sync.mapping import (
    ArticleSchema,
    BookmarkMapper,
    ai_tag_names,
    bookmark_title,
)
from hoarder_sync.adapters.tana.models import PlainNode, UrlNode

SCHEMA = ArticleSchema()
FIELD_ORDER = [
    "1IJSCbcJ-4x6",
    "TAuNkyKd4gv4",
    "kmEPGZ9RM0hA",
    "aosg60mUhj0s",
    "1Q0LdvnE7q7a",
    "zENeYHbvA6f4",
    "jO0i0yhryT7J",
    "hrTDjcwTMcyo",
]


def _archive_url(asset_id: str) -> str:
    return f"https://hoarder.test/archive/{asset_id}"


def _fields(node: PlainNode) -> dict[str, object]:
    return {field.attribute_id: field.children[0] for field in node.children}


def test_article_node_shape() -> None:
    bookmark = make_bookmark(
        "b1",
        "https://example.com/a",
        createdAt="2024-05-01T10:00:00.000Z",
        tags=[
            {"name": "python", "attachedBy": "ai"},
            {"name": "mine", "attachedBy": "human"},
            {"name": "async", "attachedBy": "ai"},
        ],
        content={"fullPageArchiveAssetId": "asset-9"},
    )

    node = BookmarkMapper(_archive_url).map(bookmark)

    assert node.name == "Title b1"
    assert [tag.id for tag in node.supertags] == [SCHEMA.supertag_id]
    assert [field.attribute_id for field in node.children] == FIELD_ORDER
    assert all(len(field.children) == 1 for field in node.children)

    values = {key: child.name for key, child in _fields(node).items()}
    assert values == {
        "1IJSCbcJ-4x6": "b1",
        "TAuNkyKd4gv4": "Title b1",
        "kmEPGZ9RM0hA": "Description of b1",
        "aosg60mUhj0s": "python, async",
        "1Q0LdvnE7q7a": "https://example.com/a",
        "zENeYHbvA6f4": "asset-9",
        "jO0i0yhryT7J": "https://hoarder.test/archive/asset-9",
        "hrTDjcwTMcyo": "2024-05-01T10:00:00.000Z",
    }


def test_url_fields_use_url_nodes() -> None:
    node = BookmarkMapper(_archive_url).map(make_bookmark("b1"))
    fields = _fields(node)

    assert isinstance(fields["1Q0LdvnE7q7a"], UrlNode)
    assert isinstance(fields["jO0i0yhryT7J"], UrlNode)
    assert isinstance(fields["hrTDjcwTMcyo"], PlainNode)


def test_missing_archive_leaves_fields_empty() -> None:
    calls: list[str] = []

    def archive_url(asset_id: str) -> str:
        calls.append(asset_id)
        return _archive_url(asset_id)

    node = BookmarkMapper(archive_url).map(make_bookmark("b1"))
    fields = _fields(node)

    assert fields["zENeYHbvA6f4"].name == ""
    assert fields["jO0i0yhryT7J"].name == ""
    assert calls == []


def test_title_falls_back_to_user_title_then_placeholder() -> None:
    with_user_title = make_bookmark("b1", title="User title", content={"title": None})
    assert bookmark_title(with_user_title) == "User title"

    untitled = make_bookmark("b2", content={"title": "   \n "})
    assert bookmark_title(untitled) == "Untitled Bookmark"


def test_description_falls_back_to_summary() -> None:
    bookmark = make_bookmark("b1", summary="AI summary", content={"description": None})
    node = BookmarkMapper(_archive_url).map(bookmark)
    assert _fields(node)["kmEPGZ9RM0hA"].name == "AI summary"


def test_text_is_cleaned_and_capped() -> None:
    bookmark = make_bookmark(
        "b1",
        content={"title": "A\n\n  long   title " + "x" * 2000, "description": "d" * 9000},
    )
    node = BookmarkMapper(_archive_url).map(bookmark)
    fields = _fields(node)

    assert node.name.startswith("A long title x")
    assert len(node.name) == 1000
    assert node.name.endswith("...")
    assert fields["TAuNkyKd4gv4"].name == node.name
    assert len(fields["kmEPGZ9RM0hA"].name) == 8000


def test_no_ai_tags_gives_empty_field() -> None:
    bookmark = make_bookmark("b1", tags=[{"name": "mine", "attachedBy": "human"}])
    assert ai_tag_names(bookmark) == ""


def test_payload_is_api_shaped() -> None:
    mapper = BookmarkMapper(_archive_url, ArticleSchema(supertag_id="Custom123"))
    payload = mapper(make_bookmark("b1")).as_api_payload()

    assert payload["supertags"] == [{"id": "Custom123"}]
    assert payload["children"][0] == {
        "type": "field",
        "attributeId": "1IJSCbcJ-4x6",
        "children": [{"name": "b1"}],
    }
    assert payload["children"][4]["children"] == [{"dataType": "url", "name": "https://example.com/b1"}]
