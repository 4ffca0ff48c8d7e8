"""Tests for the typed Tana node models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hoarder_sync.adapters.tana.models import (
    BooleanNode,
    DateNode,
    FieldNode,
    PlainNode,
    ReferenceNode,
    Supertag,
)


def test_invalid_ids_rejected() -> None:
    with pytest.raises(ValidationError):
        Supertag(id="short")
    with pytest.raises(ValidationError):
        FieldNode(attribute_id="has spaces!!")
    with pytest.raises(ValidationError):
        ReferenceNode(id="x" * 17)


def test_unknown_keys_rejected() -> None:
    with pytest.raises(ValidationError):
        PlainNode(name="x", color="red")


def test_nodes_are_frozen() -> None:
    node = PlainNode(name="x")
    with pytest.raises(ValidationError):
        node.name = "y"


def test_field_children_payload() -> None:
    field = FieldNode(
        attribute_id="hrTDjcwTMcyo",
        children=[DateNode(name="2024-05-01"), BooleanNode(value=True)],
    )
    assert field.as_api_payload() == {
        "type": "field",
        "attributeId": "hrTDjcwTMcyo",
        "children": [
            {"dataType": "date", "name": "2024-05-01"},
            {"dataType": "boolean", "value": True},
        ],
    }


def test_nested_plain_children_accept_dicts() -> None:
    node = PlainNode.model_validate(
        {
            "name": "Parent",
            "children": [
                {"type": "field", "attributeId": "1IJSCbcJ-4x6", "children": [{"name": "id"}]},
                {"name": "child"},
            ],
        }
    )
    assert isinstance(node.children[0], FieldNode)
    assert isinstance(node.children[1], PlainNode)
