"""Tana Input API adapter (target of the bookmark sync)."""

from hoarder_sync.adapters.tana.client import TanaClient, TanaClientError, TanaRetryableError
from hoarder_sync.adapters.tana.models import (
    BooleanNode,
    DateNode,
    FieldNode,
    FileNode,
    PlainNode,
    ReferenceNode,
    Supertag,
    UrlNode,
)

__all__ = [
    "BooleanNode",
    "DateNode",
    "FieldNode",
    "FileNode",
    "PlainNode",
    "ReferenceNode",
    "Supertag",
    "TanaClient",
    "TanaClientError",
    "TanaRetryableError",
    "UrlNode",
]
