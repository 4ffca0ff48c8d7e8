"""Typed Tana Input API nodes.

The Input API accepts a small closed set of node kinds. Each kind is its own
frozen model so malformed nodes fail at construction instead of at the API.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

TanaId = Annotated[str, StringConstraints(min_length=7, max_length=16, pattern=r"^[A-Za-z0-9_-]+$")]


class _TanaModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    def as_api_payload(self) -> dict[str, Any]:
        """JSON-ready dict in the Input API's camelCase shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Supertag(_TanaModel):
    id: TanaId


class PlainNode(_TanaModel):
    """Text node; the only kind that may carry supertags and children."""

    type: Literal["node"] | None = None
    data_type: Literal["plain"] | None = Field(default=None, alias="dataType")
    name: str
    description: str | None = None
    supertags: list[Supertag] | None = None
    children: list[FieldNode | AnyNode] | None = None


class UrlNode(_TanaModel):
    type: Literal["node"] | None = None
    data_type: Literal["url"] = Field(default="url", alias="dataType")
    name: str


class DateNode(_TanaModel):
    type: Literal["node"] | None = None
    data_type: Literal["date"] = Field(default="date", alias="dataType")
    name: str


class ReferenceNode(_TanaModel):
    type: Literal["node"] | None = None
    data_type: Literal["reference"] = Field(default="reference", alias="dataType")
    id: TanaId


class BooleanNode(_TanaModel):
    """Checkbox value; only valid as a field child."""

    type: Literal["node"] | None = None
    data_type: Literal["boolean"] = Field(default="boolean", alias="dataType")
    value: bool


class FileNode(_TanaModel):
    type: Literal["node"] | None = None
    data_type: Literal["file"] = Field(default="file", alias="dataType")
    file: str  # base64 payload
    content_type: str = Field(alias="contentType")
    filename: str


AnyNode = PlainNode | UrlNode | DateNode | ReferenceNode | FileNode
FieldChild = PlainNode | UrlNode | DateNode | ReferenceNode | FileNode | BooleanNode


class FieldNode(_TanaModel):
    """Value of one attribute (field) of the parent node."""

    type: Literal["field"] = "field"
    attribute_id: TanaId = Field(alias="attributeId")
    children: list[FieldChild] = Field(default_factory=list)


PlainNode.model_rebuild()
