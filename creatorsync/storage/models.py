"""
CreatorSync Data Models
=======================

Pydantic models for the records persisted by the post store. The metadata
JSON file of every stored post is a serialized ``PostRecord``.
"""

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from ..config.source_config import SourceKind


UNTITLED = "Untitled"


class PostRecord(BaseModel):
    """Metadata for one ingested post."""
    title: str = Field(default=UNTITLED, description="Post title")
    link: str = Field(..., min_length=1, description="Normalized absolute URL (dedup key)")
    published: Optional[str] = Field(default=None, description="ISO-8601 UTC publication instant")
    updated: Optional[str] = Field(default=None, description="ISO-8601 UTC update instant")
    source: SourceKind = Field(default=SourceKind.BLOG, description="Publishing platform")
    feed_url: str = Field(default="", alias="feedUrl", description="Originating feed URL")
    description: Optional[str] = Field(default=None, description="Truncated plain-text body")
    guid: str = Field(default="", validate_default=True, description="Feed GUID, falls back to the link")
    supplement: bool = Field(default=False, description="True for archive-derived stubs")

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v):
        """Absent or blank titles become 'Untitled'."""
        if v is None:
            return UNTITLED
        v = str(v).strip()
        return v or UNTITLED

    @field_validator("guid")
    @classmethod
    def guid_or_link(cls, v, info):
        if v:
            return v
        return info.data.get("link", "")

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys; optional empty fields are omitted."""
        data = self.model_dump(by_alias=True, mode="json")
        for key in ("updated", "description"):
            if data.get(key) is None:
                data.pop(key, None)
        if not self.supplement:
            data.pop("supplement", None)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_json_dict(), indent=2, ensure_ascii=False)

    def __str__(self) -> str:
        return f"PostRecord({self.title[:50]}:{self.link})"
