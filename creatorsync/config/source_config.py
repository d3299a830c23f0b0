"""
Owner Configuration
===================

Pydantic model for a content owner's ``creator.json`` and the loader used by
the per-target sync entry point.
"""

import json
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator, model_validator

from ..utils.exceptions import ConfigurationError, ErrorCode


SUBSTACK_MARKER = "substack.com"


class SupplementStrategy(str, Enum):
    """How a source compensates for its feed's recency cap."""
    NONE = "none"
    ARCHIVE = "archive"
    BROWSER = "browser"  # manual, out-of-band; never executed here


class SourceKind(str, Enum):
    """Publishing platform of a content owner."""
    SUBSTACK = "substack"
    BLOG = "blog"


class SourceConfig(BaseModel):
    """A content owner's sync configuration."""

    display_name: str = Field(..., alias="displayName", min_length=1)
    blog_name: Optional[str] = Field(default=None, alias="blogName")
    blog_url: str = Field(default="", alias="blogUrl")
    follow_url: Optional[str] = Field(default=None, alias="followUrl")
    feed_urls: List[str] = Field(default_factory=list, alias="feedUrls")
    slug: str = Field(default="")
    supplement_strategy: SupplementStrategy = Field(default=SupplementStrategy.NONE, alias="supplementStrategy")

    model_config = {
        "populate_by_name": True,
        "frozen": True,
        "extra": "ignore",
    }

    @field_validator("blog_url", mode="before")
    @classmethod
    def blank_blog_url(cls, v):
        """Null and whitespace-only URLs mean 'no primary URL'."""
        return (v or "").strip()

    @field_validator("feed_urls", mode="before")
    @classmethod
    def coerce_feed_urls(cls, v: Union[None, str, List[str]]):
        """Accept a single URL string and drop empty entries."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [url.strip() for url in v if isinstance(url, str) and url.strip()]

    @field_validator("supplement_strategy", mode="before")
    @classmethod
    def legacy_strategy_names(cls, v):
        """``substack_archive`` is the historical spelling of ``archive``."""
        if v == "substack_archive":
            return SupplementStrategy.ARCHIVE.value
        return v

    @model_validator(mode="before")
    @classmethod
    def infer_strategy(cls, data):
        """Default the strategy from the primary URL when not given."""
        if not isinstance(data, dict):
            return data
        strategy = data.get("supplementStrategy", data.get("supplement_strategy"))
        if strategy is None:
            blog_url = data.get("blogUrl", data.get("blog_url")) or ""
            inferred = (
                SupplementStrategy.ARCHIVE
                if SUBSTACK_MARKER in blog_url
                else SupplementStrategy.NONE
            )
            data = {k: v for k, v in data.items() if k != "supplement_strategy"}
            data["supplementStrategy"] = inferred.value
        return data

    @property
    def source_kind(self) -> SourceKind:
        """Platform derived from whether the primary URL is a Substack."""
        return SourceKind.SUBSTACK if SUBSTACK_MARKER in self.blog_url else SourceKind.BLOG

    @property
    def identifier(self) -> str:
        return self.slug or self.display_name

    def __str__(self) -> str:
        return f"SourceConfig({self.identifier}:{len(self.feed_urls)} feeds)"


def load_source_config(path: Path) -> SourceConfig:
    """Read and validate a ``creator.json`` file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Owner configuration not found: {path}",
            config_key=str(path),
            error_code=ErrorCode.CONFIG_MISSING,
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read owner configuration {path}: {e}",
            config_key=str(path),
            error_code=ErrorCode.CONFIG_MISSING,
        ) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Owner configuration is not valid JSON ({path}): {e}",
            config_key=str(path),
            error_code=ErrorCode.CONFIG_PARSE_ERROR,
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Owner configuration must be a JSON object: {path}",
            config_key=str(path),
            error_code=ErrorCode.CONFIG_PARSE_ERROR,
        )

    try:
        return SourceConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid owner configuration {path}: {e.error_count()} error(s): {e.errors()[0]['msg']}",
            config_key=str(path),
            error_code=ErrorCode.CONFIG_INVALID,
        ) from e
