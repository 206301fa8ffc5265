"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import normalize_tags_from_settings


def validate_tag_list(v: object) -> list[str]:
    """
    Normalize a raw `tags` value from a request body.

    Runs before pydantic's own list check, so anything other than a list (a
    bare string in particular, which would otherwise be split into characters)
    is rejected here.
    """
    if v is None:
        return []
    if not isinstance(v, list):
        raise ValueError("tags must be a list of strings")
    return normalize_tags_from_settings(v)


class BookmarkCreate(BaseModel):
    """
    Schema for creating a new bookmark.

    Only the URL and tags are user-supplied; title, favicon and summary are
    derived by enrichment when the bookmark is saved. The URL is normalized by
    the service so a malformed URL surfaces as INVALID_INPUT rather than a 422.
    """

    url: str = Field(..., min_length=1)
    tags: list[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: object) -> list[str]:
        """Normalize tags; invalid entries are dropped."""
        return validate_tag_list(v)


class BookmarkTagsUpdate(BaseModel):
    """Schema for replacing a bookmark's tags."""

    tags: list[str]

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: object) -> list[str]:
        """Normalize tags; invalid entries are dropped."""
        return validate_tag_list(v)


class ReorderItem(BaseModel):
    """New position for one bookmark."""

    id: UUID
    position: int = Field(..., ge=1)


class BookmarkReorderRequest(BaseModel):
    """Schema for bulk position updates (manual drag-and-drop ordering)."""

    items: list[ReorderItem] = Field(..., max_length=1000)


class ReorderResponse(BaseModel):
    """Number of bookmarks whose position was written."""

    updated: int


class BookmarkResponse(BaseModel):
    """Schema for bookmark responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url: str
    title: str
    favicon: str
    summary: str
    tags: list[str]
    position: int
    created_at: datetime


class BookmarkListResponse(BaseModel):
    """Schema for paginated bookmark list responses."""

    items: list[BookmarkResponse]
    total: int  # Total count of the user's bookmarks (before pagination)
    offset: int  # Current pagination offset
    limit: int  # Current pagination limit
    has_more: bool  # True if there are more results beyond this page


class BookmarkSearchResult(BookmarkResponse):
    """A search hit with its relevance score (0 when ranking is off)."""

    score: float = 0.0


class BookmarkSearchResponse(BaseModel):
    """Schema for search results."""

    items: list[BookmarkSearchResult]
    total: int


class MetadataPreviewResponse(BaseModel):
    """Schema for URL enrichment preview (before saving bookmark)."""

    url: str  # Normalized URL
    title: str
    favicon: str
    summary: str
    method: str  # Strategy that produced the title, or "fallback"
