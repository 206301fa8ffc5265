"""Pydantic schemas for tag endpoints."""
from pydantic import BaseModel


class TagCount(BaseModel):
    """Schema for a tag with the number of bookmarks carrying it."""

    tag: str
    count: int


class TagListResponse(BaseModel):
    """Schema for the tags list response (most used first)."""

    tags: list[TagCount]
