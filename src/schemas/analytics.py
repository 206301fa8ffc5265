"""Pydantic schemas for the analytics endpoint."""
from pydantic import BaseModel

from schemas.tag import TagCount


class DomainCount(BaseModel):
    """A domain (without 'www.') with the number of bookmarks pointing to it."""

    domain: str
    count: int


class ActivityDay(BaseModel):
    """Number of bookmarks created on one day (ISO date)."""

    date: str
    count: int


class AnalyticsResponse(BaseModel):
    """Aggregated usage statistics for the current user."""

    total_bookmarks: int
    bookmarks_this_week: int
    bookmarks_this_month: int
    top_tags: list[TagCount]
    top_domains: list[DomainCount]
    activity: list[ActivityDay]  # last 30 days, oldest first, zero-filled
