"""Usage analytics over an owner's bookmark collection."""
import logging
from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import as_utc, utc_now
from models.bookmark import Bookmark
from schemas.analytics import ActivityDay, AnalyticsResponse, DomainCount
from schemas.tag import TagCount
from services.exceptions import ErrorCode, PersistenceError
from services.urls import get_domain

logger = logging.getLogger(__name__)

WEEK_DAYS = 7
MONTH_DAYS = 30
ACTIVITY_DAYS = 30
DEFAULT_TOP_N = 5


def compute_analytics(
    bookmarks: Sequence[Bookmark],
    now: datetime,
    top_n: int = DEFAULT_TOP_N,
) -> AnalyticsResponse:
    """
    Aggregate counts, top tags, top domains and daily activity.

    Pure function over already-loaded bookmarks.

    Args:
        bookmarks: The owner's bookmarks.
        now: Reference time for the 7/30-day windows and the histogram.
        top_n: Number of tags and domains to report.

    Returns:
        AnalyticsResponse; activity covers the last 30 days (oldest first, today
        last) with days without bookmarks reported as zero.
    """
    now = as_utc(now)
    week_start = now - timedelta(days=WEEK_DAYS)
    month_start = now - timedelta(days=MONTH_DAYS)

    tag_counts: Counter[str] = Counter()
    domain_counts: Counter[str] = Counter()
    day_counts: Counter[str] = Counter()
    this_week = 0
    this_month = 0

    for bookmark in bookmarks:
        created_at = as_utc(bookmark.created_at)
        if created_at >= week_start:
            this_week += 1
        if created_at >= month_start:
            this_month += 1
        tag_counts.update(bookmark.tags or [])
        domain = get_domain(bookmark.url)
        if domain:
            domain_counts[domain] += 1
        day_counts[created_at.date().isoformat()] += 1

    today = now.date()
    activity = []
    for offset in range(ACTIVITY_DAYS - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        activity.append(ActivityDay(date=day, count=day_counts.get(day, 0)))

    # Counter.most_common keeps insertion order for ties; sort by name for stability
    top_tags = sorted(tag_counts.items(), key=lambda item: (-item[1], item[0]))[:top_n]
    top_domains = sorted(domain_counts.items(), key=lambda item: (-item[1], item[0]))[:top_n]

    return AnalyticsResponse(
        total_bookmarks=len(bookmarks),
        bookmarks_this_week=this_week,
        bookmarks_this_month=this_month,
        top_tags=[TagCount(tag=tag, count=count) for tag, count in top_tags],
        top_domains=[DomainCount(domain=domain, count=count) for domain, count in top_domains],
        activity=activity,
    )


async def get_analytics(
    db: AsyncSession,
    user_id: UUID,
    now: datetime | None = None,
    top_n: int = DEFAULT_TOP_N,
) -> AnalyticsResponse:
    """
    Load the owner's bookmarks and aggregate them.

    Raises:
        PersistenceError: ANALYTICS_FAILED if the bookmarks cannot be loaded.
    """
    try:
        result = await db.execute(select(Bookmark).where(Bookmark.user_id == user_id))
        bookmarks = list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error("Failed to load bookmarks for analytics: %s", e, exc_info=True)
        raise PersistenceError(ErrorCode.ANALYTICS_FAILED, str(e)) from e
    return compute_analytics(bookmarks, now or utc_now(), top_n)
