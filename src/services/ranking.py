"""Relevance scoring for bookmark search results."""
from collections.abc import Iterable, Sequence
from datetime import datetime

from models.base import as_utc
from models.bookmark import Bookmark

TITLE_WEIGHT = 10
TAG_WEIGHT = 7
URL_WEIGHT = 5
SUMMARY_WEIGHT = 3

# Recency bonus decays linearly from 5 points at creation to 0 after 50 days
RECENCY_WINDOW_DAYS = 50.0
RECENCY_DIVISOR = 10.0


def query_terms(query: str | None, fuzzy: bool = False) -> list[str]:
    """Lower-cased search terms: the whole query, or its words in fuzzy mode."""
    if not query or not query.strip():
        return []
    lowered = query.strip().lower()
    if fuzzy:
        return list(dict.fromkeys(lowered.split()))
    return [lowered]


def recency_bonus(created_at: datetime, now: datetime) -> float:
    """Linearly decaying bonus for recently created bookmarks, floored at 0."""
    age_days = max((as_utc(now) - as_utc(created_at)).total_seconds() / 86400, 0.0)
    return max(0.0, RECENCY_WINDOW_DAYS - age_days) / RECENCY_DIVISOR


def relevance_score(
    bookmark: Bookmark,
    terms: Sequence[str],
    filter_tags: Iterable[str],
    now: datetime,
) -> float:
    """
    Weighted relevance of a bookmark for a query.

    Per term: title match +10, url match +5, summary match +3, and +7 for each of
    the bookmark's tags containing the term. Each filter tag the bookmark carries
    adds +7. The recency bonus is added on top.
    """
    title = (bookmark.title or "").lower()
    url = (bookmark.url or "").lower()
    summary = (bookmark.summary or "").lower()
    tags = [tag.lower() for tag in bookmark.tags or []]

    score = 0.0
    for term in terms:
        if term in title:
            score += TITLE_WEIGHT
        if term in url:
            score += URL_WEIGHT
        if term in summary:
            score += SUMMARY_WEIGHT
        score += TAG_WEIGHT * sum(1 for tag in tags if term in tag)

    tag_set = set(tags)
    score += TAG_WEIGHT * sum(1 for tag in set(filter_tags) if tag in tag_set)

    return score + recency_bonus(bookmark.created_at, now)


def rank_bookmarks(
    bookmarks: Iterable[Bookmark],
    query: str | None,
    filter_tags: Iterable[str],
    now: datetime,
    fuzzy: bool = False,
) -> list[tuple[Bookmark, float]]:
    """Score bookmarks and sort by descending score, ties kept in position order."""
    terms = query_terms(query, fuzzy)
    filter_tags = list(filter_tags)
    scored = [
        (bookmark, relevance_score(bookmark, terms, filter_tags, now))
        for bookmark in bookmarks
    ]
    scored.sort(key=lambda pair: (-pair[1], pair[0].position, as_utc(pair[0].created_at)))
    return scored
