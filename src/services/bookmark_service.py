"""Service layer for bookmark persistence: create, list, search, tags, ordering."""
import logging
from collections import Counter
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Literal
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import as_utc, utc_now
from models.bookmark import Bookmark
from models.user import User
from schemas.bookmark import BookmarkCreate, ReorderItem
from schemas.validators import normalize_tags_from_settings
from services.enrichment import EnrichmentPipeline
from services.exceptions import ErrorCode, PersistenceError
from services.ranking import query_terms, rank_bookmarks
from services.urls import normalize_url
from services.utils import escape_ilike

logger = logging.getLogger(__name__)

SortBy = Literal["position", "created_at", "title"]
SortOrder = Literal["asc", "desc"]


async def _next_position(db: AsyncSession, user_id: UUID) -> int:
    """
    Position for a new bookmark: one past the owner's current maximum.

    Locks the owner row first so concurrent creates for the same owner serialize
    on it and cannot read the same maximum. Must run inside the insert's
    transaction. (SQLite has no row locks; its writers are serialized anyway.)
    """
    await db.execute(select(User.id).where(User.id == user_id).with_for_update())
    result = await db.execute(
        select(func.max(Bookmark.position)).where(Bookmark.user_id == user_id),
    )
    current_max = result.scalar()
    return (current_max or 0) + 1


async def create_bookmark(
    db: AsyncSession,
    user_id: UUID,
    data: BookmarkCreate,
    pipeline: EnrichmentPipeline,
) -> Bookmark:
    """
    Enrich and store a new bookmark at the end of the owner's manual order.

    Args:
        db: Database session.
        user_id: Owner of the new bookmark.
        data: URL and tags as supplied by the user.
        pipeline: Enrichment pipeline deriving title, favicon and summary.

    Returns:
        The created bookmark with its id, position and created_at populated.

    Raises:
        InvalidInputError: If the URL is malformed (before any network call).
        PersistenceError: CREATE_BOOKMARK_FAILED if the insert fails; nothing is stored.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    url = normalize_url(data.url)
    tags = normalize_tags_from_settings(data.tags)

    # Enrichment never raises for a valid URL; it runs before any lock is taken
    enriched = await pipeline.enrich(url)

    try:
        position = await _next_position(db, user_id)
        bookmark = Bookmark(
            user_id=user_id,
            url=enriched.url,
            title=enriched.title,
            favicon=enriched.favicon,
            summary=enriched.summary,
            tags=tags,
            position=position,
        )
        db.add(bookmark)
        await db.flush()
        await db.refresh(bookmark)
    except SQLAlchemyError as e:
        logger.error("Failed to create bookmark for %s: %s", url, e, exc_info=True)
        raise PersistenceError(ErrorCode.CREATE_BOOKMARK_FAILED, str(e)) from e

    logger.info(
        "Created bookmark %s at position %d (method=%s)", bookmark.id, position, enriched.method,
    )
    return bookmark


async def get_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
) -> Bookmark | None:
    """
    Get a bookmark by ID, scoped to user.

    Returns:
        The bookmark if found and owned by the user, None otherwise.
    """
    try:
        result = await db.execute(
            select(Bookmark).where(
                Bookmark.id == bookmark_id,
                Bookmark.user_id == user_id,
            ),
        )
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error("Failed to fetch bookmark %s: %s", bookmark_id, e, exc_info=True)
        raise PersistenceError(ErrorCode.FETCH_BOOKMARKS_FAILED, str(e)) from e


async def list_bookmarks(
    db: AsyncSession,
    user_id: UUID,
    limit: int = 50,
    offset: int = 0,
    sort_by: SortBy = "position",
    sort_order: SortOrder = "asc",
) -> tuple[list[Bookmark], int]:
    """
    Page through the user's bookmarks.

    Args:
        db: Database session.
        user_id: User ID to scope bookmarks.
        limit: Page size.
        offset: Number of bookmarks to skip.
        sort_by: "position" (manual order), "created_at" or "title".
        sort_order: Sort direction.

    Returns:
        Tuple of (page of bookmarks, total count for the user).
    """
    # Tiebreakers (created_at, then id) keep paging deterministic
    sort_columns = {
        "position": Bookmark.position,
        "created_at": Bookmark.created_at,
        "title": func.lower(Bookmark.title),
    }
    sort_column = sort_columns[sort_by]
    if sort_order == "desc":
        order = (sort_column.desc(), Bookmark.created_at.desc(), Bookmark.id.desc())
    else:
        order = (sort_column.asc(), Bookmark.created_at.asc(), Bookmark.id.asc())

    try:
        total_result = await db.execute(
            select(func.count()).select_from(Bookmark).where(Bookmark.user_id == user_id),
        )
        total = total_result.scalar() or 0

        result = await db.execute(
            select(Bookmark)
            .where(Bookmark.user_id == user_id)
            .order_by(*order)
            .offset(offset)
            .limit(limit),
        )
        bookmarks = list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error("Failed to list bookmarks: %s", e, exc_info=True)
        raise PersistenceError(ErrorCode.FETCH_BOOKMARKS_FAILED, str(e)) from e

    return bookmarks, total


async def delete_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
) -> bool:
    """
    Permanently delete a bookmark.

    Returns:
        True if deleted, False if not found or owned by another user.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        return False
    try:
        await db.delete(bookmark)
        await db.flush()
    except SQLAlchemyError as e:
        logger.error("Failed to delete bookmark %s: %s", bookmark_id, e, exc_info=True)
        raise PersistenceError(ErrorCode.DELETE_BOOKMARK_FAILED, str(e)) from e
    return True


async def update_bookmark_tags(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
    tags: Sequence[str],
) -> Bookmark | None:
    """
    Replace a bookmark's tags. Returns None if not found or wrong user.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        return None
    try:
        bookmark.tags = normalize_tags_from_settings(tags)
        await db.flush()
        await db.refresh(bookmark)
    except SQLAlchemyError as e:
        logger.error("Failed to update tags of bookmark %s: %s", bookmark_id, e, exc_info=True)
        raise PersistenceError(ErrorCode.UPDATE_TAGS_FAILED, str(e)) from e
    return bookmark


async def bulk_reorder(
    db: AsyncSession,
    user_id: UUID,
    items: Sequence[ReorderItem],
) -> int:
    """
    Write new positions for a batch of bookmarks.

    Ids that do not exist or belong to another user are ignored. The changed rows
    are flushed together (one executemany UPDATE), so applying the same batch
    twice leaves the same state.

    Returns:
        Number of bookmarks whose position was written.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    if not items:
        return 0
    # Later entries win when an id is repeated
    positions = {item.id: item.position for item in items}

    try:
        result = await db.execute(
            select(Bookmark).where(
                Bookmark.user_id == user_id,
                Bookmark.id.in_(positions.keys()),
            ),
        )
        bookmarks = list(result.scalars().all())
        for bookmark in bookmarks:
            bookmark.position = positions[bookmark.id]
        await db.flush()
    except SQLAlchemyError as e:
        logger.error("Failed to update bookmark positions: %s", e, exc_info=True)
        raise PersistenceError(ErrorCode.UPDATE_POSITIONS_FAILED, str(e)) from e

    ignored = len(positions) - len(bookmarks)
    if ignored:
        logger.info("Ignored %d reorder item(s) not owned by user %s", ignored, user_id)
    return len(bookmarks)


def _to_utc(value: datetime) -> datetime:
    return as_utc(value).astimezone(UTC)


async def search_bookmarks(
    db: AsyncSession,
    user_id: UUID,
    query: str | None = None,
    tags: Sequence[str] | None = None,
    created_after: datetime | None = None,
    created_before: datetime | None = None,
    fuzzy: bool = False,
    rank: bool = False,
    now: datetime | None = None,
) -> list[tuple[Bookmark, float]]:
    """
    Search the user's bookmarks.

    Args:
        db: Database session.
        user_id: User ID to scope bookmarks.
        query: Case-insensitive substring matched against title, summary and url.
        tags: Keep bookmarks carrying any of these tags (normalized first).
        created_after: Inclusive lower bound on created_at.
        created_before: Inclusive upper bound on created_at.
        fuzzy: Split the query on whitespace; a bookmark matches when any term
            matches any field.
        rank: Order by relevance score instead of position.
        now: Reference time for the recency part of the score.

    Returns:
        List of (bookmark, score) pairs. Without ranking the score is 0 and the
        order is the manual position order.
    """
    terms = query_terms(query, fuzzy)
    filter_tags = normalize_tags_from_settings(tags) if tags else []

    statement = select(Bookmark).where(Bookmark.user_id == user_id)
    if terms:
        conditions = []
        for term in terms:
            pattern = f"%{escape_ilike(term)}%"
            conditions.extend([
                Bookmark.title.ilike(pattern, escape="\\"),
                Bookmark.summary.ilike(pattern, escape="\\"),
                Bookmark.url.ilike(pattern, escape="\\"),
            ])
        statement = statement.where(or_(*conditions))
    if created_after is not None:
        statement = statement.where(Bookmark.created_at >= _to_utc(created_after))
    if created_before is not None:
        statement = statement.where(Bookmark.created_at <= _to_utc(created_before))
    statement = statement.order_by(
        Bookmark.position.asc(), Bookmark.created_at.asc(), Bookmark.id.asc(),
    )

    try:
        result = await db.execute(statement)
        bookmarks = list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error("Failed to search bookmarks: %s", e, exc_info=True)
        raise PersistenceError(ErrorCode.SEARCH_BOOKMARKS_FAILED, str(e)) from e

    # Tags live in a JSON column; the any-of filter is applied on loaded rows
    if filter_tags:
        wanted = set(filter_tags)
        bookmarks = [b for b in bookmarks if wanted.intersection(b.tags or [])]

    if rank:
        return rank_bookmarks(bookmarks, query, filter_tags, now or utc_now(), fuzzy)
    return [(bookmark, 0.0) for bookmark in bookmarks]


async def list_tags(db: AsyncSession, user_id: UUID) -> list[tuple[str, int]]:
    """
    Tags in use by the user with their bookmark counts.

    Returns:
        (tag, count) pairs, most used first, ties by name.
    """
    try:
        result = await db.execute(select(Bookmark.tags).where(Bookmark.user_id == user_id))
        tag_lists = list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error("Failed to list tags: %s", e, exc_info=True)
        raise PersistenceError(ErrorCode.FETCH_TAGS_FAILED, str(e)) from e

    counts: Counter[str] = Counter()
    for tags in tag_lists:
        counts.update(set(tags or []))
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))
