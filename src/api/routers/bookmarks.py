"""Bookmark endpoints: create, list, search, tags, ordering, analytics."""
from datetime import datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_enrichment_pipeline
from models.user import User
from schemas.analytics import AnalyticsResponse
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkListResponse,
    BookmarkReorderRequest,
    BookmarkResponse,
    BookmarkSearchResponse,
    BookmarkSearchResult,
    BookmarkTagsUpdate,
    MetadataPreviewResponse,
    ReorderResponse,
)
from schemas.tag import TagCount, TagListResponse
from services import analytics_service, bookmark_service
from services.enrichment import EnrichmentPipeline

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.post("/", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    pipeline: EnrichmentPipeline = Depends(get_enrichment_pipeline),
) -> BookmarkResponse:
    """
    Create a new bookmark.

    Title, favicon and summary are derived from the URL; the bookmark is
    appended to the end of the manual order.
    """
    bookmark = await bookmark_service.create_bookmark(db, current_user.id, data, pipeline)
    return BookmarkResponse.model_validate(bookmark)


@router.get("/", response_model=BookmarkListResponse)
async def list_bookmarks(
    sort_by: Literal["position", "created_at", "title"] = Query(default="position", description="Sort field"),  # noqa: E501
    sort_order: Literal["asc", "desc"] = Query(default="asc", description="Sort order"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    limit: int = Query(default=50, ge=1, le=100, description="Pagination limit"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkListResponse:
    """
    List bookmarks for the current user.

    - **sort_by**: position (manual order, default), created_at or title
    - **sort_order**: asc (default) or desc
    """
    bookmarks, total = await bookmark_service.list_bookmarks(
        db=db,
        user_id=current_user.id,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return BookmarkListResponse(
        items=[BookmarkResponse.model_validate(b) for b in bookmarks],
        total=total,
        offset=offset,
        limit=limit,
        has_more=offset + limit < total,
    )


@router.get("/search", response_model=BookmarkSearchResponse)
async def search_bookmarks(
    q: str | None = Query(default=None, description="Search query (matches title, summary, url)"),  # noqa: E501
    tags: list[str] = Query(default=[], description="Keep bookmarks with any of these tags"),
    created_after: datetime | None = Query(default=None, description="Created at or after (ISO 8601)"),  # noqa: E501
    created_before: datetime | None = Query(default=None, description="Created at or before (ISO 8601)"),  # noqa: E501
    fuzzy: bool = Query(default=False, description="Match any whitespace-separated term"),
    rank: bool = Query(default=False, description="Order by relevance score"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkSearchResponse:
    """
    Search bookmarks for the current user.

    - **q**: Case-insensitive substring search across title, summary and url
    - **tags**: Tag filter; a bookmark matches when it has ANY of the tags
    - **fuzzy**: Split `q` on whitespace and match any term
    - **rank**: Sort by relevance (title, tags, url, summary, recency) instead of position
    """
    results = await bookmark_service.search_bookmarks(
        db=db,
        user_id=current_user.id,
        query=q,
        tags=tags or None,
        created_after=created_after,
        created_before=created_before,
        fuzzy=fuzzy,
        rank=rank,
    )
    items = [
        BookmarkSearchResult.model_validate(
            {**BookmarkResponse.model_validate(bookmark).model_dump(), "score": score},
        )
        for bookmark, score in results
    ]
    return BookmarkSearchResponse(items=items, total=len(items))


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> AnalyticsResponse:
    """Totals, top tags, top domains and 30-day activity for the current user."""
    return await analytics_service.get_analytics(db, current_user.id)


@router.get("/tags", response_model=TagListResponse)
async def list_tags(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> TagListResponse:
    """Tags in use with their bookmark counts, most used first."""
    counts = await bookmark_service.list_tags(db, current_user.id)
    return TagListResponse(tags=[TagCount(tag=tag, count=count) for tag, count in counts])


@router.get("/metadata", response_model=MetadataPreviewResponse)
async def preview_metadata(
    url: str = Query(..., min_length=1, description="URL to enrich"),
    _current_user: User = Depends(get_current_user),
    pipeline: EnrichmentPipeline = Depends(get_enrichment_pipeline),
) -> MetadataPreviewResponse:
    """
    Enrich a URL without saving it.

    Always returns a title, favicon and summary; when every strategy fails they
    are synthesized from the URL and `method` is "fallback".
    """
    result = await pipeline.enrich(url)
    return MetadataPreviewResponse(
        url=result.url,
        title=result.title,
        favicon=result.favicon,
        summary=result.summary,
        method=result.method,
    )


@router.put("/positions", response_model=ReorderResponse)
async def reorder_bookmarks(
    data: BookmarkReorderRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ReorderResponse:
    """Write new manual positions; ids not owned by the user are ignored."""
    updated = await bookmark_service.bulk_reorder(db, current_user.id, data.items)
    return ReorderResponse(updated=updated)


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = await bookmark_service.get_bookmark(db, current_user.id, bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}/tags", response_model=BookmarkResponse)
async def update_bookmark_tags(
    bookmark_id: UUID,
    data: BookmarkTagsUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Replace a bookmark's tags."""
    bookmark = await bookmark_service.update_bookmark_tags(
        db, current_user.id, bookmark_id, data.tags,
    )
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a bookmark."""
    deleted = await bookmark_service.delete_bookmark(db, current_user.id, bookmark_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Bookmark not found")
