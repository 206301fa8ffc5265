"""Health check endpoints."""
import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_async_session


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Database and enrichment readiness."""

    status: str
    database: str
    enrichment: str
    cached_results: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """
    Report whether bookmarks can be stored and enriched.

    The pipeline and result cache are created at startup; until then (or if
    startup failed) enrichment is reported as unavailable.
    """
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database health check failed")
        db_status = "unhealthy"

    pipeline = getattr(request.app.state, "enrichment_pipeline", None)
    cache = getattr(request.app.state, "result_cache", None)
    enrichment_status = "ready" if pipeline is not None else "unavailable"

    return HealthResponse(
        status="healthy" if db_status == "healthy" and pipeline is not None else "degraded",
        database=db_status,
        enrichment=enrichment_status,
        cached_results=len(cache) if cache is not None else None,
    )
