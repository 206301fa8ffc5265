"""FastAPI dependencies for injection."""
from fastapi import Request

from core.auth import get_current_user
from core.config import get_settings
from db.session import get_async_session
from services.enrichment import EnrichmentPipeline


def get_enrichment_pipeline(request: Request) -> EnrichmentPipeline:
    """Return the enrichment pipeline created at application startup."""
    return request.app.state.enrichment_pipeline


__all__ = [
    "get_async_session",
    "get_current_user",
    "get_enrichment_pipeline",
    "get_settings",
]
