"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import bookmarks, health
from core.config import get_settings
from models.base import utc_now
from schemas.errors import ErrorResponse
from services.enrichment import build_enrichment_pipeline
from services.exceptions import ErrorCode, InvalidInputError, PersistenceError
from services.result_cache import ResultCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()
    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Startup: one result cache shared by every enrichment for the process lifetime
    cache = ResultCache(ttl_seconds=app_settings.cache_ttl_seconds)
    app.state.result_cache = cache
    app.state.enrichment_pipeline = build_enrichment_pipeline(app_settings, cache)
    logger.info("Enrichment pipeline ready (cache ttl=%ss)", app_settings.cache_ttl_seconds)

    yield

    # Shutdown: drop cached enrichment results
    cache.clear()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # HSTS: enforce HTTPS for 1 year, including subdomains
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        return response


app_settings = get_settings()

app = FastAPI(
    title="Link Saver API",
    description="Bookmarks enriched with title, favicon and summary, with tags, "
                "manual ordering, search and analytics.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(InvalidInputError)
async def invalid_input_exception_handler(
    _request: Request, exc: InvalidInputError,
) -> JSONResponse:
    """Malformed caller input (e.g. a URL without scheme or host)."""
    body = ErrorResponse(code=ErrorCode.INVALID_INPUT, message=str(exc), timestamp=utc_now())
    return JSONResponse(status_code=400, content=body.model_dump(mode="json"))


@app.exception_handler(PersistenceError)
async def persistence_exception_handler(
    _request: Request, exc: PersistenceError,
) -> JSONResponse:
    """Store failures keep their operation code and time of failure."""
    body = ErrorResponse(code=exc.code, message=exc.message, timestamp=exc.timestamp)
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(bookmarks.router)
