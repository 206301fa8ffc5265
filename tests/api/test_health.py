"""Tests for the health check endpoint."""
import pytest
from httpx import AsyncClient

from services.enrichment import EnrichmentPipeline
from services.result_cache import ResultCache


@pytest.fixture
def started_app(stub_pipeline: EnrichmentPipeline, monkeypatch: pytest.MonkeyPatch) -> ResultCache:
    """Put the objects created by the lifespan handler on app.state."""
    from api.main import app

    cache = ResultCache()
    monkeypatch.setattr(app.state, "enrichment_pipeline", stub_pipeline, raising=False)
    monkeypatch.setattr(app.state, "result_cache", cache, raising=False)
    return cache


async def test_health_after_startup(client: AsyncClient, started_app: ResultCache) -> None:
    """Database reachable and pipeline created means healthy."""
    started_app.put("metadata:https://example.com/", object())

    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "database": "healthy",
        "enrichment": "ready",
        "cached_results": 1,
    }


async def test_health_without_pipeline_is_degraded(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Before startup has created the pipeline the service is degraded."""
    from api.main import app

    monkeypatch.delattr(app.state, "enrichment_pipeline", raising=False)
    monkeypatch.delattr(app.state, "result_cache", raising=False)

    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "healthy"
    assert data["enrichment"] == "unavailable"
    assert data["cached_results"] is None
