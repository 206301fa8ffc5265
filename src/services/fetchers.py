"""
Thin adapters over the third-party extraction services.

Each adapter performs one outbound call and either returns the raw payload the
strategies need or raises ExtractionFailure. Parsing of the payload into titles
and summaries happens in the metadata extractor / summary generator.
"""
import logging
from typing import Any
from urllib.parse import quote

import httpx

from core.config import Settings
from services.exceptions import ExtractionFailure
from services.url_scraper import USER_AGENT, FetchResult, fetch_url

logger = logging.getLogger(__name__)


async def _request_json(
    source: str,
    method: str,
    endpoint: str,
    timeout: float,  # noqa: ASYNC109
    params: dict[str, str] | None = None,
    json_body: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Call a JSON endpoint and return the decoded object.

    Raises:
        ExtractionFailure: On transport errors, non-2xx responses, or a body that is
            not a JSON object.
    """
    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT, 'Accept': 'application/json'},
        ) as client:
            response = await client.request(method, endpoint, params=params, json=json_body)
    except httpx.TimeoutException as e:
        raise ExtractionFailure(source, "request timed out") from e
    except httpx.RequestError as e:
        raise ExtractionFailure(source, f"request failed: {e}") from e

    if not response.is_success:
        raise ExtractionFailure(source, f"returned status {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        raise ExtractionFailure(source, "response was not valid JSON") from e
    if not isinstance(data, dict):
        raise ExtractionFailure(source, "response was not a JSON object")
    return data


async def fetch_textract(url: str, settings: Settings) -> dict[str, Any]:
    """Structured extraction service: returns a JSON object with `title` and `content`."""
    return await _request_json(
        'textract',
        'GET',
        settings.textract_api_url,
        settings.extraction_timeout,
        params={'url': url},
    )


async def fetch_opengraph(url: str, settings: Settings) -> dict[str, Any]:
    """Open Graph service: returns `hybridGraph` / `openGraph` objects for the page."""
    endpoint = f"{settings.opengraph_api_url.rstrip('/')}/{quote(url, safe='')}"
    return await _request_json(
        'opengraph',
        'GET',
        endpoint,
        settings.extraction_timeout,
        params={'app_id': settings.opengraph_app_id},
    )


async def fetch_via_proxy(url: str, settings: Settings) -> str:
    """
    Fetch raw page HTML through the CORS proxy service.

    Raises:
        ExtractionFailure: If the proxy fails or returns no HTML.
    """
    data = await _request_json(
        'proxy',
        'GET',
        settings.cors_proxy_url,
        settings.extraction_timeout,
        params={'url': url},
    )
    contents = data.get('contents')
    if not isinstance(contents, str) or not contents.strip():
        raise ExtractionFailure('proxy', "no page contents returned")
    return contents


async def fetch_summarizer(url: str, settings: Settings) -> str:
    """
    Ask the configured summarizer service for a summary of the page.

    Raises:
        ExtractionFailure: If no summarizer is configured or it returns no summary.
    """
    if not settings.summarizer_api_url:
        raise ExtractionFailure('summarizer', "no summarizer configured")
    data = await _request_json(
        'summarizer',
        'POST',
        settings.summarizer_api_url,
        settings.extraction_timeout,
        json_body={'url': url},
    )
    summary = data.get('summary')
    if not isinstance(summary, str) or not summary.strip():
        raise ExtractionFailure('summarizer', "no summary returned")
    return summary


async def fetch_page(url: str, settings: Settings) -> FetchResult:
    """
    Fetch the page directly (SSRF-guarded).

    Raises:
        ExtractionFailure: If the fetch reports an error or returns no content.
    """
    result = await fetch_url(url, timeout=settings.extraction_timeout)
    if result.error or result.content is None:
        raise ExtractionFailure('direct', result.error or "empty response")
    return result
