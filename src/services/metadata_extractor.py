"""Metadata extraction: title and favicon for a URL with ordered fallback."""
import asyncio
import html
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from core.config import Settings
from services.fallback import fallback_favicon, fallback_title
from services.fetchers import fetch_opengraph, fetch_page, fetch_textract, fetch_via_proxy
from services.result_cache import ResultCache, metadata_key
from services.strategy import RetryPolicy, Strategy, first_accepted
from services.url_scraper import extract_html_metadata, extract_pdf_metadata
from services.urls import normalize_url

logger = logging.getLogger(__name__)

FALLBACK_METHOD = "fallback"
MIN_TITLE_LENGTH = 3  # accepted titles must be longer than this


@dataclass(frozen=True)
class MetadataCandidate:
    """Raw title/favicon returned by one strategy, before cleaning."""

    title: str | None
    favicon: str | None = None


@dataclass(frozen=True)
class PageMetadata:
    """Display-ready metadata and the name of the strategy that produced it."""

    title: str
    favicon: str
    method: str


def clean_title(raw: str | None, max_length: int) -> str:
    """Strip tags and entities, collapse whitespace and cap the length of a title."""
    if not raw:
        return ""
    text = re.sub(r"<[^>]*>", " ", raw)
    text = html.unescape(text)
    text = re.sub(r"\s+", " ", text).strip()
    if len(text) > max_length:
        text = text[:max_length].rstrip()
    return text


def _nested(data: dict[str, Any], *keys: str) -> Any:
    value: Any = data
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def default_metadata_strategies(settings: Settings) -> list[Strategy[MetadataCandidate]]:
    """Strategies in priority order: structured extraction, Open Graph, direct fetch, proxy."""

    async def textract(url: str) -> MetadataCandidate:
        data = await fetch_textract(url, settings)
        title = data.get("title")
        return MetadataCandidate(title=title if isinstance(title, str) else None)

    async def opengraph(url: str) -> MetadataCandidate:
        data = await fetch_opengraph(url, settings)
        title = _nested(data, "hybridGraph", "title") or _nested(data, "openGraph", "title")
        favicon = _nested(data, "hybridGraph", "favicon")
        return MetadataCandidate(
            title=title if isinstance(title, str) else None,
            favicon=favicon if isinstance(favicon, str) else None,
        )

    async def direct(url: str) -> MetadataCandidate:
        result = await fetch_page(url, settings)
        if result.is_pdf:
            meta = extract_pdf_metadata(result.content)
        else:
            meta = extract_html_metadata(result.content, base_url=result.final_url)
        return MetadataCandidate(title=meta.title, favicon=meta.favicon)

    async def proxy(url: str) -> MetadataCandidate:
        page = await fetch_via_proxy(url, settings)
        meta = extract_html_metadata(page, base_url=url)
        return MetadataCandidate(title=meta.title, favicon=meta.favicon)

    return [
        Strategy("textract", textract),
        Strategy("opengraph", opengraph),
        Strategy("direct", direct),
        Strategy("proxy", proxy),
    ]


class MetadataExtractor:
    """
    Produce a title and favicon for a URL.

    Strategies are tried in order (each with retries); the first one whose cleaned
    title is longer than three characters wins. When all of them fail the result
    is synthesized from the URL and marked with method "fallback". Apart from
    rejecting malformed URLs, `extract` never raises.
    """

    def __init__(
        self,
        strategies: Sequence[Strategy[MetadataCandidate]],
        settings: Settings,
        cache: ResultCache | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.strategies = list(strategies)
        self.settings = settings
        self.cache = cache
        self.policy = RetryPolicy.from_settings(settings)
        self._sleep = sleep

    def _accept(self, candidate: MetadataCandidate) -> bool:
        return len(clean_title(candidate.title, self.settings.max_title_length)) > MIN_TITLE_LENGTH

    def fallback(self, url: str) -> PageMetadata:
        """Metadata synthesized from the URL alone."""
        return PageMetadata(
            title=clean_title(fallback_title(url), self.settings.max_title_length),
            favicon=fallback_favicon(
                url, self.settings.favicon_service_url, self.settings.favicon_size,
            ),
            method=FALLBACK_METHOD,
        )

    async def extract(self, url: str) -> PageMetadata:
        """
        Extract metadata for a URL.

        Raises:
            InvalidInputError: If the URL is malformed (before any network call).
        """
        url = normalize_url(url)
        key = metadata_key(url)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        accepted = await first_accepted(
            "metadata", self.strategies, url, self._accept, self.policy, self._sleep,
        )
        if accepted is None:
            logger.warning("all metadata strategies failed for %s; using fallback", url)
            return self.fallback(url)

        method, candidate = accepted
        metadata = PageMetadata(
            title=clean_title(candidate.title, self.settings.max_title_length),
            favicon=candidate.favicon or fallback_favicon(
                url, self.settings.favicon_service_url, self.settings.favicon_size,
            ),
            method=method,
        )
        if self.cache is not None:
            self.cache.put(key, metadata)
        return metadata
