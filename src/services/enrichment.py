"""Bookmark enrichment: metadata and summary for a URL, computed concurrently."""
import asyncio
import logging
from dataclasses import dataclass

from core.config import Settings
from services.metadata_extractor import MetadataExtractor, default_metadata_strategies
from services.result_cache import ResultCache
from services.summary_generator import SummaryGenerator, default_summary_strategies
from services.urls import normalize_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrichmentResult:
    """Everything derived for a bookmark before it is stored."""

    url: str
    title: str
    favicon: str
    summary: str
    method: str


class EnrichmentPipeline:
    """
    Runs metadata extraction and summary generation for one URL.

    Both halves run concurrently and settle independently: a failure on one side
    is replaced by that side's fallback and never cancels the other.
    """

    def __init__(
        self,
        metadata_extractor: MetadataExtractor,
        summary_generator: SummaryGenerator,
    ) -> None:
        self.metadata_extractor = metadata_extractor
        self.summary_generator = summary_generator

    async def enrich(self, url: str) -> EnrichmentResult:
        """
        Enrich a URL.

        Raises:
            InvalidInputError: If the URL is malformed. No network call is made.
        """
        url = normalize_url(url)
        metadata, summary = await asyncio.gather(
            self.metadata_extractor.extract(url),
            self.summary_generator.summarize(url),
            return_exceptions=True,
        )

        if isinstance(metadata, BaseException):
            logger.error("metadata extraction crashed for %s", url, exc_info=metadata)
            metadata = self.metadata_extractor.fallback(url)
        if isinstance(summary, BaseException):
            logger.error("summary generation crashed for %s", url, exc_info=summary)
            summary = self.summary_generator.fallback(url)

        return EnrichmentResult(
            url=url,
            title=metadata.title,
            favicon=metadata.favicon,
            summary=summary,
            method=metadata.method,
        )


def build_enrichment_pipeline(settings: Settings, cache: ResultCache) -> EnrichmentPipeline:
    """Wire the default strategy lists and the shared result cache into a pipeline."""
    return EnrichmentPipeline(
        MetadataExtractor(default_metadata_strategies(settings), settings, cache),
        SummaryGenerator(default_summary_strategies(settings), settings, cache),
    )
