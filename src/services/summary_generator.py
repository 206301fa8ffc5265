"""Summary generation for a URL with ordered fallback and readability clean-up."""
import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence

from core.config import Settings
from services.exceptions import ExtractionFailure
from services.fallback import fallback_summary
from services.fetchers import fetch_page, fetch_summarizer, fetch_textract, fetch_via_proxy
from services.result_cache import ResultCache, summary_key
from services.strategy import RetryPolicy, Strategy, first_accepted
from services.url_scraper import extract_html_content, extract_pdf_content, extract_text_nodes
from services.urls import normalize_url

logger = logging.getLogger(__name__)

MIN_SUMMARY_LENGTH = 50  # accepted text must be longer than this
ELLIPSIS = "..."
# A sentence end inside the last 40% of the window is a good enough cut point
SENTENCE_CUT_RATIO = 0.6

LEAD_IN_PATTERN = re.compile(
    r"^(?:this is an?|this is|this page|this article|the following|here is|welcome to)\b[\s:,-]*",
    re.IGNORECASE,
)
FILLER_PATTERN = re.compile(
    r"\b(?:click here|read more|learn more|continue reading)\b[.!:]*",
    re.IGNORECASE,
)


def collapse_whitespace(text: str) -> str:
    """Replace runs of whitespace with single spaces and trim."""
    return re.sub(r"\s+", " ", text).strip()


def truncate_summary(text: str, max_length: int) -> str:
    """
    Cap a summary at `max_length` characters.

    Cuts after the last sentence end when one falls late enough in the window
    (no ellipsis needed); otherwise cuts at the last word boundary and appends
    an ellipsis, which counts toward the limit.
    """
    if len(text) <= max_length:
        return text

    # One extra character so a sentence ending exactly at the limit is found
    window = text[: max_length + 1]
    sentence_end = max(window.rfind(". "), window.rfind("! "), window.rfind("? "))
    if sentence_end >= int(max_length * SENTENCE_CUT_RATIO):
        return window[: sentence_end + 1]

    cut = text[: max_length - len(ELLIPSIS)]
    space = cut.rfind(" ")
    if space > 0:
        cut = cut[:space]
    return cut.rstrip(" ,;:-") + ELLIPSIS


def clean_summary(text: str, max_length: int) -> str:
    """
    Make extracted text presentable as a summary.

    Collapses whitespace, strips a boilerplate lead-in and filler phrases,
    re-capitalizes the first letter and truncates to `max_length`.
    """
    collapsed = collapse_whitespace(text)
    cleaned = LEAD_IN_PATTERN.sub("", collapsed, count=1)
    cleaned = collapse_whitespace(FILLER_PATTERN.sub("", cleaned))
    if not cleaned:
        cleaned = collapsed
    cleaned = cleaned[:1].upper() + cleaned[1:]
    return truncate_summary(cleaned, max_length)


def default_summary_strategies(settings: Settings) -> list[Strategy[str]]:
    """
    Strategies in priority order: structured extraction, summarizer service (when
    configured), readable-content extraction from the page, raw text-node scraping
    through the proxy.
    """

    async def textract(url: str) -> str:
        data = await fetch_textract(url, settings)
        content = data.get("content")
        if not isinstance(content, str):
            raise ExtractionFailure("textract", "no content extracted")
        return content

    async def summarizer(url: str) -> str:
        return await fetch_summarizer(url, settings)

    async def readability(url: str) -> str:
        result = await fetch_page(url, settings)
        if result.is_pdf:
            text = extract_pdf_content(result.content)
        else:
            text = extract_html_content(result.content)
        if not text:
            raise ExtractionFailure("readability", "no readable content")
        return text

    async def proxy(url: str) -> str:
        page = await fetch_via_proxy(url, settings)
        return extract_text_nodes(page)

    strategies = [Strategy("textract", textract)]
    if settings.summarizer_api_url:
        strategies.append(Strategy("summarizer", summarizer))
    strategies.extend([
        Strategy("readability", readability),
        Strategy("proxy", proxy),
    ])
    return strategies


class SummaryGenerator:
    """
    Produce a short textual summary for a URL.

    Strategies are tried in order (each with retries); the first text longer than
    50 characters is cleaned and returned. When all of them fail the summary is
    synthesized from the URL. Apart from rejecting malformed URLs, `summarize`
    never raises.
    """

    def __init__(
        self,
        strategies: Sequence[Strategy[str]],
        settings: Settings,
        cache: ResultCache | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.strategies = list(strategies)
        self.settings = settings
        self.cache = cache
        self.policy = RetryPolicy.from_settings(settings)
        self._sleep = sleep

    @staticmethod
    def _accept(text: str) -> bool:
        return isinstance(text, str) and len(collapse_whitespace(text)) > MIN_SUMMARY_LENGTH

    def fallback(self, url: str) -> str:
        """Summary synthesized from the URL alone."""
        return truncate_summary(fallback_summary(url), self.settings.max_summary_length)

    async def summarize(self, url: str) -> str:
        """
        Generate a summary for a URL.

        Raises:
            InvalidInputError: If the URL is malformed (before any network call).
        """
        url = normalize_url(url)
        key = summary_key(url)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        accepted = await first_accepted(
            "summary", self.strategies, url, self._accept, self.policy, self._sleep,
        )
        if accepted is None:
            logger.warning("all summary strategies failed for %s; using fallback", url)
            return self.fallback(url)

        _, text = accepted
        summary = clean_summary(text, self.settings.max_summary_length)
        if self.cache is not None:
            self.cache.put(key, summary)
        return summary
