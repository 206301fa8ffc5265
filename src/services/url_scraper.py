"""URL scraping service for fetching pages and extracting metadata and text."""
import html as html_lib
import ipaddress
import re
import socket
from dataclasses import dataclass
from io import BytesIO
from urllib.parse import urljoin, urlparse

import httpx
import trafilatura
from bs4 import BeautifulSoup
from pypdf import PdfReader

USER_AGENT = 'Mozilla/5.0 (compatible; LinkSaver/1.0)'
DEFAULT_TIMEOUT = 10.0

# Elements tried in order when scraping raw text nodes; the first that matches wins
CONTENT_SELECTORS = ('article', 'main', 'div[class*="content"]', 'p')
MIN_SENTENCE_LENGTH = 20
MAX_SENTENCES = 3
RAW_TEXT_FALLBACK_LENGTH = 200


class SSRFBlockedError(Exception):
    """Raised when a URL targets a private/internal network address."""

    pass


def is_private_ip(ip_str: str) -> bool:
    """
    Check if an IP address is private, loopback, or otherwise internal.

    Args:
        ip_str: IP address string (IPv4 or IPv6).

    Returns:
        True if the IP is private/internal, False if public.
    """
    try:
        ip = ipaddress.ip_address(ip_str)
        return (
            ip.is_private
            or ip.is_loopback
            or ip.is_link_local
            or ip.is_multicast
            or ip.is_reserved
            or ip.is_unspecified
        )
    except ValueError:
        # If we can't parse it, block it to be safe
        return True


def validate_url_not_private(url: str) -> None:
    """
    Validate that a URL does not target a private/internal network.

    Resolves the hostname to check the actual IP address, preventing
    DNS rebinding attacks where a hostname resolves to an internal IP.

    Raises:
        SSRFBlockedError: If the URL targets a private network.
        ValueError: If the URL is malformed or the hostname does not resolve.
    """
    parsed = urlparse(url)
    hostname = parsed.hostname

    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")

    if hostname.lower() in ('localhost', 'localhost.localdomain'):
        raise SSRFBlockedError(f"Blocked request to localhost: {url}")

    try:
        addrinfo = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ValueError(f"Could not resolve hostname: {hostname}") from e
    for _, _, _, _, sockaddr in addrinfo:
        ip_str = sockaddr[0]
        if is_private_ip(ip_str):
            raise SSRFBlockedError(
                f"Blocked request to private/internal address: {url} resolves to {ip_str}",
            )


@dataclass
class FetchResult:
    """Result of fetching a URL (raw content before extraction)."""

    content: str | bytes | None  # str for HTML, bytes for PDF
    final_url: str
    status_code: int | None
    content_type: str | None
    error: str | None

    @property
    def is_pdf(self) -> bool:
        """Check if the content type indicates a PDF."""
        return bool(self.content_type and 'application/pdf' in self.content_type.lower())

    @property
    def is_html(self) -> bool:
        """Check if the content type indicates HTML."""
        return bool(self.content_type and 'text/html' in self.content_type.lower())


@dataclass
class ExtractedMetadata:
    """Title, description and favicon extracted from HTML or PDF."""

    title: str | None
    description: str | None
    favicon: str | None = None


async def fetch_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> FetchResult:  # noqa: ASYNC109, PLR0911
    """
    Fetch content from a URL (HTML or PDF).

    Best-effort fetch that returns error info on failure rather than raising.
    Follows redirects and captures the final URL.

    Security: Validates that the URL does not target private/internal networks
    to prevent SSRF attacks, both before the request and after redirects.

    Args:
        url:
            The URL to fetch.
        timeout:
            Request timeout in seconds.

    Returns:
        FetchResult containing content (str for HTML, bytes for PDF) or error info.
    """
    try:
        validate_url_not_private(url)
    except (SSRFBlockedError, ValueError) as e:
        return FetchResult(
            content=None,
            final_url=url,
            status_code=None,
            content_type=None,
            error=str(e),
        )

    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
            http2=True,
        ) as client:
            response = await client.get(url)

            final_url_str = str(response.url)
            try:
                validate_url_not_private(final_url_str)
            except (SSRFBlockedError, ValueError) as e:
                return FetchResult(
                    content=None,
                    final_url=final_url_str,
                    status_code=response.status_code,
                    content_type=None,
                    error=f"Redirect blocked: {e}",
                )

            if not response.is_success:
                return FetchResult(
                    content=None,
                    final_url=final_url_str,
                    status_code=response.status_code,
                    content_type=response.headers.get('content-type', ''),
                    error=f"HTTP {response.status_code}",
                )

            content_type = response.headers.get('content-type', '')

            if 'application/pdf' in content_type.lower():
                return FetchResult(
                    content=response.content,
                    final_url=final_url_str,
                    status_code=response.status_code,
                    content_type=content_type,
                    error=None,
                )
            if 'text/html' in content_type.lower():
                return FetchResult(
                    content=response.text,
                    final_url=final_url_str,
                    status_code=response.status_code,
                    content_type=content_type,
                    error=None,
                )
            return FetchResult(
                content=None,
                final_url=final_url_str,
                status_code=response.status_code,
                content_type=content_type,
                error=f"Unsupported content type: {content_type}",
            )
    except httpx.TimeoutException:
        return FetchResult(
            content=None,
            final_url=url,
            status_code=None,
            content_type=None,
            error="Request timed out",
        )
    except httpx.RequestError as e:
        return FetchResult(
            content=None,
            final_url=url,
            status_code=None,
            content_type=None,
            error=f"Request failed: {e}",
        )


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str | None:
    tag = soup.find('meta', attrs=attrs)
    if tag and tag.get('content'):
        return tag['content'].strip() or None
    return None


def extract_html_metadata(html: str, base_url: str | None = None) -> ExtractedMetadata:
    """
    Extract title, description and favicon from HTML.

    Pure function with no I/O. Uses BeautifulSoup for parsing.

    Title extraction priority:
    1. <title> tag
    2. <meta property="og:title">
    3. <meta name="twitter:title">

    Description extraction priority:
    1. <meta name="description">
    2. <meta property="og:description">
    3. <meta name="twitter:description">

    Favicon: first <link rel="icon"> / "shortcut icon" / "apple-touch-icon",
    resolved against `base_url` when given.

    Args:
        html:
            Raw HTML string to parse.
        base_url:
            URL the HTML was served from, used to resolve relative icon links.

    Returns:
        ExtractedMetadata (fields may be None if not found).
    """
    soup = BeautifulSoup(html, 'lxml')

    title = None
    title_tag = soup.find('title')
    if title_tag and title_tag.string:
        title = title_tag.string.strip() or None
    if not title:
        title = _meta_content(soup, property='og:title')
    if not title:
        title = _meta_content(soup, name='twitter:title')

    description = _meta_content(soup, name='description')
    if not description:
        description = _meta_content(soup, property='og:description')
    if not description:
        description = _meta_content(soup, name='twitter:description')

    favicon = None
    for link in soup.find_all('link', href=True):
        rel = link.get('rel') or []
        rel_values = {value.lower() for value in rel} if isinstance(rel, list) else {rel.lower()}
        if rel_values & {'icon', 'apple-touch-icon'}:
            href = link['href'].strip()
            if href:
                favicon = urljoin(base_url, href) if base_url else href
                break

    return ExtractedMetadata(title=title, description=description, favicon=favicon)


def extract_html_content(html: str) -> str | None:
    """
    Extract main readable content from HTML using trafilatura.

    Pure function with no I/O. Returns plain text extracted from the page,
    stripping navigation, scripts, styles, and other non-content elements.

    Returns:
        Extracted plain text content, or None if extraction fails.
    """
    return trafilatura.extract(html)


def extract_text_nodes(html: str) -> str:
    """
    Scrape visible text straight from HTML text nodes.

    Scripts and styles are dropped, then the first selector in CONTENT_SELECTORS
    that matches anything supplies the text (whole document otherwise). Returns the
    first few reasonably long sentences, or the first characters of the text when
    no sentence qualifies.
    """
    soup = BeautifulSoup(html, 'lxml')
    for tag in soup(['script', 'style', 'noscript']):
        tag.decompose()

    text = ''
    for selector in CONTENT_SELECTORS:
        matches = soup.select(selector)
        if matches:
            text = ' '.join(match.get_text(' ') for match in matches)
            break
    if not text:
        text = soup.get_text(' ')

    text = html_lib.unescape(text)
    text = re.sub(r'\s+', ' ', text).strip()

    sentences = [s.strip() for s in re.split(r'[.!?]+', text) if len(s.strip()) > MIN_SENTENCE_LENGTH]
    summary = '. '.join(sentences[:MAX_SENTENCES]).strip()
    if summary:
        return summary + '.'
    return text[:RAW_TEXT_FALLBACK_LENGTH]


def extract_pdf_metadata(pdf_bytes: bytes) -> ExtractedMetadata:
    """
    Extract title and description from PDF document metadata.

    Uses /Title for the title and /Subject for the description. PDF metadata is
    often missing or auto-generated junk, so expect None values frequently.
    """
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
        meta = reader.metadata

        title = meta.title if meta and meta.title else None
        description = meta.subject if meta and meta.subject else None

        return ExtractedMetadata(title=title, description=description)
    except Exception:
        return ExtractedMetadata(title=None, description=None)


def extract_pdf_content(pdf_bytes: bytes) -> str | None:
    """
    Extract text content from all PDF pages.

    Returns concatenated text from all pages, or None if extraction fails
    or the PDF contains no extractable text (e.g., scanned images).
    """
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
        text_parts = []
        for page in reader.pages:
            text = page.extract_text()
            if text:
                text_parts.append(text)

        return '\n'.join(text_parts) if text_parts else None
    except Exception:
        return None
