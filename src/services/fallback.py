"""
Offline title/summary/favicon synthesis from URL structure alone.

These functions are the terminal case of both enrichment pipelines: they never
touch the network and never raise, whatever the input.
"""
import re
from urllib.parse import quote, urlsplit

GENERIC_TITLE = "Saved Link"
GENERIC_SUMMARY = (
    "This is a saved link that you bookmarked for future reference. "
    "The content summary could not be generated automatically, but the page "
    "content is saved for reference."
)

# Embedded star icon used when not even a hostname is available
PLACEHOLDER_FAVICON = (
    "data:image/svg+xml;base64,PHN2ZyB3aWR0aD0iMjQiIGhlaWdodD0iMjQiIHZpZXdCb3g9IjAgMCAy"
    "NCAyNCIgZmlsbD0ibm9uZSIgeG1sbnM9Imh0dHA6Ly93d3cudzMub3JnLzIwMDAvc3ZnIj4KPHBhdGggZD0i"
    "TTEyIDJMMTQgN0gyMUwxNSAxMUwxNyAyMEwxMiAxNkw3IDIwTDkgMTFMMyA3SDEwTDEyIDJaIiBmaWxsPSIj"
    "OTQ5NWE3Ii8+Cjwvc3ZnPgo="
)

DEFAULT_FAVICON_SERVICE = "https://www.google.com/s2/favicons"
DEFAULT_FAVICON_SIZE = 32

# Matched as substrings of the hostname, in this order
DOMAIN_CONTEXTS: dict[str, str] = {
    "github.com": "This is likely a code repository or software project",
    "stackoverflow.com": "This is a programming question and answer",
    "medium.com": "This is an article or blog post",
    "dev.to": "This is a developer community article",
    "youtube.com": "This is a video",
    "twitter.com": "This is a social media post",
    "linkedin.com": "This is professional networking content",
    "reddit.com": "This is a community discussion",
    "wikipedia.org": "This is an encyclopedia article",
    "docs.google.com": "This is a Google document",
    "notion.so": "This is a Notion page or document",
}

MAX_SEGMENT_LENGTH = 50


def _hostname(url: object) -> str:
    if not isinstance(url, str):
        return ""
    try:
        return (urlsplit(url.strip()).hostname or "").lower()
    except ValueError:
        return ""


def _strip_www(hostname: str) -> str:
    return hostname[4:] if hostname.startswith("www.") else hostname


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def _path_segment_title(url: object) -> str:
    """Readable title from the last non-empty path segment ('' when there is none)."""
    if not isinstance(url, str):
        return ""
    try:
        path = urlsplit(url.strip()).path
    except ValueError:
        return ""
    segments = [part for part in path.split("/") if part]
    if not segments:
        return ""
    segment = re.sub(r"[-_]", " ", segments[-1])
    segment = re.sub(r"\.[^.]*$", "", segment)
    words = [_capitalize(word) for word in segment.split()]
    return " ".join(words)


def domain_context(hostname: str) -> str:
    """Return the one-sentence description for a well-known domain, or ''."""
    for domain, context in DOMAIN_CONTEXTS.items():
        if domain in hostname:
            return context
    return ""


def fallback_title(url: object) -> str:
    """
    Build a title from the URL: capitalized first hostname label, plus the last
    path segment when it is short enough ("Github - My Project").
    """
    hostname = _hostname(url)
    if not hostname:
        return GENERIC_TITLE
    domain = _strip_www(hostname)
    title = _capitalize(domain.split(".")[0]) or GENERIC_TITLE

    segment = _path_segment_title(url)
    if 0 < len(segment) < MAX_SEGMENT_LENGTH:
        title += f" - {segment}"
    return title


def fallback_summary(url: object) -> str:
    """Build a summary from the domain and the static domain-context table."""
    hostname = _hostname(url)
    if not hostname:
        return GENERIC_SUMMARY
    domain = _strip_www(hostname)
    context = domain_context(hostname) or f"Saved link from {domain}"
    return f"{context}. This bookmark contains saved content from {domain} for future reference."


def favicon_service_url(
    hostname: str,
    service_url: str = DEFAULT_FAVICON_SERVICE,
    size: int = DEFAULT_FAVICON_SIZE,
) -> str:
    """Favicon-service URL for a hostname: '{service}?domain=<hostname>&sz=<size>'."""
    return f"{service_url}?domain={quote(hostname, safe='.-:')}&sz={size}"


def fallback_favicon(
    url: object,
    service_url: str = DEFAULT_FAVICON_SERVICE,
    size: int = DEFAULT_FAVICON_SIZE,
) -> str:
    """Favicon-service URL for the URL's hostname, or the embedded placeholder."""
    hostname = _hostname(url)
    if not hostname:
        return PLACEHOLDER_FAVICON
    return favicon_service_url(hostname, service_url, size)
