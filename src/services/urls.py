"""URL normalization helpers shared by the enrichment pipeline and the store."""
from urllib.parse import unquote_plus, urlsplit, urlunsplit

from services.exceptions import InvalidInputError

# Query parameters that only identify a campaign or click, never the resource
TRACKING_PARAMS = frozenset({
    "fbclid",
    "gclid",
    "dclid",
    "msclkid",
    "mc_cid",
    "mc_eid",
    "igshid",
    "yclid",
    "_hsenc",
    "_hsmi",
})


def is_tracking_param(name: str) -> bool:
    """Check whether a query parameter name is a tracking parameter."""
    lowered = name.lower()
    return lowered.startswith("utm_") or lowered in TRACKING_PARAMS


def strip_tracking_params(query: str) -> str:
    """
    Remove tracking parameters from a raw query string.

    Only the parameter names are decoded (to recognize them); kept parameters
    are not re-encoded. Empty segments (`a=1&&b=2`) are dropped.
    """
    kept = [
        segment
        for segment in query.split("&")
        if segment and not is_tracking_param(unquote_plus(segment.split("=", 1)[0]))
    ]
    return "&".join(kept)


def normalize_url(url: str) -> str:
    """
    Validate and normalize an absolute http(s) URL.

    - scheme and hostname are lower-cased
    - user credentials (`user:pass@`) are dropped
    - tracking query parameters are removed; the remaining parameters are
      kept byte for byte, in their original order
    - the fragment is dropped

    Args:
        url: URL submitted by the user.

    Returns:
        The normalized URL.

    Raises:
        InvalidInputError: If the URL is not an absolute http(s) URL with a hostname.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidInputError("URL cannot be empty")

    candidate = url.strip()
    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        port = parts.port
    except ValueError as e:
        raise InvalidInputError(f"Invalid URL: {candidate}") from e

    scheme = parts.scheme.lower()
    if scheme not in ("http", "https"):
        raise InvalidInputError(f"Invalid URL (must start with http:// or https://): {candidate}")
    if not hostname:
        raise InvalidInputError(f"Invalid URL (no hostname): {candidate}")

    netloc = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None:
        netloc = f"{netloc}:{port}"

    query = strip_tracking_params(parts.query)
    path = parts.path or "/"

    return urlunsplit((scheme, netloc, path, query, ""))


def get_hostname(url: str) -> str:
    """Return the lower-cased hostname of a URL, or an empty string if unparseable."""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def get_domain(url: str) -> str:
    """Return the hostname without a leading 'www.' (empty string if unparseable)."""
    hostname = get_hostname(url)
    if hostname.startswith("www."):
        return hostname[4:]
    return hostname
