"""
Shared validation functions for Pydantic schemas and the service layer.

Tag normalization lives here so the same rules apply to request bodies, query
parameters and service calls.
"""
import re
from collections.abc import Iterable

from core.config import get_settings

# Tag format after normalization: lowercase letters, digits, spaces, hyphens, underscores
TAG_PATTERN = re.compile(r"^[a-z0-9 _-]+$")

DEFAULT_MAX_TAGS = 15
DEFAULT_MAX_TAG_LENGTH = 50


def normalize_preview(value: str | None) -> str | None:
    """Collapse newlines, tabs, and runs of whitespace in a text preview."""
    if value is None:
        return None
    return re.sub(r"\s+", " ", value).strip()


def normalize_tag(tag: object, max_length: int = DEFAULT_MAX_TAG_LENGTH) -> str | None:
    """
    Normalize a single tag.

    Args:
        tag: Raw tag as supplied by the user.
        max_length: Maximum accepted length after trimming.

    Returns:
        The normalized tag (trimmed, lowercase, inner whitespace collapsed), or None
        if the tag is empty, too long, not a string, or contains disallowed characters.
    """
    if not isinstance(tag, str):
        return None
    normalized = normalize_preview(tag.lower())
    if not normalized or len(normalized) > max_length:
        return None
    if not TAG_PATTERN.match(normalized):
        return None
    return normalized


def normalize_tags(
    tags: Iterable[object] | None,
    max_tags: int = DEFAULT_MAX_TAGS,
    max_length: int = DEFAULT_MAX_TAG_LENGTH,
) -> list[str]:
    """
    Normalize a list of user-supplied tags.

    Invalid entries are dropped rather than rejected, duplicates are removed
    preserving first occurrence order, and the result is capped at `max_tags`.
    Normalizing an already-normalized list returns it unchanged.

    Args:
        tags: Raw tags (None is treated as an empty list).
        max_tags: Maximum number of tags kept.
        max_length: Maximum length of a single tag.

    Returns:
        List of normalized, unique tags.
    """
    if not tags:
        return []
    normalized: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        cleaned = normalize_tag(tag, max_length)
        if cleaned is None or cleaned in seen:
            continue
        seen.add(cleaned)
        normalized.append(cleaned)
        if len(normalized) >= max_tags:
            break
    return normalized


def normalize_tags_from_settings(tags: Iterable[object] | None) -> list[str]:
    """Normalize tags using the caps configured in Settings."""
    settings = get_settings()
    return normalize_tags(tags, max_tags=settings.max_tags, max_length=settings.max_tag_length)
