"""Shared exceptions for service layer operations."""
from datetime import UTC, datetime
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error codes reported to API clients, one per store operation."""

    INVALID_INPUT = "INVALID_INPUT"
    CREATE_BOOKMARK_FAILED = "CREATE_BOOKMARK_FAILED"
    FETCH_BOOKMARKS_FAILED = "FETCH_BOOKMARKS_FAILED"
    DELETE_BOOKMARK_FAILED = "DELETE_BOOKMARK_FAILED"
    UPDATE_TAGS_FAILED = "UPDATE_TAGS_FAILED"
    UPDATE_POSITIONS_FAILED = "UPDATE_POSITIONS_FAILED"
    SEARCH_BOOKMARKS_FAILED = "SEARCH_BOOKMARKS_FAILED"
    FETCH_TAGS_FAILED = "FETCH_TAGS_FAILED"
    ANALYTICS_FAILED = "ANALYTICS_FAILED"


class InvalidInputError(ValueError):
    """
    Raised when caller input is malformed (e.g. a URL without scheme or host).

    Reported to API clients as HTTP 400 with code INVALID_INPUT.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ExtractionFailure(Exception):
    """
    Raised when a single enrichment strategy fails.

    Always caught inside the metadata extractor / summary generator, which move on
    to the next strategy. Never reaches API callers.
    """

    def __init__(self, strategy: str, message: str) -> None:
        self.strategy = strategy
        super().__init__(f"{strategy}: {message}")


class PersistenceError(Exception):
    """
    Raised when a store read or write fails.

    Carries a stable error code per operation and the time of failure so the API
    layer can report both to the client unchanged.
    """

    def __init__(self, code: ErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        self.timestamp = datetime.now(UTC)
        super().__init__(f"{code}: {message}")
