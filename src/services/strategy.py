"""Ordered strategy execution shared by metadata extraction and summary generation."""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Generic, TypeVar

from core.config import Settings
from services.retry import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    with_retry,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """One way of obtaining a result for a URL (usually one third-party service)."""

    name: str
    attempt: Callable[[str], Awaitable[T]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings applied to every strategy attempt."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay: float = DEFAULT_INITIAL_DELAY
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
    timeout: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        """Build the policy from application settings."""
        return cls(
            max_attempts=settings.retry_max_attempts,
            initial_delay=settings.retry_initial_delay,
            backoff_factor=settings.retry_backoff_factor,
            timeout=settings.extraction_timeout,
        )


async def first_accepted(
    kind: str,
    strategies: Sequence[Strategy[T]],
    url: str,
    accept: Callable[[T], bool],
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> tuple[str, T] | None:
    """
    Run strategies in order and return the first acceptable result.

    Each strategy is retried according to `policy`. A strategy that still fails,
    or returns a result rejected by `accept`, hands over to the next one.

    Args:
        kind: Label used in log messages ("metadata", "summary").
        strategies: Strategies in priority order.
        url: URL passed to every strategy.
        accept: Predicate deciding whether a result is good enough.
        policy: Retry policy for each strategy.
        sleep: Awaitable sleep used between retries.

    Returns:
        (strategy name, result) of the first accepted result, or None when every
        strategy failed or was rejected.
    """
    for strategy in strategies:
        try:
            result = await with_retry(
                partial(strategy.attempt, url),
                max_attempts=policy.max_attempts,
                initial_delay=policy.initial_delay,
                backoff_factor=policy.backoff_factor,
                timeout=policy.timeout,
                sleep=sleep,
            )
        except Exception as e:
            logger.info("%s strategy %s failed for %s: %s", kind, strategy.name, url, e)
            continue
        if accept(result):
            logger.debug("%s strategy %s succeeded for %s", kind, strategy.name, url)
            return strategy.name, result
        logger.info("%s strategy %s returned an unusable result for %s", kind, strategy.name, url)
    return None
