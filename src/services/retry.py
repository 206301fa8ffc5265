"""Retry with exponential backoff for enrichment strategy attempts."""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 1.0
DEFAULT_BACKOFF_FACTOR = 1.5


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    timeout: float | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await `operation()` until it succeeds or `max_attempts` attempts have failed.

    Attempts run one after another, never concurrently. Between attempts the
    caller's task sleeps for `delay`, which starts at `initial_delay` and is
    multiplied by `backoff_factor` after every failure. Other tasks keep running
    while this one waits.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt.
        max_attempts: Total number of attempts (at least 1).
        initial_delay: Seconds to wait before the second attempt.
        backoff_factor: Multiplier applied to the delay after each failed attempt.
        timeout: Optional per-attempt timeout in seconds.
        sleep: Awaitable sleep function (injectable for tests).

    Returns:
        The result of the first successful attempt.

    Raises:
        ValueError: If max_attempts is less than 1.
        Exception: The last attempt's exception once all attempts are exhausted.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    delay = initial_delay
    for attempt in range(1, max_attempts + 1):
        try:
            if timeout is None:
                return await operation()
            return await asyncio.wait_for(operation(), timeout=timeout)
        except Exception as e:
            if attempt == max_attempts:
                raise
            logger.debug(
                "attempt %d/%d failed (%s); retrying in %.2fs",
                attempt, max_attempts, e, delay,
            )
            await sleep(delay)
            delay *= backoff_factor

    # Unreachable: the loop either returns or re-raises
    raise RuntimeError("with_retry exhausted without result")
