"""Caller-side retry of whole sync rounds.

The engine never retries on its own. A round that failed with NetworkError
has changed nothing locally, so the CLI may run it again after a pause;
the pause doubles on each attempt up to a ceiling.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from typing import TypeVar

from mynk.client.api import NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 0
DEFAULT_INITIAL_BACKOFF = 1.0  # seconds
DEFAULT_MAX_BACKOFF = 60.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0

# Only failures guaranteed to leave no local side effects
RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (NetworkError,)


def backoff_delays(
    count: int,
    initial: float = DEFAULT_INITIAL_BACKOFF,
    ceiling: float = DEFAULT_MAX_BACKOFF,
    multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
) -> Iterator[float]:
    """Yield count pauses growing geometrically from initial, capped at ceiling."""
    delay = initial
    for _ in range(count):
        yield min(delay, ceiling)
        delay *= multiplier


def retry_with_backoff(
    func: Callable[[], T],
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
    max_backoff: float = DEFAULT_MAX_BACKOFF,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
    retryable_exceptions: tuple[type[Exception], ...] = RETRYABLE_EXCEPTIONS,
    on_retry: Callable[[int, Exception, float], None] | None = None,
) -> T:
    """Call func, calling it again after a pause while it fails retryably.

    Args:
        func: The round to run.
        max_retries: Extra attempts after the first (0 runs func once).
        initial_backoff: First pause in seconds.
        max_backoff: Longest pause in seconds.
        backoff_multiplier: Growth factor between pauses.
        retryable_exceptions: Failures worth another attempt.
        on_retry: Called with (attempt, error, delay) before each pause.

    Returns:
        What func returned on its first successful call.

    Raises:
        The error of the final attempt, or any non-retryable error at once.
    """
    delays = backoff_delays(max_retries, initial_backoff, max_backoff, backoff_multiplier)
    for attempt, delay in enumerate(delays, start=1):
        try:
            return func()
        except retryable_exceptions as e:
            logger.warning(
                f"Round {attempt} of {max_retries + 1} failed ({e}), next in {delay:.1f}s"
            )
            if on_retry:
                on_retry(attempt, e, delay)
            time.sleep(delay)

    try:
        return func()
    except retryable_exceptions as e:
        if max_retries:
            logger.error(f"Giving up after {max_retries + 1} rounds: {e}")
        raise
