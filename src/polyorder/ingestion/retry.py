"""Bounded exponential backoff for transient HTTP failures."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

import structlog

from polyorder.errors import Transient

log = structlog.get_logger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float = 0.5, max_delay: float = 8.0) -> float:
    """Delay in seconds before retry number `attempt` (0-based). Exponential, capped."""
    return min(max_delay, base_delay * (2**attempt))


def call_with_retries(
    fn: Callable[[], T],
    *,
    op: str,
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call fn, retrying only on Transient. Other errors propagate immediately."""
    attempt = 0
    while True:
        try:
            return fn()
        except Transient as e:
            if attempt >= max_retries:
                log.warning("retries_exhausted", op=op, attempts=attempt + 1, error=e.message)
                raise
            delay = backoff_delay(attempt, base_delay, max_delay)
            log.info("transient_retry", op=op, attempt=attempt + 1, delay_sec=delay, error=e.message)
            sleep(delay)
            attempt += 1
