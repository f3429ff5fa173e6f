# mc_core/common/retry.py
from __future__ import annotations

import logging
import random
import time
from typing import Callable, Tuple, Type, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, base_delay: float, jitter: float | None = None) -> float:
    """
    Delay before retry number `attempt` (0-based): base * 2**attempt plus up to `base` of jitter.
    """
    if jitter is None:
        jitter = random.random() * base_delay
    return base_delay * (2 ** attempt) + jitter


def retry_with_backoff(
    fn: Callable[[], T],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (OSError,),
    sleep: Callable[[float], None] = time.sleep,
    label: str = "operation",
) -> T:
    """
    Call `fn` until it succeeds or `max_attempts` is exhausted; the last error is re-raised.
    Errors not listed in `retry_on` propagate immediately.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    last_error: BaseException | None = None
    for attempt in range(max_attempts):
        try:
            return fn()
        except retry_on as exc:
            last_error = exc
            remaining = max_attempts - attempt - 1
            if remaining:
                delay = backoff_delay(attempt, base_delay)
                logger.warning(
                    "%s failed (attempt %s/%s), retrying in %.2fs: %s",
                    label, attempt + 1, max_attempts, delay, exc,
                )
                sleep(delay)
            else:
                logger.error("%s failed after %s attempts: %s", label, max_attempts, exc)

    assert last_error is not None
    raise last_error
