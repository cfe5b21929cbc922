"""Bounded retry for optimistic-concurrency conflicts.

Every stock or cart mutation is a read, an in-memory change and a
versioned save. When the save loses a race the whole attempt is run again
against fresh state, a small number of times, before the conflict is
surfaced as a transient failure.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, TypeVar

from storefront.domain.exceptions import ConcurrentUpdateConflict

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 5
DEFAULT_BACKOFF = 0.01


def run_with_retry(
    func: Callable[[], T],
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff_base: float = DEFAULT_BACKOFF,
) -> T:
    """Call ``func`` until it stops raising ConcurrentUpdateConflict.

    ``func`` must re-read whatever it mutates on each call. Any other
    exception propagates immediately.
    """
    for attempt in range(attempts):
        try:
            return func()
        except ConcurrentUpdateConflict:
            if attempt >= attempts - 1:
                logger.warning("Giving up after %d conflicting attempts", attempts)
                raise
            delay = backoff_base * (2 ** attempt)
            logger.debug("Update conflict, retrying in %.3fs (attempt %d)", delay, attempt + 1)
            # jitter keeps colliding writers from retrying in lockstep
            time.sleep(delay * random.uniform(0.5, 1.5))
    raise ConcurrentUpdateConflict("No attempts were made")
