"""
Request Pacer
=============
Fixed-batch throttle for the geocoding quota: before every
``batch_size``-th request of the run the whole pipeline sleeps for
``pause_seconds``.  Requests 1..49 go out immediately, request 50 waits,
51..99 go out immediately, and so on.  Not adaptive.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger("address_to_utm.pacing")

DEFAULT_BATCH_SIZE = 50
DEFAULT_PAUSE_SECONDS = 1.0


class RequestPacer:
    """Counts outbound requests and pauses on batch boundaries.

    Args:
        batch_size: Pause before every request whose 1-based number is a
                    multiple of this value.  Must be ``>= 1``.
        pause_seconds: Length of the pause.
        sleep: Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        pause_seconds: float = DEFAULT_PAUSE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.batch_size = batch_size
        self.pause_seconds = pause_seconds
        self._sleep = sleep
        self.requests_issued = 0

    def before_request(self) -> None:
        """Register the next request, pausing first if it ends a batch."""
        self.requests_issued += 1
        if self.requests_issued % self.batch_size == 0 and self.pause_seconds > 0:
            logger.debug(
                "Request %d: pausing %.2fs for rate limit.",
                self.requests_issued, self.pause_seconds,
            )
            self._sleep(self.pause_seconds)
