"""
Response Classifier
===================
Maps a Geocoding API status string to what the batch should do next.

================== ========== ============================================
Status             Decision   Meaning
================== ========== ============================================
OK                 PROCEED    extract coordinates
ZERO_RESULTS       CONTINUE   address unresolvable, skip the row
OVER_QUERY_LIMIT   STOP       quota exhausted, further calls are futile
REQUEST_DENIED     CONTINUE   this request refused, others may succeed
INVALID_REQUEST    CONTINUE   parameters malformed for this row only
UNKNOWN_ERROR      CONTINUE   transient service error, no retry
anything else      CONTINUE   unrecognised status, logged
================== ========== ============================================
"""

from __future__ import annotations

import logging
from enum import Enum, auto

logger = logging.getLogger("address_to_utm.classifier")


class Decision(Enum):
    """What the pipeline does with one geocoding response."""

    PROCEED = auto()
    CONTINUE = auto()
    STOP = auto()


STATUS_OK = "OK"
STATUS_ZERO_RESULTS = "ZERO_RESULTS"
STATUS_OVER_QUERY_LIMIT = "OVER_QUERY_LIMIT"
STATUS_REQUEST_DENIED = "REQUEST_DENIED"
STATUS_INVALID_REQUEST = "INVALID_REQUEST"
STATUS_UNKNOWN_ERROR = "UNKNOWN_ERROR"

POLICY: dict[str, Decision] = {
    STATUS_OK: Decision.PROCEED,
    STATUS_ZERO_RESULTS: Decision.CONTINUE,
    STATUS_OVER_QUERY_LIMIT: Decision.STOP,
    STATUS_REQUEST_DENIED: Decision.CONTINUE,
    STATUS_INVALID_REQUEST: Decision.CONTINUE,
    STATUS_UNKNOWN_ERROR: Decision.CONTINUE,
}


def classify(status: str, error_message: str | None = None, request: str = "") -> Decision:
    """Decide how the batch proceeds after a response with *status*.

    Every non-``OK`` outcome is logged with the request it belongs to.

    Args:
        status: ``status`` field of the response body.
        error_message: ``error_message`` field, if any.
        request: Request identifier for log messages (API key redacted).

    Returns:
        The :class:`Decision` for this response.  Unrecognised statuses
        yield :attr:`Decision.CONTINUE`.
    """
    decision = POLICY.get(status, Decision.CONTINUE)
    error = f"Error: {error_message or 'N/A'}"

    if status == STATUS_OK:
        pass
    elif status == STATUS_ZERO_RESULTS:
        logger.warning("No results for request %s.", request)
    elif status == STATUS_OVER_QUERY_LIMIT:
        logger.error("Query limit reached at request %s. Stopping. %s", request, error)
    elif status == STATUS_REQUEST_DENIED:
        logger.warning("Request %s was denied. %s", request, error)
    elif status == STATUS_INVALID_REQUEST:
        logger.warning("Request %s is invalid. %s", request, error)
    elif status == STATUS_UNKNOWN_ERROR:
        logger.warning("Unknown error occurred for request %s. %s", request, error)
    else:
        logger.warning("Unrecognised status %r for request %s. %s", status, request, error)

    return decision
