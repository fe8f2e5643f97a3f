# app/db/retry.py
"""
Bounded exponential-backoff retry for transient store failures.

Only connectivity-type errors are retried; constraint violations and
programming errors propagate on the first attempt. Stores never retry on
their own; services wrap idempotent reads with this.
"""

import logging
import time
from typing import Callable, TypeVar

from sqlalchemy.exc import DBAPIError, DisconnectionError, OperationalError

from app.errors import TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Driver messages for lock contention and lost or unreachable connections.
# Other OperationalErrors (missing table or column, bad SQL) are permanent.
TRANSIENT_MARKERS = (
    "locked",
    "busy",
    "timeout",
    "timed out",
    "unable to open",
    "could not connect",
    "connection refused",
    "server closed the connection",
    "deadlock",
)


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, DisconnectionError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    if isinstance(exc, OperationalError):
        message = str(exc.orig).lower()
        return any(marker in message for marker in TRANSIENT_MARKERS)
    return False


def with_retry(
    operation: Callable[[], T],
    max_retries: int = 3,
    base_delay: float = 0.1,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``operation``; on a transient error wait and try again, doubling the
    delay each time, up to ``max_retries`` extra attempts.
    """
    attempt = 0
    delay = base_delay

    while True:
        try:
            return operation()
        except Exception as exc:
            if not is_transient(exc):
                raise
            if attempt >= max_retries:
                logger.error("Giving up after %s retries: %s", max_retries, exc)
                raise TransientStoreError(str(exc)) from exc

            attempt += 1
            logger.warning(
                "Transient store error, retry %s/%s in %.3fs: %s",
                attempt,
                max_retries,
                delay,
                exc,
            )
            sleep(delay)
            delay *= 2
