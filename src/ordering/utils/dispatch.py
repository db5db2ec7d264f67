"""Serialized command dispatch for writes that touch shared stock.

Stock checks read a counter and then write a lower value. Two checkouts doing
that at the same time can both see enough stock. ``dispatch`` runs each command
(read, floor check and Unit of Work commit) while holding one process-wide
lock, so reservations against the same counter cannot interleave. The lock is
held for a single command only.

Stores that detect concurrent writers themselves report it as
``ExpectedVersionError``; those commands are replayed from a fresh read.
"""

import threading
import time
from contextlib import contextmanager

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from ordering.utils.config import setting

logger = structlog.get_logger(__name__)

_write_lock = threading.RLock()


@contextmanager
def serialized():
    """Hold the write lock for the duration of the block (re-entrant)."""
    with _write_lock:
        yield


def dispatch(command):
    """Process ``command`` synchronously and return the handler's result."""
    max_attempts = setting("WRITE_CONFLICT_RETRIES", 3)
    backoff = setting("WRITE_CONFLICT_BACKOFF", 0.05)

    attempt = 0
    while True:
        attempt += 1
        try:
            with serialized():
                return current_domain.process(command, asynchronous=False)
        except ExpectedVersionError:
            if attempt >= max_attempts:
                logger.error(
                    "Write conflict persisted, giving up",
                    command=command.__class__.__name__,
                    attempts=attempt,
                )
                raise
            logger.warning(
                "Write conflict, retrying command",
                command=command.__class__.__name__,
                attempt=attempt,
            )
            time.sleep(backoff * attempt)
