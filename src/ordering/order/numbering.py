"""Human-readable order numbers.

A number is ``ORD`` followed by the last six digits of the current time in
milliseconds and three random digits, e.g. ``ORD483920117``. Two checkouts in
the same millisecond can draw the same number, so allocation checks the number
against stored orders and draws again on a collision.
"""

import random
import time

import structlog

from ordering.errors import OrderNumberExhausted
from ordering.utils.config import setting

logger = structlog.get_logger(__name__)

PREFIX = "ORD"


def generate_order_number(now_ms=None, rng=random) -> str:
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    return f"{PREFIX}{str(now_ms)[-6:]:0>6}{rng.randint(0, 999):03d}"


def allocate_order_number(orders, generate=generate_order_number) -> str:
    """Draw numbers until one is unused by ``orders`` (an OrderRepository)."""
    attempts = setting("ORDER_NUMBER_ATTEMPTS", 5)
    for attempt in range(1, attempts + 1):
        candidate = generate()
        if not orders.number_taken(candidate):
            return candidate
        logger.warning("Order number collision, drawing again", order_number=candidate, attempt=attempt)

    logger.error("Order number allocation exhausted", attempts=attempts)
    raise OrderNumberExhausted(attempts)
