"""Ordering bounded context — checkout, order lifecycle and stock keeping.

Converts shopping carts into priced, durable orders, drives the order status
and payment state machines, and owns the per-product stock counter that
checkout and cancellation both mutate.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
