"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
State tracks entity IDs returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CartState:
    """Tracks state for a shopping cart filled before checkout."""

    customer_id: str | None = None
    product_ids: list[str] = field(default_factory=list)


@dataclass
class OrderState:
    """Tracks state for a single order lifecycle."""

    order_id: str | None = None
    customer_id: str | None = None
    current_status: str = "pending"


@dataclass
class ScarceStockTally:
    """Outcome counts for checkouts racing for the same limited stock."""

    placed: int = 0
    sold_out: int = 0
    other_failures: int = 0
