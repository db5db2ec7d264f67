"""Order reads: single orders, per-customer and store-wide lists, and statistics.

Lists come back newest first. Statistics scan every order page by page, which
is fine for a single store's volume but grows linearly with it.
"""

from protean.utils.globals import current_domain

from ordering.errors import InvalidLimit
from ordering.order.order import Order, OrderStatus, PaymentStatus, parse_payment_status, parse_status
from ordering.order.pricing import round_money


def _orders():
    return current_domain.repository_for(Order)


def _filters(status, payment_status, limit):
    if limit is not None and limit < 1:
        raise InvalidLimit(limit)
    return (
        parse_status(status).value if status else None,
        parse_payment_status(payment_status).value if payment_status else None,
    )


def get_order(order_id) -> Order | None:
    return _orders().find(order_id)


def list_customer_orders(customer_id, status=None, payment_status=None, limit=None) -> list[Order]:
    status, payment_status = _filters(status, payment_status, limit)
    return _orders().for_customer(customer_id, status=status, payment_status=payment_status, limit=limit)


def list_all_orders(status=None, payment_status=None, limit=None) -> list[Order]:
    status, payment_status = _filters(status, payment_status, limit)
    return _orders().listing(status=status, payment_status=payment_status, limit=limit)


def order_stats() -> dict:
    """Order counts by status and revenue from paid orders."""
    stats = {
        "total_orders": 0,
        "total_revenue": 0.0,
        "status_counts": {status.value: 0 for status in OrderStatus},
        "payment_counts": {status.value: 0 for status in PaymentStatus},
    }

    for order in _orders().scan():
        stats["total_orders"] += 1
        stats["status_counts"][order.order_status] += 1
        stats["payment_counts"][order.payment_status] += 1
        if order.payment_status == PaymentStatus.PAID.value and order.summary:
            stats["total_revenue"] += order.summary.total_amount or 0.0

    stats["total_revenue"] = round_money(stats["total_revenue"])
    return stats
