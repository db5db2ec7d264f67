"""Application tests for order reads and store statistics."""

import time

import pytest
from ordering.errors import InvalidLimit, InvalidPaymentStatus, InvalidStatus
from ordering.order.order import Order
from ordering.order.payment import UpdatePaymentStatus
from ordering.order.queries import get_order, list_all_orders, list_customer_orders, order_stats
from ordering.order.repository import OrderRepository
from ordering.order.status import UpdateOrderStatus
from ordering.utils.dispatch import dispatch
from protean import current_domain


@pytest.fixture()
def placed(make_product, place_order):
    """Three orders: two for cust-001 (one paid), one for cust-002."""
    product = make_product(price=25.0, stock=50)
    first = place_order(lines=[(product, 2)])
    time.sleep(0.002)
    second = place_order(lines=[(product, 1)])
    time.sleep(0.002)
    other = place_order(lines=[(product, 4)], customer="cust-002")

    dispatch(UpdatePaymentStatus(order_id=first, payment_status="paid"))
    dispatch(UpdateOrderStatus(order_id=second, status="confirmed"))
    return {"first": first, "second": second, "other": other}


class TestReads:
    def test_get_order(self, placed):
        assert str(get_order(placed["first"]).id) == placed["first"]
        assert get_order("ord-missing") is None

    def test_customer_orders_newest_first(self, placed):
        orders = list_customer_orders("cust-001")
        assert [str(order.id) for order in orders] == [placed["second"], placed["first"]]

    def test_customer_orders_filtered(self, placed):
        assert [str(o.id) for o in list_customer_orders("cust-001", status="confirmed")] == [placed["second"]]
        assert [str(o.id) for o in list_customer_orders("cust-001", payment_status="paid")] == [placed["first"]]
        assert list_customer_orders("cust-002", status="confirmed") == []

    def test_all_orders_with_limit(self, placed):
        assert len(list_all_orders()) == 3
        assert [str(o.id) for o in list_all_orders(limit=1)] == [placed["other"]]

    def test_invalid_filters(self, placed):
        with pytest.raises(InvalidStatus):
            list_all_orders(status="lost")
        with pytest.raises(InvalidPaymentStatus):
            list_customer_orders("cust-001", payment_status="maybe")

    @pytest.mark.parametrize("limit", [0, -1])
    def test_limit_below_one_rejected(self, placed, limit):
        with pytest.raises(InvalidLimit):
            list_all_orders(limit=limit)
        with pytest.raises(InvalidLimit):
            list_customer_orders("cust-001", limit=limit)


class TestStats:
    def test_counts_and_paid_revenue(self, placed):
        stats = order_stats()

        assert stats["total_orders"] == 3
        assert stats["total_revenue"] == 50.0
        assert stats["status_counts"]["pending"] == 2
        assert stats["status_counts"]["confirmed"] == 1
        assert stats["status_counts"]["cancelled"] == 0
        assert stats["payment_counts"] == {"pending": 2, "paid": 1, "failed": 0, "refunded": 0}

    def test_empty_store(self):
        stats = order_stats()
        assert stats["total_orders"] == 0
        assert stats["total_revenue"] == 0.0

    def test_stats_span_several_pages(self, make_product, place_order):
        product = make_product(price=1.0, stock=100)
        for _ in range(5):
            place_order(lines=[(product, 1)])

        orders = current_domain.repository_for(Order)
        assert isinstance(orders, OrderRepository)
        assert len(list(orders.scan(page_size=2))) == 5
