"""Tests for Order.place — item snapshots, summary arithmetic and the OrderPlaced event."""

import pytest
from ordering.errors import MissingOrderLines
from ordering.order.events import OrderPlaced
from ordering.order.order import Order, OrderItem, OrderStatus, OrderSummary, PaymentStatus
from ordering.order.pricing import PricingPolicy
from ordering.stock.product import Product
from protean.exceptions import ValidationError

ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "street": "12 Analytical Row",
    "city": "London",
    "state": "Greater London",
    "zip_code": "N1 9GU",
    "country": "UK",
    "phone": "+44 20 7946 0000",
}


def _place(lines, **kwargs):
    kwargs.setdefault("payment_method", "credit_card")
    return Order.place(
        customer_id="cust-001",
        order_number="ORD123456001",
        lines=lines,
        shipping_address=ADDRESS,
        **kwargs,
    )


class FlatShippingPolicy(PricingPolicy):
    def shipping(self, items, subtotal):
        return 9.99

    def tax(self, items, subtotal):
        return subtotal * 0.1

    def discount(self, items, subtotal):
        return 5.0


class TestItemSnapshot:
    def test_discount_price_is_final_price(self):
        product = Product.register(name="Lamp", price=100.0, discount_price=80.0, stock=3)
        item = OrderItem.snapshot(product, 2)

        assert item.price == 100.0
        assert item.discount_price == 80.0
        assert item.final_price == 80.0
        assert item.item_total == 160.0

    def test_list_price_used_without_discount(self):
        product = Product.register(name="Lamp", price=19.99, stock=3)
        item = OrderItem.snapshot(product, 3)
        assert item.final_price == 19.99
        assert item.item_total == 59.97

    def test_snapshot_copies_catalogue_details(self):
        product = Product.register(
            name="Lamp",
            price=10.0,
            stock=3,
            images=["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"],
            sku="LMP-1",
            category="Lighting",
        )
        item = OrderItem.snapshot(product, 1)
        assert item.product_name == "Lamp"
        assert item.product_image == "https://cdn.example.com/a.jpg"
        assert item.sku == "LMP-1"
        assert item.category == "Lighting"

    def test_later_price_change_does_not_reach_snapshot(self):
        product = Product.register(name="Lamp", price=100.0, discount_price=80.0, stock=3)
        order = _place([(product, 1)])

        product.change_price(150.0, None)

        assert order.items[0].final_price == 80.0
        assert order.summary.total_amount == 80.0


class TestSummary:
    def test_summary_totals(self):
        lamp = Product.register(name="Lamp", price=100.0, discount_price=80.0, stock=3)
        bulb = Product.register(name="Bulb", price=2.5, stock=50)
        order = _place([(lamp, 2), (bulb, 4)])

        summary = order.summary
        assert summary.subtotal == 170.0
        assert summary.total_amount == 170.0
        assert summary.total_items == 6
        assert summary.item_count == 2
        assert summary.shipping == summary.tax == summary.discount == 0.0

    def test_summary_applies_pricing_policy(self):
        product = Product.register(name="Lamp", price=100.0, stock=3)
        order = _place([(product, 1)], policy=FlatShippingPolicy())

        summary = order.summary
        assert summary.shipping == 9.99
        assert summary.tax == 10.0
        assert summary.discount == 5.0
        assert summary.total_amount == round(100.0 + 9.99 + 10.0 - 5.0, 2)

    def test_money_rounded_to_two_decimals(self):
        product = Product.register(name="Pen", price=0.1, stock=100)
        summary = OrderSummary.compute([OrderItem.snapshot(product, 3)])
        assert summary.subtotal == 0.3
        assert summary.total_amount == 0.3


class TestPlacement:
    def test_new_order_is_pending_with_one_history_entry(self):
        product = Product.register(name="Lamp", price=10.0, stock=3)
        order = _place([(product, 1)])

        assert order.order_status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert len(order.timeline) == 1
        assert order.timeline[0].note == "Order created"
        assert order.timeline[0].sequence == 1

    def test_initial_payment_status_can_be_supplied(self):
        product = Product.register(name="Lamp", price=10.0, stock=3)
        order = _place([(product, 1)], payment_status="paid")
        assert order.payment_status == "paid"

    def test_address_captured(self):
        product = Product.register(name="Lamp", price=10.0, stock=3)
        order = _place([(product, 1)], billing_address={**ADDRESS, "company": "Engines Ltd"})

        assert order.shipping_address.city == "London"
        assert order.billing_address.company == "Engines Ltd"

    def test_raises_order_placed_event(self):
        product = Product.register(name="Lamp", price=10.0, stock=3)
        order = _place([(product, 2)])

        events = [e for e in order._events if isinstance(e, OrderPlaced)]
        assert len(events) == 1
        assert events[0].order_number == "ORD123456001"
        assert events[0].total_amount == 20.0
        assert events[0].total_items == 2

    def test_no_lines_rejected(self):
        with pytest.raises(MissingOrderLines):
            _place([])

    def test_unknown_payment_method_rejected(self):
        product = Product.register(name="Lamp", price=10.0, stock=3)
        with pytest.raises(ValidationError):
            _place([(product, 1)], payment_method="barter")

    def test_incomplete_address_rejected(self):
        product = Product.register(name="Lamp", price=10.0, stock=3)
        with pytest.raises(ValidationError):
            Order.place(
                customer_id="cust-001",
                order_number="ORD123456001",
                lines=[(product, 1)],
                shipping_address={"street": "12 Analytical Row", "city": "London"},
                payment_method="paypal",
            )
