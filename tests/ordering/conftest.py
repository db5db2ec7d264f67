"""Shared fixtures for the ordering tests: products, carts and checkouts."""

import json

import pytest
from ordering.cart.items import AddToCart
from ordering.order.creation import PlaceOrder, PlaceOrderFromCart
from ordering.order.order import Order
from ordering.stock.product import Product
from ordering.utils.dispatch import dispatch
from protean import current_domain


@pytest.fixture()
def customer_id():
    return "cust-001"


@pytest.fixture()
def address():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "street": "12 Analytical Row",
        "city": "London",
        "state": "Greater London",
        "zip_code": "N1 9GU",
        "country": "UK",
        "phone": "+44 20 7946 0000",
        "email": "ada@example.com",
    }


@pytest.fixture()
def make_product():
    """Register a product directly in the repository and return it."""

    def _make(name="Widget", price=100.0, stock=10, discount_price=None, is_active=True, **kwargs):
        kwargs.setdefault("images", ["https://cdn.example.com/widget.jpg"])
        kwargs.setdefault("category", "Gadgets")
        kwargs.setdefault("brand", "Acme")
        kwargs.setdefault("sku", "WID-001")
        product = Product.register(
            name=name,
            price=price,
            stock=stock,
            discount_price=discount_price,
            is_active=is_active,
            **kwargs,
        )
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def stock_of():
    def _stock(product):
        product_id = product if isinstance(product, str) else product.id
        return current_domain.repository_for(Product).get(product_id).stock

    return _stock


@pytest.fixture()
def load_order():
    def _load(order_id):
        return current_domain.repository_for(Order).get(order_id)

    return _load


@pytest.fixture()
def add_to_cart(customer_id):
    def _add(product, quantity=1, customer=None):
        dispatch(
            AddToCart(
                customer_id=customer or customer_id,
                product_id=str(product.id),
                quantity=quantity,
            )
        )

    return _add


@pytest.fixture()
def place_order(customer_id, address):
    """Place an order through the dispatcher and return its id.

    ``lines`` is a list of ``(product, quantity)``; ``product_ids`` takes those
    lines from the customer's cart instead.
    """

    def _place(lines=None, product_ids=None, customer=None, payment_method="credit_card", **kwargs):
        items = [{"product_id": str(p.id), "quantity": q} for p, q in lines] if lines else None
        return dispatch(
            PlaceOrder(
                customer_id=customer or customer_id,
                items=json.dumps(items) if items else None,
                product_ids=json.dumps([str(pid) for pid in product_ids]) if product_ids else None,
                shipping_address=json.dumps(address),
                payment_method=payment_method,
                **kwargs,
            )
        )

    return _place


@pytest.fixture()
def place_order_from_cart(customer_id, address):
    def _place(customer=None, payment_method="paypal", **kwargs):
        return dispatch(
            PlaceOrderFromCart(
                customer_id=customer or customer_id,
                shipping_address=json.dumps(address),
                payment_method=payment_method,
                **kwargs,
            )
        )

    return _place
