"""Shared BDD fixtures and step definitions for the Ordering domain.

Scenarios run real commands through ``dispatch``; ``world`` carries what a
scenario has created (products by name, the last order, the last refusal).
"""

import json

import pytest
from ordering.cart.cart import ShoppingCart
from ordering.cart.items import AddToCart
from ordering.errors import OrderingError
from ordering.order.creation import PlaceOrder, PlaceOrderFromCart
from ordering.order.order import Order
from ordering.order.status import UpdateOrderStatus
from ordering.stock.product import Product
from ordering.utils.dispatch import dispatch
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def world():
    return {"products": {}, "order_id": None, "error": None}


def _attempt(world, command):
    """Dispatch ``command``, recording a refusal instead of raising it."""
    world["error"] = None
    try:
        return dispatch(command)
    except (OrderingError, ValidationError) as exc:
        world["error"] = exc
        return None


def product_named(world, name):
    return current_domain.repository_for(Product).get(world["products"][name])


def current_order(world):
    return current_domain.repository_for(Order).get(world["order_id"])


@pytest.fixture()
def attempt(world):
    """Dispatch a command within the scenario, keeping any refusal in ``world``."""
    return lambda command: _attempt(world, command)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.parse('a product "{name}" priced at {price:g} with {stock:d} in stock'))
def _(world, name, price, stock):
    product = Product.register(name=name, price=price, stock=stock)
    current_domain.repository_for(Product).add(product)
    world["products"][name] = str(product.id)


@given(parsers.parse('"{name}" is discounted to {discount_price:g}'))
def _(world, name, discount_price):
    product = product_named(world, name)
    product.change_price(product.price, discount_price)
    current_domain.repository_for(Product).add(product)


@given(parsers.parse('the customer has {quantity:d} of "{name}" in their cart'))
def _(world, customer_id, quantity, name):
    dispatch(AddToCart(customer_id=customer_id, product_id=world["products"][name], quantity=quantity))


@given(parsers.parse('the customer has ordered {quantity:d} of "{name}"'))
def _(world, customer_id, address, quantity, name):
    world["order_id"] = dispatch(
        PlaceOrder(
            customer_id=customer_id,
            items=json.dumps([{"product_id": world["products"][name], "quantity": quantity}]),
            shipping_address=json.dumps(address),
            payment_method="credit_card",
        )
    )


@given(parsers.parse('the order has been moved to "{status}"'))
def _(world, status):
    dispatch(UpdateOrderStatus(order_id=world["order_id"], status=status, updated_by="admin-1"))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.parse('the administrator moves the order to "{status}"'))
def _(attempt, world, status):
    attempt(UpdateOrderStatus(order_id=world["order_id"], status=status, updated_by="admin-1"))


@when(parsers.parse('the customer orders {quantity:d} of "{name}"'))
def _(attempt, world, customer_id, address, quantity, name):
    world["order_id"] = attempt(
        PlaceOrder(
            customer_id=customer_id,
            items=json.dumps([{"product_id": world["products"][name], "quantity": quantity}]),
            shipping_address=json.dumps(address),
            payment_method="credit_card",
        )
    )


@when("the customer checks out their cart")
def _(attempt, world, customer_id, address):
    world["order_id"] = attempt(
        PlaceOrderFromCart(
            customer_id=customer_id,
            shipping_address=json.dumps(address),
            payment_method="paypal",
        )
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse('"{name}" has {stock:d} in stock'))
def _(world, name, stock):
    assert product_named(world, name).stock == stock


@then(parsers.parse('the order is "{status}"'))
def _(world, status):
    assert current_order(world).order_status == status


@then(parsers.parse("the order total is {total:g}"))
def _(world, total):
    assert current_order(world).summary.total_amount == total


@then(parsers.parse('the request is refused with "{error_type}"'))
def _(world, error_type):
    assert world["error"] is not None
    assert type(world["error"]).__name__ == error_type


@then(parsers.parse('the request is refused with message "{message}"'))
def _(world, message):
    assert world["error"] is not None
    assert str(world["error"]) == message


@then("the cart is empty")
def _(customer_id):
    cart = current_domain.repository_for(ShoppingCart).for_customer(customer_id)
    assert cart is None or cart.is_empty


@then(parsers.parse('the cart holds {quantity:d} of "{name}"'))
def _(world, customer_id, quantity, name):
    cart = current_domain.repository_for(ShoppingCart).for_customer(customer_id)
    assert cart.item_for(world["products"][name]).quantity == quantity


@then(parsers.parse('the order history reads "{statuses}"'))
def _(world, statuses):
    assert [entry.status for entry in current_order(world).timeline] == statuses.split(", ")
