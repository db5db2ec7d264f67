"""Order creation — commands and handler.

A checkout resolves its lines, re-reads and checks every product, builds the
order and only then writes: the order, the stock decrements and the consumed
cart lines are saved together by the handler's Unit of Work. Any failure
before the commit leaves stock, cart and orders as they were.

Lines come from one of three places:

- ``PlaceOrder`` with ``items``: the caller's own ``{product_id, quantity}`` list.
- ``PlaceOrder`` with ``product_ids``: those products' lines in the customer's cart.
- ``PlaceOrderFromCart``: the whole cart.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering
from ordering.errors import CartEmpty, MissingOrderLines
from ordering.order.numbering import allocate_order_number
from ordering.order.order import Order
from ordering.order.pricing import active_policy
from ordering.stock.ledger import StockLedger

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text()  # JSON: list of {product_id, quantity}
    product_ids = Text()  # JSON: list of product ids to take from the cart
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict
    payment_method = String(required=True, max_length=50)
    payment_status = String(max_length=20)
    order_notes = Text()


@ordering.command(part_of="Order")
class PlaceOrderFromCart:
    customer_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict
    payment_method = String(required=True, max_length=50)
    order_notes = Text()


def _load(value):
    return json.loads(value) if isinstance(value, str) else value


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = _load(command.items)
        product_ids = _load(command.product_ids)

        if items:
            lines = [(item.get("product_id"), item.get("quantity")) for item in items]
            return self._checkout(command, lines, payment_status=command.payment_status)

        if product_ids:
            cart = self._cart_with_items(command.customer_id)
            lines = cart.select(product_ids)
            return self._checkout(
                command,
                lines,
                cart=cart,
                product_ids=product_ids,
                payment_status=command.payment_status,
            )

        raise MissingOrderLines()

    @handle(PlaceOrderFromCart)
    def place_order_from_cart(self, command):
        cart = self._cart_with_items(command.customer_id)
        return self._checkout(command, cart.lines(), cart=cart)

    def _cart_with_items(self, customer_id):
        cart = current_domain.repository_for(ShoppingCart).for_customer(customer_id)
        if cart is None or cart.is_empty:
            raise CartEmpty()
        return cart

    def _checkout(self, command, lines, cart=None, product_ids=None, payment_status=None):
        orders = current_domain.repository_for(Order)
        ledger = StockLedger()

        # Reads and checks; nothing is written until all of them pass
        reservation = ledger.prepare(lines)
        order = Order.place(
            customer_id=command.customer_id,
            order_number=allocate_order_number(orders),
            lines=reservation.lines,
            shipping_address=_load(command.shipping_address),
            payment_method=command.payment_method,
            policy=active_policy(),
            billing_address=_load(command.billing_address),
            payment_status=payment_status,
            order_notes=command.order_notes,
        )

        orders.add(order)
        ledger.commit(reservation, order.id)
        if cart is not None:
            cart.take(product_ids)
            current_domain.repository_for(ShoppingCart).add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total_amount=order.summary.total_amount,
            from_cart=cart is not None,
        )
        return str(order.id)
