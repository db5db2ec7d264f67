"""Order aggregate — the durable record of a checkout and its lifecycle.

An order is created once, by checkout, with a point-in-time copy of every
product it contains. After that only its statuses move, and every move of the
order status is appended to the status history.

Order status:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from PENDING, CONFIRMED, PROCESSING)

Administrators may move a live order to any other fulfillment state, skipping
ahead or stepping back. DELIVERED and CANCELLED are terminal. Payment status
(PENDING, PAID, FAILED, REFUNDED) is tracked separately and does not constrain
the order status.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import (
    CannotCancelShippedOrDelivered,
    InvalidPaymentStatus,
    InvalidStatus,
    InvalidStatusTransition,
    MissingOrderLines,
    MissingTrackingNumber,
)
from ordering.order.events import (
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    PaymentStatusUpdated,
    TrackingNumberAssigned,
)
from ordering.order.pricing import PricingPolicy, round_money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    RAZORPAY = "razorpay"
    CASH_ON_DELIVERY = "cash_on_delivery"
    BANK_TRANSFER = "bank_transfer"


# Fulfillment order. Administrators may move a non-terminal order to any other
# status in this list, forward or back.
_FULFILLMENT_SEQUENCE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

_CANCELLABLE_STATES = {
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
}

_TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

DEFAULT_CANCELLATION_NOTE = "Order cancelled by user"


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatus(value) from None


def parse_payment_status(value) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        raise InvalidPaymentStatus(value) from None


def allowed_transitions(current: OrderStatus) -> set:
    """Statuses an order in ``current`` may move to."""
    if current in _TERMINAL_STATES:
        return set()
    targets = set(_FULFILLMENT_SEQUENCE) - {current}
    if current in _CANCELLABLE_STATES:
        targets.add(OrderStatus.CANCELLED)
    return targets


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class Address:
    """A delivery or billing address captured at checkout time.

    Once recorded on an Order the address is immutable; later changes to the
    customer's address book do not reach placed orders.
    """

    first_name = String(required=True, max_length=50)
    last_name = String(required=True, max_length=50)
    company = String(max_length=100)
    street = String(required=True, min_length=5, max_length=200)
    apartment = String(max_length=50)
    city = String(required=True, max_length=50)
    state = String(required=True, max_length=50)
    zip_code = String(required=True, min_length=3, max_length=20)
    country = String(required=True, min_length=2, max_length=50)
    phone = String(required=True, max_length=20)
    email = String(max_length=255)


@ordering.value_object(part_of="Order")
class OrderSummary:
    """Totals of an order, fixed at checkout.

    ``total_amount`` is ``subtotal + shipping + tax - discount``.
    """

    subtotal = Float(default=0.0)
    shipping = Float(default=0.0)
    tax = Float(default=0.0)
    discount = Float(default=0.0)
    total_amount = Float(default=0.0)
    total_items = Integer(default=0)
    item_count = Integer(default=0)

    @classmethod
    def compute(cls, items, shipping=0.0, tax=0.0, discount=0.0):
        subtotal = round_money(sum(item.item_total for item in items))
        shipping, tax, discount = round_money(shipping), round_money(tax), round_money(discount)
        return cls(
            subtotal=subtotal,
            shipping=shipping,
            tax=tax,
            discount=discount,
            total_amount=round_money(subtotal + shipping + tax - discount),
            total_items=sum(item.quantity for item in items),
            item_count=len(items),
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A product as it was when the order was placed.

    Prices, name and image are copied from the product; later catalogue edits
    never change them.
    """

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    product_image = String(max_length=1000)
    price = Float(required=True, min_value=0.0)
    discount_price = Float(min_value=0.0)
    final_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    item_total = Float(required=True, min_value=0.0)
    sku = String(max_length=50)
    category = String(max_length=100)

    @classmethod
    def snapshot(cls, product, quantity):
        final_price = product.effective_price
        return cls(
            product_id=str(product.id),
            product_name=product.name,
            product_image=product.primary_image,
            price=product.price,
            discount_price=product.discount_price,
            final_price=final_price,
            quantity=quantity,
            item_total=round_money(final_price * quantity),
            sku=product.sku,
            category=product.category,
        )

    def to_dict(self):
        return {
            "product_id": str(self.product_id),
            "product_name": self.product_name,
            "product_image": self.product_image,
            "price": self.price,
            "discount_price": self.discount_price,
            "final_price": self.final_price,
            "quantity": self.quantity,
            "item_total": self.item_total,
            "sku": self.sku,
            "category": self.category,
        }


@ordering.entity(part_of="Order")
class StatusHistoryEntry:
    status = String(choices=OrderStatus, required=True)
    timestamp = DateTime(required=True)
    note = String(max_length=500)
    updated_by = String(max_length=255)
    sequence = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    summary = ValueObject(OrderSummary)
    shipping_address = ValueObject(Address, required=True)
    billing_address = ValueObject(Address)
    payment_method = String(choices=PaymentMethod, required=True)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    order_notes = Text()
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    transaction_id = String(max_length=255)
    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=255)
    status_history = HasMany(StatusHistoryEntry)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        order_number,
        lines,
        shipping_address,
        payment_method,
        policy=None,
        billing_address=None,
        payment_status=None,
        order_notes=None,
    ):
        """Build a pending order from ``(product, quantity)`` lines.

        Args:
            customer_id: The customer placing the order.
            order_number: A number not used by any other order.
            lines: ``(Product, quantity)`` pairs, one per product.
            shipping_address: Dict of Address fields.
            payment_method: One of PaymentMethod's values.
            policy: PricingPolicy deciding shipping, tax and discount; charges nothing when omitted.
            billing_address: Optional dict of Address fields.
            payment_status: Initial payment status, pending when omitted.
            order_notes: Free text from the customer.
        """
        if not lines:
            raise MissingOrderLines()

        payment_status = parse_payment_status(payment_status or PaymentStatus.PENDING.value)
        items = [OrderItem.snapshot(product, quantity) for product, quantity in lines]
        charges = (policy or PricingPolicy()).charges(items, sum(item.item_total for item in items))
        summary = OrderSummary.compute(
            items,
            shipping=charges.get("shipping", 0.0),
            tax=charges.get("tax", 0.0),
            discount=charges.get("discount", 0.0),
        )

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=str(customer_id),
            items=items,
            summary=summary,
            shipping_address=Address(**shipping_address),
            billing_address=Address(**billing_address) if billing_address else None,
            payment_method=payment_method,
            payment_status=payment_status.value,
            order_status=OrderStatus.PENDING.value,
            order_notes=order_notes,
            status_history=[
                StatusHistoryEntry(
                    status=OrderStatus.PENDING.value,
                    timestamp=now,
                    note="Order created",
                    sequence=1,
                )
            ],
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                items=json.dumps([item.to_dict() for item in items]),
                shipping_address=json.dumps(shipping_address),
                payment_method=payment_method,
                payment_status=payment_status.value,
                subtotal=summary.subtotal,
                shipping=summary.shipping,
                tax=summary.tax,
                discount=summary.discount,
                total_amount=summary.total_amount,
                total_items=summary.total_items,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def status(self) -> OrderStatus:
        return OrderStatus(self.order_status)

    @property
    def timeline(self):
        """Status history in the order it was written."""
        return tuple(sorted(self.status_history, key=lambda entry: entry.sequence))

    def stock_lines(self):
        """``(product_id, quantity)`` for every item, as reserved at checkout."""
        return [(str(item.product_id), item.quantity) for item in self.items]

    def _record_status(self, status, note, updated_by, at):
        self.add_status_history(
            StatusHistoryEntry(
                status=status.value,
                timestamp=at,
                note=note,
                updated_by=updated_by,
                sequence=len(self.status_history) + 1,
            )
        )

    # -------------------------------------------------------------------
    # Fulfillment
    # -------------------------------------------------------------------
    def advance_to(self, target, note=None, updated_by=None):
        """Move the order to another fulfillment ``target``. Cancellation goes through ``cancel``."""
        target = parse_status(target) if not isinstance(target, OrderStatus) else target
        current = self.status

        if target == OrderStatus.CANCELLED or target not in allowed_transitions(current):
            raise InvalidStatusTransition(current.value, target.value)

        now = datetime.now(UTC)
        note = note or f"Order status updated to {target.value}"

        self.order_status = target.value
        self.updated_at = now
        if target == OrderStatus.SHIPPED:
            self.shipped_at = now
        elif target == OrderStatus.DELIVERED:
            self.delivered_at = now
        self._record_status(target, note, updated_by, now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                note=note,
                updated_by=updated_by,
                changed_at=now,
            )
        )

    def cancel(self, reason=None, cancelled_by=None):
        """Cancel the order and return the stock lines to hand back."""
        current = self.status
        if current in (OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            raise CannotCancelShippedOrDelivered(current.value)
        if current not in _CANCELLABLE_STATES:
            raise InvalidStatusTransition(current.value, OrderStatus.CANCELLED.value)

        now = datetime.now(UTC)
        note = reason or DEFAULT_CANCELLATION_NOTE

        self.order_status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.cancelled_at = now
        self.updated_at = now
        self._record_status(OrderStatus.CANCELLED, note, cancelled_by, now)

        lines = self.stock_lines()
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                previous_status=current.value,
                reason=reason,
                cancelled_by=cancelled_by,
                items=json.dumps([{"product_id": pid, "quantity": qty} for pid, qty in lines]),
                cancelled_at=now,
            )
        )
        return lines

    # -------------------------------------------------------------------
    # Payment and shipping details
    # -------------------------------------------------------------------
    def update_payment_status(self, payment_status, transaction_id=None):
        target = parse_payment_status(payment_status)
        previous = self.payment_status
        now = datetime.now(UTC)

        self.payment_status = target.value
        if transaction_id:
            self.transaction_id = transaction_id
        if target == PaymentStatus.PAID:
            self.paid_at = now
        self.updated_at = now

        self.raise_(
            PaymentStatusUpdated(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                transaction_id=transaction_id,
                updated_at=now,
            )
        )

    def assign_tracking(self, tracking_number, carrier=None):
        if not tracking_number or not tracking_number.strip():
            raise MissingTrackingNumber()

        now = datetime.now(UTC)
        self.tracking_number = tracking_number.strip()
        if carrier:
            self.carrier = carrier
        self.updated_at = now

        self.raise_(
            TrackingNumberAssigned(
                order_id=str(self.id),
                tracking_number=self.tracking_number,
                carrier=carrier,
                assigned_at=now,
            )
        )
