"""Domain events for the Order aggregate.

Item lists and addresses travel as JSON text so the events stay flat and can
be stored as-is.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A checkout produced a pending order and reserved its stock."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of item snapshots
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True)
    payment_status = String(required=True)
    subtotal = Float(required=True)
    shipping = Float()
    tax = Float()
    discount = Float()
    total_amount = Float(required=True)
    total_items = Integer(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to another fulfillment status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = String()
    updated_by = String()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its stock handed back."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String()
    cancelled_by = String()
    items = Text(required=True)  # JSON: list of {product_id, quantity} to restore
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentStatusUpdated:
    """The recorded payment status of an order changed."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    transaction_id = String()
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class TrackingNumberAssigned:
    """A shipment tracking number was attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    carrier = String()
    assigned_at = DateTime(required=True)
