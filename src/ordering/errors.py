"""Failure kinds raised by checkout, the order lifecycle and stock keeping.

Every error is an ``OrderingError`` carrying a user-facing ``message`` and
Protean-style ``messages`` (``{field: [message]}``). Not-found errors extend
``ObjectNotFoundError`` and rule violations extend ``ValidationError``, so code
that already handles Protean's exceptions keeps working.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class OrderingError(Exception):
    """Base of ordering failures: a message and the field it concerns."""

    field = "order"

    def __init__(self, message: str):
        self.message = message
        self.messages = {self.field: [message]}
        super().__init__(self.messages)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# NotFound
# ---------------------------------------------------------------------------
class NotFound(OrderingError, ObjectNotFoundError):
    """A referenced order, product or cart line does not exist."""


class OrderNotFound(NotFound):
    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class ProductNotFound(NotFound):
    field = "product_id"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ItemNotInCart(NotFound):
    field = "product_ids"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found in cart")


# ---------------------------------------------------------------------------
# Unavailable / InsufficientStock
# ---------------------------------------------------------------------------
class ProductUnavailable(OrderingError, ValidationError):
    field = "product_id"

    def __init__(self, product_id, product_name=None):
        self.product_id = product_id
        super().__init__(f"Product {product_name or product_id} is not available")


class InsufficientStock(OrderingError, ValidationError):
    field = "quantity"

    def __init__(self, product_id, available, requested, product_name=None):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name or product_id}. Available: {available}, Requested: {requested}"
        )


# ---------------------------------------------------------------------------
# InvalidState
# ---------------------------------------------------------------------------
class InvalidState(OrderingError, ValidationError):
    """A status value or transition the state machines do not allow."""

    field = "status"


class InvalidStatus(InvalidState):
    def __init__(self, status):
        self.status = status
        super().__init__(f"Invalid order status: {status}")


class InvalidPaymentStatus(InvalidState):
    field = "payment_status"

    def __init__(self, payment_status):
        self.payment_status = payment_status
        super().__init__(f"Invalid payment status: {payment_status}")


class InvalidStatusTransition(InvalidState):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move order from {current} to {target}")


class CannotCancelShippedOrDelivered(InvalidState):
    def __init__(self, current):
        self.current = current
        super().__init__("Cannot cancel order that has been shipped or delivered")


# ---------------------------------------------------------------------------
# ValidationFailed
# ---------------------------------------------------------------------------
class ValidationFailed(OrderingError, ValidationError):
    """A request is missing something it needs."""


class CartEmpty(ValidationFailed):
    field = "cart"

    def __init__(self):
        super().__init__("Cart is empty")


class MissingOrderLines(ValidationFailed):
    field = "items"

    def __init__(self):
        super().__init__("Either items or product ids are required")


class MissingTrackingNumber(ValidationFailed):
    field = "tracking_number"

    def __init__(self):
        super().__init__("Tracking number is required")


class InvalidLimit(ValidationFailed):
    field = "limit"

    def __init__(self, limit):
        self.limit = limit
        super().__init__(f"Limit must be at least 1, got {limit}")


# ---------------------------------------------------------------------------
# Access and conflicts
# ---------------------------------------------------------------------------
class AccessDenied(OrderingError):
    field = "caller"

    def __init__(self, message="Access denied"):
        super().__init__(message)


class OrderNumberExhausted(OrderingError):
    field = "order_number"

    def __init__(self, attempts):
        self.attempts = attempts
        super().__init__(f"Could not allocate a unique order number after {attempts} attempts")
