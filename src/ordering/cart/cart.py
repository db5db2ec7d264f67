"""Shopping Cart aggregate — one per customer, a list of products waiting for checkout.

A cart holds at most one line per product. Adding a product that is already in
the cart increases that line's quantity. Lines leave the cart when the shopper
removes them, when checkout consumes them, or when a cart read prunes a line
whose product can no longer be bought.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from ordering.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from ordering.domain import ordering
from ordering.errors import ItemNotInCart

# Reasons recorded on line removals and quantity changes
BY_CUSTOMER = "customer"
CHECKED_OUT = "checked_out"
PRODUCT_UNAVAILABLE = "product_unavailable"
CLAMPED_TO_STOCK = "clamped_to_stock"


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@ordering.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            customer_id=str(customer_id),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def lines(self):
        """Current ``(product_id, quantity)`` pairs, oldest line first."""
        return [(str(item.product_id), item.quantity) for item in self.items]

    def select(self, product_ids):
        """Lines for ``product_ids``, raising ItemNotInCart for any the cart does not hold."""
        selected = []
        for product_id in dict.fromkeys(str(pid) for pid in product_ids):
            item = self.item_for(product_id)
            if item is None:
                raise ItemNotInCart(product_id)
            selected.append((product_id, item.quantity))
        return selected

    @property
    def is_empty(self):
        return not self.items

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity):
        """Add a product to the cart (or increase its quantity if already present)."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.item_for(product_id)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            line_quantity = existing.quantity
        else:
            self.add_items(
                CartItem(
                    product_id=str(product_id),
                    quantity=quantity,
                    added_at=now,
                )
            )
            line_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line_quantity,
                added_at=now,
            )
        )

    def update_item_quantity(self, product_id, new_quantity, reason=BY_CUSTOMER):
        """Set a line's quantity. Zero or less removes the line."""
        item = self.item_for(product_id)
        if item is None:
            raise ItemNotInCart(product_id)

        if new_quantity is None or new_quantity <= 0:
            self.remove_item(product_id, reason=reason)
            return

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                reason=reason,
            )
        )

    def remove_item(self, product_id, reason=BY_CUSTOMER):
        item = self.item_for(product_id)
        if item is None:
            raise ItemNotInCart(product_id)

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity=item.quantity,
                reason=reason,
            )
        )

    def take(self, product_ids=None):
        """Remove the lines being checked out and return them.

        With no ``product_ids`` the whole cart is taken.
        """
        if product_ids is None:
            taken = self.lines()
        else:
            taken = self.select(product_ids)

        for product_id, _ in taken:
            self.remove_item(product_id, reason=CHECKED_OUT)
        return taken

    def clear(self, reason=BY_CUSTOMER):
        count = len(self.items)
        for item in list(self.items):
            self.remove_items(item)

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                items_removed=count,
                reason=reason,
                cleared_at=now,
            )
        )


@ordering.repository(part_of=ShoppingCart)
class CartRepository:
    def for_customer(self, customer_id, create=False):
        """The customer's cart. When none exists, a new unsaved cart if ``create`` is set, else None."""
        try:
            cart = self._dao.find_by(customer_id=str(customer_id))
        except ObjectNotFoundError:
            cart = None

        if cart is None and create:
            cart = ShoppingCart.create(customer_id)
        return cart
