"""Cart item management — commands and handler.

Adding to the cart and raising a line's quantity are checked against the live
product: it must exist, be on sale and have enough stock for the whole line.
The check is advisory; checkout re-checks stock when it reserves.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering
from ordering.errors import ItemNotInCart
from ordering.stock.product import Product


@ordering.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)


@ordering.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    """Set a line's quantity; zero or less removes the line."""

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        quantity = command.quantity or 1
        product = current_domain.repository_for(Product).fetch(command.product_id)

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_customer(command.customer_id, create=True)

        existing = cart.item_for(command.product_id)
        product.ensure_can_supply(quantity + (existing.quantity if existing else 0))

        cart.add_item(command.product_id, quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_customer(command.customer_id)
        if cart is None or cart.item_for(command.product_id) is None:
            raise ItemNotInCart(command.product_id)

        if command.quantity > 0:
            product = current_domain.repository_for(Product).fetch(command.product_id)
            product.ensure_can_supply(command.quantity)

        cart.update_item_quantity(command.product_id, command.quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_customer(command.customer_id)
        if cart is None:
            raise ItemNotInCart(command.product_id)

        cart.remove_item(command.product_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_customer(command.customer_id)
        if cart is None or cart.is_empty:
            return

        cart.clear()
        repo.add(cart)
