"""Priced cart read with lazy cleanup.

Reading a cart reconciles it with the live catalogue before returning it:
lines whose product is gone, off sale or out of stock are removed, and lines
asking for more than is in stock are clamped down to what is available. The
cleanup is saved, so the shopper never sees a line that checkout would refuse
outright.
"""

import structlog
from protean.utils.globals import current_domain

from ordering.cart.cart import CLAMPED_TO_STOCK, PRODUCT_UNAVAILABLE, ShoppingCart
from ordering.order.pricing import round_money
from ordering.stock.product import Product
from ordering.utils.dispatch import serialized

logger = structlog.get_logger(__name__)


def _line_view(item, product):
    item_total = product.effective_price * item.quantity
    return {
        "product_id": str(item.product_id),
        "quantity": item.quantity,
        "added_at": item.added_at,
        "product": {
            "id": str(product.id),
            "name": product.name,
            "price": product.price,
            "discount_price": product.discount_price,
            "images": product.image_urls,
            "stock": product.stock,
            "category": product.category,
            "brand": product.brand,
        },
        "item_total": round_money(item_total),
    }


def cart_contents(customer_id):
    """Return the customer's cleaned-up cart with line details and a summary."""
    carts = current_domain.repository_for(ShoppingCart)
    products = current_domain.repository_for(Product)

    # Cleanup is read and saved under the write lock so a checkout cannot interleave
    with serialized():
        cart = carts.for_customer(customer_id)
        if cart is None:
            return {
                "cart_id": None,
                "customer_id": str(customer_id),
                "items": [],
                "summary": {"total_items": 0, "total_amount": 0.0, "item_count": 0},
            }

        lines = []
        changed = False
        for item in list(cart.items):
            product = products.find(item.product_id)
            if product is None or not product.is_active or product.stock <= 0:
                cart.remove_item(item.product_id, reason=PRODUCT_UNAVAILABLE)
                changed = True
                continue

            if product.stock < item.quantity:
                cart.update_item_quantity(item.product_id, product.stock, reason=CLAMPED_TO_STOCK)
                changed = True

            lines.append(_line_view(item, product))

        if changed:
            carts.add(cart)
            logger.info("Cart reconciled with catalogue", customer_id=str(customer_id), lines=len(lines))

    lines.sort(key=lambda line: line["added_at"], reverse=True)

    return {
        "cart_id": str(cart.id),
        "customer_id": str(customer_id),
        "items": lines,
        "summary": {
            "total_items": sum(line["quantity"] for line in lines),
            "total_amount": round_money(sum(line["item_total"] for line in lines)),
            "item_count": len(lines),
        },
    }
