"""StockLedger — the only path by which order handling moves product stock.

Reservation is split in two so a checkout can validate everything before it
writes anything:

1. ``prepare`` merges the requested lines per product, re-reads every product
   in sorted id order and checks it can supply the quantity.
2. ``commit`` decrements each counter. ``Product.reserve`` repeats the floor
   check against the value it is about to overwrite.

Both run inside the caller's Unit of Work and under the dispatcher's write
lock, so the counters read in step 1 are still current in step 2.
"""

from dataclasses import dataclass, field

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.stock.product import Product

logger = structlog.get_logger(__name__)


def merge_lines(lines):
    """Collapse ``(product_id, quantity)`` pairs into one entry per product, sorted by id."""
    merged = {}
    for product_id, quantity in lines:
        if quantity is None or int(quantity) < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        key = str(product_id)
        merged[key] = merged.get(key, 0) + int(quantity)
    return sorted(merged.items())


@dataclass
class Reservation:
    """Products checked for a checkout, paired with the quantity each must supply."""

    lines: list = field(default_factory=list)

    @property
    def products(self):
        return [product for product, _ in self.lines]

    @property
    def total_quantity(self):
        return sum(quantity for _, quantity in self.lines)


class StockLedger:
    def __init__(self):
        self.products = current_domain.repository_for(Product)

    def prepare(self, lines):
        reservation = Reservation()
        for product_id, quantity in merge_lines(lines):
            product = self.products.fetch(product_id)
            product.ensure_can_supply(quantity)
            reservation.lines.append((product, quantity))
        return reservation

    def commit(self, reservation, order_id):
        for product, quantity in reservation.lines:
            product.reserve(quantity, order_id=order_id)
            self.products.add(product)

        logger.info(
            "Stock reserved",
            order_id=str(order_id),
            products=len(reservation.lines),
            units=reservation.total_quantity,
        )

    def restore(self, lines, order_id):
        """Put stock back for every line. Products that no longer exist are skipped.

        Returns the ids of skipped products.
        """
        skipped = []
        for product_id, quantity in merge_lines(lines):
            product = self.products.find(product_id)
            if product is None:
                logger.warning(
                    "Product missing during stock restoration, skipping",
                    order_id=str(order_id),
                    product_id=product_id,
                    quantity=quantity,
                )
                skipped.append(product_id)
                continue

            product.restore(quantity, order_id=order_id)
            self.products.add(product)

        logger.info("Stock restored", order_id=str(order_id), skipped=len(skipped))
        return skipped
