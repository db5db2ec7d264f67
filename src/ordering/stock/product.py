"""Product aggregate — the authoritative price and stock record for a sellable item.

Catalogue management owns names, images and categories; the ordering domain
keeps the copy it needs to price a checkout and the single stock counter every
order draws from. The counter never goes below zero: reservations check the
floor at write time and the field itself rejects negative values.
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from ordering.domain import ordering
from ordering.errors import InsufficientStock, ProductNotFound, ProductUnavailable
from ordering.stock.events import (
    ProductAvailabilityChanged,
    ProductPriceChanged,
    ProductRegistered,
    StockLevelSet,
    StockReserved,
    StockRestored,
)


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    discount_price = Float(min_value=0.0)
    is_active = Boolean(default=True)
    stock = Integer(default=0, min_value=0)
    images = Text()  # JSON array of image URLs
    category = String(max_length=100)
    brand = String(max_length=100)
    sku = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def discount_price_must_not_exceed_price(self):
        if self.discount_price is not None and self.price is not None and self.discount_price > self.price:
            raise ValidationError({"discount_price": ["Discount price cannot exceed the list price"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(
        cls,
        name,
        price,
        stock=0,
        discount_price=None,
        images=None,
        category=None,
        brand=None,
        sku=None,
        is_active=True,
        product_id=None,
    ):
        now = datetime.now(UTC)
        identity = {"id": str(product_id)} if product_id else {}
        product = cls(
            **identity,
            name=name,
            price=price,
            discount_price=discount_price,
            stock=stock,
            images=json.dumps(images or []),
            category=category,
            brand=brand,
            sku=sku,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                name=name,
                price=price,
                discount_price=discount_price,
                stock=stock,
                registered_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    @property
    def effective_price(self):
        """Price actually charged: the sale price when one is set."""
        return self.discount_price if self.discount_price else self.price

    @property
    def image_urls(self):
        return json.loads(self.images) if self.images else []

    @property
    def primary_image(self):
        urls = self.image_urls
        return urls[0] if urls else None

    def change_price(self, price, discount_price=None):
        previous_price, previous_discount = self.price, self.discount_price
        now = datetime.now(UTC)
        with atomic_change(self):
            self.price = price
            self.discount_price = discount_price
            self.updated_at = now

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=price,
                previous_discount_price=previous_discount,
                new_discount_price=discount_price,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------
    def activate(self):
        self._set_availability(True)

    def deactivate(self):
        self._set_availability(False)

    def _set_availability(self, is_active):
        now = datetime.now(UTC)
        self.is_active = is_active
        self.updated_at = now
        self.raise_(
            ProductAvailabilityChanged(
                product_id=str(self.id),
                is_active=is_active,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def ensure_can_supply(self, quantity):
        """Raise unless the product is on sale with at least ``quantity`` units."""
        if not self.is_active:
            raise ProductUnavailable(self.id, self.name)
        if self.stock < quantity:
            raise InsufficientStock(self.id, self.stock, quantity, self.name)

    def reserve(self, quantity, order_id=None):
        """Take ``quantity`` units out of stock, checking the floor against the current value."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self.ensure_can_supply(quantity)

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = previous - quantity
        self.updated_at = now

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                order_id=str(order_id) if order_id else None,
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                reserved_at=now,
            )
        )

    def restore(self, quantity, order_id=None):
        """Return ``quantity`` units to stock. Inactive products still take their units back."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = previous + quantity
        self.updated_at = now

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                order_id=str(order_id) if order_id else None,
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                restored_at=now,
            )
        )

    def set_stock(self, new_stock):
        if new_stock is None or new_stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = new_stock
        self.updated_at = now

        self.raise_(
            StockLevelSet(
                product_id=str(self.id),
                previous_stock=previous,
                new_stock=new_stock,
                set_at=now,
            )
        )


@ordering.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id):
        """Return the product, or None when it does not exist."""
        try:
            return self.get(str(product_id))
        except ObjectNotFoundError:
            return None

    def fetch(self, product_id):
        product = self.find(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product
