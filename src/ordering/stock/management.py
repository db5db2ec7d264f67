"""Product stock and price maintenance — commands and handler.

These are the catalogue-side writes the ordering domain accepts: registering a
sellable product, setting its stock level, changing its price and switching it
on or off sale. Order handling itself moves stock only through ``StockLedger``.
"""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.stock.product import Product

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Product")
class RegisterProduct:
    product_id = Identifier()  # Optional; generated when absent
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    discount_price = Float(min_value=0.0)
    stock = Integer(default=0, min_value=0)
    images = Text()  # JSON: list of image URLs
    category = String(max_length=100)
    brand = String(max_length=100)
    sku = String(max_length=50)
    is_active = Boolean(default=True)


@ordering.command(part_of="Product")
class SetStock:
    product_id = Identifier(required=True)
    stock = Integer(required=True, min_value=0)


@ordering.command(part_of="Product")
class ChangePrice:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)
    discount_price = Float(min_value=0.0)


@ordering.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@ordering.command(part_of="Product")
class ActivateProduct:
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        images = json.loads(command.images) if isinstance(command.images, str) else command.images

        product = Product.register(
            name=command.name,
            price=command.price,
            stock=command.stock or 0,
            discount_price=command.discount_price,
            images=images,
            category=command.category,
            brand=command.brand,
            sku=command.sku,
            is_active=command.is_active if command.is_active is not None else True,
            product_id=command.product_id,
        )

        current_domain.repository_for(Product).add(product)
        logger.info("Product registered", product_id=str(product.id), stock=product.stock)
        return str(product.id)

    @handle(SetStock)
    def set_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.fetch(command.product_id)
        product.set_stock(command.stock)
        repo.add(product)

    @handle(ChangePrice)
    def change_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.fetch(command.product_id)
        product.change_price(command.price, command.discount_price)
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.fetch(command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(ActivateProduct)
    def activate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.fetch(command.product_id)
        product.activate()
        repo.add(product)
