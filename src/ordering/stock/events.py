"""Domain events for the Product aggregate.

Stock events record every movement of the counter along with the order that
caused it, so a product's stock history can be reconciled against orders.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Product")
class ProductRegistered:
    """A sellable product was registered with an opening stock level."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    discount_price = Float()
    stock = Integer(required=True)
    registered_at = DateTime(required=True)


@ordering.event(part_of="Product")
class ProductPriceChanged:
    """The list price or sale price of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)
    previous_discount_price = Float()
    new_discount_price = Float()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Product")
class ProductAvailabilityChanged:
    """A product was activated for sale or withdrawn from sale."""

    __version__ = 1

    product_id = Identifier(required=True)
    is_active = Boolean(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Product")
class StockReserved:
    """Units were taken out of stock for an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier()
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    reserved_at = DateTime(required=True)


@ordering.event(part_of="Product")
class StockRestored:
    """Units of a cancelled order were put back into stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier()
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    restored_at = DateTime(required=True)


@ordering.event(part_of="Product")
class StockLevelSet:
    """The stock counter was set to an absolute value (recount, replenishment)."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    set_at = DateTime(required=True)
