"""Repository for the Order aggregate, with the lookups checkout and the query layer need."""

from itertools import islice

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.errors import OrderNotFound
from ordering.order.order import Order

PAGE_SIZE = 100


@ordering.repository(part_of=Order)
class OrderRepository:
    def find(self, order_id) -> Order | None:
        """Return the order, or None when it does not exist."""
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            return None

    def fetch(self, order_id) -> Order:
        order = self.find(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def number_taken(self, order_number: str) -> bool:
        return self._dao.query.filter(order_number=order_number).all().total > 0

    def scan(self, page_size=PAGE_SIZE, **filters):
        """Yield matching orders newest first, one page at a time.

        Filters with a None value are ignored.
        """
        filters = {field: value for field, value in filters.items() if value is not None}
        offset = 0
        while True:
            query = self._dao.query.filter(**filters) if filters else self._dao.query
            page = query.order_by("-created_at").offset(offset).limit(page_size).all()
            yield from page.items
            if len(page.items) < page_size:
                return
            offset += page_size

    def listing(self, customer_id=None, status=None, payment_status=None, limit=None) -> list[Order]:
        orders = self.scan(
            customer_id=str(customer_id) if customer_id else None,
            order_status=status,
            payment_status=payment_status,
        )
        return list(islice(orders, limit)) if limit else list(orders)

    def for_customer(self, customer_id, status=None, payment_status=None, limit=None) -> list[Order]:
        return self.listing(customer_id=customer_id, status=status, payment_status=payment_status, limit=limit)
