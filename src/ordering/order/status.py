"""Order status updates — command and handler.

Administrators move orders through fulfillment. A status update to
``cancelled`` is a cancellation: it goes through ``Order.cancel`` and hands the
order's stock back.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus, parse_status
from ordering.stock.ledger import StockLedger


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = String(max_length=500)
    updated_by = String(max_length=255)


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        target = parse_status(command.status)

        repo = current_domain.repository_for(Order)
        order = repo.fetch(command.order_id)

        if target == OrderStatus.CANCELLED:
            lines = order.cancel(reason=command.note, cancelled_by=command.updated_by)
            repo.add(order)
            StockLedger().restore(lines, order.id)
            return

        order.advance_to(target, note=command.note, updated_by=command.updated_by)
        repo.add(order)
