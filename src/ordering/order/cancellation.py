"""Order cancellation — command and handler.

The owner of an order or an administrator may cancel it while it has not
shipped. Every item's quantity goes back to its product's stock in the same
Unit of Work as the status change; products deleted since checkout are skipped.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.access import CUSTOMER, Caller
from ordering.domain import ordering
from ordering.order.order import Order
from ordering.stock.ledger import StockLedger

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_by = String(required=True, max_length=255)
    actor_role = String(max_length=20, default=CUSTOMER)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.fetch(command.order_id)
        Caller(command.cancelled_by, command.actor_role or CUSTOMER).require_access(order)

        lines = order.cancel(reason=command.reason, cancelled_by=command.cancelled_by)
        repo.add(order)
        skipped = StockLedger().restore(lines, order.id)

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            cancelled_by=command.cancelled_by,
            restored_products=len(lines) - len(skipped),
        )
