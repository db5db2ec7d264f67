"""Shipment tracking — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class AddTrackingNumber:
    order_id = Identifier(required=True)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)


@ordering.command_handler(part_of=Order)
class AddTrackingNumberHandler:
    @handle(AddTrackingNumber)
    def add_tracking_number(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.fetch(command.order_id)
        order.assign_tracking(command.tracking_number, carrier=command.carrier)
        repo.add(order)
