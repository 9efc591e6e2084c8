"""Order lifecycle: commands and handler for the barista board."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from pos.domain import pos
from pos.order.order import Order

logger = structlog.get_logger(__name__)


@pos.command(part_of="Order")
class SetOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@pos.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)


@pos.command_handler(part_of=Order)
class OrderLifecycleHandler:
    def _apply(self, order_id, change):
        repo = current_domain.repository_for(Order)
        order = repo.get(order_id)
        previous = order.status
        change(order)
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order_id),
            previous_status=previous,
            new_status=order.status,
        )

    @handle(SetOrderStatus)
    def set_status(self, command):
        self._apply(command.order_id, lambda order: order.transition_to(command.status))

    @handle(CancelOrder)
    def cancel_order(self, command):
        self._apply(command.order_id, lambda order: order.cancel())
