"""Refund adjustments: command and handler.

A refund never edits the original order. It is booked as a new, already
completed order with a single negative line, so period revenue nets the two
by plain summation.
"""

import math

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, String
from protean.utils.globals import current_domain

from pos.domain import pos
from pos.order.order import Order
from pos.order.sequence import ADJUSTMENT_PREFIX, allocate_identifier

logger = structlog.get_logger(__name__)


@pos.command(part_of="Order")
class CreateAdjustment:
    order_id = String(required=True, max_length=50)  # the order being refunded
    amount = Float(required=True)  # sign is ignored


@pos.command_handler(part_of=Order)
class CreateAdjustmentHandler:
    @handle(CreateAdjustment)
    def create_adjustment(self, command):
        amount = command.amount
        if amount is None or not math.isfinite(amount) or amount == 0:
            raise ValidationError({"amount": ["Adjustment amount must be a non-zero number"]})

        repo = current_domain.repository_for(Order)
        try:
            original = repo.get(command.order_id)
        except ObjectNotFoundError:
            original = None
            logger.warning("Adjustment booked against an unknown order", order_id=command.order_id)

        adjustment_id, sequence = allocate_identifier(ADJUSTMENT_PREFIX)
        adjustment = Order.create_adjustment(
            adjustment_id=adjustment_id,
            sequence=sequence,
            original_order_id=command.order_id,
            amount=amount,
            original=original,
        )
        repo.add(adjustment)

        logger.info(
            "Adjustment recorded",
            adjustment_id=adjustment_id,
            original_order_id=command.order_id,
            amount=adjustment.total,
        )
        return adjustment_id
