"""Identifier allocator: human-readable order numbers from a shared counter.

Sales are numbered ``ORD-001``, ``ORD-002``, ... and adjustments ``ADJ-...``.
Both prefixes draw from the same persisted counter, so a number is never
handed out twice, whatever its prefix. Allocation must run inside the
command handler that stores the order, so the counter bump and the new
order commit in the same unit of work.
"""

from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from pos.domain import pos

ORDER_PREFIX = "ORD"
ADJUSTMENT_PREFIX = "ADJ"

_COUNTER_NAME = "orders"


@pos.aggregate
class OrderSequence:
    name = String(identifier=True, max_length=50)
    last_value = Integer(default=0, min_value=0)

    def next_value(self) -> int:
        self.last_value = (self.last_value or 0) + 1
        return self.last_value


def format_identifier(prefix: str, value: int) -> str:
    return f"{prefix}-{value:03d}"


def allocate_identifier(prefix: str = ORDER_PREFIX) -> tuple[str, int]:
    """Bump the shared counter and return ``(identifier, value)``."""
    repo = current_domain.repository_for(OrderSequence)
    try:
        sequence = repo.get(_COUNTER_NAME)
    except ObjectNotFoundError:
        sequence = OrderSequence(name=_COUNTER_NAME, last_value=0)

    value = sequence.next_value()
    repo.add(sequence)
    return format_identifier(prefix, value), value
