"""Inventory ledger — reserve, release and adjust product stock.

Every change is a compare-and-set loop over the catalogue's atomic
primitive: read the current stock, compute the new value, and write it only
if the stock is still what was read. A writer that loses the race re-reads
and recomputes, so two reservations can never both succeed against the same
pre-decrement value.

    reserve(p, q)   stock - q, only while stock >= q (InsufficientStock otherwise)
    release(p, q)   stock + q, unconditionally
    adjust(p, d, m) set -> d | add -> stock + d | subtract -> max(0, stock - d)
"""

from dataclasses import dataclass
from enum import Enum

import structlog
from protean.exceptions import ValidationError

from ordering import settings
from ordering.catalogue import get_catalogue
from ordering.errors import InsufficientStock, StockContention

logger = structlog.get_logger(__name__)


class AdjustmentMode(Enum):
    SET = "set"
    ADD = "add"
    SUBTRACT = "subtract"


@dataclass(frozen=True)
class StockChange:
    """Outcome of one applied stock change."""

    product_id: str
    previous: int
    current: int


def _require_positive(quantity, field="quantity"):
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise ValidationError({field: ["Quantity must be a positive integer"]})


class InventoryLedger:
    def __init__(self, catalogue=None):
        self._catalogue = catalogue if catalogue is not None else get_catalogue()

    def reserve(self, product_id, quantity) -> StockChange:
        """Take ``quantity`` units out of stock, or fail without touching it."""
        _require_positive(quantity)

        def take(current):
            if current < quantity:
                raise InsufficientStock(product_id, available=current, requested=quantity)
            return current - quantity

        return self._apply(product_id, take, action="reserve")

    def release(self, product_id, quantity) -> StockChange:
        """Put previously reserved units back into stock."""
        _require_positive(quantity)
        return self._apply(product_id, lambda current: current + quantity, action="release")

    def adjust(self, product_id, delta, mode=AdjustmentMode.SET) -> StockChange:
        try:
            mode = AdjustmentMode(mode)
        except ValueError:
            raise ValidationError({"operation": ["Operation must be set, add, or subtract"]}) from None

        if not isinstance(delta, int) or isinstance(delta, bool) or delta < 0:
            raise ValidationError({"stock": ["Stock must be a non-negative integer"]})

        if mode == AdjustmentMode.SET:
            compute = lambda current: delta  # noqa: E731
        elif mode == AdjustmentMode.ADD:
            compute = lambda current: current + delta  # noqa: E731
        else:
            compute = lambda current: max(0, current - delta)  # noqa: E731

        return self._apply(product_id, compute, action=f"adjust:{mode.value}")

    def _apply(self, product_id, compute, action) -> StockChange:
        product_id = str(product_id)
        attempts = settings.ledger_max_cas_attempts()

        for attempt in range(1, attempts + 1):
            current = self._catalogue.stock_of(product_id)
            new = compute(current)

            if new == current or self._catalogue.compare_and_set_stock(product_id, current, new):
                logger.info(
                    "Stock updated",
                    action=action,
                    product_id=product_id,
                    previous_stock=current,
                    new_stock=new,
                )
                return StockChange(product_id=product_id, previous=current, current=new)

            logger.debug("Stock changed concurrently, retrying", action=action, product_id=product_id, attempt=attempt)

        logger.error("Stock change abandoned after repeated conflicts", action=action, product_id=product_id)
        raise StockContention(product_id, attempts)
