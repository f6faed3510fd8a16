"""StockLevel aggregate (CQRS) — units available for sale, one row per product.

Stock lives apart from the Product record so catalogue maintenance (price,
activation) never rewrites it. The row is only ever changed through
``StockLevelRepository.compare_and_set_stock``, the conditional update the
inventory ledger is built on.

Reads and writes of stock bypass the caller's unit of work. A handler's
unit of work sees a snapshot taken at its first repository access, and its
writes only land when the handler finishes; neither is good enough for a
primitive that other requests race on. Each write is committed on its own,
guarded by the aggregate's version, so of two writers that read the same
row only the first one to commit succeeds.
"""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer

from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.aggregate
class StockLevel:
    product_id = Identifier(identifier=True, required=True)
    available = Integer(default=0, min_value=0)
    updated_at = DateTime()

    @classmethod
    def open(cls, product_id, available=0):
        return cls(product_id=product_id, available=available, updated_at=datetime.now(UTC))


@ordering.repository(part_of=StockLevel)
class StockLevelRepository:
    def _live(self):
        """A DAO working against the committed store, outside any unit of work."""
        return self._provider.get_dao(StockLevel, self._database_model).outside_uow()

    def levels_for(self, product_ids) -> dict[str, int]:
        ids = [str(product_id) for product_id in product_ids]
        if not ids:
            return {}
        rows = self._live().query.filter(product_id__in=ids).all().items
        return {str(row.product_id): row.available for row in rows}

    def stock_of(self, product_id) -> int:
        return self._current(product_id).available

    def compare_and_set_stock(self, product_id, expected, new) -> bool:
        """Write ``new`` only if the stored value still equals ``expected``."""
        dao = self._live()
        level = self._current(product_id, dao)
        if level.available != expected:
            return False

        level.available = new
        level.updated_at = datetime.now(UTC)
        try:
            dao.save(level)
        except ExpectedVersionError:
            logger.debug("Stock level written concurrently", product_id=str(product_id), expected=expected)
            return False
        return True

    def _current(self, product_id, dao=None) -> StockLevel:
        dao = dao or self._live()
        rows = dao.query.filter(product_id=str(product_id)).all().items
        if not rows:
            raise ObjectNotFoundError({"_entity": [f"Product {product_id} not found"]})
        return rows[0]
