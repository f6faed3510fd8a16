"""Stock adjustment — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String

from ordering.domain import ordering
from ordering.inventory.ledger import AdjustmentMode, InventoryLedger
from ordering.inventory.stock import StockLevel


@ordering.command(part_of="StockLevel")
class AdjustStock:
    """Manually correct a product's stock level."""

    product_id = Identifier(required=True)
    stock = Integer(required=True, min_value=0)
    operation = String(choices=AdjustmentMode, default=AdjustmentMode.SET.value)


@ordering.command_handler(part_of=StockLevel)
class StockAdjustmentHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        operation = command.operation or AdjustmentMode.SET.value
        change = InventoryLedger().adjust(command.product_id, command.stock, operation)
        return {
            "product_id": change.product_id,
            "previous_stock": change.previous,
            "new_stock": change.current,
            "operation": operation,
        }
