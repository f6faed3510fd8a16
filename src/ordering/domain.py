"""Ordering bounded context — Catalogue stock, Shopping Cart and Orders.

Handles product stock through the inventory ledger, per-customer shopping
carts (CQRS), order placement with stock reservation, and the order status
lifecycle.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
