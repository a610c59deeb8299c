"""Ordering bounded context: shopping carts, discount codes, orders and loyalty.

Carts are priced on every mutation, orders keep an append-only status
history, and the checkout flow turns an active cart into an order.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

ordering = Domain(name="ordering")
