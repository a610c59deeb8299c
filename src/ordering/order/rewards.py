"""Credits a registered customer's loyalty points when their order is delivered."""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.loyalty.account import EntryKind, LoyaltyAccount
from ordering.loyalty.management import account_for
from ordering.order.events import OrderStatusChanged
from ordering.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@ordering.event_handler(part_of=Order)
class DeliveryRewardsHandler:
    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged):
        if event.status != OrderStatus.DELIVERED.value:
            return
        if not event.customer_id or not event.loyalty_points_earned:
            return

        account = account_for(event.customer_id)
        if account.has_entry_for(event.order_number, EntryKind.EARNED):
            logger.debug("loyalty_already_credited", order_number=event.order_number)
            return

        account.credit(
            event.loyalty_points_earned,
            reason=f"Order {event.order_number} delivered",
            order_number=event.order_number,
        )
        current_domain.repository_for(LoyaltyAccount).add(account)
        logger.info(
            "loyalty_points_credited",
            customer_id=str(event.customer_id),
            order_number=event.order_number,
            points=event.loyalty_points_earned,
        )
