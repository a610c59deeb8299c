"""Pushes refreshed cart totals to the owner's live sessions."""

from protean.utils.mixins import handle

from ordering.cart.cart import ShoppingCart
from ordering.cart.events import CartUpdated
from ordering.domain import ordering
from realtime import broadcast


@ordering.event_handler(part_of=ShoppingCart)
class CartBroadcastHandler:
    @handle(CartUpdated)
    def on_cart_updated(self, event: CartUpdated):
        broadcast(
            "cart_updated",
            identity=event.owner_key,
            totals={
                "cart_id": str(event.cart_id),
                "change": event.change,
                "item_count": event.item_count,
                "subtotal": event.subtotal,
                "tax": event.tax,
                "shipping": event.shipping,
                "discount": event.discount,
                "loyalty_discount": event.loyalty_discount,
                "total": event.total,
                "discount_code": event.discount_code,
                "loyalty_points_used": event.loyalty_points_used,
            },
        )
