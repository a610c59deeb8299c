"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="ShoppingCart")
class CartUpdated:
    """The cart changed and its totals were recomputed.

    Carries the full set of totals so listeners never have to reload the cart.
    """

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_key = String(required=True)
    change = String(required=True)
    item_count = Integer(default=0)
    subtotal = Integer(default=0)
    tax = Integer(default=0)
    shipping = Integer(default=0)
    discount = Integer(default=0)
    loyalty_discount = Integer(default=0)
    total = Integer(default=0)
    discount_code = String()
    loyalty_points_used = Integer(default=0)
    updated_at = DateTime()


@ordering.event(part_of="ShoppingCart")
class CartsMerged:
    """A guest cart was folded into a registered customer's cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    source_cart_id = Identifier(required=True)
    source_owner_key = String()
    items_merged_count = Integer(default=0)
    attachments_carried = Boolean(default=False)
    merged_at = DateTime()


@ordering.event(part_of="ShoppingCart")
class CartConverted:
    """The cart was checked out into an order and is no longer active."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_key = String(required=True)
    order_id = Identifier(required=True)
    order_number = String()
    converted_at = DateTime()
