"""Domain events for the DiscountCode aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="DiscountCode")
class DiscountCodeCreated:
    __version__ = 1

    discount_code_id = Identifier(required=True)
    code = String(required=True)
    discount_type = String(required=True)
    discount_value = Float(required=True)
    max_uses = Integer(required=True)
    created_by = String()
    created_at = DateTime()


@ordering.event(part_of="DiscountCode")
class DiscountCodeUpdated:
    __version__ = 1

    discount_code_id = Identifier(required=True)
    code = String(required=True)
    updated_by = String()
    updated_at = DateTime()


@ordering.event(part_of="DiscountCode")
class DiscountCodeActivated:
    __version__ = 1

    discount_code_id = Identifier(required=True)
    code = String(required=True)


@ordering.event(part_of="DiscountCode")
class DiscountCodeDeactivated:
    __version__ = 1

    discount_code_id = Identifier(required=True)
    code = String(required=True)


@ordering.event(part_of="DiscountCode")
class DiscountCodeRedeemed:
    """A code was consumed by a placed order."""

    __version__ = 1

    discount_code_id = Identifier(required=True)
    code = String(required=True)
    identity_key = String(required=True)
    order_ref = String(required=True)
    discount_amount = Integer(required=True)
    used_count = Integer(required=True)
    max_uses = Integer(required=True)
    used_at = DateTime()
