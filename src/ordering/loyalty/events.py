"""Domain events for the LoyaltyAccount aggregate."""

from protean.fields import Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="LoyaltyAccount")
class LoyaltyPointsCredited:
    __version__ = 1

    account_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    points = Integer(required=True)
    balance = Integer(required=True)
    reason = String()
    order_number = String()


@ordering.event(part_of="LoyaltyAccount")
class LoyaltyPointsDebited:
    __version__ = 1

    account_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    points = Integer(required=True)
    balance = Integer(required=True)
    reason = String()
    order_number = String()
