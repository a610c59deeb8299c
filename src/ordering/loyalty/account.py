"""LoyaltyAccount aggregate: a registered customer's points balance and ledger.

Points are earned when an order is delivered and spent at checkout. Every
movement is a ledger entry; the balance is never negative.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from ordering.domain import ordering
from ordering.loyalty.events import LoyaltyPointsCredited, LoyaltyPointsDebited
from shared.errors import InsufficientResourceError


class EntryKind(Enum):
    EARNED = "Earned"
    REDEEMED = "Redeemed"
    GRANTED = "Granted"


@ordering.entity(part_of="LoyaltyAccount")
class LoyaltyEntry:
    kind = String(required=True, choices=EntryKind)
    points = Integer(required=True, min_value=1)
    reason = String(max_length=255)
    order_number = String(max_length=50)
    created_at = DateTime()


@ordering.aggregate
class LoyaltyAccount:
    customer_id = Identifier(required=True)
    balance = Integer(default=0)
    entries = HasMany(LoyaltyEntry)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def balance_is_never_negative(self):
        if self.balance < 0:
            raise ValidationError({"balance": ["Loyalty balance cannot be negative"]})

    @classmethod
    def open(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=str(customer_id), balance=0, created_at=now, updated_at=now)

    def has_entry_for(self, order_number, kind: EntryKind) -> bool:
        return any(e.order_number == order_number and e.kind == kind.value for e in self.entries)

    def credit(self, points: int, reason: str, order_number=None, kind: EntryKind = EntryKind.EARNED):
        if points is None or points <= 0:
            raise ValidationError({"points": ["Points to credit must be positive"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.add_entries(
                LoyaltyEntry(kind=kind.value, points=points, reason=reason, order_number=order_number, created_at=now)
            )
            self.balance += points
            self.updated_at = now

        self.raise_(
            LoyaltyPointsCredited(
                account_id=str(self.id),
                customer_id=str(self.customer_id),
                points=points,
                balance=self.balance,
                reason=reason,
                order_number=order_number,
            )
        )

    def debit(self, points: int, reason: str, order_number=None):
        if points is None or points <= 0:
            raise ValidationError({"points": ["Points to debit must be positive"]})
        if points > self.balance:
            raise InsufficientResourceError(
                {"loyalty_points": [f"Insufficient loyalty points. Available: {self.balance}"]}
            )

        now = datetime.now(UTC)
        with atomic_change(self):
            self.add_entries(
                LoyaltyEntry(
                    kind=EntryKind.REDEEMED.value,
                    points=points,
                    reason=reason,
                    order_number=order_number,
                    created_at=now,
                )
            )
            self.balance -= points
            self.updated_at = now

        self.raise_(
            LoyaltyPointsDebited(
                account_id=str(self.id),
                customer_id=str(self.customer_id),
                points=points,
                balance=self.balance,
                reason=reason,
                order_number=order_number,
            )
        )
