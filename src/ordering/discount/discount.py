"""DiscountCode aggregate: the registry of codes and their redemption history.

A code is exactly five uppercase letters or digits and can be redeemed at
most ``max_uses`` times (never more than ten). Eligibility checks are pure
previews; only ``use_code`` consumes a use, and it does so at most once per
order.
"""

import json
import re
from dataclasses import dataclass
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from ordering.discount.events import (
    DiscountCodeActivated,
    DiscountCodeCreated,
    DiscountCodeDeactivated,
    DiscountCodeRedeemed,
    DiscountCodeUpdated,
)
from ordering.domain import ordering
from ordering.pricing import DiscountType, discount_amount
from shared.errors import IneligibleError, StateError

CODE_PATTERN = re.compile(r"^[A-Z0-9]{5}$")
MAX_USES_LIMIT = 10

REASON_INVALID = "Code is not active or has reached maximum uses"
REASON_NOT_APPLICABLE = "Code is not applicable to this user"
REASON_FIRST_TIME_ONLY = "Code can only be used once per user"


@dataclass(frozen=True)
class Eligibility:
    valid: bool
    reason: str | None = None


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


@ordering.entity(part_of="DiscountCode")
class UsageRecord:
    identity_key = String(required=True, max_length=300)
    order_ref = String(required=True, max_length=100)
    discount_amount = Integer(default=0, min_value=0)
    used_at = DateTime()


@ordering.aggregate
class DiscountCode:
    code = String(required=True, max_length=5)
    description = String(max_length=200)
    discount_type = String(choices=DiscountType, default=DiscountType.PERCENTAGE.value)
    discount_value = Float(required=True, min_value=0.0)
    min_order_amount = Integer(default=0, min_value=0)
    max_discount_amount = Integer()
    max_uses = Integer(default=1, min_value=1, max_value=MAX_USES_LIMIT)
    used_count = Integer(default=0, min_value=0)
    applicable_products = Text()  # JSON array of product ids
    applicable_categories = Text()  # JSON array of category ids
    applicable_users = Text()  # JSON array of customer ids
    is_first_time_only = Boolean(default=False)
    is_active = Boolean(default=True)
    is_public = Boolean(default=False)
    usage_history = HasMany(UsageRecord)
    created_by = String(max_length=255)
    updated_by = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def code_must_be_five_uppercase_alphanumerics(self):
        if not CODE_PATTERN.match(self.code or ""):
            raise ValidationError({"code": ["Discount code must be exactly 5 alphanumeric characters"]})

    @invariant.post
    def used_count_cannot_exceed_max_uses(self):
        if self.used_count > self.max_uses:
            raise ValidationError({"used_count": ["Used count cannot exceed maximum uses"]})

    @invariant.post
    def percentage_cannot_exceed_one_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and self.discount_value > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        code,
        discount_type,
        discount_value,
        max_uses=1,
        description=None,
        min_order_amount=0,
        max_discount_amount=None,
        applicable_products=None,
        applicable_categories=None,
        applicable_users=None,
        is_first_time_only=False,
        is_public=False,
        created_by=None,
    ):
        now = datetime.now(UTC)
        discount_code = cls(
            code=normalize_code(code),
            description=description,
            discount_type=discount_type,
            discount_value=discount_value,
            min_order_amount=min_order_amount or 0,
            max_discount_amount=max_discount_amount or None,
            max_uses=max_uses,
            used_count=0,
            applicable_products=json.dumps(list(applicable_products or [])),
            applicable_categories=json.dumps(list(applicable_categories or [])),
            applicable_users=json.dumps([str(u) for u in applicable_users or []]),
            is_first_time_only=is_first_time_only,
            is_active=True,
            is_public=is_public,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        discount_code.raise_(
            DiscountCodeCreated(
                discount_code_id=str(discount_code.id),
                code=discount_code.code,
                discount_type=discount_code.discount_type,
                discount_value=discount_code.discount_value,
                max_uses=discount_code.max_uses,
                created_by=created_by,
                created_at=now,
            )
        )
        return discount_code

    # -------------------------------------------------------------------
    # Queries on the code
    # -------------------------------------------------------------------
    @property
    def allowed_users(self) -> list[str]:
        return json.loads(self.applicable_users) if self.applicable_users else []

    @property
    def remaining_uses(self) -> int:
        return self.max_uses - self.used_count

    def is_valid(self) -> bool:
        return bool(self.is_active) and self.used_count < self.max_uses

    def _identity_allowed(self, identity_key: str) -> bool:
        allowed = self.allowed_users
        if not allowed:
            return True
        return any(identity_key in (user, f"customer:{user}") for user in allowed)

    def has_been_used_by(self, identity_key: str) -> bool:
        return any(usage.identity_key == identity_key for usage in self.usage_history)

    def can_be_used_by(self, identity_key: str, amount: int = 0) -> Eligibility:
        """Whether ``identity_key`` may use this code on an order of ``amount``.

        Checks run in order and the first failure wins. Nothing is mutated.
        """
        if not self.is_valid():
            return Eligibility(valid=False, reason=REASON_INVALID)

        if (amount or 0) < (self.min_order_amount or 0):
            return Eligibility(
                valid=False,
                reason=f"Minimum order amount of {self.min_order_amount} required",
            )

        if not self._identity_allowed(identity_key):
            return Eligibility(valid=False, reason=REASON_NOT_APPLICABLE)

        if self.is_first_time_only and self.has_been_used_by(identity_key):
            return Eligibility(valid=False, reason=REASON_FIRST_TIME_ONLY)

        return Eligibility(valid=True)

    def calculate_discount(self, amount: int) -> int:
        return discount_amount(amount, self.discount_type, self.discount_value, self.max_discount_amount)

    # -------------------------------------------------------------------
    # Redemption
    # -------------------------------------------------------------------
    def use_code(self, identity_key: str, order_ref: str, discount_amount: int) -> int:
        """Consume one use for ``order_ref``, recording the ``discount_amount`` the order received.

        A second call for the same order returns the first redemption's
        amount and consumes nothing.
        """
        existing = next((u for u in self.usage_history if u.order_ref == str(order_ref)), None)
        if existing is not None:
            return existing.discount_amount

        if not self.is_valid():
            raise IneligibleError({"discount_code": [REASON_INVALID]})

        if discount_amount is None or discount_amount < 0:
            raise ValidationError({"discount_amount": ["Discount amount cannot be negative"]})

        granted = int(discount_amount)
        now = datetime.now(UTC)

        with atomic_change(self):
            self.add_usage_history(
                UsageRecord(
                    identity_key=identity_key,
                    order_ref=str(order_ref),
                    discount_amount=granted,
                    used_at=now,
                )
            )
            self.used_count += 1
            self.updated_at = now

        self.raise_(
            DiscountCodeRedeemed(
                discount_code_id=str(self.id),
                code=self.code,
                identity_key=identity_key,
                order_ref=str(order_ref),
                discount_amount=granted,
                used_count=self.used_count,
                max_uses=self.max_uses,
                used_at=now,
            )
        )
        return granted

    # -------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------
    def usage_stats(self) -> dict:
        total_given = sum(u.discount_amount or 0 for u in self.usage_history)
        history_size = len(self.usage_history)
        average = total_given / history_size if history_size else 0
        return {
            "total_uses": self.used_count,
            "max_uses": self.max_uses,
            "remaining_uses": self.remaining_uses,
            "usage_percentage": round(self.used_count / self.max_uses * 100),
            "total_discount_given": total_given,
            "average_discount": round(average, 2),
        }

    def recent_usage(self, limit: int = 10) -> list[dict]:
        ordered = sorted(self.usage_history, key=lambda u: u.used_at, reverse=True)
        return [
            {
                "identity_key": u.identity_key,
                "order_ref": u.order_ref,
                "discount_amount": u.discount_amount,
                "used_at": u.used_at.isoformat() if u.used_at else None,
            }
            for u in ordered[:limit]
        ]

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def activate(self, updated_by=None):
        self.is_active = True
        self.updated_by = updated_by
        self.updated_at = datetime.now(UTC)
        self.raise_(DiscountCodeActivated(discount_code_id=str(self.id), code=self.code))

    def deactivate(self, updated_by=None):
        self.is_active = False
        self.updated_by = updated_by
        self.updated_at = datetime.now(UTC)
        self.raise_(DiscountCodeDeactivated(discount_code_id=str(self.id), code=self.code))

    def update_details(
        self,
        description=None,
        discount_type=None,
        discount_value=None,
        min_order_amount=None,
        max_discount_amount=None,
        max_uses=None,
        applicable_users=None,
        is_first_time_only=None,
        is_public=None,
        updated_by=None,
    ):
        """Change the code's terms. Fields left as None keep their value."""
        if max_uses is not None and max_uses < self.used_count:
            raise ValidationError({"max_uses": ["Maximum uses cannot be lower than the current used count"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            if description is not None:
                self.description = description
            if discount_type is not None:
                self.discount_type = discount_type
            if discount_value is not None:
                self.discount_value = discount_value
            if min_order_amount is not None:
                self.min_order_amount = min_order_amount
            if max_discount_amount is not None:
                self.max_discount_amount = max_discount_amount or None
            if max_uses is not None:
                self.max_uses = max_uses
            if applicable_users is not None:
                self.applicable_users = json.dumps([str(u) for u in applicable_users])
            if is_first_time_only is not None:
                self.is_first_time_only = is_first_time_only
            if is_public is not None:
                self.is_public = is_public
            self.updated_by = updated_by
            self.updated_at = now

        self.raise_(
            DiscountCodeUpdated(
                discount_code_id=str(self.id),
                code=self.code,
                updated_by=updated_by,
                updated_at=now,
            )
        )

    def ensure_deletable(self):
        """Codes with redemptions keep their ledger; deactivate them instead."""
        if self.used_count:
            raise StateError({"discount_code": ["A code that has been used cannot be deleted; deactivate it instead"]})

    def details(self) -> dict:
        return {
            "discount_code_id": str(self.id),
            "code": self.code,
            "description": self.description,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "min_order_amount": self.min_order_amount,
            "max_discount_amount": self.max_discount_amount,
            "max_uses": self.max_uses,
            "used_count": self.used_count,
            "remaining_uses": self.remaining_uses,
            "is_first_time_only": self.is_first_time_only,
            "is_active": self.is_active,
            "is_public": self.is_public,
            "created_at": self.created_at,
        }
