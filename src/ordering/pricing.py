"""Money helpers and the cart totals function.

All amounts are whole currency units (integers). Rounding is half away from
zero, applied once per computed figure.
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

TAX_RATE = Decimal("0.10")
FREE_SHIPPING_THRESHOLD = 1_000_000
FLAT_SHIPPING_FEE = 50_000
LOYALTY_POINT_VALUE = 1_000
LOYALTY_EARN_DIVISOR = 10_000
MAX_LINE_QUANTITY = 99


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class CartTotals:
    subtotal: int = 0
    tax: int = 0
    shipping: int = 0
    discount: int = 0
    loyalty_discount: int = 0
    total: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def round_money(amount) -> int:
    """Round to whole currency units, halves away from zero."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def discount_amount(subtotal: int, discount_type: str, value, max_discount: int | None = None) -> int:
    """Discount a code grants on ``subtotal``.

    Percentage codes take ``value`` percent of the subtotal, fixed codes take
    ``value`` as-is. The result is capped by ``max_discount`` (when set) and
    then by the subtotal itself.
    """
    if not value or value <= 0 or subtotal <= 0:
        return 0

    if discount_type == DiscountType.PERCENTAGE.value:
        amount = round_money(Decimal(subtotal) * Decimal(str(value)) / Decimal(100))
    else:
        amount = round_money(value)

    if max_discount:
        amount = min(amount, max_discount)

    return max(0, min(amount, subtotal))


def loyalty_deduction(points: int, subtotal: int) -> int:
    """Currency value of ``points``, never more than the subtotal."""
    if not points or points <= 0:
        return 0
    return max(0, min(points * LOYALTY_POINT_VALUE, subtotal))


def shipping_for(subtotal: int, has_lines: bool = True) -> int:
    if not has_lines or subtotal >= FREE_SHIPPING_THRESHOLD:
        return 0
    return FLAT_SHIPPING_FEE


def compute_totals(
    lines,
    discount_code: str | None = None,
    discount_type: str = DiscountType.PERCENTAGE.value,
    discount_value=0,
    max_discount: int | None = None,
    loyalty_points: int = 0,
) -> CartTotals:
    """Price a set of ``(price, quantity)`` lines with the attached discount and points."""
    lines = list(lines)
    subtotal = sum(price * quantity for price, quantity in lines)
    tax = round_money(Decimal(subtotal) * TAX_RATE)
    shipping = shipping_for(subtotal, has_lines=bool(lines))

    discount = 0
    if discount_code:
        discount = discount_amount(subtotal, discount_type, discount_value, max_discount)

    loyalty = loyalty_deduction(loyalty_points, subtotal)

    total = max(0, subtotal + tax + shipping - discount - loyalty)

    return CartTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        loyalty_discount=loyalty,
        total=total,
    )


def loyalty_points_earned(total: int) -> int:
    """Points earned for an order of ``total``: one per 10,000 spent."""
    if not total or total <= 0:
        return 0
    return int(total) // LOYALTY_EARN_DIVISOR
