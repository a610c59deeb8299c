"""Read-side helpers over the discount registry."""

from protean.utils.globals import current_domain

from ordering.discount.discount import DiscountCode, Eligibility, normalize_code
from shared.errors import NotFoundError


def find_by_code(code: str) -> DiscountCode | None:
    """The active code matching ``code`` (case-insensitive), or None."""
    repo = current_domain.repository_for(DiscountCode)
    matches = repo._dao.query.filter(code=normalize_code(code), is_active=True).all().items
    if not matches:
        return None
    return repo.get(matches[0].id)


def list_discount_codes(active: bool | None = None) -> list[dict]:
    """Every code, newest first, optionally only active or only inactive ones."""
    repo = current_domain.repository_for(DiscountCode)
    dao = repo._dao
    records = dao.query.filter(is_active=active).all().items if active is not None else dao.query.all().items
    codes = [repo.get(record.id) for record in records]
    codes.sort(key=lambda c: c.created_at, reverse=True)
    return [{**c.details(), "usage_stats": c.usage_stats()} for c in codes]


def check_eligibility(code: str, identity_key: str, amount: int) -> dict:
    """Preview what ``code`` would do for ``identity_key`` on ``amount``. Consumes nothing."""
    discount_code = find_by_code(code)
    if discount_code is None:
        raise NotFoundError({"code": ["Invalid discount code"]})

    eligibility: Eligibility = discount_code.can_be_used_by(identity_key, amount)
    return {
        "code": discount_code.code,
        "valid": eligibility.valid,
        "reason": eligibility.reason,
        "discount_amount": discount_code.calculate_discount(amount) if eligibility.valid else 0,
        "remaining_uses": discount_code.remaining_uses,
    }


def discount_statistics() -> dict:
    """Registry-wide totals across every code."""
    repo = current_domain.repository_for(DiscountCode)
    codes = [repo.get(c.id) for c in repo._dao.query.all().items]
    total_codes = len(codes)
    active_codes = sum(1 for c in codes if c.is_active)
    total_uses = sum(c.used_count for c in codes)
    total_max_uses = sum(c.max_uses for c in codes)
    total_given = sum(u.discount_amount or 0 for c in codes for u in c.usage_history)

    return {
        "total_codes": total_codes,
        "active_codes": active_codes,
        "inactive_codes": total_codes - active_codes,
        "total_uses": total_uses,
        "total_max_uses": total_max_uses,
        "remaining_uses": total_max_uses - total_uses,
        "usage_percentage": round(total_uses / total_max_uses * 100, 2) if total_max_uses else 0,
        "total_discount_given": total_given,
    }
