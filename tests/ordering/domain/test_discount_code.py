"""Tests for the DiscountCode aggregate: validity, eligibility and redemption."""

import pytest
from ordering.discount.discount import (
    REASON_FIRST_TIME_ONLY,
    REASON_INVALID,
    REASON_NOT_APPLICABLE,
    DiscountCode,
)
from ordering.discount.events import DiscountCodeRedeemed
from ordering.pricing import DiscountType
from protean.exceptions import ValidationError
from shared.errors import IneligibleError


def _code(**overrides):
    defaults = {
        "code": "SAVE1",
        "discount_type": DiscountType.PERCENTAGE.value,
        "discount_value": 10,
        "max_uses": 3,
    }
    defaults.update(overrides)
    return DiscountCode.create(**defaults)


class TestCreation:
    def test_code_is_uppercased(self):
        assert _code(code="save1").code == "SAVE1"

    @pytest.mark.parametrize("bad", ["SAVE", "SAVE10", "SAV-1"])
    def test_code_must_be_five_alphanumerics(self, bad):
        with pytest.raises(ValidationError):
            _code(code=bad)

    def test_max_uses_limited_to_ten(self):
        with pytest.raises(ValidationError):
            _code(max_uses=11)

    def test_percentage_cannot_exceed_one_hundred(self):
        with pytest.raises(ValidationError):
            _code(discount_value=120)


class TestEligibility:
    def test_valid_code(self):
        eligibility = _code().can_be_used_by("customer:cust-001", 100_000)
        assert eligibility.valid
        assert eligibility.reason is None

    def test_exhausted_code_is_invalid(self):
        code = _code(max_uses=1)
        code.use_code("customer:cust-001", "ORD-1", 10_000)

        assert not code.is_valid()
        assert code.can_be_used_by("customer:cust-002", 100_000).reason == REASON_INVALID

    def test_inactive_code_is_invalid(self):
        code = _code()
        code.deactivate()
        assert code.can_be_used_by("customer:cust-001", 100_000).reason == REASON_INVALID

    def test_minimum_order_amount(self):
        code = _code(min_order_amount=200_000)
        eligibility = code.can_be_used_by("customer:cust-001", 150_000)
        assert not eligibility.valid
        assert eligibility.reason == "Minimum order amount of 200000 required"

    def test_restricted_to_listed_customers(self):
        code = _code(applicable_users=["cust-001"])
        assert code.can_be_used_by("customer:cust-001", 100_000).valid
        assert code.can_be_used_by("customer:cust-002", 100_000).reason == REASON_NOT_APPLICABLE

    def test_first_time_only(self):
        code = _code(is_first_time_only=True)
        code.use_code("customer:cust-001", "ORD-1", 10_000)
        assert code.can_be_used_by("customer:cust-001", 100_000).reason == REASON_FIRST_TIME_ONLY
        assert code.can_be_used_by("customer:cust-002", 100_000).valid

    def test_checking_consumes_nothing(self):
        code = _code()
        code.can_be_used_by("customer:cust-001", 100_000)
        assert code.used_count == 0


class TestRedemption:
    def test_use_code_returns_discount_and_counts_use(self):
        code = _code(max_discount_amount=50_000)
        granted = code.use_code("customer:cust-001", "ORD-1", code.calculate_discount(1_000_000))

        assert granted == 50_000
        assert code.used_count == 1
        assert code.usage_history[0].order_ref == "ORD-1"

    def test_records_the_amount_the_order_received(self):
        code = _code()
        code.update_details(discount_value=20)

        granted = code.use_code("customer:cust-001", "ORD-1", 100_000)

        assert granted == 100_000
        assert code.usage_history[0].discount_amount == 100_000
        assert code.usage_stats()["total_discount_given"] == 100_000

    def test_negative_amount_rejected(self):
        code = _code()
        with pytest.raises(ValidationError):
            code.use_code("customer:cust-001", "ORD-1", -1)
        assert code.used_count == 0

    def test_same_order_is_redeemed_once(self):
        code = _code()
        first = code.use_code("customer:cust-001", "ORD-1", 20_000)
        second = code.use_code("customer:cust-001", "ORD-1", 20_000)

        assert first == second == 20_000
        assert code.used_count == 1
        assert len(code.usage_history) == 1

    def test_exhausted_code_cannot_be_used(self):
        code = _code(max_uses=1)
        code.use_code("customer:cust-001", "ORD-1", 10_000)
        with pytest.raises(IneligibleError) as exc:
            code.use_code("customer:cust-002", "ORD-2", 10_000)
        assert exc.value.reason == REASON_INVALID

    def test_raises_redeemed_event(self):
        code = _code()
        code._events.clear()
        code.use_code("customer:cust-001", "ORD-1", 10_000)

        assert isinstance(code._events[0], DiscountCodeRedeemed)
        assert code._events[0].used_count == 1


class TestAdministration:
    def test_max_uses_cannot_drop_below_used_count(self):
        code = _code(max_uses=3)
        code.use_code("customer:cust-001", "ORD-1", 10_000)
        code.use_code("customer:cust-002", "ORD-2", 10_000)

        with pytest.raises(ValidationError):
            code.update_details(max_uses=1)

    def test_update_terms(self):
        code = _code()
        code.update_details(discount_value=15, description="Autumn sale", updated_by="admin")
        assert code.discount_value == 15
        assert code.description == "Autumn sale"

    def test_usage_stats(self):
        code = _code(max_uses=4)
        code.use_code("customer:cust-001", "ORD-1", 10_000)
        code.use_code("customer:cust-002", "ORD-2", 30_000)

        stats = code.usage_stats()

        assert stats["total_uses"] == 2
        assert stats["remaining_uses"] == 2
        assert stats["usage_percentage"] == 50
        assert stats["total_discount_given"] == 40_000
        assert stats["average_discount"] == 20_000
