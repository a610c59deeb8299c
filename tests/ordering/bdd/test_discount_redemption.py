"""BDD tests for discount code redemption."""

from ordering.discount.discount import DiscountCode
from ordering.pricing import DiscountType
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/discount_redemption.feature")


@given(
    parsers.cfparse('a {percent:d} percent discount code "{code}" with {max_uses:d} maximum uses'),
    target_fixture="discount_code",
)
def discount_code(percent, code, max_uses):
    return DiscountCode.create(
        code=code,
        discount_type=DiscountType.PERCENTAGE.value,
        discount_value=percent,
        max_uses=max_uses,
    )


@given(parsers.cfparse("the code requires a minimum order of {amount:d}"))
def minimum_order(discount_code, amount):
    discount_code.update_details(min_order_amount=amount)


@when(
    parsers.cfparse('the code is redeemed by "{identity_key}" for order "{order_ref}" on {amount:d}'),
    target_fixture="granted",
)
def redeem(discount_code, identity_key, order_ref, amount):
    return discount_code.use_code(identity_key, order_ref, discount_code.calculate_discount(amount))


@then(parsers.cfparse("the code has been used {count:d} times"))
def used_times(discount_code, count):
    assert discount_code.used_count == count
    assert len(discount_code.usage_history) == count


@then(parsers.cfparse("the last redemption granted {amount:d}"))
def last_granted(granted, amount):
    assert granted == amount


@then("the code is not valid")
def code_not_valid(discount_code):
    assert not discount_code.is_valid()


@then(parsers.cfparse('"{identity_key}" is told "{reason}"'))
def told_reason(discount_code, identity_key, reason):
    eligibility = discount_code.can_be_used_by(identity_key, 1_000_000)
    assert not eligibility.valid
    assert eligibility.reason == reason


@then(parsers.cfparse('"{identity_key}" is told "{reason}" for an order of {amount:d}'))
def told_reason_for_amount(discount_code, identity_key, reason, amount):
    eligibility = discount_code.can_be_used_by(identity_key, amount)
    assert eligibility.reason == reason
