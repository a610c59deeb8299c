"""BDD tests for cart pricing."""

from ordering.cart.cart import ShoppingCart
from ordering.identity import CartOwner
from ordering.pricing import DiscountType
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/cart_pricing.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a cart for customer "{customer_id}"'), target_fixture="cart")
def cart_for_customer(customer_id):
    return ShoppingCart.create(CartOwner.registered(customer_id))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('{quantity:d} units of "{product_id}" are added at {price:d} each'))
def add_units(cart, quantity, product_id, price, error):
    try:
        cart.add_item(product_id, quantity=quantity, price=price)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the discount "{code}" for {percent:d} percent capped at {cap:d} is applied'))
def apply_discount(cart, code, percent, cap):
    cart.apply_discount(code, DiscountType.PERCENTAGE.value, percent, max_discount=cap)


@when(parsers.cfparse("{points:d} loyalty points are used"))
def use_points(cart, points):
    cart.use_loyalty_points(points)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart subtotal is {amount:d}"))
def cart_subtotal(cart, amount):
    assert cart.subtotal == amount


@then(parsers.cfparse("the cart tax is {amount:d}"))
def cart_tax(cart, amount):
    assert cart.tax == amount


@then(parsers.cfparse("the cart shipping is {amount:d}"))
def cart_shipping(cart, amount):
    assert cart.shipping == amount


@then(parsers.cfparse("the cart discount is {amount:d}"))
def cart_discount(cart, amount):
    assert cart.discount == amount


@then(parsers.cfparse("the cart loyalty deduction is {amount:d}"))
def cart_loyalty(cart, amount):
    assert cart.loyalty_discount == amount


@then(parsers.cfparse("the cart total is {amount:d}"))
def cart_total(cart, amount):
    assert cart.total == amount
    assert cart.total == cart.calculate_totals().total


@then(parsers.cfparse("the cart has {count:d} units"))
def cart_units(cart, count):
    assert cart.item_count == count
