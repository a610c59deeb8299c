"""Application tests for cart commands: resolving, line management and merging."""

import pytest
from ordering.cart.cart import CartStatus, ShoppingCart
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from ordering.cart.management import MergeGuestCart, ResolveCart
from protean import current_domain
from shared.errors import InsufficientResourceError, ItemNotFoundError, NotFoundError


def _resolve(**kwargs):
    return current_domain.process(ResolveCart(**kwargs), asynchronous=False)


def _add(cart_id, product_id="prod-phone", variant_id="var-black", quantity=1):
    return current_domain.process(
        AddToCart(cart_id=cart_id, product_id=product_id, variant_id=variant_id, quantity=quantity),
        asynchronous=False,
    )


class TestResolveCart:
    def test_creates_cart_on_first_use(self):
        view = _resolve(customer_id="cust-001")

        cart = current_domain.repository_for(ShoppingCart).get(view["cart_id"])
        assert cart.owner_key == "customer:cust-001"
        assert view["total"] == 0

    def test_returns_the_same_active_cart(self):
        first = _resolve(customer_id="cust-001")
        second = _resolve(customer_id="cust-001")
        assert first["cart_id"] == second["cart_id"]

    def test_guest_cart_by_session(self):
        view = _resolve(session_id="sess-001")
        assert view["owner_key"] == "session:sess-001"


class TestAddToCart:
    def test_prices_from_catalog(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]

        view = _add(cart_id, quantity=2)

        assert view["subtotal"] == 1_000_000
        assert view["tax"] == 100_000
        assert view["shipping"] == 0
        assert view["total"] == 1_100_000

    def test_product_without_variant_uses_base_price(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        view = _add(cart_id, product_id="prod-case", variant_id=None)
        assert view["subtotal"] == 80_000
        assert view["shipping"] == 50_000

    def test_stock_checked_against_combined_quantity(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        _add(cart_id, variant_id="var-gold", quantity=2)

        with pytest.raises(InsufficientResourceError) as exc:
            _add(cart_id, variant_id="var-gold", quantity=1)
        assert exc.value.messages["quantity"] == ["Insufficient stock. Available: 2"]

    def test_unknown_product(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        with pytest.raises(NotFoundError):
            _add(cart_id, product_id="prod-404", variant_id=None)

    def test_inactive_product(self, catalog):
        catalog.add_product("prod-old", "Old Phone", base_price=100_000, active=False)
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        with pytest.raises(NotFoundError):
            _add(cart_id, product_id="prod-old", variant_id=None)

    def test_unknown_cart(self, catalog):
        with pytest.raises(NotFoundError):
            _add("cart-404")

    def test_catalog_is_only_read(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        _add(cart_id)
        assert {call["method"] for call in catalog.calls} <= {"get_product", "get_variant"}


class TestUpdateRemoveClear:
    def test_update_quantity(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        _add(cart_id)

        view = current_domain.process(
            UpdateCartItem(cart_id=cart_id, product_id="prod-phone", variant_id="var-black", quantity=3),
            asynchronous=False,
        )
        assert view["item_count"] == 3

    def test_update_to_zero_removes(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        _add(cart_id)

        view = current_domain.process(
            UpdateCartItem(cart_id=cart_id, product_id="prod-phone", variant_id="var-black", quantity=0),
            asynchronous=False,
        )
        assert view["item_count"] == 0

    def test_update_missing_line(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        with pytest.raises(ItemNotFoundError):
            current_domain.process(
                UpdateCartItem(cart_id=cart_id, product_id="prod-phone", variant_id="var-black", quantity=2),
                asynchronous=False,
            )

    def test_remove_line(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        _add(cart_id)
        _add(cart_id, product_id="prod-case", variant_id=None)

        view = current_domain.process(
            RemoveFromCart(cart_id=cart_id, product_id="prod-phone", variant_id="var-black"),
            asynchronous=False,
        )
        assert view["subtotal"] == 80_000

    def test_clear(self, catalog):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        _add(cart_id, quantity=2)

        view = current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
        assert view["total"] == 0


class TestMergeGuestCart:
    def test_guest_lines_move_to_customer_cart(self, catalog):
        guest_cart_id = _resolve(session_id="sess-001")["cart_id"]
        _add(guest_cart_id, quantity=2)

        view = current_domain.process(
            MergeGuestCart(customer_id="cust-001", session_id="sess-001"),
            asynchronous=False,
        )

        assert view["owner_key"] == "customer:cust-001"
        assert view["item_count"] == 2

        guest_cart = current_domain.repository_for(ShoppingCart).get(guest_cart_id)
        assert guest_cart.status == CartStatus.MERGED.value
        assert guest_cart.merged_into == view["cart_id"]

    def test_no_guest_cart(self):
        with pytest.raises(NotFoundError):
            current_domain.process(
                MergeGuestCart(customer_id="cust-001", session_id="sess-404"),
                asynchronous=False,
            )

    def test_resolving_after_merge_gives_a_fresh_guest_cart(self, catalog):
        guest_cart_id = _resolve(session_id="sess-001")["cart_id"]
        _add(guest_cart_id)
        current_domain.process(MergeGuestCart(customer_id="cust-001", session_id="sess-001"), asynchronous=False)

        assert _resolve(session_id="sess-001")["cart_id"] != guest_cart_id


class TestCartBroadcasts:
    def test_every_mutation_is_broadcast_to_the_owner(self, catalog, notifier):
        cart_id = _resolve(customer_id="cust-001")["cart_id"]
        _add(cart_id, quantity=2)

        updates = notifier.calls_for("cart_updated")
        assert len(updates) == 1
        assert updates[0]["identity"] == "customer:cust-001"
        assert updates[0]["totals"]["total"] == 1_100_000

    def test_failing_notifier_does_not_undo_the_change(self, catalog, notifier):
        notifier.configure(should_fail=True)
        cart_id = _resolve(customer_id="cust-001")["cart_id"]

        view = _add(cart_id, quantity=1)

        assert view["item_count"] == 1
        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert cart.item_count == 1
        assert len(notifier.calls_for("cart_updated")) == 1
