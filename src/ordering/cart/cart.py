"""Shopping Cart aggregate: the pricing and reconciliation engine.

A cart belongs to exactly one owner (a registered customer or a guest
session). Every mutation recomputes the full set of totals from the lines,
the attached discount and the attached loyalty points, so the stored totals
are always exactly what ``ordering.pricing.compute_totals`` yields.

Discounts attached here are previews only: redemption against the discount
registry happens when an order is placed.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from ordering.cart.events import CartConverted, CartsMerged, CartUpdated
from ordering.domain import ordering
from ordering.identity import CartOwner
from ordering.pricing import (
    MAX_LINE_QUANTITY,
    CartTotals,
    DiscountType,
    compute_totals,
)
from shared.errors import EmptyCartError, ItemNotFoundError, StateError

REGISTERED_CART_LIFETIME = timedelta(days=7)
GUEST_CART_LIFETIME = timedelta(days=30)


class CartStatus(Enum):
    ACTIVE = "Active"
    MERGED = "Merged"
    CONVERTED = "Converted"


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1, max_value=MAX_LINE_QUANTITY)
    price = Integer(required=True, min_value=0)
    added_at = DateTime()

    def matches(self, product_id, variant_id=None) -> bool:
        return str(self.product_id) == str(product_id) and (self.variant_id or None) == (
            str(variant_id) if variant_id else None
        )

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


@ordering.aggregate
class ShoppingCart:
    owner = ValueObject(CartOwner, required=True)
    owner_key = String(required=True, max_length=300)
    items = HasMany(CartItem)

    subtotal = Integer(default=0)
    tax = Integer(default=0)
    shipping = Integer(default=0)
    discount = Integer(default=0)
    loyalty_discount = Integer(default=0)
    total = Integer(default=0)

    discount_code = String(max_length=5)
    discount_type = String(choices=DiscountType, default=DiscountType.PERCENTAGE.value)
    discount_value = Float(default=0.0)
    discount_max_amount = Integer()
    loyalty_points_used = Integer(default=0, min_value=0)

    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    merged_into = Identifier()
    expires_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def deductions_never_exceed_subtotal(self):
        if self.discount > self.subtotal or self.loyalty_discount > self.subtotal:
            raise ValidationError({"total": ["Deductions cannot exceed the cart subtotal"]})

    @invariant.post
    def total_is_never_negative(self):
        if self.total < 0:
            raise ValidationError({"total": ["Cart total cannot be negative"]})

    @invariant.post
    def cart_must_have_items_to_convert(self):
        if self.status == CartStatus.CONVERTED.value and not self.items:
            raise ValidationError({"cart": ["Cannot convert an empty cart to an order"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner: CartOwner):
        now = datetime.now(UTC)
        return cls(
            owner=owner,
            owner_key=owner.key,
            status=CartStatus.ACTIVE.value,
            expires_at=now + cls._lifetime_for(owner),
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def _lifetime_for(owner: CartOwner) -> timedelta:
        return REGISTERED_CART_LIFETIME if owner.is_registered else GUEST_CART_LIFETIME

    @property
    def is_active(self) -> bool:
        return self.status == CartStatus.ACTIVE.value

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def find_item(self, product_id, variant_id=None):
        return next((i for i in self.items if i.matches(product_id, variant_id)), None)

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def calculate_totals(self) -> CartTotals:
        """Price the cart as it stands, without changing it."""
        return compute_totals(
            ((item.price, item.quantity) for item in self.items),
            discount_code=self.discount_code,
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            max_discount=self.discount_max_amount,
            loyalty_points=self.loyalty_points_used,
        )

    def _assert_active(self, action: str):
        if not self.is_active:
            raise StateError({"status": [f"Cannot {action}: cart is {self.status.lower()}"]})

    def _apply_totals(self, totals: CartTotals):
        self.subtotal = totals.subtotal
        self.tax = totals.tax
        self.shipping = totals.shipping
        self.discount = totals.discount
        self.loyalty_discount = totals.loyalty_discount
        self.total = totals.total

    def _refresh(self, change: str) -> CartTotals:
        """Recompute and store every total, then announce the new figures."""
        totals = self.calculate_totals()
        now = datetime.now(UTC)
        with atomic_change(self):
            self._apply_totals(totals)
            self.updated_at = now
            self.expires_at = now + self._lifetime_for(self.owner)

        self.raise_(
            CartUpdated(
                cart_id=str(self.id),
                owner_key=self.owner_key,
                change=change,
                item_count=self.item_count,
                subtotal=totals.subtotal,
                tax=totals.tax,
                shipping=totals.shipping,
                discount=totals.discount,
                loyalty_discount=totals.loyalty_discount,
                total=totals.total,
                discount_code=self.discount_code,
                loyalty_points_used=self.loyalty_points_used or 0,
                updated_at=now,
            )
        )
        return totals

    # -------------------------------------------------------------------
    # Line items
    # -------------------------------------------------------------------
    def add_item(self, product_id, variant_id=None, quantity=1, price=0):
        """Add ``quantity`` units, combining with an existing line for the same product and variant.

        The price given here is the current catalog price and overwrites the
        price stored on an existing line.
        """
        self._assert_active("add items")
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if price is None or price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

        existing = self.find_item(product_id, variant_id)
        with atomic_change(self):
            if existing:
                combined = existing.quantity + quantity
                if combined > MAX_LINE_QUANTITY:
                    raise ValidationError(
                        {"quantity": [f"Quantity per item cannot exceed {MAX_LINE_QUANTITY}"]}
                    )
                existing.quantity = combined
                existing.price = price
            else:
                if quantity > MAX_LINE_QUANTITY:
                    raise ValidationError(
                        {"quantity": [f"Quantity per item cannot exceed {MAX_LINE_QUANTITY}"]}
                    )
                self.add_items(
                    CartItem(
                        product_id=str(product_id),
                        variant_id=str(variant_id) if variant_id else None,
                        quantity=quantity,
                        price=price,
                        added_at=datetime.now(UTC),
                    )
                )

        return self._refresh("item_added")

    def update_item_quantity(self, product_id, variant_id=None, quantity=1):
        """Set a line's quantity; zero or less removes the line."""
        self._assert_active("update items")

        item = self.find_item(product_id, variant_id)
        if item is None:
            raise ItemNotFoundError({"item": ["Item not found in cart"]})

        if quantity is None or quantity <= 0:
            return self.remove_item(product_id, variant_id)

        if quantity > MAX_LINE_QUANTITY:
            raise ValidationError({"quantity": [f"Quantity per item cannot exceed {MAX_LINE_QUANTITY}"]})

        with atomic_change(self):
            item.quantity = quantity

        return self._refresh("quantity_updated")

    def remove_item(self, product_id, variant_id=None):
        """Remove a line. Removing a line that is not there is a no-op."""
        self._assert_active("remove items")

        item = self.find_item(product_id, variant_id)
        if item is None:
            return self.calculate_totals()

        with atomic_change(self):
            self.remove_items(item)

        return self._refresh("item_removed")

    def clear(self):
        """Empty the cart and detach any discount and loyalty points."""
        self._assert_active("clear")

        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self._detach_discount()
            self.loyalty_points_used = 0

        return self._refresh("cleared")

    # -------------------------------------------------------------------
    # Discount attachment (preview, no redemption)
    # -------------------------------------------------------------------
    def apply_discount(self, code, discount_type, value, max_discount=None) -> int:
        """Attach a discount code, replacing any previous one.

        Returns the discount the cart now carries, computed exactly as the
        totals compute it.
        """
        self._assert_active("apply a discount")
        if discount_type not in (DiscountType.PERCENTAGE.value, DiscountType.FIXED.value):
            raise ValidationError({"discount_type": ["Discount type must be percentage or fixed"]})
        if value is None or value < 0:
            raise ValidationError({"discount_value": ["Discount value cannot be negative"]})

        with atomic_change(self):
            self.discount_code = code.upper()
            self.discount_type = discount_type
            self.discount_value = float(value)
            self.discount_max_amount = max_discount or None

        return self._refresh("discount_applied").discount

    def _detach_discount(self):
        self.discount_code = None
        self.discount_type = DiscountType.PERCENTAGE.value
        self.discount_value = 0.0
        self.discount_max_amount = None

    def remove_discount(self):
        self._assert_active("remove the discount")

        with atomic_change(self):
            self._detach_discount()

        return self._refresh("discount_removed")

    # -------------------------------------------------------------------
    # Loyalty points
    # -------------------------------------------------------------------
    def use_loyalty_points(self, points: int):
        """Attach ``points``; the deduction is worth 1,000 per point, capped at the subtotal.

        Whether the owner actually holds that many points is checked by the
        caller against the loyalty account.
        """
        self._assert_active("use loyalty points")
        if points is None or points < 0:
            raise ValidationError({"points": ["Loyalty points cannot be negative"]})

        with atomic_change(self):
            self.loyalty_points_used = points

        return self._refresh("loyalty_applied")

    def remove_loyalty_points(self):
        self._assert_active("remove loyalty points")

        with atomic_change(self):
            self.loyalty_points_used = 0

        return self._refresh("loyalty_removed")

    # -------------------------------------------------------------------
    # Guest cart merging
    # -------------------------------------------------------------------
    def merge_from(self, guest_cart: "ShoppingCart"):
        """Fold a guest cart into this cart and deactivate the guest cart.

        When this cart is empty, the guest cart's lines, discount and loyalty
        attachment carry over wholesale. Otherwise each guest line is added
        with add-item semantics (the guest price wins, the combined quantity
        is clamped at the per-line maximum) and the guest's attachments are
        dropped.
        """
        self._assert_active("merge into this cart")
        guest_cart._assert_active("merge from this cart")
        if str(guest_cart.id) == str(self.id):
            raise ValidationError({"cart": ["A cart cannot be merged into itself"]})

        carried_over = not self.items
        now = datetime.now(UTC)

        with atomic_change(self):
            for guest_item in guest_cart.items:
                existing = self.find_item(guest_item.product_id, guest_item.variant_id)
                if existing:
                    existing.quantity = min(existing.quantity + guest_item.quantity, MAX_LINE_QUANTITY)
                    existing.price = guest_item.price
                else:
                    self.add_items(
                        CartItem(
                            product_id=guest_item.product_id,
                            variant_id=guest_item.variant_id,
                            quantity=guest_item.quantity,
                            price=guest_item.price,
                            added_at=guest_item.added_at or now,
                        )
                    )

            if carried_over:
                self.discount_code = guest_cart.discount_code
                self.discount_type = guest_cart.discount_type
                self.discount_value = guest_cart.discount_value
                self.discount_max_amount = guest_cart.discount_max_amount
                self.loyalty_points_used = guest_cart.loyalty_points_used

        with atomic_change(guest_cart):
            guest_cart.status = CartStatus.MERGED.value
            guest_cart.merged_into = str(self.id)
            guest_cart.updated_at = now

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                source_cart_id=str(guest_cart.id),
                source_owner_key=guest_cart.owner_key,
                items_merged_count=len(guest_cart.items),
                attachments_carried=carried_over,
                merged_at=now,
            )
        )

        return self._refresh("merged")

    # -------------------------------------------------------------------
    # Read models handed to callers
    # -------------------------------------------------------------------
    def summary(self) -> dict:
        return {
            "item_count": self.item_count,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping": self.shipping,
            "discount": self.discount,
            "loyalty_discount": self.loyalty_discount,
            "total": self.total,
            "discount_code": self.discount_code,
            "loyalty_points_used": self.loyalty_points_used or 0,
        }

    def snapshot(self) -> dict:
        """Lines and pricing as an order should capture them."""
        return {
            "cart_id": str(self.id),
            "owner_key": self.owner_key,
            "items": tuple(
                {
                    "product_id": str(item.product_id),
                    "variant_id": str(item.variant_id) if item.variant_id else None,
                    "quantity": item.quantity,
                    "price": item.price,
                }
                for item in self.items
            ),
            "discount_code": self.discount_code,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "discount_max_amount": self.discount_max_amount,
            "loyalty_points_used": self.loyalty_points_used or 0,
            **self.calculate_totals().to_dict(),
        }

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def convert_to_order(self, order_id, order_number=None):
        """Deactivate the cart once an order has been placed from it."""
        self._assert_active("check out")
        if not self.items:
            raise EmptyCartError({"cart": ["Cannot convert an empty cart"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = CartStatus.CONVERTED.value
            self.updated_at = now

        self.raise_(
            CartConverted(
                cart_id=str(self.id),
                owner_key=self.owner_key,
                order_id=str(order_id),
                order_number=order_number,
                converted_at=now,
            )
        )
