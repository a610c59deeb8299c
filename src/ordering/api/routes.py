"""FastAPI routes for the Ordering domain: carts, orders, discount codes and loyalty."""

import json
from datetime import datetime

from fastapi import APIRouter
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddToCartRequest,
    AdminNoteRequest,
    ApplyDiscountRequest,
    CancelOrderRequest,
    CartResponse,
    CheckoutRequest,
    CreateDiscountCodeRequest,
    DiscountAdminRequest,
    DiscountAppliedResponse,
    GrantLoyaltyPointsRequest,
    IdResponse,
    MergeGuestCartRequest,
    OrderPlacedResponse,
    ResolveCartRequest,
    ReturnOrderRequest,
    StatusResponse,
    UpdateCartItemRequest,
    UpdateDiscountCodeRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    UpdateTrackingRequest,
    UseLoyaltyPointsRequest,
)
from ordering.cart.discounts import ApplyDiscountCode, RemoveDiscountCode
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from ordering.cart.management import MergeGuestCart, ResolveCart, cart_view, load_cart
from ordering.cart.points import RemoveLoyaltyPoints, UseLoyaltyPoints
from ordering.discount.management import (
    ActivateDiscountCode,
    CreateDiscountCode,
    DeactivateDiscountCode,
    DeleteDiscountCode,
    UpdateDiscountCode,
    load_discount_code,
)
from ordering.discount.queries import check_eligibility, discount_statistics, list_discount_codes
from ordering.loyalty.management import GrantLoyaltyPoints, find_account
from ordering.order.fulfilment import AddAdminNote, UpdatePaymentStatus, UpdateTracking
from ordering.order.placement import PlaceOrder
from ordering.order.status import CancelOrder, ReturnOrder, UpdateOrderStatus, load_order
from ordering.projections.analytics import order_statistics, orders_by_status, orders_for_customer

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", response_model=CartResponse)
async def resolve_cart(body: ResolveCartRequest) -> CartResponse:
    command = ResolveCart(customer_id=body.customer_id, session_id=body.session_id)
    return current_domain.process(command, asynchronous=False)


@cart_router.post("/merge", response_model=CartResponse)
async def merge_guest_cart(body: MergeGuestCartRequest) -> CartResponse:
    command = MergeGuestCart(customer_id=body.customer_id, session_id=body.session_id)
    return current_domain.process(command, asynchronous=False)


@cart_router.get("/{cart_id}")
async def get_cart(cart_id: str) -> dict:
    cart = load_cart(cart_id)
    return {
        **cart_view(cart),
        "status": cart.status,
        "items": [
            {
                "product_id": str(item.product_id),
                "variant_id": str(item.variant_id) if item.variant_id else None,
                "quantity": item.quantity,
                "price": item.price,
                "line_total": item.line_total,
            }
            for item in cart.items
        ],
    }


@cart_router.post("/{cart_id}/items", response_model=CartResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest) -> CartResponse:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    return current_domain.process(command, asynchronous=False)


@cart_router.put("/{cart_id}/items", response_model=CartResponse)
async def update_cart_item(cart_id: str, body: UpdateCartItemRequest) -> CartResponse:
    command = UpdateCartItem(
        cart_id=cart_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    return current_domain.process(command, asynchronous=False)


@cart_router.delete("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(cart_id: str, product_id: str, variant_id: str | None = None) -> CartResponse:
    command = RemoveFromCart(cart_id=cart_id, product_id=product_id, variant_id=variant_id)
    return current_domain.process(command, asynchronous=False)


@cart_router.delete("/{cart_id}/items", response_model=CartResponse)
async def clear_cart(cart_id: str) -> CartResponse:
    return current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)


@cart_router.post("/{cart_id}/discount", response_model=DiscountAppliedResponse)
async def apply_discount_code(cart_id: str, body: ApplyDiscountRequest) -> DiscountAppliedResponse:
    command = ApplyDiscountCode(cart_id=cart_id, code=body.code)
    return current_domain.process(command, asynchronous=False)


@cart_router.delete("/{cart_id}/discount", response_model=CartResponse)
async def remove_discount_code(cart_id: str) -> CartResponse:
    return current_domain.process(RemoveDiscountCode(cart_id=cart_id), asynchronous=False)


@cart_router.post("/{cart_id}/loyalty", response_model=CartResponse)
async def use_loyalty_points(cart_id: str, body: UseLoyaltyPointsRequest) -> CartResponse:
    command = UseLoyaltyPoints(cart_id=cart_id, points=body.points)
    return current_domain.process(command, asynchronous=False)


@cart_router.delete("/{cart_id}/loyalty", response_model=CartResponse)
async def remove_loyalty_points(cart_id: str) -> CartResponse:
    return current_domain.process(RemoveLoyaltyPoints(cart_id=cart_id), asynchronous=False)


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=OrderPlacedResponse)
async def checkout_cart(cart_id: str, body: CheckoutRequest) -> OrderPlacedResponse:
    command = PlaceOrder(
        cart_id=cart_id,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        payment_method=body.payment_method,
        customer_notes=body.customer_notes,
        guest_email=body.guest.email if body.guest else None,
        guest_full_name=body.guest.full_name if body.guest else None,
        guest_phone=body.guest.phone if body.guest else None,
    )
    return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("")
async def list_orders(customer_key: str | None = None, status: str | None = None) -> list[dict]:
    if customer_key:
        return orders_for_customer(customer_key, status=status)
    return orders_by_status(status or "pending")


@order_router.get("/statistics")
async def get_order_statistics(
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    timeframe: str = "monthly",
) -> dict:
    return order_statistics(date_from, date_to, timeframe)


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    order = load_order(order_id)
    return {
        **order.details(),
        "can_be_cancelled": order.can_be_cancelled(),
        "can_be_returned": order.can_be_returned(),
    }


@order_router.put("/{order_id}/status")
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> dict:
    command = UpdateOrderStatus(order_id=order_id, status=body.status, note=body.note, actor=body.actor)
    return current_domain.process(command, asynchronous=False)


@order_router.post("/{order_id}/cancel")
async def cancel_order(order_id: str, body: CancelOrderRequest) -> dict:
    command = CancelOrder(order_id=order_id, reason=body.reason, actor=body.actor)
    return current_domain.process(command, asynchronous=False)


@order_router.post("/{order_id}/return")
async def return_order(order_id: str, body: ReturnOrderRequest) -> dict:
    command = ReturnOrder(order_id=order_id, reason=body.reason, actor=body.actor)
    return current_domain.process(command, asynchronous=False)


@order_router.put("/{order_id}/tracking", response_model=StatusResponse)
async def update_tracking(order_id: str, body: UpdateTrackingRequest) -> StatusResponse:
    command = UpdateTracking(
        order_id=order_id,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        estimated_delivery=body.estimated_delivery,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/payment", response_model=StatusResponse)
async def update_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> StatusResponse:
    command = UpdatePaymentStatus(order_id=order_id, payment_status=body.payment_status, payment_id=body.payment_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/notes", response_model=StatusResponse)
async def add_admin_note(order_id: str, body: AdminNoteRequest) -> StatusResponse:
    current_domain.process(AddAdminNote(order_id=order_id, note=body.note, actor=body.actor), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Discount Router
# ---------------------------------------------------------------------------
discount_router = APIRouter(prefix="/discounts", tags=["discounts"])


@discount_router.post("", status_code=201, response_model=IdResponse)
async def create_discount_code(body: CreateDiscountCodeRequest) -> IdResponse:
    command = CreateDiscountCode(
        code=body.code,
        discount_type=body.discount_type,
        discount_value=body.discount_value,
        max_uses=body.max_uses,
        description=body.description,
        min_order_amount=body.min_order_amount,
        max_discount_amount=body.max_discount_amount,
        applicable_users=json.dumps(body.applicable_users) if body.applicable_users else None,
        is_first_time_only=body.is_first_time_only,
        is_public=body.is_public,
        created_by=body.created_by,
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@discount_router.get("")
async def list_codes(active: bool | None = None) -> list[dict]:
    return list_discount_codes(active)


@discount_router.get("/statistics")
async def get_discount_statistics() -> dict:
    return discount_statistics()


@discount_router.get("/check/{code}")
async def check_discount_code(code: str, identity_key: str, amount: int = 0) -> dict:
    return check_eligibility(code, identity_key, amount)


@discount_router.get("/{discount_code_id}")
async def get_discount_code(discount_code_id: str) -> dict:
    discount_code = load_discount_code(discount_code_id)
    return {
        **discount_code.details(),
        "usage_stats": discount_code.usage_stats(),
        "recent_usage": discount_code.recent_usage(),
    }


@discount_router.put("/{discount_code_id}", response_model=StatusResponse)
async def update_discount_code(discount_code_id: str, body: UpdateDiscountCodeRequest) -> StatusResponse:
    command = UpdateDiscountCode(
        discount_code_id=discount_code_id,
        description=body.description,
        discount_type=body.discount_type,
        discount_value=body.discount_value,
        min_order_amount=body.min_order_amount,
        max_discount_amount=body.max_discount_amount,
        max_uses=body.max_uses,
        applicable_users=json.dumps(body.applicable_users) if body.applicable_users is not None else None,
        is_first_time_only=body.is_first_time_only,
        is_public=body.is_public,
        updated_by=body.updated_by,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@discount_router.delete("/{discount_code_id}", response_model=StatusResponse)
async def delete_discount_code(discount_code_id: str, deleted_by: str | None = None) -> StatusResponse:
    command = DeleteDiscountCode(discount_code_id=discount_code_id, deleted_by=deleted_by)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@discount_router.post("/{discount_code_id}/activate", response_model=StatusResponse)
async def activate_discount_code(discount_code_id: str, body: DiscountAdminRequest) -> StatusResponse:
    command = ActivateDiscountCode(discount_code_id=discount_code_id, updated_by=body.updated_by)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@discount_router.post("/{discount_code_id}/deactivate", response_model=StatusResponse)
async def deactivate_discount_code(discount_code_id: str, body: DiscountAdminRequest) -> StatusResponse:
    command = DeactivateDiscountCode(discount_code_id=discount_code_id, updated_by=body.updated_by)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Loyalty Router
# ---------------------------------------------------------------------------
loyalty_router = APIRouter(prefix="/loyalty", tags=["loyalty"])


@loyalty_router.get("/{customer_id}")
async def get_loyalty_account(customer_id: str) -> dict:
    account = find_account(customer_id)
    if account is None:
        return {"customer_id": customer_id, "balance": 0, "entries": []}
    return {
        "customer_id": customer_id,
        "balance": account.balance,
        "entries": [
            {
                "kind": entry.kind,
                "points": entry.points,
                "reason": entry.reason,
                "order_number": entry.order_number,
                "created_at": entry.created_at,
            }
            for entry in sorted(account.entries, key=lambda e: e.created_at)
        ],
    }


@loyalty_router.post("/{customer_id}/grant")
async def grant_loyalty_points(customer_id: str, body: GrantLoyaltyPointsRequest) -> dict:
    command = GrantLoyaltyPoints(customer_id=customer_id, points=body.points, reason=body.reason)
    balance = current_domain.process(command, asynchronous=False)
    return {"customer_id": customer_id, "balance": balance}
