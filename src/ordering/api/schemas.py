"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept separate from the internal Protean
commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    full_name: str
    street: str
    city: str
    state: str | None = None
    zip_code: str | None = None
    country: str = "Vietnam"
    phone: str | None = None


class GuestSchema(BaseModel):
    email: str
    full_name: str
    phone: str | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class ResolveCartRequest(BaseModel):
    customer_id: str | None = None
    session_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"customer_id": "cust-001", "session_id": None},
                {"customer_id": None, "session_id": "sess-7f3a"},
            ]
        }
    }


class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int


class ApplyDiscountRequest(BaseModel):
    code: str = Field(min_length=1, max_length=20)


class UseLoyaltyPointsRequest(BaseModel):
    points: int = Field(ge=0)


class MergeGuestCartRequest(BaseModel):
    customer_id: str
    session_id: str


class CheckoutRequest(BaseModel):
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    customer_notes: str | None = Field(default=None, max_length=500)
    guest: GuestSchema | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "full_name": "Nguyen Van A",
                        "street": "12 Le Loi",
                        "city": "Ho Chi Minh City",
                        "state": "HCM",
                        "zip_code": "700000",
                        "country": "Vietnam",
                        "phone": "+84901234567",
                    },
                    "payment_method": "cod",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    status: str
    note: str | None = Field(default=None, max_length=500)
    actor: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)
    actor: str | None = None


class ReturnOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)
    actor: str | None = None


class UpdateTrackingRequest(BaseModel):
    carrier: str | None = None
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: str
    payment_id: str | None = None


class AdminNoteRequest(BaseModel):
    note: str = Field(min_length=1, max_length=1000)
    actor: str | None = None


# ---------------------------------------------------------------------------
# Discount Request Schemas
# ---------------------------------------------------------------------------
class CreateDiscountCodeRequest(BaseModel):
    code: str
    discount_type: str = "percentage"
    discount_value: float = Field(ge=0)
    max_uses: int = Field(ge=1, le=10, default=1)
    description: str | None = Field(default=None, max_length=200)
    min_order_amount: int = Field(ge=0, default=0)
    max_discount_amount: int | None = Field(default=None, ge=0)
    applicable_users: list[str] | None = None
    is_first_time_only: bool = False
    is_public: bool = False
    created_by: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "SAVE1",
                    "discount_type": "percentage",
                    "discount_value": 10,
                    "max_uses": 5,
                    "max_discount_amount": 50000,
                }
            ]
        }
    }


class UpdateDiscountCodeRequest(BaseModel):
    description: str | None = Field(default=None, max_length=200)
    discount_type: str | None = None
    discount_value: float | None = Field(default=None, ge=0)
    min_order_amount: int | None = Field(default=None, ge=0)
    max_discount_amount: int | None = Field(default=None, ge=0)
    max_uses: int | None = Field(default=None, ge=1, le=10)
    applicable_users: list[str] | None = None
    is_first_time_only: bool | None = None
    is_public: bool | None = None
    updated_by: str | None = None


class DiscountAdminRequest(BaseModel):
    updated_by: str | None = None


# ---------------------------------------------------------------------------
# Loyalty Request Schemas
# ---------------------------------------------------------------------------
class GrantLoyaltyPointsRequest(BaseModel):
    points: int = Field(ge=1)
    reason: str = "Manual grant"


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


class CartResponse(BaseModel):
    cart_id: str
    owner_key: str
    item_count: int
    subtotal: int
    tax: int
    shipping: int
    discount: int
    loyalty_discount: int
    total: int
    discount_code: str | None = None
    loyalty_points_used: int = 0


class OrderPlacedResponse(BaseModel):
    order_id: str
    order_number: str
    total: int


class DiscountAppliedResponse(CartResponse):
    discount_amount: int
