"""Pydantic request/response schemas for the Reviews API.

These are separate from Protean commands: the API layer is the external
contract, commands are internal domain concepts.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    product_id: str
    customer_id: str
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1, max_length=100)
    comment: str = Field(min_length=10, max_length=1000)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "customer_id": "cust-001",
                    "rating": 5,
                    "title": "Great phone",
                    "comment": "Battery lasts two full days of heavy use.",
                }
            ]
        }
    }


class EditReviewRequest(BaseModel):
    actor_id: str
    is_admin: bool = False
    title: str | None = Field(default=None, min_length=1, max_length=100)
    comment: str | None = Field(default=None, min_length=10, max_length=1000)
    rating: int | None = Field(default=None, ge=1, le=5)


class RemoveReviewRequest(BaseModel):
    actor_id: str
    is_admin: bool = False
    reason: str | None = None


class ModerateReviewRequest(BaseModel):
    moderator_id: str
    action: str  # "Approve" or "Reject"
    notes: str | None = None


class VoteReviewRequest(BaseModel):
    customer_id: str
    helpful: bool


class RespondToReviewRequest(BaseModel):
    admin_id: str
    response: str = Field(min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewIdResponse(BaseModel):
    review_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class VoteResponse(BaseModel):
    helpful_votes: int
    total_votes: int
