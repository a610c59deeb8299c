"""FastAPI routes for the Reviews bounded context.

Each route translates between Pydantic schemas (external contract) and
Protean commands (internal domain concepts).
"""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from reviews.api.schemas import (
    EditReviewRequest,
    ModerateReviewRequest,
    RemoveReviewRequest,
    RespondToReviewRequest,
    ReviewIdResponse,
    StatusResponse,
    SubmitReviewRequest,
    VoteResponse,
    VoteReviewRequest,
)
from reviews.projections.product_rating import rating_for
from reviews.review.editing import EditReview
from reviews.review.lookup import load_review
from reviews.review.moderation import ModerateReview, RespondToReview
from reviews.review.removal import RemoveReview
from reviews.review.review import Review, ReviewStatus
from reviews.review.submission import SubmitReview
from reviews.review.voting import VoteReview

review_router = APIRouter(prefix="/reviews", tags=["reviews"])
product_router = APIRouter(prefix="/products", tags=["reviews"])


@review_router.post("", status_code=201, response_model=ReviewIdResponse)
async def submit_review(body: SubmitReviewRequest) -> ReviewIdResponse:
    """Submit and publish a product review."""
    command = SubmitReview(
        product_id=body.product_id,
        customer_id=body.customer_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
    )
    review_id = current_domain.process(command, asynchronous=False)
    return ReviewIdResponse(review_id=review_id)


@review_router.get("/{review_id}")
async def get_review(review_id: str) -> dict:
    return load_review(review_id).details()


@review_router.put("/{review_id}", response_model=StatusResponse)
async def edit_review(review_id: str, body: EditReviewRequest) -> StatusResponse:
    command = EditReview(
        review_id=review_id,
        actor_id=body.actor_id,
        is_admin=body.is_admin,
        title=body.title,
        comment=body.comment,
        rating=body.rating,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.post("/{review_id}/remove", response_model=StatusResponse)
async def remove_review(review_id: str, body: RemoveReviewRequest) -> StatusResponse:
    command = RemoveReview(
        review_id=review_id,
        actor_id=body.actor_id,
        is_admin=body.is_admin,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.post("/{review_id}/moderate", response_model=StatusResponse)
async def moderate_review(review_id: str, body: ModerateReviewRequest) -> StatusResponse:
    command = ModerateReview(
        review_id=review_id,
        moderator_id=body.moderator_id,
        action=body.action,
        notes=body.notes,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.post("/{review_id}/vote", response_model=VoteResponse)
async def vote_review(review_id: str, body: VoteReviewRequest) -> VoteResponse:
    command = VoteReview(review_id=review_id, customer_id=body.customer_id, helpful=body.helpful)
    return current_domain.process(command, asynchronous=False)


@review_router.post("/{review_id}/response", response_model=StatusResponse)
async def respond_to_review(review_id: str, body: RespondToReviewRequest) -> StatusResponse:
    command = RespondToReview(review_id=review_id, admin_id=body.admin_id, response=body.response)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.get("/{product_id}/rating")
async def get_product_rating(product_id: str) -> dict:
    return rating_for(product_id)


@product_router.get("/{product_id}/reviews")
async def list_product_reviews(product_id: str) -> list[dict]:
    repo = current_domain.repository_for(Review)
    published = repo._dao.query.filter(product_id=product_id, status=ReviewStatus.PUBLISHED.value).all().items
    ordered = sorted(published, key=lambda r: r.created_at, reverse=True)
    return [repo.get(r.id).details() for r in ordered]
