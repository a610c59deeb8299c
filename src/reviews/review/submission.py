"""SubmitReview: publish a new product review.

One live review per customer per product, enforced here because the check
spans review instances.
"""

import structlog
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.review import Review, ReviewStatus
from shared.errors import ConflictError

logger = structlog.get_logger(__name__)


@reviews.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(required=True, max_length=100)
    comment = Text(required=True)


@reviews.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        repo = current_domain.repository_for(Review)

        existing = repo._dao.query.filter(
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
        ).all()
        if any(r.status != ReviewStatus.REMOVED.value for r in existing.items):
            raise ConflictError({"review": ["You have already reviewed this product"]})

        review = Review.submit(
            product_id=command.product_id,
            customer_id=command.customer_id,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
        )
        repo.add(review)
        logger.info("review_submitted", review_id=str(review.id), product_id=str(command.product_id))
        return str(review.id)
