"""Loading reviews and checking who may change them."""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from reviews.review.review import Review
from shared.errors import NotFoundError


def load_review(review_id) -> Review:
    try:
        return current_domain.repository_for(Review).get(str(review_id))
    except ObjectNotFoundError as exc:
        raise NotFoundError({"review_id": ["Review not found"]}) from exc


def ensure_author_or_admin(review: Review, actor_id, is_admin: bool) -> None:
    if is_admin:
        return
    if str(actor_id) != str(review.customer_id):
        raise ValidationError({"review": ["Only the author or an admin can change this review"]})
