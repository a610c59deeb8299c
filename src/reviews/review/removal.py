"""RemoveReview: take a review down. Authors remove their own; admins remove any."""

from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.lookup import ensure_author_or_admin, load_review
from reviews.review.review import Review


@reviews.command(part_of="Review")
class RemoveReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    reason = String(max_length=500)


@reviews.command_handler(part_of=Review)
class RemoveReviewHandler:
    @handle(RemoveReview)
    def remove_review(self, command):
        review = load_review(command.review_id)
        ensure_author_or_admin(review, command.actor_id, command.is_admin)

        review.remove(removed_by=command.actor_id, reason=command.reason)
        current_domain.repository_for(Review).add(review)
