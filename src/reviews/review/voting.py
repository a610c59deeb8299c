"""VoteReview: record whether a review was helpful."""

from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.lookup import load_review
from reviews.review.review import Review


@reviews.command(part_of="Review")
class VoteReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    helpful = Boolean(required=True)


@reviews.command_handler(part_of=Review)
class VoteReviewHandler:
    @handle(VoteReview)
    def vote_review(self, command):
        review = load_review(command.review_id)
        review.vote(customer_id=command.customer_id, helpful=command.helpful)
        current_domain.repository_for(Review).add(review)
        return {"helpful_votes": review.helpful_votes, "total_votes": review.total_votes}
