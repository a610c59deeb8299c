"""EditReview: change a review's title, comment or rating."""

from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.lookup import ensure_author_or_admin, load_review
from reviews.review.review import Review


@reviews.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    title = String(max_length=100)
    comment = Text()
    rating = Integer()


@reviews.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        review = load_review(command.review_id)
        ensure_author_or_admin(review, command.actor_id, command.is_admin)

        review.edit(title=command.title, comment=command.comment, rating=command.rating)
        current_domain.repository_for(Review).add(review)
