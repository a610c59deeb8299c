"""Admin moderation: approve or reject a review, and respond to it publicly."""

from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.lookup import load_review
from reviews.review.review import Review


@reviews.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    action = String(required=True)  # "Approve" or "Reject"
    notes = Text()


@reviews.command(part_of="Review")
class RespondToReview:
    review_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    response = String(required=True, max_length=500)


@reviews.command_handler(part_of=Review)
class ModerationHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        review = load_review(command.review_id)
        review.moderate(action=command.action, moderator_id=command.moderator_id, notes=command.notes)
        current_domain.repository_for(Review).add(review)

    @handle(RespondToReview)
    def respond_to_review(self, command):
        review = load_review(command.review_id)
        review.respond(admin_id=command.admin_id, response=command.response)
        current_domain.repository_for(Review).add(review)
