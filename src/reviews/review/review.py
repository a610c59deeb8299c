"""Review aggregate: a customer's rating and comment on a product.

Reviews are published as soon as they are submitted; moderation can reject
or re-approve them later. A customer holds at most one live review per
product, which the submission handler enforces across instances.

Status:
    PUBLISHED <-> REJECTED
    PUBLISHED | REJECTED -> REMOVED (terminal)
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from reviews.domain import reviews
from reviews.review.events import (
    ReviewEdited,
    ReviewModerated,
    ReviewRemoved,
    ReviewResponded,
    ReviewSubmitted,
    ReviewVoted,
)

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

COMMENT_MIN_LENGTH = 10
COMMENT_MAX_LENGTH = 1000


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PUBLISHED = "Published"
    REJECTED = "Rejected"
    REMOVED = "Removed"


class ModerationAction(Enum):
    APPROVE = "Approve"
    REJECT = "Reject"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@reviews.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@reviews.entity(part_of="Review")
class HelpfulVote:
    """One customer's verdict on whether the review helped."""

    customer_id = Identifier(required=True)
    helpful = Boolean(required=True)
    voted_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@reviews.aggregate
class Review:
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)

    rating = ValueObject(Rating, required=True)
    title = String(required=True, max_length=100)
    comment = Text(required=True)

    status = String(choices=ReviewStatus, default=ReviewStatus.PUBLISHED.value)
    moderation_notes = Text()

    votes = HasMany(HelpfulVote)
    helpful_votes = Integer(default=0)
    total_votes = Integer(default=0)

    admin_response = String(max_length=500)
    responded_by = Identifier()
    responded_at = DateTime()

    is_edited = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def comment_length_within_bounds(self):
        length = len(self.comment.strip()) if self.comment else 0
        if length < COMMENT_MIN_LENGTH or length > COMMENT_MAX_LENGTH:
            raise ValidationError(
                {"comment": [f"Comment must be between {COMMENT_MIN_LENGTH} and {COMMENT_MAX_LENGTH} characters"]}
            )

    @invariant.post
    def title_must_not_be_empty(self):
        if self.title is not None and len(self.title.strip()) == 0:
            raise ValidationError({"title": ["Review title cannot be empty"]})

    @invariant.post
    def helpful_votes_within_total(self):
        if self.helpful_votes > self.total_votes:
            raise ValidationError({"helpful_votes": ["Helpful votes cannot exceed total votes"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(cls, product_id, customer_id, rating, title, comment):
        """Submit and publish a new review."""
        now = datetime.now(UTC)

        review = cls(
            product_id=product_id,
            customer_id=customer_id,
            rating=Rating(score=rating),
            title=title,
            comment=comment,
            status=ReviewStatus.PUBLISHED.value,
            helpful_votes=0,
            total_votes=0,
            is_edited=False,
            created_at=now,
            updated_at=now,
        )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                customer_id=str(customer_id),
                rating=rating,
                title=title,
                comment=comment,
                submitted_at=now,
            )
        )
        return review

    @property
    def is_live(self) -> bool:
        return self.status != ReviewStatus.REMOVED.value

    @property
    def helpful_percentage(self) -> int:
        if not self.total_votes:
            return 0
        return round(self.helpful_votes / self.total_votes * 100)

    def _assert_not_removed(self, action):
        if self.status == ReviewStatus.REMOVED.value:
            raise ValidationError({"status": [f"Cannot {action} a removed review"]})

    # -------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------
    def edit(self, title=_UNSET, comment=_UNSET, rating=_UNSET):
        self._assert_not_removed("edit")

        now = datetime.now(UTC)
        with atomic_change(self):
            if title is not _UNSET and title is not None:
                self.title = title
            if comment is not _UNSET and comment is not None:
                self.comment = comment
            if rating is not _UNSET and rating is not None:
                self.rating = Rating(score=rating)
            self.is_edited = True
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                title=self.title,
                comment=self.comment,
                rating=self.rating.score,
                edited_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def moderate(self, action, moderator_id, notes=None):
        """Approve (publish) or reject the review."""
        self._assert_not_removed("moderate")
        target = (
            ReviewStatus.PUBLISHED.value
            if ModerationAction(action) == ModerationAction.APPROVE
            else ReviewStatus.REJECTED.value
        )

        now = datetime.now(UTC)
        self.status = target
        self.moderation_notes = notes
        self.updated_at = now

        self.raise_(
            ReviewModerated(
                review_id=str(self.id),
                product_id=str(self.product_id),
                status=target,
                moderator_id=str(moderator_id),
                notes=notes,
                moderated_at=now,
            )
        )

    def remove(self, removed_by, reason=None):
        self._assert_not_removed("remove")

        now = datetime.now(UTC)
        self.status = ReviewStatus.REMOVED.value
        self.moderation_notes = reason
        self.updated_at = now

        self.raise_(
            ReviewRemoved(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id),
                removed_by=str(removed_by),
                reason=reason,
                removed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Voting
    # -------------------------------------------------------------------
    def vote(self, customer_id, helpful: bool):
        """Record a helpful/not-helpful vote. Cannot vote on own review, cannot vote twice."""
        if str(customer_id) == str(self.customer_id):
            raise ValidationError({"vote": ["Cannot vote on your own review"]})

        if any(str(v.customer_id) == str(customer_id) for v in self.votes):
            raise ValidationError({"vote": ["You have already voted on this review"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.add_votes(HelpfulVote(customer_id=customer_id, helpful=helpful, voted_at=now))
            self.total_votes = self.total_votes + 1
            if helpful:
                self.helpful_votes = self.helpful_votes + 1
            self.updated_at = now

        self.raise_(
            ReviewVoted(
                review_id=str(self.id),
                voter_id=str(customer_id),
                helpful=helpful,
                helpful_votes=self.helpful_votes,
                total_votes=self.total_votes,
                voted_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Admin response
    # -------------------------------------------------------------------
    def respond(self, admin_id, response):
        self._assert_not_removed("respond to")
        if not response or not response.strip():
            raise ValidationError({"admin_response": ["Response cannot be empty"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.admin_response = response
            self.responded_by = admin_id
            self.responded_at = now
            self.updated_at = now

        self.raise_(
            ReviewResponded(
                review_id=str(self.id),
                admin_id=str(admin_id),
                response=response,
                responded_at=now,
            )
        )

    def details(self) -> dict:
        return {
            "review_id": str(self.id),
            "product_id": str(self.product_id),
            "customer_id": str(self.customer_id),
            "rating": self.rating.score,
            "title": self.title,
            "comment": self.comment,
            "status": self.status,
            "helpful_votes": self.helpful_votes,
            "total_votes": self.total_votes,
            "helpful_percentage": self.helpful_percentage,
            "admin_response": self.admin_response,
            "is_edited": self.is_edited,
            "created_at": self.created_at,
        }
