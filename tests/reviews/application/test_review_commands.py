"""Application tests for review commands, the rating projection and broadcasts."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from reviews.projections.product_rating import ProductRating, calculate_rating, rating_for
from reviews.review.editing import EditReview
from reviews.review.moderation import ModerateReview, RespondToReview
from reviews.review.removal import RemoveReview
from reviews.review.review import Review, ReviewStatus
from reviews.review.submission import SubmitReview
from reviews.review.voting import VoteReview
from shared.errors import ConflictError, NotFoundError


def _submit(customer_id="cust-001", product_id="prod-001", rating=4):
    return current_domain.process(
        SubmitReview(
            product_id=product_id,
            customer_id=customer_id,
            rating=rating,
            title="Worth it",
            comment="Does everything I need it to do.",
        ),
        asynchronous=False,
    )


class TestSubmitReview:
    def test_submit_persists_published_review(self):
        review_id = _submit()
        review = current_domain.repository_for(Review).get(review_id)
        assert review.status == ReviewStatus.PUBLISHED.value

    def test_one_review_per_customer_and_product(self):
        _submit()
        with pytest.raises(ConflictError):
            _submit()

    def test_removed_review_allows_a_new_one(self):
        review_id = _submit()
        current_domain.process(RemoveReview(review_id=review_id, actor_id="cust-001"), asynchronous=False)
        assert _submit() != review_id


class TestEditAndRemove:
    def test_author_edits(self):
        review_id = _submit()
        current_domain.process(EditReview(review_id=review_id, actor_id="cust-001", rating=5), asynchronous=False)
        assert current_domain.repository_for(Review).get(review_id).rating.score == 5

    def test_stranger_cannot_edit(self):
        review_id = _submit()
        with pytest.raises(ValidationError):
            current_domain.process(EditReview(review_id=review_id, actor_id="cust-002", rating=1), asynchronous=False)

    def test_admin_removes(self):
        review_id = _submit()
        current_domain.process(
            RemoveReview(review_id=review_id, actor_id="admin-1", is_admin=True, reason="Spam"),
            asynchronous=False,
        )
        assert current_domain.repository_for(Review).get(review_id).status == ReviewStatus.REMOVED.value

    def test_unknown_review(self):
        with pytest.raises(NotFoundError):
            current_domain.process(EditReview(review_id="rev-404", actor_id="cust-001", rating=5), asynchronous=False)


class TestVoteAndRespond:
    def test_vote_returns_counts(self):
        review_id = _submit()
        counts = current_domain.process(
            VoteReview(review_id=review_id, customer_id="cust-002", helpful=True), asynchronous=False
        )
        assert counts == {"helpful_votes": 1, "total_votes": 1}

    def test_respond(self):
        review_id = _submit()
        current_domain.process(
            RespondToReview(review_id=review_id, admin_id="admin-1", response="Glad you like it"),
            asynchronous=False,
        )
        assert current_domain.repository_for(Review).get(review_id).responded_by == "admin-1"


class TestProductRating:
    def test_average_over_published_reviews(self):
        _submit(customer_id="cust-001", rating=5)
        _submit(customer_id="cust-002", rating=4)
        _submit(customer_id="cust-003", rating=4)

        rating = rating_for("prod-001")

        assert rating["review_count"] == 3
        assert rating["average_rating"] == 4.3
        assert rating["rating_distribution"]["4"] == 2

    def test_rejected_reviews_are_excluded(self):
        _submit(customer_id="cust-001", rating=5)
        review_id = _submit(customer_id="cust-002", rating=1)
        current_domain.process(
            ModerateReview(review_id=review_id, moderator_id="admin-1", action="Reject"),
            asynchronous=False,
        )

        assert rating_for("prod-001")["average_rating"] == 5.0
        assert rating_for("prod-001")["review_count"] == 1

    def test_projection_row_is_kept_current(self):
        review_id = _submit(rating=3)
        current_domain.process(EditReview(review_id=review_id, actor_id="cust-001", rating=5), asynchronous=False)

        stored = current_domain.repository_for(ProductRating).get("prod-001")
        assert stored.average_rating == 5.0
        assert stored.review_count == 1

    def test_product_without_reviews(self):
        assert rating_for("prod-999")["review_count"] == 0
        assert calculate_rating("prod-999")["average_rating"] == 0.0


class TestReviewBroadcasts:
    def test_submission_broadcasts_review_and_rating(self, notifier):
        review_id = _submit(rating=5)

        posted = notifier.calls_for("review_posted")
        ratings = notifier.calls_for("rating_updated")
        assert posted[0]["review"]["review_id"] == review_id
        assert ratings[-1]["rating"]["average_rating"] == 5.0

    def test_failing_notifier_does_not_block_submission(self, notifier):
        notifier.configure(should_fail=True)
        review_id = _submit()
        assert current_domain.repository_for(Review).get(review_id) is not None
