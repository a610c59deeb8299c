"""ProductRating: average and count over a product's published reviews.

Recalculated from the Review store on every review event, so it never
drifts from the reviews themselves.
"""

import json
from datetime import UTC, datetime

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, Text
from protean.utils.globals import current_domain

from reviews.domain import reviews
from reviews.review.events import ReviewEdited, ReviewModerated, ReviewRemoved, ReviewSubmitted
from reviews.review.review import Review, ReviewStatus


@reviews.projection
class ProductRating:
    product_id = Identifier(identifier=True, required=True)
    average_rating = Float(default=0.0)
    review_count = Integer(default=0)
    rating_distribution = Text()  # JSON: {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}
    updated_at = DateTime()


def calculate_rating(product_id) -> dict:
    """Average (one decimal) and count over the product's published reviews."""
    published = (
        current_domain.repository_for(Review)
        ._dao.query.filter(product_id=str(product_id), status=ReviewStatus.PUBLISHED.value)
        .all()
        .items
    )
    distribution = {str(score): 0 for score in range(1, 6)}
    for review in published:
        distribution[str(review.rating.score)] += 1

    count = len(published)
    average = round(sum(r.rating.score for r in published) / count, 1) if count else 0.0
    return {
        "product_id": str(product_id),
        "average_rating": average,
        "review_count": count,
        "rating_distribution": distribution,
    }


def rating_for(product_id) -> dict:
    """The stored rating for a product, or an empty rating when it has none yet."""
    results = current_domain.repository_for(ProductRating)._dao.query.filter(product_id=str(product_id)).all().items
    if not results:
        return {
            "product_id": str(product_id),
            "average_rating": 0.0,
            "review_count": 0,
            "rating_distribution": {str(score): 0 for score in range(1, 6)},
        }
    rating = results[0]
    return {
        "product_id": str(product_id),
        "average_rating": rating.average_rating,
        "review_count": rating.review_count,
        "rating_distribution": json.loads(rating.rating_distribution) if rating.rating_distribution else {},
    }


@reviews.projector(projector_for=ProductRating, aggregates=[Review])
class ProductRatingProjector:
    def _refresh(self, product_id):
        stats = calculate_rating(product_id)
        repo = current_domain.repository_for(ProductRating)

        existing = repo._dao.query.filter(product_id=str(product_id)).all().items
        rating = existing[0] if existing else ProductRating(product_id=str(product_id))

        rating.average_rating = stats["average_rating"]
        rating.review_count = stats["review_count"]
        rating.rating_distribution = json.dumps(stats["rating_distribution"])
        rating.updated_at = datetime.now(UTC)
        repo.add(rating)

    @on(ReviewSubmitted)
    def on_review_submitted(self, event):
        self._refresh(event.product_id)

    @on(ReviewEdited)
    def on_review_edited(self, event):
        self._refresh(event.product_id)

    @on(ReviewModerated)
    def on_review_moderated(self, event):
        self._refresh(event.product_id)

    @on(ReviewRemoved)
    def on_review_removed(self, event):
        self._refresh(event.product_id)
