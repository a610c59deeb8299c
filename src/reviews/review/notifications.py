"""Broadcasts new reviews and recalculated product ratings."""

from protean.utils.mixins import handle

from realtime import broadcast
from reviews.domain import reviews
from reviews.projections.product_rating import calculate_rating
from reviews.review.events import ReviewEdited, ReviewModerated, ReviewRemoved, ReviewSubmitted
from reviews.review.review import Review


@reviews.event_handler(part_of=Review)
class ReviewBroadcastHandler:
    def _broadcast_rating(self, product_id):
        broadcast("rating_updated", product_id=str(product_id), rating=calculate_rating(product_id))

    @handle(ReviewSubmitted)
    def on_review_submitted(self, event):
        broadcast(
            "review_posted",
            product_id=str(event.product_id),
            review={
                "review_id": str(event.review_id),
                "customer_id": str(event.customer_id),
                "rating": event.rating,
                "title": event.title,
                "comment": event.comment,
            },
        )
        self._broadcast_rating(event.product_id)

    @handle(ReviewEdited)
    def on_review_edited(self, event):
        self._broadcast_rating(event.product_id)

    @handle(ReviewModerated)
    def on_review_moderated(self, event):
        self._broadcast_rating(event.product_id)

    @handle(ReviewRemoved)
    def on_review_removed(self, event):
        self._broadcast_rating(event.product_id)
