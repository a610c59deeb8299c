"""Domain events for the Review aggregate."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from reviews.domain import reviews


@reviews.event(part_of="Review")
class ReviewSubmitted:
    """A customer submitted a review; it is published immediately."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(required=True)
    comment = Text(required=True)
    submitted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewEdited:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    title = String()
    comment = Text()
    rating = Integer()
    edited_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewModerated:
    """A moderator published or rejected the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    status = String(required=True)
    moderator_id = Identifier(required=True)
    notes = Text()
    moderated_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewRemoved:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    removed_by = String(required=True)
    reason = String()
    removed_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewVoted:
    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    helpful = Boolean(required=True)
    helpful_votes = Integer(required=True)
    total_votes = Integer(required=True)
    voted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewResponded:
    __version__ = 1

    review_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    response = Text(required=True)
    responded_at = DateTime(required=True)
