"""Default notifier: writes every broadcast to the structured log."""

import structlog

from realtime.port import Notifier

logger = structlog.get_logger(__name__)


class LoggingNotifier(Notifier):
    def cart_updated(self, identity: str, totals: dict) -> None:
        logger.info("broadcast_cart_updated", identity=identity, total=totals.get("total"))

    def order_created(self, order: dict) -> None:
        logger.info(
            "broadcast_order_created",
            order_number=order.get("order_number"),
            customer=order.get("customer_key"),
        )

    def order_status_changed(self, identity: str, order: dict) -> None:
        logger.info(
            "broadcast_order_status_changed",
            identity=identity,
            order_number=order.get("order_number"),
            status=order.get("status"),
        )

    def review_posted(self, product_id: str, review: dict) -> None:
        logger.info("broadcast_review_posted", product_id=product_id, review_id=review.get("review_id"))

    def rating_updated(self, product_id: str, rating: dict) -> None:
        logger.info(
            "broadcast_rating_updated",
            product_id=product_id,
            average_rating=rating.get("average_rating"),
            review_count=rating.get("review_count"),
        )
