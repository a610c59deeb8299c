"""Recording notifier for tests.

Captures every broadcast as ``(method, payload)`` and can be configured to
fail, which lets tests prove a broken notifier never affects the operation
that triggered it.
"""

from realtime.port import Notifier


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.should_fail: bool = False
        self.failure_reason: str = "Notifier unavailable"
        self.calls: list[tuple[str, dict]] = []

    def configure(self, should_fail: bool, failure_reason: str = "Notifier unavailable") -> None:
        self.should_fail = should_fail
        self.failure_reason = failure_reason

    def _record(self, method: str, **payload) -> None:
        self.calls.append((method, payload))
        if self.should_fail:
            raise ConnectionError(self.failure_reason)

    def calls_for(self, method: str) -> list[dict]:
        return [payload for name, payload in self.calls if name == method]

    def cart_updated(self, identity: str, totals: dict) -> None:
        self._record("cart_updated", identity=identity, totals=totals)

    def order_created(self, order: dict) -> None:
        self._record("order_created", order=order)

    def order_status_changed(self, identity: str, order: dict) -> None:
        self._record("order_status_changed", identity=identity, order=order)

    def review_posted(self, product_id: str, review: dict) -> None:
        self._record("review_posted", product_id=product_id, review=review)

    def rating_updated(self, product_id: str, rating: dict) -> None:
        self._record("rating_updated", product_id=product_id, rating=rating)
