"""Real-time notifier factory and broadcast helper.

Provides get_notifier() / set_notifier() to swap implementations:
- LoggingNotifier by default
- RecordingNotifier in tests
"""

import structlog

from realtime.logging_adapter import LoggingNotifier
from realtime.port import Notifier

logger = structlog.get_logger(__name__)

_current_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """Return the current notifier. Defaults to LoggingNotifier."""
    global _current_notifier
    if _current_notifier is None:
        _current_notifier = LoggingNotifier()
    return _current_notifier


def set_notifier(notifier: Notifier) -> None:
    """Override the active notifier (useful for tests)."""
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    """Reset to default notifier."""
    global _current_notifier
    _current_notifier = None


def broadcast(method: str, **payload) -> bool:
    """Invoke ``method`` on the active notifier.

    Delivery failures are logged and swallowed: a broadcast never raises and
    never undoes the state change that triggered it. Returns whether the
    notifier accepted the message.
    """
    notifier = get_notifier()
    try:
        getattr(notifier, method)(**payload)
    except Exception as exc:
        logger.warning(
            "broadcast_failed",
            method=method,
            notifier=type(notifier).__name__,
            error=str(exc),
            exc_info=True,
        )
        return False
    return True
