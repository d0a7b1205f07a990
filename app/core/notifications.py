"""Fire-and-forget notification sink (the toast channel).

The engine reports outcomes here but never depends on delivery: a sink that
raises is logged and ignored.
"""
import logging
from collections import deque
from datetime import UTC, datetime
from typing import Protocol

from app.core.config import settings

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default sink: logs every notification and keeps the most recent ones."""

    def __init__(self, history: int = settings.notification_history):
        self._recent: deque[dict] = deque(maxlen=history)

    def success(self, message: str) -> None:
        logger.info(f"Notify success: {message}")
        self._record("success", message)

    def error(self, message: str) -> None:
        logger.warning(f"Notify error: {message}")
        self._record("error", message)

    def _record(self, level: str, message: str) -> None:
        self._recent.appendleft(
            {"level": level, "message": message, "at": datetime.now(UTC).isoformat()}
        )

    def recent(self) -> list[dict]:
        return list(self._recent)


notifier = LoggingNotifier()


def get_notifier() -> NotificationSink:
    """Dependency returning the process-wide sink."""
    return notifier


def notify(sink: NotificationSink | None, level: str, message: str) -> None:
    """Deliver a notification without letting sink failures propagate."""
    if sink is None:
        return
    try:
        getattr(sink, level)(message)
    except Exception as e:
        logger.error(f"Notification sink failed ({level}: {message}): {e}")
