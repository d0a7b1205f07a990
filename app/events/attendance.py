"""Attendance tracking: who is going, how many, and the recent-joiners preview.

The count on the event row is authoritative and maintained incrementally;
nothing here recounts membership rows on read. Mutations on one event are
serialized by a per-event lock so concurrent joins never lose an increment
and a join/leave race never double-counts. Different events use different
locks and never contend.
"""
import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.core.config import settings
from app.core.errors import EventNotFoundError
from app.core.notifications import NotificationSink, notify
from app.events.store import EventStore
from app.models import Attendee, Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceSnapshot:
    """Attendance as shown on an event card.

    Attributes:
        attendee_count: Total number of attendees.
        recent_attendees: Up to three ``{"user_id", "avatar_url"}`` entries,
            most recent first.
    """
    attendee_count: int
    recent_attendees: list[dict] = field(default_factory=list)

    @classmethod
    def of(cls, event: Event) -> "AttendanceSnapshot":
        return cls(
            attendee_count=event.attendee_count,
            recent_attendees=[dict(a) for a in event.recent_attendees or []],
        )


class EventLockRegistry:
    """One lock per event id, created on first use."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, event_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(event_id)
            if lock is None:
                lock = self._locks[event_id] = threading.Lock()
            return lock

    def forget(self, event_id: str) -> None:
        """Drop the lock of a deleted event."""
        with self._guard:
            self._locks.pop(event_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Shared by every tracker in the process, whatever session it was built with
event_locks = EventLockRegistry()


class AttendanceTracker:
    """Join, leave and read attendance for events in an EventStore."""

    def __init__(
        self,
        store: EventStore,
        locks: EventLockRegistry | None = None,
        notifier: NotificationSink | None = None,
        recent_limit: int = settings.recent_attendee_limit,
    ):
        self.store = store
        self.locks = locks if locks is not None else event_locks
        self.notifier = notifier
        self.recent_limit = recent_limit

    def _require_event(self, event_id: str) -> Event:
        event = self.store.get_event(event_id)
        if not event:
            raise EventNotFoundError(f"Event {event_id} not found")
        return event

    def join(
        self,
        event_id: str,
        user_id: str,
        avatar_url: str = "",
        username: str | None = None,
    ) -> AttendanceSnapshot:
        """
        Mark user_id as going.

        Joining again is a no-op that returns the current snapshot. A first
        join increments the count and puts the user at the front of the
        recent list, truncated to the preview size.
        """
        # Unknown ids never get a lock entry
        self._require_event(event_id)
        with self.locks.lock_for(event_id):
            event = self._require_event(event_id)
            if self.store.get_attendee(event_id, user_id):
                return AttendanceSnapshot.of(event)

            recent = [a for a in event.recent_attendees or [] if a.get("user_id") != user_id]
            recent.insert(0, {"user_id": user_id, "avatar_url": avatar_url})

            event.attendee_count = event.attendee_count + 1
            event.recent_attendees = recent[: min(self.recent_limit, event.attendee_count)]
            event.updated_at = datetime.now(UTC)

            membership = Attendee(
                event_id=event_id,
                user_id=user_id,
                avatar_url=avatar_url,
                username=username,
            )
            event = self.store.save_attendance(event, add=membership)

        logger.info(f"User {user_id} joined event {event_id} ({event.attendee_count} going)")
        notify(self.notifier, "success", f"You're going to {event.title}!")
        return AttendanceSnapshot.of(event)

    def leave(self, event_id: str, user_id: str) -> AttendanceSnapshot:
        """
        Remove user_id from the event.

        Leaving while absent is a no-op. The count never drops below zero.
        The user is dropped from the recent list, which may then hold fewer
        entries than the count; the preview is not backfilled.
        """
        self._require_event(event_id)
        with self.locks.lock_for(event_id):
            event = self._require_event(event_id)
            membership = self.store.get_attendee(event_id, user_id)
            if not membership:
                return AttendanceSnapshot.of(event)

            event.attendee_count = max(event.attendee_count - 1, 0)
            event.recent_attendees = [
                a for a in event.recent_attendees or [] if a.get("user_id") != user_id
            ][: event.attendee_count]
            event.updated_at = datetime.now(UTC)

            event = self.store.save_attendance(event, remove=membership)

        logger.info(f"User {user_id} left event {event_id} ({event.attendee_count} going)")
        notify(self.notifier, "success", f"You're no longer going to {event.title}")
        return AttendanceSnapshot.of(event)

    def snapshot(self, event_id: str) -> AttendanceSnapshot:
        return AttendanceSnapshot.of(self._require_event(event_id))

    def is_member(self, event_id: str, user_id: str | None) -> bool:
        if not user_id:
            return False
        return self.store.get_attendee(event_id, user_id) is not None

    def attendees(self, event_id: str) -> list[Attendee]:
        """Full attendee list for the 'Going' dialog, most recent first."""
        self._require_event(event_id)
        return self.store.list_attendees(event_id)


def attendance_label(snapshot: AttendanceSnapshot, viewer_is_member: bool) -> str:
    """
    Text shown next to the attendee avatars.

    - nobody:            "No one is going yet."
    - viewer alone:      "You are going"
    - viewer and others: "You and 2 others" / "You and 1 other"
    - otherwise:         "5 going"
    """
    count = snapshot.attendee_count
    if count <= 0:
        return "No one is going yet."
    if viewer_is_member:
        others = count - 1
        if others == 0:
            return "You are going"
        return f"You and {others} {'other' if others == 1 else 'others'}"
    return f"{count} going"
