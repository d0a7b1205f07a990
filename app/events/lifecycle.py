"""Event lifecycle: submission, moderation, publishing, editing and deletion.

Two independent dimensions control an event:

- ``status`` is the moderation outcome (pending, approved, rejected), set
  only by admins.
- ``is_published`` is the host's visibility switch, set by the shop owner or
  an admin.

Approving does not publish. Public feeds show events that are published and
not rejected; see ``app.events.feed``.

Every operation checks its inputs and the actor's privilege before touching
the store, so a refused operation has no effect.
"""
import logging
from datetime import UTC, datetime

from app.calendar.temporal import parse_local
from app.core.errors import (
    AuthorizationError,
    EventNotFoundError,
    ImmutableFieldError,
    ValidationError,
)
from app.core.identity import Actor
from app.core.notifications import NotificationSink, notify
from app.events.attendance import EventLockRegistry, event_locks
from app.events.store import EventStore
from app.models import CreatorRole, Event, EventCreate, EventStatus, EventUpdate

logger = logging.getLogger(__name__)

# Moderation moves an event out of pending; nothing moves it back.
ALLOWED_TRANSITIONS: dict[EventStatus, set[EventStatus]] = {
    EventStatus.PENDING: {EventStatus.APPROVED, EventStatus.REJECTED},
    EventStatus.APPROVED: {EventStatus.REJECTED},
    EventStatus.REJECTED: {EventStatus.APPROVED},
}

EDITABLE_FIELDS = (
    "title",
    "description",
    "event_type",
    "start_date_time",
    "end_date_time",
    "all_day",
    "location_name",
    "address_override",
    "ticket_url",
    "cover_image_url",
)


def _check_date_time(field_name: str, value: str | None) -> None:
    if value is None:
        return
    try:
        parse_local(value)
    except ValueError as e:
        raise ValidationError(f"{field_name} must look like YYYY-MM-DDTHH:MM ({e})") from e


class EventLifecycleManager:
    """Single authority for creating events and changing their moderation state."""

    def __init__(
        self,
        store: EventStore,
        notifier: NotificationSink | None = None,
        locks: EventLockRegistry | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.locks = locks if locks is not None else event_locks

    def _require_event(self, event_id: str) -> Event:
        event = self.store.get_event(event_id)
        if not event:
            raise EventNotFoundError(f"Event {event_id} not found")
        return event

    def _touch_and_save(self, event: Event) -> Event:
        event.updated_at = datetime.now(UTC)
        return self.store.put_event(event)

    def submit(self, draft: EventCreate, actor: Actor) -> Event:
        """
        Create an event from a submission.

        Shop, title and start time are required. Owners of the shop and
        admins get an approved event with their requested publish flag.
        Everyone else gets a pending, unpublished event no matter what the
        draft asked for.
        """
        missing = [
            name
            for name in ("shop_id", "title", "start_date_time")
            if not (getattr(draft, name) or "").strip()
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        _check_date_time("start_date_time", draft.start_date_time)
        _check_date_time("end_date_time", draft.end_date_time or None)

        privileged = actor.is_privileged_for(draft.shop_id)
        if actor.is_admin:
            created_by = CreatorRole.ADMIN
        elif privileged:
            created_by = CreatorRole.OWNER
        else:
            created_by = CreatorRole.COMMUNITY

        data = draft.model_dump(include=set(EDITABLE_FIELDS))
        data["end_date_time"] = draft.end_date_time or draft.start_date_time
        event = Event(
            **data,
            shop_id=draft.shop_id,
            status=EventStatus.APPROVED if privileged else EventStatus.PENDING,
            is_published=draft.is_published if privileged else False,
            created_by=created_by,
            submitted_by=actor.user_id,
        )
        event = self.store.put_event(event)

        logger.info(
            f"Event '{event.title}' ({event.id}) submitted for shop {event.shop_id} "
            f"by {actor.user_id}: status={event.status.value} published={event.is_published}"
        )
        if event.status == EventStatus.PENDING:
            notify(self.notifier, "success", "Event submitted for approval!")
        else:
            notify(self.notifier, "success", "Event created successfully!")
        return event

    def update_content(self, event_id: str, patch: EventUpdate, actor: Actor) -> Event:
        """
        Apply an edit to an event.

        ``shop_id`` can never change. Only privileged actors may change
        ``is_published``; other actors may edit only events they submitted.
        """
        event = self._require_event(event_id)
        changes = patch.model_dump(exclude_unset=True)

        if "shop_id" in changes and changes["shop_id"] != event.shop_id:
            raise ImmutableFieldError("shop_id cannot be changed after creation")
        changes.pop("shop_id", None)

        privileged = actor.is_privileged_for(event.shop_id)
        if not privileged:
            if "is_published" in changes:
                raise AuthorizationError("Only the shop owner or an admin can publish events")
            if not actor.user_id or actor.user_id != event.submitted_by:
                raise AuthorizationError("You can only edit events you submitted")

        if "title" in changes and not (changes["title"] or "").strip():
            raise ValidationError("Missing required fields: title")
        if "start_date_time" in changes and not changes["start_date_time"]:
            raise ValidationError("Missing required fields: start_date_time")
        _check_date_time("start_date_time", changes.get("start_date_time"))
        _check_date_time("end_date_time", changes.get("end_date_time") or None)

        for name, value in changes.items():
            if value is None and name in ("event_type", "all_day", "is_published"):
                continue
            setattr(event, name, value)

        event = self._touch_and_save(event)
        logger.info(f"Event {event_id} updated by {actor.user_id}: {sorted(changes)}")
        notify(self.notifier, "success", "Event updated successfully!")
        return event

    def set_status(self, event_id: str, new_status: EventStatus, actor: Actor) -> Event:
        """
        Record the moderation outcome. Admins only.

        Pending can become approved or rejected, and an admin can flip between
        approved and rejected. Nothing returns to pending. The publish flag
        is left alone.
        """
        if not actor.is_admin:
            raise AuthorizationError("Only admins can moderate events")

        event = self._require_event(event_id)
        if event.status == new_status:
            return event
        if new_status not in ALLOWED_TRANSITIONS[event.status]:
            raise ValidationError(
                f"Cannot move event from {event.status.value} to {new_status.value}"
            )

        previous = event.status
        event.status = new_status
        event = self._touch_and_save(event)
        logger.info(
            f"Event {event_id} moderated by {actor.user_id}: "
            f"{previous.value} -> {new_status.value}"
        )
        notify(self.notifier, "success", f"Event {new_status.value}")
        return event

    def set_published(self, event_id: str, published: bool, actor: Actor) -> Event:
        """
        Toggle public visibility. Shop owner or admin.

        Allowed whatever the moderation status; a rejected event stays out of
        public feeds even when published.
        """
        event = self._require_event(event_id)
        if not actor.is_privileged_for(event.shop_id):
            raise AuthorizationError("Only the shop owner or an admin can publish events")

        if event.is_published != published:
            event.is_published = published
            event = self._touch_and_save(event)
            logger.info(f"Event {event_id} published={published} by {actor.user_id}")
        notify(self.notifier, "success", "Event published" if published else "Event unpublished")
        return event

    def delete(self, event_id: str, actor: Actor) -> None:
        """Hard-delete an event and its attendees. Missing events are ignored."""
        event = self.store.get_event(event_id)
        if not event:
            return
        if not actor.is_privileged_for(event.shop_id):
            raise AuthorizationError("Only the shop owner or an admin can delete events")

        with self.locks.lock_for(event_id):
            self.store.delete_event(event_id)
        self.locks.forget(event_id)
        logger.info(f"Event {event_id} deleted by {actor.user_id}")
        notify(self.notifier, "success", "Event deleted")

    def moderation_queue(self, actor: Actor) -> list[Event]:
        """Pending events awaiting review, oldest first. Admins only."""
        if not actor.is_admin:
            raise AuthorizationError("Only admins can review events")
        return self.store.list_events(status=EventStatus.PENDING)
