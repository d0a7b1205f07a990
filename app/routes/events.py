"""Event routes: public feed, submission, moderation and calendar export."""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session, SQLModel

from app.calendar.export import google_calendar_url, ics_filename, ics_payload
from app.calendar.temporal import local_now
from app.core.config import settings
from app.core.database import get_session
from app.core.identity import Actor, get_actor
from app.core.notifications import NotificationSink, get_notifier
from app.events.feed import build_feed, is_publicly_visible
from app.events.lifecycle import EventLifecycleManager
from app.events.store import SQLEventStore
from app.models import EventCreate, EventRead, EventStatus, EventType, EventUpdate

router = APIRouter(prefix="/events", tags=["events"])


class FeedRead(SQLModel):
    today: list[EventRead]
    upcoming: list[EventRead]


class StatusChange(SQLModel):
    status: EventStatus


class PublishChange(SQLModel):
    published: bool


def get_store(session: Session = Depends(get_session)) -> SQLEventStore:
    return SQLEventStore(session)


def get_lifecycle(
    store: SQLEventStore = Depends(get_store),
    notifier: NotificationSink = Depends(get_notifier),
) -> EventLifecycleManager:
    return EventLifecycleManager(store, notifier=notifier)


def get_visible_event(event_id: str, store: SQLEventStore, actor: Actor):
    """Fetch an event the actor is allowed to see, or 404."""
    event = store.get_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    if not is_publicly_visible(event) and not (
        actor.is_privileged_for(event.shop_id)
        or (actor.user_id and actor.user_id == event.submitted_by)
    ):
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("/feed", response_model=FeedRead)
def event_feed(
    event_type: EventType | None = None,
    q: str | None = None,
    store: SQLEventStore = Depends(get_store),
):
    """
    Public events feed.

    Shows published, non-rejected events happening today or later, split
    into "today" and "upcoming" sections sorted by start time. Optional
    filters: exact ``event_type`` and free-text ``q`` matched against the
    event title or the shop name.
    """
    feed = build_feed(
        store.list_events(),
        store.list_shops(),
        now=local_now(settings.local_timezone),
        event_type=event_type,
        search=q,
    )
    return {"today": feed.today, "upcoming": feed.upcoming}


@router.post("", response_model=EventRead, status_code=status.HTTP_201_CREATED)
def submit_event(
    draft: EventCreate,
    actor: Actor = Depends(get_actor),
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
):
    """
    Submit a new event.

    Shop owners and admins publish directly (approved, with the requested
    publish flag). Anyone else's submission waits in the review queue as
    pending and unpublished.
    """
    if not actor.user_id:
        raise HTTPException(status_code=401, detail="Sign in to submit events")
    return lifecycle.submit(draft, actor)


@router.get("/{event_id}", response_model=EventRead)
def event_detail(
    event_id: str,
    actor: Actor = Depends(get_actor),
    store: SQLEventStore = Depends(get_store),
):
    """Single event. Hidden events are only visible to their host, admins and submitter."""
    return get_visible_event(event_id, store, actor)


@router.patch("/{event_id}", response_model=EventRead)
def update_event(
    event_id: str,
    patch: EventUpdate,
    actor: Actor = Depends(get_actor),
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
):
    """Edit event content. The hosting shop cannot be changed."""
    return lifecycle.update_content(event_id, patch, actor)


@router.post("/{event_id}/status", response_model=EventRead)
def moderate_event(
    event_id: str,
    change: StatusChange,
    actor: Actor = Depends(get_actor),
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
):
    """Approve or reject an event (admins only). Does not change publishing."""
    return lifecycle.set_status(event_id, change.status, actor)


@router.post("/{event_id}/publish", response_model=EventRead)
def publish_event(
    event_id: str,
    change: PublishChange,
    actor: Actor = Depends(get_actor),
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
):
    """Publish or unpublish an event (shop owner or admin)."""
    return lifecycle.set_published(event_id, change.published, actor)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    actor: Actor = Depends(get_actor),
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
):
    """Delete an event and its attendees. Deleting a missing event succeeds."""
    lifecycle.delete(event_id, actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/calendar.ics")
def download_ics(
    event_id: str,
    actor: Actor = Depends(get_actor),
    store: SQLEventStore = Depends(get_store),
):
    """Download the event as an iCalendar file."""
    event = get_visible_event(event_id, store, actor)
    shop = store.get_shop(event.shop_id)
    return Response(
        content=ics_payload(event, shop),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{ics_filename(event)}"'},
    )


@router.get("/{event_id}/google-calendar")
def google_calendar_link(
    event_id: str,
    actor: Actor = Depends(get_actor),
    store: SQLEventStore = Depends(get_store),
):
    """Return the 'add to Google Calendar' link for an event."""
    event = get_visible_event(event_id, store, actor)
    return {"url": google_calendar_url(event, store.get_shop(event.shop_id))}
