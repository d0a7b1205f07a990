"""Attendance routes for marking yourself as going to an event."""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import SQLModel

from app.core.identity import Actor, get_actor
from app.core.notifications import NotificationSink, get_notifier
from app.events.attendance import AttendanceSnapshot, AttendanceTracker, attendance_label
from app.events.store import SQLEventStore
from app.routes.events import get_store, get_visible_event

router = APIRouter(prefix="/events/{event_id}", tags=["attendance"])


class JoinRequest(SQLModel):
    avatar_url: str = ""
    username: str | None = None


class AttendanceRead(SQLModel):
    attendee_count: int
    recent_attendees: list[dict]
    is_going: bool
    label: str


class AttendeeRead(SQLModel):
    user_id: str
    avatar_url: str
    username: str | None
    joined_at: datetime


def get_tracker(
    store: SQLEventStore = Depends(get_store),
    notifier: NotificationSink = Depends(get_notifier),
) -> AttendanceTracker:
    return AttendanceTracker(store, notifier=notifier)


def _read(snapshot: AttendanceSnapshot, is_going: bool) -> dict:
    return {
        "attendee_count": snapshot.attendee_count,
        "recent_attendees": snapshot.recent_attendees,
        "is_going": is_going,
        "label": attendance_label(snapshot, is_going),
    }


def _require_user(actor: Actor) -> str:
    if not actor.user_id:
        raise HTTPException(status_code=401, detail="Sign in to mark yourself as going")
    return actor.user_id


@router.get("/attendance", response_model=AttendanceRead)
def attendance(
    event_id: str,
    actor: Actor = Depends(get_actor),
    store: SQLEventStore = Depends(get_store),
    tracker: AttendanceTracker = Depends(get_tracker),
):
    """Attendance count, avatar preview and the label for the current viewer."""
    get_visible_event(event_id, store, actor)
    snapshot = tracker.snapshot(event_id)
    return _read(snapshot, tracker.is_member(event_id, actor.user_id))


@router.post("/attendance", response_model=AttendanceRead)
def join_event(
    event_id: str,
    body: JoinRequest | None = None,
    actor: Actor = Depends(get_actor),
    store: SQLEventStore = Depends(get_store),
    tracker: AttendanceTracker = Depends(get_tracker),
):
    """
    Mark the current user as going.

    Repeating the request (e.g. a double click) leaves the count unchanged.
    Events hidden from the caller answer 404, as on the detail page.
    """
    user_id = _require_user(actor)
    get_visible_event(event_id, store, actor)
    body = body or JoinRequest()
    snapshot = tracker.join(event_id, user_id, body.avatar_url, body.username)
    return _read(snapshot, True)


@router.delete("/attendance", response_model=AttendanceRead)
def leave_event(
    event_id: str,
    actor: Actor = Depends(get_actor),
    store: SQLEventStore = Depends(get_store),
    tracker: AttendanceTracker = Depends(get_tracker),
):
    """Stop going. Leaving an event you are not going to is a no-op."""
    user_id = _require_user(actor)
    get_visible_event(event_id, store, actor)
    snapshot = tracker.leave(event_id, user_id)
    return _read(snapshot, False)


@router.get("/attendees", response_model=list[AttendeeRead])
def attendees(
    event_id: str,
    actor: Actor = Depends(get_actor),
    store: SQLEventStore = Depends(get_store),
    tracker: AttendanceTracker = Depends(get_tracker),
):
    """Everyone going, most recent first."""
    get_visible_event(event_id, store, actor)
    return tracker.attendees(event_id)
