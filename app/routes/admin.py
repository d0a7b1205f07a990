"""Admin routes for the event review queue."""
from fastapi import APIRouter, Depends

from app.core.identity import Actor, get_actor
from app.events.lifecycle import EventLifecycleManager
from app.models import EventRead
from app.routes.events import get_lifecycle

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/events/pending", response_model=list[EventRead])
def pending_events(
    actor: Actor = Depends(get_actor),
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
):
    """Events waiting for review, oldest first. Approve or reject via /events/{id}/status."""
    return lifecycle.moderation_queue(actor)
