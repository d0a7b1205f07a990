"""Shop routes: the events section of a shop page."""
from fastapi import APIRouter, Depends, HTTPException

from app.calendar.temporal import local_now
from app.core.config import settings
from app.core.identity import Actor, get_actor
from app.events.feed import shop_events
from app.events.store import SQLEventStore
from app.models import EventRead
from app.routes.events import get_store

router = APIRouter(prefix="/shops", tags=["shops"])


@router.get("/{shop_id}/events", response_model=list[EventRead])
def events_for_shop(
    shop_id: str,
    actor: Actor = Depends(get_actor),
    store: SQLEventStore = Depends(get_store),
):
    """
    Today's and upcoming events hosted by a shop.

    The shop owner and admins also see unpublished and pending events so they
    can manage them from the shop page.
    """
    if not store.get_shop(shop_id):
        raise HTTPException(status_code=404, detail="Shop not found")

    return shop_events(
        store.list_events(shop_id=shop_id),
        shop_id,
        now=local_now(settings.local_timezone),
        include_hidden=actor.is_privileged_for(shop_id),
    )
