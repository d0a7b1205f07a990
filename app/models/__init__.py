from app.models.attendee import Attendee
from app.models.event import (
    CreatorRole,
    Event,
    EventCreate,
    EventRead,
    EventStatus,
    EventType,
    EventUpdate,
)
from app.models.shop import Shop

__all__ = [
    "Event",
    "EventCreate",
    "EventRead",
    "EventUpdate",
    "EventStatus",
    "EventType",
    "CreatorRole",
    "Attendee",
    "Shop",
]
