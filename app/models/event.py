"""Event model for community events hosted by shops.

This module defines the Event table plus the request/response shapes built
from the same base. An event carries two independent moderation dimensions:
``status`` (the admin review outcome) and ``is_published`` (whether the host
wants it shown). Public feeds require both published and not rejected.
"""

import enum
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.attendee import Attendee


class EventType(str, enum.Enum):
    TASTING = "Tasting"
    MUSIC = "Music"
    WORKSHOP = "Workshop"
    POPUP = "Pop-up"
    COMMUNITY = "Community"
    ACTIVE = "Active"
    OTHER = "Other"


class EventStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CreatorRole(str, enum.Enum):
    ADMIN = "admin"
    OWNER = "owner"
    COMMUNITY = "community"


class EventBase(SQLModel):
    """Fields a host edits on an event.

    ``start_date_time`` and ``end_date_time`` are naive local wall-clock
    strings in ``YYYY-MM-DDTHH:MM`` form, exactly as entered.
    """
    title: str = ""
    description: str | None = None
    event_type: EventType = EventType.TASTING
    start_date_time: str = ""
    end_date_time: str | None = None
    all_day: bool = False
    location_name: str | None = None
    address_override: str | None = None
    ticket_url: str | None = None
    cover_image_url: str | None = None


class Event(EventBase, table=True):
    """A single-occurrence event hosted by a shop.

    Attributes:
        id: Opaque unique identifier.
        shop_id: Hosting shop. Fixed once the event exists.
        status: Moderation outcome: pending, approved or rejected.
        is_published: Host-controlled visibility flag, independent of status.
        created_by: Role of the submitter at submission time.
        submitted_by: User id of the submitter.
        attendee_count: Authoritative number of attendees, maintained
            incrementally on join and leave.
        recent_attendees: Up to three ``{"user_id", "avatar_url"}`` entries,
            most recent first. A display cache; may hold fewer entries than
            ``attendee_count`` after leaves.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
        attendees: Membership rows for this event.
    """
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    shop_id: str = Field(index=True)
    status: EventStatus = Field(default=EventStatus.PENDING, index=True)
    is_published: bool = Field(default=False)
    created_by: CreatorRole = Field(default=CreatorRole.COMMUNITY)
    submitted_by: str | None = None
    attendee_count: int = Field(default=0)
    recent_attendees: list[dict] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationship
    attendees: list["Attendee"] = Relationship(
        back_populates="event",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class EventCreate(EventBase):
    """Submission payload. Required fields are checked by the lifecycle manager."""
    shop_id: str = ""
    is_published: bool = False


class EventUpdate(SQLModel):
    """Partial edit. Only fields explicitly sent are applied."""
    shop_id: str | None = None
    title: str | None = None
    description: str | None = None
    event_type: EventType | None = None
    start_date_time: str | None = None
    end_date_time: str | None = None
    all_day: bool | None = None
    location_name: str | None = None
    address_override: str | None = None
    ticket_url: str | None = None
    cover_image_url: str | None = None
    is_published: bool | None = None


class EventRead(EventBase):
    id: str
    shop_id: str
    status: EventStatus
    is_published: bool
    created_by: CreatorRole
    attendee_count: int
    recent_attendees: list[dict]
    created_at: datetime
