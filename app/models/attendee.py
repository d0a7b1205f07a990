"""Attendee model for tracking who is going to an event.

This module defines the Attendee membership row. Identity is the
``(event_id, user_id)`` pair, so a user can be going to an event at most
once. Rows are removed when the user leaves or the event is deleted.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.event import Event


class Attendee(SQLModel, table=True):
    """A user who marked themselves as going to an event.

    Attributes:
        event_id: Foreign key to the Event (part of the primary key).
        user_id: The attending user (part of the primary key).
        avatar_url: Denormalized avatar for display.
        username: Denormalized display name, if known.
        joined_at: When the user joined.
        event: Reference to the parent Event object.
    """
    event_id: str = Field(foreign_key="event.id", primary_key=True, ondelete="CASCADE")
    user_id: str = Field(primary_key=True)
    avatar_url: str = ""
    username: str | None = None
    joined_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationship
    event: Optional["Event"] = Relationship(back_populates="attendees")
