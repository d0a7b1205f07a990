"""Record store for events, memberships and shops.

The engine talks to persistence only through ``EventStore``. Every write
method commits a single transaction; on failure the session is rolled back,
which also expires any in-memory changes made to loaded objects, and a
``PersistenceError`` is raised for the caller to retry.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.errors import PersistenceError
from app.models import Attendee, Event, EventStatus, Shop

logger = logging.getLogger(__name__)


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def get_event(self, event_id: str) -> Event | None:
        """Return an event by id, or None if not found."""

    @abstractmethod
    def list_events(
        self,
        shop_id: str | None = None,
        status: EventStatus | None = None,
    ) -> list[Event]:
        """Return events, optionally narrowed to one shop or one status."""

    @abstractmethod
    def put_event(self, event: Event) -> Event:
        """Insert or update an event."""

    @abstractmethod
    def delete_event(self, event_id: str) -> bool:
        """Delete an event and its memberships. Returns False if it did not exist."""

    @abstractmethod
    def get_attendee(self, event_id: str, user_id: str) -> Attendee | None:
        """Return the membership for (event, user), or None."""

    @abstractmethod
    def list_attendees(self, event_id: str) -> list[Attendee]:
        """Return all memberships for an event, most recent first."""

    @abstractmethod
    def save_attendance(
        self,
        event: Event,
        add: Attendee | None = None,
        remove: Attendee | None = None,
    ) -> Event:
        """Persist an event's counters together with one membership change, atomically."""

    @abstractmethod
    def get_shop(self, shop_id: str) -> Shop | None:
        """Return a shop by id, or None."""

    @abstractmethod
    def list_shops(self, shop_ids: Iterable[str] | None = None) -> list[Shop]:
        """Return shops, optionally restricted to the given ids."""


class SQLEventStore(EventStore):
    """EventStore backed by a SQLModel session."""

    def __init__(self, session: Session):
        self.session = session

    def get_event(self, event_id: str) -> Event | None:
        # Reload from the database so a read inside an event lock sees the
        # last committed counters, not a stale identity-map copy.
        return self.session.get(Event, event_id, populate_existing=True)

    def list_events(
        self,
        shop_id: str | None = None,
        status: EventStatus | None = None,
    ) -> list[Event]:
        statement = select(Event)
        if shop_id is not None:
            statement = statement.where(Event.shop_id == shop_id)
        if status is not None:
            statement = statement.where(Event.status == status)
        statement = statement.order_by(Event.created_at)
        return list(self.session.exec(statement).all())

    def put_event(self, event: Event) -> Event:
        self.session.add(event)
        self._commit(f"put event {event.id}")
        self.session.refresh(event)
        return event

    def delete_event(self, event_id: str) -> bool:
        event = self.session.get(Event, event_id)
        if not event:
            return False
        self.session.delete(event)
        self._commit(f"delete event {event_id}")
        return True

    def get_attendee(self, event_id: str, user_id: str) -> Attendee | None:
        return self.session.get(Attendee, (event_id, user_id))

    def list_attendees(self, event_id: str) -> list[Attendee]:
        statement = (
            select(Attendee)
            .where(Attendee.event_id == event_id)
            .order_by(Attendee.joined_at.desc())
        )
        return list(self.session.exec(statement).all())

    def save_attendance(
        self,
        event: Event,
        add: Attendee | None = None,
        remove: Attendee | None = None,
    ) -> Event:
        if add is not None:
            self.session.add(add)
        if remove is not None:
            self.session.delete(remove)
        self.session.add(event)
        self._commit(f"save attendance for event {event.id}")
        self.session.refresh(event)
        return event

    def get_shop(self, shop_id: str) -> Shop | None:
        return self.session.get(Shop, shop_id)

    def list_shops(self, shop_ids: Iterable[str] | None = None) -> list[Shop]:
        statement = select(Shop)
        if shop_ids is not None:
            statement = statement.where(Shop.id.in_(list(shop_ids)))
        return list(self.session.exec(statement).all())

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Store failed to {action}: {e}")
            raise PersistenceError(f"Could not {action}, please retry") from e
