"""Public event feed: what a visitor sees on the events page.

Pipeline:
    published and not rejected
    -> drop expired (by calendar date, in local time)
    -> optional exact event type
    -> optional case-insensitive text match on title or shop name
    -> split into Today and Upcoming, each sorted by start time

The feed only reads. Attendance counters may change underneath it; whatever
the event rows hold at read time is what gets shown.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from app.calendar.temporal import Bucket, classify, parse_local
from app.models import Event, EventStatus, EventType, Shop

logger = logging.getLogger(__name__)


@dataclass
class EventFeed:
    today: list[Event] = field(default_factory=list)
    upcoming: list[Event] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.today) + len(self.upcoming)


def is_publicly_visible(event: Event) -> bool:
    """The visibility gate: published, and never when rejected."""
    return event.is_published and event.status != EventStatus.REJECTED


def _start_of(event: Event) -> datetime | None:
    try:
        return parse_local(event.start_date_time)
    except ValueError:
        logger.warning(
            f"Skipping event {event.id}: unparseable start {event.start_date_time!r}"
        )
        return None


def _matches_search(event: Event, shop: Shop | None, query: str) -> bool:
    if query in (event.title or "").lower():
        return True
    return shop is not None and query in (shop.name or "").lower()


def build_feed(
    events: list[Event],
    shops: list[Shop] | dict[str, Shop],
    now: datetime,
    event_type: EventType | None = None,
    search: str | None = None,
) -> EventFeed:
    """
    Build the public feed from the full event collection.

    ``now`` is the naive local reference time. Events with a start string
    that cannot be parsed are skipped rather than failing the whole feed.
    """
    shops_by_id = shops if isinstance(shops, dict) else {s.id: s for s in shops}
    query = (search or "").strip().lower()

    feed = EventFeed()
    dated: list[tuple[datetime, Bucket, Event]] = []
    for event in events:
        if not is_publicly_visible(event):
            continue
        start = _start_of(event)
        if start is None:
            continue
        bucket = classify(start, now)
        if bucket == Bucket.EXPIRED:
            continue
        if event_type is not None and event.event_type != event_type:
            continue
        if query and not _matches_search(event, shops_by_id.get(event.shop_id), query):
            continue
        dated.append((start, bucket, event))

    dated.sort(key=lambda item: (item[0], item[2].title or ""))
    for _, bucket, event in dated:
        if bucket == Bucket.TODAY:
            feed.today.append(event)
        else:
            feed.upcoming.append(event)
    return feed


def shop_events(
    events: list[Event],
    shop_id: str,
    now: datetime,
    include_hidden: bool = False,
) -> list[Event]:
    """
    Today's and upcoming events of one shop, sorted by start time.

    With ``include_hidden`` (shop owner or admin viewing) unpublished and
    pending events are listed too; rejected ones only then.
    """
    listed: list[tuple[datetime, Event]] = []
    for event in events:
        if event.shop_id != shop_id:
            continue
        if not include_hidden and not is_publicly_visible(event):
            continue
        start = _start_of(event)
        if start is None or classify(start, now) == Bucket.EXPIRED:
            continue
        listed.append((start, event))

    listed.sort(key=lambda item: item[0])
    return [event for _, event in listed]
