"""Calendar export: Google Calendar deep links and .ics payloads.

Both formats carry UTC instants as ``YYYYMMDDTHHmmssZ``. Stored event times
are naive local wall-clock strings, so they are localized to the configured
zone before conversion.
"""
import re
from datetime import UTC, datetime, timedelta
from urllib.parse import quote

import pytz

from app.calendar.temporal import parse_local
from app.core.config import settings
from app.models import Event, Shop

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def format_utc(instant: datetime) -> str:
    """Format an aware datetime as YYYYMMDDTHHmmssZ in UTC."""
    return instant.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")


def to_utc(local_value: str, tz_name: str | None = None) -> datetime:
    """Interpret a naive local string in tz_name and convert to UTC."""
    tz = pytz.timezone(tz_name or settings.local_timezone)
    return tz.localize(parse_local(local_value)).astimezone(pytz.utc)


def event_window(event: Event, tz_name: str | None = None) -> tuple[datetime, datetime]:
    """Start and end in UTC. A missing end defaults to start plus the default duration."""
    start = to_utc(event.start_date_time, tz_name)
    if event.end_date_time:
        end = to_utc(event.end_date_time, tz_name)
    else:
        end = start + timedelta(minutes=settings.default_event_duration_minutes)
    return start, end


def event_location(event: Event, shop: Shop | None) -> str:
    if event.address_override:
        return event.address_override
    if shop:
        return f"{shop.name}, {shop.address}, {shop.city}"
    return "Coffee Shop"


def event_details(event: Event, shop: Shop | None) -> str:
    if event.description:
        return event.description
    host = shop.name if shop else "local coffee shop"
    return f"Event at {host}. Found on {settings.product_name}."


def google_calendar_url(event: Event, shop: Shop | None = None, tz_name: str | None = None) -> str:
    """Build the 'add to Google Calendar' template link."""
    start, end = event_window(event, tz_name)
    return (
        f"{GOOGLE_CALENDAR_URL}?action=TEMPLATE"
        f"&text={quote(event.title, safe=_URI_COMPONENT_SAFE)}"
        f"&dates={format_utc(start)}/{format_utc(end)}"
        f"&details={quote(event_details(event, shop), safe=_URI_COMPONENT_SAFE)}"
        f"&location={quote(event_location(event, shop), safe=_URI_COMPONENT_SAFE)}"
    )


def _ics_text(value: str) -> str:
    return value.replace("\n", "\\n")


def ics_payload(
    event: Event,
    shop: Shop | None = None,
    now: datetime | None = None,
    tz_name: str | None = None,
) -> str:
    """
    Build a minimal single-event iCalendar document.

    Lines are joined with a bare newline; newlines inside the summary,
    description and location are escaped as the two characters backslash-n.
    """
    start, end = event_window(event, tz_name)
    stamp = now or datetime.now(UTC)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{settings.product_name}//Events//EN",
        "BEGIN:VEVENT",
        f"UID:{event.id}@{settings.product_domain}",
        f"DTSTAMP:{format_utc(stamp)}",
        f"DTSTART:{format_utc(start)}",
        f"DTEND:{format_utc(end)}",
        f"SUMMARY:{_ics_text(event.title)}",
        f"DESCRIPTION:{_ics_text(event_details(event, shop))}",
        f"LOCATION:{_ics_text(event_location(event, shop))}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\n".join(lines)


def ics_filename(event: Event) -> str:
    return re.sub(r"\s+", "-", event.title) + ".ics"
