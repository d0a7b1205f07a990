"""Tests for the public event feed and the shop events list."""

from datetime import datetime

import pytest

from app.events.feed import build_feed, is_publicly_visible, shop_events
from app.models import Event, EventStatus, EventType, Shop

NOW = datetime(2024, 3, 15, 14, 0)

SHOPS = [
    Shop(id="s1", name="Blue Bottle", address="1 Main St", city="Oakland"),
    Shop(id="s2", name="Verve Roasters", address="9 Pine St", city="Santa Cruz"),
]


def make_event(title: str, start: str, **overrides) -> Event:
    data = {
        "id": title.lower().replace(" ", "-"),
        "shop_id": "s1",
        "title": title,
        "start_date_time": start,
        "status": EventStatus.APPROVED,
        "is_published": True,
        "event_type": EventType.TASTING,
    }
    data.update(overrides)
    return Event(**data)


def titles(events: list[Event]) -> list[str]:
    return [e.title for e in events]


class TestVisibility:
    @pytest.mark.parametrize(
        "status, published, visible",
        [
            (EventStatus.APPROVED, True, True),
            (EventStatus.PENDING, True, True),
            (EventStatus.REJECTED, True, False),
            (EventStatus.APPROVED, False, False),
            (EventStatus.PENDING, False, False),
            (EventStatus.REJECTED, False, False),
        ],
    )
    def test_gate(self, status, published, visible):
        event = make_event("Gate", "2024-03-20T10:00", status=status, is_published=published)
        assert is_publicly_visible(event) is visible

    def test_rejected_published_never_in_feed(self):
        events = [
            make_event("Rejected Today", "2024-03-15T18:00", status=EventStatus.REJECTED),
            make_event("Rejected Later", "2024-03-20T18:00", status=EventStatus.REJECTED),
        ]
        assert len(build_feed(events, SHOPS, NOW)) == 0

    def test_unpublished_excluded(self):
        events = [make_event("Draft", "2024-03-20T18:00", is_published=False)]
        assert len(build_feed(events, SHOPS, NOW)) == 0


class TestBuckets:
    def test_same_date_goes_to_today(self):
        feed = build_feed([make_event("Tonight", "2024-03-15T19:00")], SHOPS, NOW)

        assert titles(feed.today) == ["Tonight"]
        assert feed.upcoming == []

    def test_earlier_today_still_listed(self):
        feed = build_feed([make_event("Morning Cupping", "2024-03-15T08:00")], SHOPS, NOW)
        assert titles(feed.today) == ["Morning Cupping"]

    def test_future_goes_to_upcoming(self):
        feed = build_feed([make_event("Next Week", "2024-03-22T10:00")], SHOPS, NOW)
        assert titles(feed.upcoming) == ["Next Week"]

    def test_past_dates_dropped(self):
        feed = build_feed([make_event("Yesterday", "2024-03-14T23:30")], SHOPS, NOW)
        assert len(feed) == 0

    def test_sorted_ascending_within_buckets(self):
        events = [
            make_event("C", "2024-03-18T09:00"),
            make_event("Evening", "2024-03-15T20:00"),
            make_event("A", "2024-03-16T09:00"),
            make_event("Noon", "2024-03-15T12:00"),
            make_event("B", "2024-03-16T18:00"),
        ]
        feed = build_feed(events, SHOPS, NOW)

        assert titles(feed.today) == ["Noon", "Evening"]
        assert titles(feed.upcoming) == ["A", "B", "C"]

    def test_date_only_start(self):
        feed = build_feed([make_event("All Day", "2024-03-15")], SHOPS, NOW)
        assert titles(feed.today) == ["All Day"]


class TestFilters:
    EVENTS = [
        make_event("Espresso Tasting", "2024-03-16T10:00", event_type=EventType.TASTING),
        make_event("Jazz Night", "2024-03-16T20:00", event_type=EventType.MUSIC),
        make_event("Pour Over Class", "2024-03-17T10:00", shop_id="s2", event_type=EventType.WORKSHOP),
    ]

    def test_event_type(self):
        feed = build_feed(self.EVENTS, SHOPS, NOW, event_type=EventType.MUSIC)
        assert titles(feed.upcoming) == ["Jazz Night"]

    def test_search_title_case_insensitive(self):
        feed = build_feed(self.EVENTS, SHOPS, NOW, search="JAZZ")
        assert titles(feed.upcoming) == ["Jazz Night"]

    def test_search_shop_name(self):
        feed = build_feed(self.EVENTS, SHOPS, NOW, search="verve")
        assert titles(feed.upcoming) == ["Pour Over Class"]

    def test_search_and_type_combined(self):
        feed = build_feed(self.EVENTS, SHOPS, NOW, event_type=EventType.TASTING, search="blue")
        assert titles(feed.upcoming) == ["Espresso Tasting"]

    def test_blank_search_ignored(self):
        feed = build_feed(self.EVENTS, SHOPS, NOW, search="   ")
        assert len(feed) == 3

    def test_unknown_shop_matches_title_only(self):
        orphan = make_event("Latte Art", "2024-03-16T10:00", shop_id="gone")
        assert len(build_feed([orphan], SHOPS, NOW, search="blue")) == 0
        assert len(build_feed([orphan], SHOPS, NOW, search="latte")) == 1

    def test_shops_as_mapping(self):
        shops = {s.id: s for s in SHOPS}
        feed = build_feed(self.EVENTS, shops, NOW, search="verve")
        assert titles(feed.upcoming) == ["Pour Over Class"]


class TestTolerance:
    def test_malformed_start_skipped(self):
        events = [
            make_event("Broken", "someday"),
            make_event("Fine", "2024-03-16T10:00"),
        ]
        feed = build_feed(events, SHOPS, NOW)
        assert titles(feed.upcoming) == ["Fine"]

    def test_end_before_start_tolerated(self):
        event = make_event("Backwards", "2024-03-16T10:00", end_date_time="2024-03-16T08:00")
        assert titles(build_feed([event], SHOPS, NOW).upcoming) == ["Backwards"]


class TestShopEvents:
    EVENTS = [
        make_event("Public", "2024-03-16T10:00"),
        make_event("Draft", "2024-03-15T18:00", is_published=False),
        make_event("Pending", "2024-03-17T10:00", status=EventStatus.PENDING, is_published=False),
        make_event("Old", "2024-03-01T10:00"),
        make_event("Elsewhere", "2024-03-16T10:00", shop_id="s2"),
    ]

    def test_public_view(self):
        assert titles(shop_events(self.EVENTS, "s1", NOW)) == ["Public"]

    def test_host_view_includes_hidden(self):
        listed = shop_events(self.EVENTS, "s1", NOW, include_hidden=True)
        assert titles(listed) == ["Draft", "Public", "Pending"]
