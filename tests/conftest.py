"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import datetime
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.cities import CityDirectory  # noqa: E402

SYDNEY_CALENDAR = "sydney-cal@group.calendar.google.com"
MELBOURNE_CALENDAR = "melbourne-cal@group.calendar.google.com"


@pytest.fixture
def now():
    """Tuesday 10 June 2025, 18:00 in Sydney and Melbourne (UTC+10)."""
    return datetime.fromisoformat("2025-06-10T08:00:00+00:00")


@pytest.fixture
def directory():
    """Two-city directory with fake calendar ids."""
    return CityDirectory(
        calendars=(("sydney", SYDNEY_CALENDAR), ("melbourne", MELBOURNE_CALENDAR)),
        timezones=(("sydney", "Australia/Sydney"), ("melbourne", "Australia/Melbourne")),
        default_timezone="Australia/Sydney",
    )


@pytest.fixture
def sample_item():
    """Google Calendar events.list item."""
    return {
        "id": "evt-1",
        "summary": "Bachata Social Night",
        "description": "Price: $20\nSocial dancing all night [image:https://drive.google.com/file/d/abc123/view]",
        "location": "Dance Hall, 1 George St, Sydney, NSW",
        "htmlLink": "https://www.google.com/calendar/event?eid=evt1",
        "start": {"dateTime": "2025-06-11T19:30:00+10:00"},
        "end": {"dateTime": "2025-06-11T23:00:00+10:00"},
    }


@pytest.fixture
def feed_items(sample_item):
    """Items per calendar id returned by the fake feed."""
    return {
        SYDNEY_CALENDAR: [
            {**sample_item, "id": "syd-late", "start": {"dateTime": "2025-06-11T21:00:00+10:00"},
             "end": {"dateTime": "2025-06-11T23:30:00+10:00"}},
            {**sample_item, "id": "syd-early"},
        ],
        MELBOURNE_CALENDAR: [
            {
                "id": "mel-workshop",
                "summary": "Sensual Workshop",
                "description": "Beginner workshop",
                "location": "Studio 5, Fitzroy, VIC",
                "start": {"dateTime": "2025-06-11T20:00:00+10:00"},
                "end": {"dateTime": "2025-06-11T22:00:00+10:00"},
            },
        ],
    }


def calendar_id_from(request: httpx.Request) -> str:
    """Calendar id from /calendars/{id}/events."""
    parts = request.url.path.split("/")
    return parts[parts.index("events") - 1]


@pytest.fixture
def feed_transport(feed_items):
    """MockTransport answering like the events.list endpoint, recording requests."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        items = feed_items.get(calendar_id_from(request), [])
        return httpx.Response(200, json={"kind": "calendar#events", "items": items})

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport
