"""Tests for the Excel events digest."""

from datetime import datetime
from io import BytesIO
from zoneinfo import ZoneInfo

import pytest
from openpyxl import load_workbook

from scripts.create_events_digest import digest_filename
from services.reports import (
    create_events_digest,
    create_events_digest_bytes,
    format_date_display,
)

SYDNEY = ZoneInfo("Australia/Sydney")


@pytest.fixture
def tagged_events(sample_item):
    return [
        {
            **sample_item,
            "city": "sydney",
            "start_time": datetime.fromisoformat("2025-06-11T19:30:00+10:00"),
        },
        {
            "id": "gc-1",
            "summary": "Gold Coast Bachata Weekender",
            "location": "Surfers Paradise, QLD",
            "start": {"date": "2025-06-14"},
            "city": "gold coast",
            "start_time": datetime(2025, 6, 14, tzinfo=ZoneInfo("Australia/Brisbane")),
        },
    ]


def test_format_date_display():
    assert format_date_display(datetime(2025, 6, 1).date()) == "Sun 1/6/2025"


def test_digest_workbook(tmp_path, tagged_events):
    output_path = tmp_path / "digests" / "events.xlsx"

    create_events_digest(tagged_events, SYDNEY, output_path)

    wb = load_workbook(output_path)
    assert wb.sheetnames == ["Events", "Summary"]

    rows = list(wb["Events"].iter_rows(values_only=True))
    assert rows[0] == ("Date", "Time", "City", "Event", "Location", "Price", "Link")
    assert rows[1] == (
        "Wed 11/6/2025",
        "07:30 PM",
        "Sydney",
        "Bachata Social Night",
        "Dance Hall, 1 George St, Sydney, NSW",
        "20",
        "https://www.google.com/calendar/event?eid=evt1",
    )
    assert rows[2][:4] == ("Sat 14/6/2025", "All Day", "Gold Coast", "Gold Coast Bachata Weekender")
    assert rows[2][5] == "Check event"


def test_summary_sheet_counts_per_city(tagged_events):
    wb = load_workbook(BytesIO(create_events_digest_bytes(tagged_events + tagged_events[:1], SYDNEY)))

    rows = list(wb["Summary"].iter_rows(values_only=True))
    assert rows == [
        ("City", "Events"),
        ("Gold Coast", 1),
        ("Sydney", 2),
        ("Total", "=SUM(B2:B3)"),
    ]


def test_empty_digest():
    wb = load_workbook(BytesIO(create_events_digest_bytes([], SYDNEY)))

    assert wb["Events"].max_row == 1
    assert list(wb["Summary"].iter_rows(values_only=True)) == [("City", "Events"), ("Total", 0)]


def test_digest_filename():
    day = datetime(2025, 6, 15).date()

    assert digest_filename("weekend", "Gold Coast", day) == "dance_events_gold_coast_weekend_2025_06_15.xlsx"
    assert digest_filename("3rd March 2025", None, day) == "dance_events_3rd_march_2025_2025_06_15.xlsx"
    assert digest_filename(None, None, day) == "dance_events_2025_06_15.xlsx"
