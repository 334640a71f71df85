"""Tests for the multi-calendar event search."""

import asyncio
from datetime import timedelta

import httpx
import pytest

from conftest import MELBOURNE_CALENDAR, SYDNEY_CALENDAR, calendar_id_from
from models.dates import ResolvedRange
from services import calendar as calendar_service
from services.calendar import (
    build_events_url,
    filter_events,
    search_calendar_events,
)


def run_search(transport, now, directory, **kwargs):
    async def go():
        async with httpx.AsyncClient(transport=transport) as client:
            return await search_calendar_events(
                kwargs.pop("expression", "wednesday"),
                kwargs.pop("location", None),
                now,
                api_key="test-key",
                directory=directory,
                client=client,
                **kwargs,
            )

    return asyncio.run(go())


# =============================================================================
# Requests
# =============================================================================


def test_events_url_escapes_calendar_id():
    url = build_events_url("abc@group.calendar.google.com")
    assert url.endswith("/calendars/abc%40group.calendar.google.com/events")


def test_query_params_use_resolved_range(feed_transport, now, directory):
    run_search(feed_transport, now, directory, expression="wednesday", location="sydney")

    (request,) = feed_transport.requests
    params = request.url.params
    assert calendar_id_from(request) == SYDNEY_CALENDAR
    assert params["timeMin"] == "2025-06-10T14:00:00.000Z"
    assert params["timeMax"] == "2025-06-11T13:59:59.999Z"
    assert params["key"] == "test-key"
    assert params["singleEvents"] == "true"
    assert params["orderBy"] == "startTime"
    assert params["maxResults"] == "250"


def test_no_location_queries_every_feed(feed_transport, now, directory):
    outcome = run_search(feed_transport, now, directory)

    assert sorted(calendar_id_from(r) for r in feed_transport.requests) == sorted(
        [SYDNEY_CALENDAR, MELBOURNE_CALENDAR]
    )
    assert outcome.feeds_queried == ["sydney", "melbourne"]


def test_unknown_location_queries_nothing(feed_transport, now, directory):
    outcome = run_search(feed_transport, now, directory, location="Auckland")

    assert feed_transport.requests == []
    assert outcome.events == []
    assert not outcome.partial


# =============================================================================
# Merging
# =============================================================================


def test_results_are_merged_tagged_and_sorted(feed_transport, now, directory):
    outcome = run_search(feed_transport, now, directory)

    assert [e["id"] for e in outcome.events] == ["syd-early", "mel-workshop", "syd-late"]
    assert [e["city"] for e in outcome.events] == ["sydney", "melbourne", "sydney"]
    assert outcome.events[0]["formatted_start"] == "Wednesday, 11 June 2025 07:30 PM"
    assert outcome.events[0]["formatted_end"] == "11:00 PM"
    assert not outcome.partial


def test_equal_start_times_keep_feed_order(now, directory, sample_item):
    def handler(request):
        city_id = calendar_id_from(request)
        return httpx.Response(200, json={"items": [{**sample_item, "id": city_id}]})

    outcome = run_search(httpx.MockTransport(handler), now, directory)

    assert [e["id"] for e in outcome.events] == [SYDNEY_CALENDAR, MELBOURNE_CALENDAR]


def test_all_day_events_start_at_local_midnight(now, directory):
    def handler(request):
        return httpx.Response(
            200,
            json={"items": [{"id": "fest", "start": {"date": "2025-06-11"}, "end": {"date": "2025-06-12"}}]},
        )

    outcome = run_search(httpx.MockTransport(handler), now, directory, location="melbourne")

    (event,) = outcome.events
    assert event["start_time"].isoformat() == "2025-06-11T00:00:00+10:00"


def test_missing_items_key_is_empty_feed(now, directory):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"kind": "calendar#events"}))

    outcome = run_search(transport, now, directory)

    assert outcome.events == []
    assert outcome.failed_feeds == []


# =============================================================================
# Failure isolation
# =============================================================================


def test_failing_feed_does_not_stop_others(now, directory, feed_items):
    def handler(request):
        if calendar_id_from(request) == SYDNEY_CALENDAR:
            return httpx.Response(403, json={"error": {"message": "Forbidden"}})
        return httpx.Response(200, json={"items": feed_items[MELBOURNE_CALENDAR]})

    outcome = run_search(httpx.MockTransport(handler), now, directory)

    assert [e["id"] for e in outcome.events] == ["mel-workshop"]
    assert outcome.partial
    (failed_city, reason) = outcome.failed_feeds[0]
    assert failed_city == "sydney"
    assert reason.startswith("HTTP 403")


def test_transport_error_is_isolated(now, directory, feed_items):
    def handler(request):
        if calendar_id_from(request) == MELBOURNE_CALENDAR:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"items": feed_items[SYDNEY_CALENDAR]})

    outcome = run_search(httpx.MockTransport(handler), now, directory)

    assert {e["city"] for e in outcome.events} == {"sydney"}
    assert [city for city, _ in outcome.failed_feeds] == ["melbourne"]


def test_invalid_json_is_isolated(now, directory, feed_items):
    def handler(request):
        if calendar_id_from(request) == MELBOURNE_CALENDAR:
            return httpx.Response(200, text="<html>oops</html>")
        return httpx.Response(200, json={"items": feed_items[SYDNEY_CALENDAR]})

    outcome = run_search(httpx.MockTransport(handler), now, directory)

    assert len(outcome.events) == 2
    assert [city for city, _ in outcome.failed_feeds] == ["melbourne"]


@pytest.mark.parametrize(
    "payload",
    [
        {"items": "oops"},
        {"items": ["not an event"]},
        {"items": [{"id": "bad", "start": "2025-06-11"}]},
        {"items": [{"id": "bad", "start": {"date": "2025-06-11"}, "end": 42}]},
    ],
)
def test_malformed_items_are_isolated(now, directory, feed_items, payload):
    def handler(request):
        if calendar_id_from(request) == SYDNEY_CALENDAR:
            return httpx.Response(200, json=payload)
        return httpx.Response(200, json={"items": feed_items[MELBOURNE_CALENDAR]})

    outcome = run_search(httpx.MockTransport(handler), now, directory)

    assert [e["id"] for e in outcome.events] == ["mel-workshop"]
    (failed_city, reason) = outcome.failed_feeds[0]
    assert failed_city == "sydney"
    assert reason.startswith("Invalid response")


def test_items_without_valid_start_are_skipped(now, directory, feed_items):
    broken = [
        {"id": "no-start", "summary": "Mystery social"},
        {"id": "bad-start", "start": {"dateTime": "next wednesday"}},
    ]

    def handler(request):
        items = feed_items.get(calendar_id_from(request), [])
        if calendar_id_from(request) == SYDNEY_CALENDAR:
            items = broken + items
        return httpx.Response(200, json={"items": items})

    outcome = run_search(httpx.MockTransport(handler), now, directory)

    assert [e["id"] for e in outcome.events] == ["syd-early", "mel-workshop", "syd-late"]
    assert outcome.failed_feeds == []


def test_missing_end_uses_start(now, directory):
    def handler(request):
        return httpx.Response(
            200, json={"items": [{"id": "open", "start": {"dateTime": "2025-06-11T19:00:00+10:00"}}]}
        )

    outcome = run_search(httpx.MockTransport(handler), now, directory, location="sydney")

    (event,) = outcome.events
    assert event["end_time"] == event["start_time"]


def test_slow_feed_is_dropped_at_deadline(now, directory, feed_items):
    async def handler(request):
        if calendar_id_from(request) == MELBOURNE_CALENDAR:
            await asyncio.sleep(5)
        return httpx.Response(200, json={"items": feed_items.get(calendar_id_from(request), [])})

    outcome = run_search(httpx.MockTransport(handler), now, directory, deadline=0.2)

    assert {e["city"] for e in outcome.events} == {"sydney"}
    assert outcome.failed_feeds == [("melbourne", "No response within 0.2s")]


# =============================================================================
# Time range and configuration
# =============================================================================


def test_unresolved_expression_defaults_to_next_24_hours(feed_transport, now, directory):
    outcome = run_search(feed_transport, now, directory, expression="whenever", location="sydney")

    assert outcome.defaulted
    assert outcome.time_range.time_min == now
    assert outcome.time_range.time_max == now + timedelta(days=1)
    assert feed_transport.requests[0].url.params["timeMin"] == "2025-06-10T08:00:00.000Z"


def test_missing_api_key_raises(monkeypatch, now, directory):
    monkeypatch.setattr(calendar_service, "GOOGLE_API_KEY", "")

    with pytest.raises(RuntimeError, match="GOOGLE_API_KEY"):
        asyncio.run(search_calendar_events("today", None, now, directory=directory))


def test_invalid_range_raises(monkeypatch, now, directory):
    monkeypatch.setattr(calendar_service, "resolve", lambda *args: ResolvedRange(now, now))

    with pytest.raises(ValueError, match="Invalid time range"):
        asyncio.run(search_calendar_events("today", None, now, api_key="k", directory=directory))


# =============================================================================
# Filters
# =============================================================================


def test_search_applies_keyword_and_type_filters(feed_transport, now, directory):
    by_keyword = run_search(feed_transport, now, directory, keyword="FITZROY")
    by_type = run_search(feed_transport, now, directory, event_type="social")

    assert [e["id"] for e in by_keyword.events] == ["mel-workshop"]
    assert [e["id"] for e in by_type.events] == ["syd-early", "syd-late"]


def test_search_venue_filter_matches_event_location(feed_transport, now, directory):
    outcome = run_search(feed_transport, now, directory, venue="george st")

    assert [e["id"] for e in outcome.events] == ["syd-early", "syd-late"]


@pytest.fixture
def events():
    return [
        {"summary": "Salsa Social", "description": "", "location": "Sydney, NSW"},
        {"summary": "Bachata Bootcamp", "description": "Two day workshop", "location": "Fitzroy, VIC"},
        {"summary": "Sydney Bachata Festival", "description": None, "location": None},
        {"summary": "Beginner Lessons", "description": "weekly class", "location": "Brisbane"},
    ]


def test_filter_keyword_checks_summary_description_and_location(events):
    assert len(filter_events(events, keyword="sydney")) == 2
    assert len(filter_events(events, keyword="workshop")) == 1


@pytest.mark.parametrize(
    "event_type, expected",
    [("social", 1), ("workshop", 1), ("festival", 1), ("class", 1), ("all", 4), ("zouk", 4)],
)
def test_filter_event_type(events, event_type, expected):
    assert len(filter_events(events, event_type=event_type)) == expected


def test_filter_location(events):
    assert [e["summary"] for e in filter_events(events, location="vic")] == ["Bachata Bootcamp"]


def test_filter_without_criteria_keeps_everything(events):
    assert filter_events(events) == events
