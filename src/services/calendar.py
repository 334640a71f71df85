"""
Event search across the per-city Google Calendar feeds.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import quote
from zoneinfo import ZoneInfo

import httpx

from core.cities import DEFAULT_DIRECTORY, CityDirectory
from core.config import (
    CALENDAR_API_BASE_URL,
    EVENT_TYPE_KEYWORDS,
    FEED_TIMEOUT_SECONDS,
    GOOGLE_API_KEY,
    MAX_RESULTS_PER_FEED,
    SEARCH_DEADLINE_SECONDS,
)
from models.dates import ResolvedRange
from models.events import TaggedEvent
from services.dates import default_range, ensure_aware, resolve
from services.formatting import format_display_end, format_display_start, parse_event_time


@dataclass
class SearchOutcome:
    """Merged search result plus which feeds did not answer."""

    events: list[TaggedEvent]
    time_range: ResolvedRange
    feeds_queried: list[str] = field(default_factory=list)
    failed_feeds: list[tuple[str, str]] = field(default_factory=list)  # (city, reason)
    defaulted: bool = False  # expression did not resolve, default window used

    @property
    def partial(self) -> bool:
        return bool(self.failed_feeds)


def build_events_url(calendar_id: str) -> str:
    return f"{CALENDAR_API_BASE_URL}/{quote(calendar_id, safe='')}/events"


def build_query_params(time_range: ResolvedRange, api_key: str) -> dict:
    return {
        "key": api_key,
        **time_range.as_query_params(),
        "singleEvents": "true",
        "orderBy": "startTime",
        "maxResults": str(MAX_RESULTS_PER_FEED),
    }


def describe_error(error: BaseException) -> str:
    """Short reason string for a failed feed."""
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}: {error.response.text[:200]}"
    if isinstance(error, httpx.TimeoutException):
        return "Request timed out"
    if isinstance(error, httpx.HTTPError):
        return f"{type(error).__name__}: {error}"
    if isinstance(error, ValueError):
        return f"Invalid response: {error}"
    return f"{type(error).__name__}: {error}"


async def fetch_feed_events(
    client: httpx.AsyncClient,
    city: str,
    calendar_id: str,
    time_range: ResolvedRange,
    api_key: str,
) -> list[dict]:
    """
    Fetch one city's events in the time range.

    Raises:
        httpx.HTTPError: on transport errors or non-2xx responses
        ValueError: when the body is not a JSON object or its items are malformed
    """
    print(f"  Fetching events for {city} calendar...")
    response = await client.get(
        build_events_url(calendar_id), params=build_query_params(time_range, api_key)
    )
    response.raise_for_status()

    data = response.json()
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")

    items = data.get("items") or []
    if not isinstance(items, list):
        raise ValueError("'items' is not a list")
    for item in items:
        if not isinstance(item, dict):
            raise ValueError("event item is not an object")
        for key in ("start", "end"):
            if item.get(key) is not None and not isinstance(item[key], dict):
                raise ValueError(f"event {item.get('id')!r} has a malformed '{key}'")

    print(f"    Found {len(items)} events in {city} calendar")
    return items


async def fetch_all_feeds(
    client: httpx.AsyncClient,
    feeds: list[tuple[str, str]],
    time_range: ResolvedRange,
    api_key: str,
    deadline: float = SEARCH_DEADLINE_SECONDS,
) -> tuple[list[tuple[str, list[dict]]], list[tuple[str, str]]]:
    """
    Query all feeds concurrently.

    A failing or slow feed never affects the others. Feeds still running at
    the deadline are cancelled and reported as failed.

    Returns:
        ([(city, items)] in feed order, [(city, reason)] for failed feeds)
    """
    if not feeds:
        return [], []

    tasks = {
        city: asyncio.create_task(fetch_feed_events(client, city, calendar_id, time_range, api_key))
        for city, calendar_id in feeds
    }
    _, pending = await asyncio.wait(tasks.values(), timeout=deadline)

    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    results = []
    failed = []
    for city, task in tasks.items():
        if task in pending:
            failed.append((city, f"No response within {deadline:g}s"))
        elif task.exception() is not None:
            reason = describe_error(task.exception())
            print(f"  Error fetching events for {city}: {reason}")
            failed.append((city, reason))
        else:
            results.append((city, task.result()))

    return results, failed


def tag_events(
    items: list[dict],
    city: str,
    display_tz: ZoneInfo,
    directory: CityDirectory = DEFAULT_DIRECTORY,
) -> list[TaggedEvent]:
    """
    Add source city, parsed start/end and display strings to each item.

    Items without a parseable start are skipped. A missing end is the start.
    """
    feed_tz = directory.timezone_for(city)
    tagged = []
    for item in items:
        start_time = parse_event_time(item.get("start"), feed_tz)
        if start_time is None:
            print(f"    Skipping event {item.get('id')!r} in {city} calendar: no valid start")
            continue
        end_time = parse_event_time(item.get("end"), feed_tz) or start_time
        tagged.append(
            {
                **item,
                "city": city,
                "start_time": start_time,
                "end_time": end_time,
                "formatted_start": format_display_start(start_time, display_tz),
                "formatted_end": format_display_end(end_time, display_tz),
            }
        )
    return tagged


def matches_event_type(event: dict, event_type: str) -> bool:
    keywords = EVENT_TYPE_KEYWORDS.get(event_type.lower())
    if keywords is None:
        return True

    title = (event.get("summary") or "").lower()
    description = (event.get("description") or "").lower()
    return any(word in title for word in keywords["title"]) or any(
        word in description for word in keywords["description"]
    )


def filter_events(
    events: list[dict],
    keyword: str | None = None,
    event_type: str | None = None,
    location: str | None = None,
) -> list[dict]:
    """
    Case-insensitive string filters.

    keyword: summary, description or location contains it
    event_type: social, workshop, festival or class ("all" keeps everything)
    location: event location contains it
    """
    if keyword:
        keyword_lower = keyword.lower()
        events = [
            event
            for event in events
            if any(
                keyword_lower in (event.get(key) or "").lower()
                for key in ("summary", "description", "location")
            )
        ]

    if event_type and event_type.lower() != "all":
        events = [event for event in events if matches_event_type(event, event_type)]

    if location:
        location_lower = location.lower()
        events = [
            event for event in events if location_lower in (event.get("location") or "").lower()
        ]

    return events


async def search_calendar_events(
    expression: str | None,
    location: str | None,
    now: datetime,
    *,
    keyword: str | None = None,
    event_type: str | None = None,
    venue: str | None = None,
    api_key: str | None = None,
    directory: CityDirectory = DEFAULT_DIRECTORY,
    client: httpx.AsyncClient | None = None,
    deadline: float = SEARCH_DEADLINE_SECONDS,
) -> SearchOutcome:
    """
    Search the city feeds for events matching a date expression.

    Unresolvable expressions fall back to a 24-hour window from now. Feed
    failures are isolated and reported on the outcome. keyword, event_type
    and venue narrow the merged list (see filter_events).

    Raises:
        ValueError: if the resolved time range is empty or inverted
        RuntimeError: if no Google API key is configured
    """
    now = ensure_aware(now)
    time_range = resolve(expression, location, now, directory)
    defaulted = time_range is None
    if time_range is None:
        print("No valid time range found, defaulting to the next 24 hours")
        time_range = default_range(now)

    if not time_range.is_valid:
        raise ValueError(
            f"Invalid time range: {time_range.time_min_str} is not before {time_range.time_max_str}"
        )

    api_key = api_key or GOOGLE_API_KEY
    if not api_key:
        raise RuntimeError("GOOGLE_API_KEY is not set in environment variables")

    feeds = directory.feeds_for(location)
    print(
        f"Searching {len(feeds)} calendar(s) from {time_range.time_min_str} "
        f"to {time_range.time_max_str}: {', '.join(city for city, _ in feeds) or 'none'}"
    )

    if client is None:
        async with httpx.AsyncClient(timeout=httpx.Timeout(FEED_TIMEOUT_SECONDS)) as own_client:
            results, failed = await fetch_all_feeds(own_client, feeds, time_range, api_key, deadline)
    else:
        results, failed = await fetch_all_feeds(client, feeds, time_range, api_key, deadline)

    display_tz = directory.timezone_for(location)
    events = []
    for city, items in results:
        events.extend(tag_events(items, city, display_tz, directory))

    events = filter_events(events, keyword=keyword, event_type=event_type, location=venue)
    events.sort(key=lambda event: event["start_time"])
    print(f"Total events found across all calendars: {len(events)}")

    return SearchOutcome(
        events=events,
        time_range=time_range,
        feeds_queried=[city for city, _ in feeds],
        failed_feeds=failed,
        defaulted=defaulted,
    )
