"""Event search endpoints."""

import time
from datetime import datetime
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response

from api.dependencies import (
    get_api_key,
    get_calendar_client,
    get_city_directory,
    get_client_ip,
    get_now,
)
from api.logging import RequestLog, finish_log
from api.models.responses import (
    ErrorCodes,
    EventResponse,
    FailedFeed,
    SearchResponse,
    TimeRangeResponse,
)
from core.cities import CityDirectory
from services.calendar import SearchOutcome, search_calendar_events
from services.dates import default_range, resolve
from services.formatting import format_events
from services.reports import XLSX_MEDIA_TYPE, create_events_digest_bytes

router = APIRouter(prefix="/v1")

WhenParam = Annotated[
    str | None,
    Query(description="Date expression: today, tonight, tomorrow, weekend, a weekday, or '3rd March 2025'"),
]
CityParam = Annotated[str | None, Query(description="City name, e.g. Melbourne")]
KeywordParam = Annotated[str | None, Query(description="Match in title, description or location")]
EventTypeParam = Annotated[
    str | None, Query(description="social, workshop, festival, class or all")
]


async def run_search(
    request_log: RequestLog,
    when: str | None,
    city: str | None,
    now: datetime,
    directory: CityDirectory,
    client: httpx.AsyncClient,
    api_key: str,
    keyword: str | None = None,
    event_type: str | None = None,
) -> SearchOutcome:
    """Run the search, mapping service errors to HTTP errors and filling the log."""
    try:
        outcome = await search_calendar_events(
            when,
            city,
            now,
            keyword=keyword,
            event_type=event_type,
            api_key=api_key,
            directory=directory,
            client=client,
        )
    except ValueError as e:
        request_log.status_code = 422
        request_log.error_code = ErrorCodes.VALIDATION_ERROR
        request_log.error_message = str(e)
        request_log.details.append(("validation_error", str(e)))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "Could not build a search window",
                "code": ErrorCodes.VALIDATION_ERROR,
                "details": [str(e)],
            },
        )
    except RuntimeError as e:
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.CONFIGURATION_ERROR
        request_log.error_message = str(e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Server configuration error",
                "code": ErrorCodes.CONFIGURATION_ERROR,
                "details": [str(e)],
            },
        )

    request_log.time_min = outcome.time_range.time_min_str
    request_log.time_max = outcome.time_range.time_max_str
    request_log.feeds_queried = len(outcome.feeds_queried)
    request_log.feeds_failed = len(outcome.failed_feeds)
    request_log.events_returned = len(outcome.events)
    for feed_city, reason in outcome.failed_feeds:
        request_log.details.append(("feed_error", f"{feed_city}: {reason}"))
    if outcome.defaulted and when:
        request_log.details.append(("warning", f"Unrecognised date expression: {when}"))
    return outcome


@router.get("/events/range", response_model=TimeRangeResponse)
async def resolve_range(
    when: WhenParam = None,
    city: CityParam = None,
    now: datetime = Depends(get_now),
    directory: CityDirectory = Depends(get_city_directory),
):
    """Show the UTC window a date expression resolves to."""
    time_range = resolve(when, city, now, directory)
    defaulted = time_range is None
    if time_range is None:
        time_range = default_range(now)

    return TimeRangeResponse(
        expression=when,
        city=city,
        timezone=directory.timezone_name_for(city),
        time_min=time_range.time_min_str,
        time_max=time_range.time_max_str,
        defaulted=defaulted,
    )


@router.get("/events/search", response_model=SearchResponse)
async def search_events(
    request: Request,
    when: WhenParam = None,
    city: CityParam = None,
    keyword: KeywordParam = None,
    event_type: EventTypeParam = None,
    now: datetime = Depends(get_now),
    directory: CityDirectory = Depends(get_city_directory),
    client: httpx.AsyncClient = Depends(get_calendar_client),
    api_key: str = Depends(get_api_key),
):
    """
    Search the city calendars.

    Feeds that fail are listed in failed_feeds and the result is marked partial.
    """
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/events/search",
        method="GET",
        client_ip=get_client_ip(request),
        query_text=when,
        city=city,
    )

    try:
        outcome = await run_search(
            request_log, when, city, now, directory, client, api_key, keyword, event_type
        )
        cards = format_events(outcome.events, directory.timezone_for(city))
        request_log.status_code = 200

        return SearchResponse(
            time_min=outcome.time_range.time_min_str,
            time_max=outcome.time_range.time_max_str,
            defaulted=outcome.defaulted,
            partial=outcome.partial,
            feeds_queried=outcome.feeds_queried,
            failed_feeds=[FailedFeed(city=c, reason=r) for c, r in outcome.failed_feeds],
            count=len(cards),
            events=[EventResponse(**card) for card in cards],
        )
    finally:
        finish_log(request_log, start_time)


@router.get("/events/export")
async def export_events(
    request: Request,
    when: WhenParam = None,
    city: CityParam = None,
    keyword: KeywordParam = None,
    event_type: EventTypeParam = None,
    now: datetime = Depends(get_now),
    directory: CityDirectory = Depends(get_city_directory),
    client: httpx.AsyncClient = Depends(get_calendar_client),
    api_key: str = Depends(get_api_key),
):
    """Download the search result as an Excel digest."""
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/events/export",
        method="GET",
        client_ip=get_client_ip(request),
        query_text=when,
        city=city,
    )

    try:
        outcome = await run_search(
            request_log, when, city, now, directory, client, api_key, keyword, event_type
        )
        tz = directory.timezone_for(city)
        excel_bytes = create_events_digest_bytes(outcome.events, tz)
        local_day = outcome.time_range.time_min.astimezone(tz).date()
        filename = f"dance_events_{local_day.strftime('%Y_%m_%d')}.xlsx"
        request_log.status_code = 200

        return Response(
            content=excel_bytes,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    finally:
        finish_log(request_log, start_time)
