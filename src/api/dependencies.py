"""FastAPI dependencies for shared resources."""

from datetime import datetime, timezone

import httpx
from fastapi import Request

from core.cities import DEFAULT_DIRECTORY, CityDirectory
from core.config import FEED_TIMEOUT_SECONDS, GOOGLE_API_KEY


def get_now() -> datetime:
    """Current instant, overridable in tests."""
    return datetime.now(timezone.utc)


def get_city_directory() -> CityDirectory:
    return DEFAULT_DIRECTORY


def get_api_key() -> str:
    return GOOGLE_API_KEY


async def get_calendar_client():
    """HTTP client for the calendar feeds, one per request."""
    async with httpx.AsyncClient(timeout=httpx.Timeout(FEED_TIMEOUT_SECONDS)) as client:
        yield client


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
