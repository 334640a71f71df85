"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    api_key_configured: bool
    cities: list[str]
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TimeRangeResponse(BaseModel):
    """Resolved search window."""

    expression: str | None
    city: str | None
    timezone: str
    time_min: str  # ISO 8601 UTC, millisecond precision
    time_max: str
    defaulted: bool  # True when the expression did not resolve


class EventResponse(BaseModel):
    """Display-ready event."""

    id: str
    name: str
    description: str
    start_date: str | None
    end_date: str | None
    time: str
    location: str
    city: str
    state: str
    image_url: str
    price: str
    event_link: str
    source_city: str


class FailedFeed(BaseModel):
    city: str
    reason: str


class SearchResponse(BaseModel):
    """Event search result."""

    time_min: str
    time_max: str
    defaulted: bool
    partial: bool
    feeds_queried: list[str]
    failed_feeds: list[FailedFeed] = []
    count: int
    events: list[EventResponse]


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    message: str
    events: list[EventResponse] = []
    partial: bool = False
