"""API Pydantic models."""

from .responses import (
    ChatRequest,
    ChatResponse,
    ErrorCodes,
    ErrorResponse,
    EventResponse,
    FailedFeed,
    HealthResponse,
    SearchResponse,
    TimeRangeResponse,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "TimeRangeResponse",
    "EventResponse",
    "FailedFeed",
    "SearchResponse",
    "ChatRequest",
    "ChatResponse",
]
