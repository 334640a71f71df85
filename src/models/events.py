"""
Data models for calendar feeds and events.

Raw Google Calendar items stay plain dicts; TypedDict gives the shapes we add
on top of them.
"""

from datetime import datetime
from typing import TypedDict


class TaggedEvent(TypedDict, total=False):
    """Google Calendar item after merging, tagged with its source feed."""
    id: str
    summary: str
    description: str
    location: str
    htmlLink: str
    start: dict
    end: dict
    city: str
    start_time: datetime
    end_time: datetime
    formatted_start: str
    formatted_end: str


class EventCard(TypedDict):
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
