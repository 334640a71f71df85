"""
Turn raw Google Calendar items into display-ready event cards.
"""

import re
from datetime import datetime
from zoneinfo import ZoneInfo

from core.config import KEYWORD_IMAGES, PLACEHOLDER_IMAGE
from models.dates import format_instant
from models.events import EventCard

IMAGE_TAG_PATTERN = re.compile(r"\[image:(.*?)\]")
PRICE_PATTERN = re.compile(r"Price:\s*\$?(\d+(\.\d{1,2})?)", re.IGNORECASE)

DEFAULT_DESCRIPTION = "No description available."
DEFAULT_LOCATION = "Location TBA"


def parse_event_time(value: dict | None, tz: ZoneInfo) -> datetime | None:
    """
    Parse a Google Calendar start/end object.

    'dateTime' values carry their own offset; all-day 'date' values are
    local midnight in tz.
    """
    if not isinstance(value, dict):
        return None
    try:
        if value.get("dateTime"):
            parsed = datetime.fromisoformat(str(value["dateTime"]).replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=tz)
            return parsed
        if value.get("date"):
            return datetime.fromisoformat(str(value["date"])).replace(tzinfo=tz)
    except ValueError:
        return None
    return None


def convert_google_drive_url(url: str) -> str:
    """Rewrite a Drive share link into a direct image URL."""
    if not url:
        return PLACEHOLDER_IMAGE
    if "uc?export=view&id=" in url:
        return url
    if "/file/d/" in url:
        file_id = url.split("/file/d/")[1].split("/")[0]
        return f"https://drive.google.com/uc?export=view&id={file_id}" if file_id else PLACEHOLDER_IMAGE
    return url if url.startswith("http") else PLACEHOLDER_IMAGE


def keyword_image(title: str) -> str | None:
    title_lower = title.lower()
    for keywords, image in KEYWORD_IMAGES:
        if all(keyword in title_lower for keyword in keywords):
            return image
    return None


def extract_image(description: str, title: str) -> tuple[str, str]:
    """
    Find the event image.

    Returns:
        (image_url, description with the [image:...] tag removed)
    """
    match = IMAGE_TAG_PATTERN.search(description)
    if match and match.group(1).strip():
        image_url = convert_google_drive_url(match.group(1).strip())
        return image_url, IMAGE_TAG_PATTERN.sub("", description, count=1).strip()
    return keyword_image(title) or PLACEHOLDER_IMAGE, description


def extract_price(description: str) -> str:
    match = PRICE_PATTERN.search(description)
    return match.group(1) if match else "Check event"


def split_location(location: str) -> tuple[str, str]:
    """City and state from the last two comma-separated parts of an address."""
    parts = [part.strip() for part in location.split(",")]
    city = parts[-2] if len(parts) > 1 else "TBA"
    state = parts[-1] if parts else "TBA"
    return city, state


def format_event(item: dict, tz: ZoneInfo) -> EventCard:
    """Build an event card from a (tagged) Google Calendar item."""
    title = item.get("summary") or "Untitled Event"
    image_url, description = extract_image(item.get("description") or "", title)
    description = description or DEFAULT_DESCRIPTION
    location = item.get("location") or DEFAULT_LOCATION
    city, state = split_location(location)

    start = item.get("start") or {}
    end = item.get("end") or {}
    start_dt = parse_event_time(start, tz) if start.get("dateTime") else None
    end_dt = parse_event_time(end, tz) if end.get("dateTime") else None

    if start_dt:
        time_display = start_dt.astimezone(tz).strftime("%I:%M %p")
    else:
        time_display = "All Day"

    return {
        "id": item.get("id") or item.get("iCalUID") or "",
        "name": title,
        "description": description,
        "start_date": format_instant(start_dt) if start_dt else start.get("date"),
        "end_date": format_instant(end_dt) if end_dt else end.get("date") or start.get("date"),
        "time": time_display,
        "location": location,
        "city": city,
        "state": state,
        "image_url": image_url,
        "price": extract_price(description),
        "event_link": item.get("htmlLink") or "",
        "source_city": item.get("city") or "",
    }


def format_events(items: list[dict], tz: ZoneInfo) -> list[EventCard]:
    """Format items, dropping any without an id."""
    cards = [format_event(item, tz) for item in items]
    return [card for card in cards if card["id"]]


def format_display_start(value: datetime, tz: ZoneInfo) -> str:
    """e.g. 'Wednesday, 11 June 2025 07:00 PM'."""
    local = value.astimezone(tz)
    return f"{local.strftime('%A')}, {local.day} {local.strftime('%B %Y %I:%M %p')}"


def format_display_end(value: datetime, tz: ZoneInfo) -> str:
    return value.astimezone(tz).strftime("%I:%M %p")
