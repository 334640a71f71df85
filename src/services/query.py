"""
Extract the date expression and location from a chat message.
"""

import re
from dataclasses import dataclass

from services.dates import EXPLICIT_DATE_PATTERN

LOCATION_PATTERN = re.compile(r"\b(?:in|at|near|around)\s+([A-Za-z\s,]+)", re.IGNORECASE)
TIME_PATTERN = re.compile(r"\b(tonight|today|tomorrow|weekend|this week|next week)\b", re.IGNORECASE)
DAY_PATTERN = re.compile(
    r"\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b", re.IGNORECASE
)

DEFAULT_DATE_EXPRESSION = "today"


@dataclass(frozen=True)
class UserQuery:
    date_expression: str
    location: str | None


def parse_user_query(message: str) -> UserQuery:
    """
    Pull a date expression and location out of free text.

    Date priority: explicit date, relative keyword, weekday name, else "today".
    Location is whatever follows "in", "at", "near" or "around".
    """
    date_match = EXPLICIT_DATE_PATTERN.search(message)
    time_match = TIME_PATTERN.search(message)
    day_match = DAY_PATTERN.search(message)
    location_match = LOCATION_PATTERN.search(message)

    if date_match:
        date_expression = date_match.group(0)
    elif time_match:
        date_expression = time_match.group(1)
    elif day_match:
        date_expression = day_match.group(1)
    else:
        date_expression = DEFAULT_DATE_EXPRESSION

    location = None
    if location_match:
        location = location_match.group(1).strip(" ,") or None

    return UserQuery(date_expression=date_expression, location=location)
