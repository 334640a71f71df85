"""
Resolve free-text date expressions into calendar query ranges.

"tonight", "friday", "12th March 2025" plus an optional city become a
[time_min, time_max) range anchored to the city's local calendar day.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from core.cities import DEFAULT_DIRECTORY, CityDirectory
from core.config import TONIGHT_START_HOUR
from models.dates import (
    ExplicitDate,
    RelativeDay,
    ResolvedRange,
    TemporalExpression,
    Unresolved,
    Weekday,
)

# Sunday = 0, matching the day numbering the weekday arithmetic is written for
WEEKDAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")
WEEKDAY_CHECK_ORDER = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
RELATIVE_KINDS = ("tonight", "today", "tomorrow", "weekend")

MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

EXPLICIT_DATE_PATTERN = re.compile(
    r"(\d{1,2})(?:st|nd|rd|th)?\s+"
    r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+"
    r"(\d{4})",
    re.IGNORECASE,
)

END_OF_DAY = time(23, 59, 59, 999000)
DEFAULT_WINDOW = timedelta(days=1)


def parse_expression(expression: str | None) -> TemporalExpression:
    """Classify an expression: weekday names first, then relative keywords, then explicit dates."""
    if not expression:
        return Unresolved(expression)

    text = expression.lower()

    for name in WEEKDAY_CHECK_ORDER:
        if name in text:
            return Weekday(name)

    for kind in RELATIVE_KINDS:
        if kind in text:
            return RelativeDay(kind)

    match = EXPLICIT_DATE_PATTERN.search(expression)
    if match:
        day, month_name, year = match.groups()
        return ExplicitDate(
            day=int(day),
            month=MONTHS.index(month_name[:3].lower()) + 1,
            year=int(year),
        )

    return Unresolved(expression)


def day_of_week(d: date) -> int:
    """Day number with Sunday = 0 ... Saturday = 6."""
    return d.isoweekday() % 7


def local_day_range(day: date, tz: ZoneInfo) -> ResolvedRange:
    """00:00:00.000 to 23:59:59.999 of a local calendar day."""
    return ResolvedRange(
        time_min=datetime.combine(day, time.min, tzinfo=tz),
        time_max=datetime.combine(day, END_OF_DAY, tzinfo=tz),
    )


def ensure_aware(now: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def resolve_parsed(
    parsed: TemporalExpression, local_now: datetime, tz: ZoneInfo
) -> ResolvedRange | None:
    today = local_now.date()

    if isinstance(parsed, Weekday):
        target = WEEKDAY_NAMES.index(parsed.name)
        days_until = (target - day_of_week(today) + 7) % 7
        if days_until == 0:
            # Same weekday means next week's occurrence, never today
            days_until = 7
        return local_day_range(today + timedelta(days=days_until), tz)

    if isinstance(parsed, RelativeDay):
        if parsed.kind == "tonight":
            evening = datetime.combine(today, time(TONIGHT_START_HOUR), tzinfo=tz)
            end = datetime.combine(today, END_OF_DAY, tzinfo=tz)
            start = max(local_now, evening)
            if start >= end:
                return None
            return ResolvedRange(time_min=start, time_max=end)
        if parsed.kind == "today":
            return local_day_range(today, tz)
        if parsed.kind == "tomorrow":
            return local_day_range(today + timedelta(days=1), tz)
        if parsed.kind == "weekend":
            # Single day: the coming Sunday, or next week's when today is Sunday
            days_until_sunday = 7 - day_of_week(today)
            return local_day_range(today + timedelta(days=days_until_sunday), tz)

    if isinstance(parsed, ExplicitDate):
        try:
            target_date = date(parsed.year, parsed.month, parsed.day)
        except ValueError:
            return None
        return local_day_range(target_date, tz)

    return None


def resolve(
    expression: str | None,
    city_name: str | None,
    now: datetime,
    directory: CityDirectory = DEFAULT_DIRECTORY,
) -> ResolvedRange | None:
    """
    Resolve a date expression to a time range in the city's timezone.

    Args:
        expression: Free text such as "tonight", "this friday", "3rd March 2025".
        city_name: Free-text city used only to pick the timezone.
        now: Current instant (naive values are treated as UTC).
        directory: City tables; the default timezone applies on a lookup miss.

    Returns:
        ResolvedRange in the city's timezone, or None when the expression is
        empty, unrecognised, names an impossible date, or a day whose
        boundaries cannot be expressed in UTC.
    """
    parsed = parse_expression(expression)
    if isinstance(parsed, Unresolved):
        return None

    tz = directory.timezone_for(city_name)
    local_now = ensure_aware(now).astimezone(tz)
    try:
        time_range = resolve_parsed(parsed, local_now, tz)
        if time_range is not None:
            time_range.time_min.astimezone(timezone.utc)
            time_range.time_max.astimezone(timezone.utc)
    except OverflowError:
        # Local day boundaries fall outside the representable UTC range
        return None
    return time_range


def default_range(now: datetime) -> ResolvedRange:
    """Fallback 24-hour window starting at now."""
    start = ensure_aware(now)
    return ResolvedRange(time_min=start, time_max=start + DEFAULT_WINDOW)
