"""
Temporal expression and time range models.
"""

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class Weekday:
    """A weekday name, e.g. 'friday'."""
    name: str


@dataclass(frozen=True)
class RelativeDay:
    """One of 'today', 'tonight', 'tomorrow', 'weekend'."""
    kind: str


@dataclass(frozen=True)
class ExplicitDate:
    """A 'D Month YYYY' date. Not validated against the calendar."""
    day: int
    month: int
    year: int


@dataclass(frozen=True)
class Unresolved:
    """Text that matched no known pattern."""
    text: str | None = None


TemporalExpression = Weekday | RelativeDay | ExplicitDate | Unresolved


def format_instant(value: datetime) -> str:
    """Format an aware datetime as ISO-8601 UTC with milliseconds, e.g. 2025-06-10T14:00:00.000Z."""
    utc_value = value.astimezone(timezone.utc)
    return utc_value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ResolvedRange:
    """Half-open [time_min, time_max) range of aware instants."""

    time_min: datetime
    time_max: datetime

    @property
    def time_min_str(self) -> str:
        return format_instant(self.time_min)

    @property
    def time_max_str(self) -> str:
        return format_instant(self.time_max)

    @property
    def is_valid(self) -> bool:
        return self.time_min < self.time_max

    def as_query_params(self) -> dict[str, str]:
        """timeMin/timeMax query parameters for the calendar events endpoint."""
        return {"timeMin": self.time_min_str, "timeMax": self.time_max_str}
