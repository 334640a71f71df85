"""
City directory: calendar feeds and timezones per city.

Built once at import time from the config tables and passed around by
reference. Lookups are case-insensitive substring matches, first match wins.
"""

from dataclasses import dataclass
from zoneinfo import ZoneInfo

from core.config import CITY_CALENDARS, CITY_TIMEZONES, DEFAULT_TIMEZONE


@dataclass(frozen=True)
class CityDirectory:
    """Immutable city -> calendar id and city -> timezone tables."""

    calendars: tuple[tuple[str, str], ...]
    timezones: tuple[tuple[str, str], ...]
    default_timezone: str = "Australia/Sydney"

    def __post_init__(self):
        timezone_keys = {key for key, _ in self.timezones}
        missing = [city for city, _ in self.calendars if city not in timezone_keys]
        if missing:
            raise ValueError(f"No timezone configured for cities: {', '.join(missing)}")
        # Fail fast on unknown zone names
        for _, tz_name in self.timezones:
            ZoneInfo(tz_name)
        ZoneInfo(self.default_timezone)

    def timezone_name_for(self, city_name: str | None) -> str:
        """Return the IANA timezone for a free-text city, or the default."""
        if not city_name:
            return self.default_timezone

        city_lower = city_name.lower()
        for key, tz_name in self.timezones:
            if key in city_lower:
                return tz_name
        return self.default_timezone

    def timezone_for(self, city_name: str | None) -> ZoneInfo:
        return ZoneInfo(self.timezone_name_for(city_name))

    def feeds_for(self, location: str | None) -> list[tuple[str, str]]:
        """
        Select (city, calendar_id) feeds for a location.

        All feeds when no location is given. Otherwise a feed matches when its
        key contains the location ("gold" -> "gold coast") or the location
        contains the key ("sydney cbd" -> "sydney").
        """
        if not location or not location.strip():
            return list(self.calendars)

        location_lower = location.strip().lower()
        return [
            (city, calendar_id)
            for city, calendar_id in self.calendars
            if location_lower in city or city in location_lower
        ]

    @property
    def cities(self) -> list[str]:
        return [city for city, _ in self.calendars]


def build_city_directory(default_timezone: str = DEFAULT_TIMEZONE) -> CityDirectory:
    """Create the directory from the configured city tables."""
    return CityDirectory(
        calendars=CITY_CALENDARS,
        timezones=CITY_TIMEZONES,
        default_timezone=default_timezone,
    )


DEFAULT_DIRECTORY = build_city_directory()
