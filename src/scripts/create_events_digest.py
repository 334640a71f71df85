#!/usr/bin/env python3
"""
Create an Excel digest of upcoming dance events.

Resolves the date expression per city timezone, searches the city calendars,
and writes the matching events to output/digests/.

Usage:
    uv run python src/scripts/create_events_digest.py --when weekend --city melbourne
"""

import argparse
import asyncio
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.cities import DEFAULT_DIRECTORY
from core.config import OUTPUT_DIR
from services.calendar import search_calendar_events
from services.reports import create_events_digest


def digest_filename(when: str | None, city: str | None, local_date) -> str:
    """e.g. dance_events_melbourne_weekend_2025_06_15.xlsx"""
    parts = ["dance_events"]
    for value in (city, when):
        if value:
            parts.append("_".join(value.lower().split()))
    parts.append(local_date.strftime("%Y_%m_%d"))
    return "_".join(parts) + ".xlsx"


async def main(
    when: str | None = None,
    city: str | None = None,
    keyword: str | None = None,
    event_type: str | None = None,
):
    """Main entry point."""
    try:
        now = datetime.now(timezone.utc)
        outcome = await search_calendar_events(
            when, city, now, keyword=keyword, event_type=event_type
        )
        print(
            f"\nWindow: {outcome.time_range.time_min_str} to {outcome.time_range.time_max_str}"
            + (" (default)" if outcome.defaulted else "")
        )

        for feed_city, reason in outcome.failed_feeds:
            print(f"  Skipped {feed_city}: {reason}")

        if not outcome.events:
            print("No events found!")
            return

        tz = DEFAULT_DIRECTORY.timezone_for(city)
        local_date = outcome.time_range.time_min.astimezone(tz).date()
        output_path = OUTPUT_DIR / "digests" / digest_filename(when, city, local_date)
        create_events_digest(outcome.events, tz, output_path)

        print(f"\nEvents: {len(outcome.events)}")
        print("Done!")

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate an Excel digest of dance events")
    parser.add_argument("--when", help="today, tonight, tomorrow, weekend, a weekday, or '3rd March 2025'")
    parser.add_argument("--city", help="City name. Searches all cities when omitted.")
    parser.add_argument("--keyword", help="Only events mentioning this word")
    parser.add_argument("--event-type", help="social, workshop, festival or class")
    args = parser.parse_args()

    asyncio.run(main(args.when, args.city, args.keyword, args.event_type))
