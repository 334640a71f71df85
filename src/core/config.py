"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = PROJECT_ROOT / "data" / "db" / "dance-events.db"
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# CITY CONFIGURATION
# =============================================================================

# City key -> public Google calendar id (one feed per city)
CITY_CALENDARS = (
    ("sydney", "4ea35178b00a2daa33a492682e866bd67e8b83797a948a31caa8a37e2a982dce@group.calendar.google.com"),
    ("melbourne", "641b8d8fbee5ff9eb2402997e5990b3e52a737b134ec201748349884985c84f4@group.calendar.google.com"),
    ("brisbane", "f0b5764410b23c93087a7d3ef5ed0d0a295ad2b811d10bb772533d7517d2fdc5@group.calendar.google.com"),
    ("adelaide", "6b95632fc6fe63530bbdd89c944d792009478636f5b2ce7ffc8718ccd500915f@group.calendar.google.com"),
    ("gold coast", "c9ed91c3930331387d69631072510838ec9155b75ca697065025d24e34cde78b@group.calendar.google.com"),
    ("perth", "e521c86aed4060431cf6de7405315790dcca0a10d4779cc333835199f3724c16@group.calendar.google.com"),
    ("canberra", "3a82a9f1ed5a4e865ed9f13b24a96004fe7c4b2deb07a422f068c70753f421eb@group.calendar.google.com"),
    ("darwin", "27319882e504521ffd07dca62fdf7a55f835bfb4233f4c096e787fa8e8fb881b@group.calendar.google.com"),
    ("hobart", "2f92a58bc97f58a3285a05a474f222d22aaed327af7431f21c2ad1a681c9607b@group.calendar.google.com"),
)

# City key -> IANA timezone (matched as a substring of the requested city, first wins)
CITY_TIMEZONES = (
    ("sydney", "Australia/Sydney"),
    ("melbourne", "Australia/Melbourne"),
    ("brisbane", "Australia/Brisbane"),
    ("adelaide", "Australia/Adelaide"),
    ("gold coast", "Australia/Brisbane"),
    ("perth", "Australia/Perth"),
    ("canberra", "Australia/Sydney"),
    ("darwin", "Australia/Darwin"),
    ("hobart", "Australia/Hobart"),
)

DEFAULT_TIMEZONE = os.environ.get("DEFAULT_TIMEZONE", "Australia/Sydney")

# =============================================================================
# EVENT CONFIGURATION
# =============================================================================

TONIGHT_START_HOUR = 17  # "tonight" never starts before 5 PM local

EVENT_TYPE_KEYWORDS = {
    "social": {"title": ("social", "dance"), "description": ("social dance",)},
    "workshop": {"title": ("workshop",), "description": ("workshop",)},
    "festival": {"title": ("festival",), "description": ("festival",)},
    "class": {"title": ("class", "lesson"), "description": ("class", "lesson")},
}

PLACEHOLDER_IMAGE = "/placeholder.svg"

# (required title keywords, image path) checked in order
KEYWORD_IMAGES = (
    (("sydney", "bachata", "festival"), "/images/sydney-bachata-festival.png"),
    (("world", "bachata", "melbourne"), "/images/world_bachata.png"),
)

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

DIGEST_HEADERS = ["Date", "Time", "City", "Event", "Location", "Price", "Link"]
SUMMARY_HEADERS = ["City", "Events"]

# =============================================================================
# GOOGLE CALENDAR CREDENTIALS (from environment)
# =============================================================================

GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")
CALENDAR_API_BASE_URL = os.environ.get(
    "CALENDAR_API_BASE_URL", "https://www.googleapis.com/calendar/v3/calendars"
)
FEED_TIMEOUT_SECONDS = float(os.environ.get("FEED_TIMEOUT_SECONDS", "10"))
SEARCH_DEADLINE_SECONDS = float(os.environ.get("SEARCH_DEADLINE_SECONDS", "20"))
MAX_RESULTS_PER_FEED = int(os.environ.get("MAX_RESULTS_PER_FEED", "250"))

# =============================================================================
# API CONFIGURATION
# =============================================================================

API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
