"""Tests for chat message parsing."""

import pytest

from services.query import parse_user_query


@pytest.mark.parametrize(
    "message, date_expression, location",
    [
        ("What's on tonight in Melbourne?", "tonight", "Melbourne"),
        ("Any socials on 3rd March 2025 in Sydney", "3rd March 2025", "Sydney"),
        ("bachata near Gold Coast this weekend", "weekend", "Gold Coast this weekend"),
        ("Anything on Friday?", "Friday", None),
        ("Show me events", "today", None),
        ("classes around Perth, WA", "today", "Perth, WA"),
        ("what's happening next week", "next week", None),
    ],
)
def test_parse_user_query(message, date_expression, location):
    query = parse_user_query(message)

    assert query.date_expression == date_expression
    assert query.location == location


def test_explicit_date_beats_keywords():
    assert parse_user_query("today or 5 July 2025?").date_expression == "5 July 2025"


def test_keyword_beats_weekday():
    assert parse_user_query("tomorrow, saturday").date_expression == "tomorrow"


def test_location_words_inside_other_words_are_ignored():
    assert parse_user_query("latin dance today").location is None


@pytest.mark.parametrize(
    "message, date_expression",
    [
        ("socials this weekend in Sydney", "weekend"),
        ("anything on this week?", "this week"),
    ],
)
def test_relative_keywords_match_whole_words(message, date_expression):
    assert parse_user_query(message).date_expression == date_expression
