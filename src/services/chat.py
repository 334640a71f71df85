"""
Chat responder: answer "what's on tonight in Melbourne?" style questions.
"""

import traceback
from dataclasses import dataclass, field
from datetime import datetime

from core.cities import DEFAULT_DIRECTORY, CityDirectory
from services.calendar import search_calendar_events
from services.formatting import format_events
from services.query import DEFAULT_DATE_EXPRESSION, parse_user_query

UNAVAILABLE_MESSAGE = (
    "I'm having trouble accessing the calendar right now. "
    "Please try again later or check our events page directly."
)


@dataclass
class ChatReply:
    message: str
    events: list[dict] = field(default_factory=list)
    partial: bool = False


def found_message(date_expression: str, location: str | None) -> str:
    if location:
        return f"Here are events in {location}:"
    if date_expression and date_expression != DEFAULT_DATE_EXPRESSION:
        return f"Here are events for {date_expression}:"
    return "I found these events:"


def not_found_message(date_expression: str, location: str | None) -> str:
    message = "I couldn't find any events matching your query."
    if location:
        return f"{message} Try checking our events page for activities in {location}."
    if date_expression and date_expression != DEFAULT_DATE_EXPRESSION:
        return f"{message} Try checking our events page for activities on {date_expression}."
    return f"{message} You can check our events page for more information."


async def answer_message(
    message: str,
    now: datetime,
    directory: CityDirectory = DEFAULT_DIRECTORY,
    **search_options,
) -> ChatReply:
    """
    Answer a chat message with matching events.

    Never raises: any search failure becomes the apology reply.
    """
    query = parse_user_query(message)
    try:
        outcome = await search_calendar_events(
            query.date_expression, query.location, now, directory=directory, **search_options
        )
    except Exception as e:
        print(f"Calendar error: {e}")
        traceback.print_exc()
        return ChatReply(message=UNAVAILABLE_MESSAGE)

    if not outcome.events:
        return ChatReply(
            message=not_found_message(query.date_expression, query.location),
            partial=outcome.partial,
        )

    tz = directory.timezone_for(query.location)
    return ChatReply(
        message=found_message(query.date_expression, query.location),
        events=format_events(outcome.events, tz),
        partial=outcome.partial,
    )
