"""Chat endpoint."""

import time
from datetime import datetime

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status

from api.dependencies import (
    get_api_key,
    get_calendar_client,
    get_city_directory,
    get_client_ip,
    get_now,
)
from api.logging import RequestLog, finish_log
from api.models.responses import ChatRequest, ChatResponse, ErrorCodes, EventResponse
from core.cities import CityDirectory
from services.chat import answer_message

router = APIRouter(prefix="/v1")


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: Request,
    body: ChatRequest,
    now: datetime = Depends(get_now),
    directory: CityDirectory = Depends(get_city_directory),
    client: httpx.AsyncClient = Depends(get_calendar_client),
    api_key: str = Depends(get_api_key),
):
    """
    Answer a free-text question about upcoming events.

    Calendar problems produce an apology message, not an error status.
    """
    start_time = time.time()
    request_log = RequestLog(
        endpoint="/v1/chat",
        method="POST",
        client_ip=get_client_ip(request),
        query_text=body.message,
    )

    try:
        if not body.message.strip():
            request_log.status_code = 400
            request_log.error_code = ErrorCodes.INVALID_REQUEST
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "error": "Message is empty",
                    "code": ErrorCodes.INVALID_REQUEST,
                    "details": [],
                },
            )

        reply = await answer_message(
            body.message, now, directory, api_key=api_key, client=client
        )
        request_log.status_code = 200
        request_log.events_returned = len(reply.events)

        return ChatResponse(
            message=reply.message,
            events=[EventResponse(**card) for card in reply.events],
            partial=reply.partial,
        )
    finally:
        finish_log(request_log, start_time)
