"""Chat endpoint streaming grounded, source-annotated answers."""

import json
import logging
from collections.abc import AsyncIterator, Generator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from .....config import settings
from .....core.domain import CitationEvent, StreamEvent
from .....core.services.chat_service import ChatService
from ....common.exception_handler import format_client_error, log_exception
from ..deps import get_chat_service, get_current_user
from ..models import ChatRequest, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["chat"])

_DONE = object()


def encode_event(payload: dict) -> str:
    """One server-sent event frame."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def _next_event(events: Generator[StreamEvent, None, None]) -> StreamEvent | object:
    return next(events, _DONE)


async def _prime(events: Generator[StreamEvent, None, None]) -> list[StreamEvent]:
    """Pull events up to and including the first non-citation one.

    This makes the generation call start before the response is committed,
    so an upstream failure still becomes a JSON error response.
    """
    buffered: list[StreamEvent] = []
    while True:
        event = await run_in_threadpool(_next_event, events)
        if event is _DONE:
            return buffered
        buffered.append(event)
        if not isinstance(event, CitationEvent):
            return buffered


async def _event_source(
    request: Request,
    events: Generator[StreamEvent, None, None],
    buffered: list[StreamEvent],
) -> AsyncIterator[str]:
    try:
        for event in buffered:
            yield encode_event(event.to_dict())

        while True:
            if await request.is_disconnected():
                logger.info("Client disconnected, cancelling answer stream")
                return
            event = await run_in_threadpool(_next_event, events)
            if event is _DONE:
                break
            yield encode_event(event.to_dict())

        yield "data: [DONE]\n\n"
    except Exception as e:
        log_exception(e, extra_context={"path": str(request.url.path)})
        yield encode_event(
            {"type": "error", **format_client_error(e, include_trace=settings.debug)}
        )
    finally:
        events.close()


@router.post(
    "/chat",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"text/event-stream": {}}, "description": "Answer event stream"},
        400: {"model": ErrorResponse, "description": "Empty conversation or query"},
        401: {"model": ErrorResponse, "description": "Unauthenticated"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)
async def chat(
    request: Request,
    body: ChatRequest,
    owner_id: str = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """Answer the last user message from the caller's saved pages.

    The body is a stream of ``data: {json}`` frames: ``source-url`` events
    (one per cited passage, in rank order), then ``text-delta`` events, then
    ``finish``. Validation and retrieval errors are returned as JSON errors
    before the stream starts.
    """
    messages = [message.to_domain() for message in body.messages]
    events = await run_in_threadpool(service.answer, messages, owner_id)

    try:
        buffered = await _prime(events)
    except Exception:
        events.close()
        raise

    return StreamingResponse(
        _event_source(request, events, buffered),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
