"""SSE (Server-Sent Events) endpoint for realtime league updates."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from clubhouse.core.event_bus import EVENT_TYPES, EventBus

router = APIRouter(prefix="/api/events", tags=["events"])
logger = logging.getLogger(__name__)

_HEARTBEAT_INTERVAL = 15  # seconds


def _get_bus(request: Request) -> EventBus:
    """Get the EventBus from app state."""
    return request.app.state.event_bus


def _get_limiter(request: Request) -> asyncio.Semaphore:
    return request.app.state.sse_slots


@router.get("/stream")
async def sse_stream(
    request: Request,
    event_type: str | None = None,
) -> StreamingResponse:
    """Server-Sent Events stream.

    Query params:
        event_type: optional filter, one of the known event types
                    (e.g. "score.updated", "standings.updated").
                    If omitted, receives all events.

    Sends an initial comment to flush proxy buffers and periodic heartbeats
    to keep the connection alive through reverse proxies.

    Errors:
        400: unknown event_type value
        429: connection limit reached
    """
    if event_type is not None and event_type not in EVENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown event_type {event_type!r}. Valid values: {sorted(EVENT_TYPES)}",
        )

    slots = _get_limiter(request)
    if slots.locked():
        raise HTTPException(
            status_code=429,
            detail="Too many concurrent event streams. Try again later.",
        )

    bus = _get_bus(request)

    async def generate():
        async with slots:
            yield ": connected\n\n"

            async with bus.subscribe(event_type) as sub:
                while not bus.closed:
                    if await request.is_disconnected():
                        break
                    event = await sub.get(timeout=_HEARTBEAT_INTERVAL)
                    if event is None:
                        yield ": heartbeat\n\n"
                        continue
                    data = json.dumps(event, default=str)
                    yield f"event: {event['type']}\ndata: {data}\n\n"

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/health")
async def events_health(request: Request) -> dict:
    """Check EventBus health and SSE connection stats."""
    bus = _get_bus(request)
    settings = request.app.state.settings
    slots = _get_limiter(request)
    return {
        "status": "closed" if bus.closed else "ok",
        "subscribers": bus.subscriber_count,
        "active_sse_connections": settings.max_sse_connections - slots._value,  # noqa: SLF001
        "max_sse_connections": settings.max_sse_connections,
    }
