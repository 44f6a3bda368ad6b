"""
Event API Endpoints

Recent ledger events and a Server-Sent Events stream of new ones.
"""

import asyncio
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from app.schemas.events import EventType, LedgerEvent
from app.services.events import get_event_bus

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[LedgerEvent])
async def list_events(
    event_type: Optional[EventType] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
):
    """Most recent committed events, oldest first."""
    bus = get_event_bus()
    events = bus.events_of(event_type) if event_type else bus.history
    return events[-limit:]


@router.get("/stream")
async def stream_events(
    heartbeat: int = Query(default=15, ge=1, le=60, description="Heartbeat interval in seconds"),
):
    """
    Stream committed ledger events via SSE.

    Usage (JavaScript):
    ```js
    const eventSource = new EventSource('/api/v1/events/stream');
    eventSource.onmessage = (event) => {
      const record = JSON.parse(event.data);
      console.log(record.event_type, record.payload);
    };
    ```
    """

    async def event_generator():
        bus = get_event_bus()
        subscriber_id = str(uuid.uuid4())
        queue = bus.create_queue(subscriber_id)

        try:
            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=heartbeat)
                    yield f"data: {event.model_dump_json()}\n\n"
                except asyncio.TimeoutError:
                    # Keep the connection alive
                    yield ": heartbeat\n\n"
        except asyncio.CancelledError:
            pass
        finally:
            bus.remove_queue(subscriber_id)
            logger.debug(f"Event subscriber {subscriber_id} disconnected")

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering for nginx
        },
    )
