"""Server-sent events stream of created planets.

Frames:
    data: Connected
    data: Ping
    data: Planet created: {"id": "...", "name": "Ceres", "type": "DwarfPlanet"}
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from solar.api.deps import EventStreamDep

router = APIRouter(tags=["Events"])


@router.get("/events", response_class=StreamingResponse)
async def stream_events(stream: EventStreamDep) -> StreamingResponse:
    """Stream creation events until the client disconnects."""
    return StreamingResponse(
        stream,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
