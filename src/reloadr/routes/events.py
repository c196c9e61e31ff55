"""SSE streaming endpoint for reload notifications."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from fastapi import Request
from sse_starlette.sse import EventSourceResponse

from reloadr.events.hub import BroadcastHub
from reloadr.events.types import FRAME_SEPARATOR

if TYPE_CHECKING:
    from reloadr.live import LiveReload

StreamHandler = Callable[[Request], Awaitable[EventSourceResponse]]

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def make_stream_handler(
    hub: BroadcastHub,
    cancelled: asyncio.Event,
    ping_interval: int,
) -> StreamHandler:
    """Build the endpoint streaming one live reload instance.

    Args:
        hub: Hub whose clients the endpoint serves.
        cancelled: Cancellation signal of the owning watcher.
        ping_interval: Seconds between sse-starlette comment pings.

    Returns:
        Endpoint taking a request and returning the event stream.
    """

    async def live_reload_stream(request: Request) -> EventSourceResponse:
        """Stream reload notifications via Server-Sent Events.

        Args:
            request: Incoming request; disconnecting ends the stream.

        Returns:
            SSE response stream.
        """
        return EventSourceResponse(
            hub.create_sse_generator(cancelled),
            headers=STREAM_HEADERS,
            ping=ping_interval,
            sep=FRAME_SEPARATOR,
        )

    return live_reload_stream


async def event_stream(request: Request) -> EventSourceResponse:
    """Stream reload notifications of the app's live reload instance.

    Args:
        request: FastAPI request object.

    Returns:
        SSE response stream.
    """
    live_reload: LiveReload = request.app.state.live_reload
    return await live_reload.handler(request)
