"""Reload fan-out to the change handler and SSE clients."""

import asyncio
from collections.abc import AsyncIterator, Callable

import structlog
from sse_starlette import ServerSentEvent

from reloadr.events.bus import ChangeFeed, ClientRegistry
from reloadr.events.types import (
    HELLO_FRAME,
    RELOAD_FRAME,
    ChangeNotice,
    WatchEvent,
    error_frame,
)

logger = structlog.get_logger()

ChangeHandler = Callable[[WatchEvent, BaseException | None], None]


class BroadcastHub:
    """Routes settled changes and errors to their consumers.

    Every notification goes to the user change handler and the change
    feed; reloads and watch failures are also broadcast to SSE clients.
    """

    def __init__(
        self,
        registry: ClientRegistry,
        on_change: ChangeHandler,
        feed: ChangeFeed | None = None,
    ) -> None:
        """Initialize broadcast hub.

        Args:
            registry: Registry of connected clients.
            on_change: User change handler.
            feed: Change feed for iterating consumers.
        """
        self.registry = registry
        self.feed = feed if feed is not None else ChangeFeed()
        self._on_change = on_change

    def notify_change(self, event: WatchEvent) -> None:
        """Report a settled change and tell clients to reload.

        Args:
            event: Last event of the settled burst.
        """
        self._call_handler(event, None)
        delivered = self.registry.broadcast(RELOAD_FRAME)
        logger.debug("reload_broadcast", path=event.path, delivered_to=delivered)

    def notify_error(
        self,
        event: WatchEvent,
        error: BaseException,
        broadcast: bool = False,
    ) -> None:
        """Report an error through the change handler.

        Args:
            event: Event the error relates to, or the zero-value event.
            error: The failure.
            broadcast: Also send an error frame to every client.
        """
        self._call_handler(event, error)
        if broadcast:
            self.registry.broadcast(error_frame(error))

    def _call_handler(self, event: WatchEvent, error: BaseException | None) -> None:
        self.feed.publish(ChangeNotice(event, error))
        try:
            self._on_change(event, error)
        except Exception:
            logger.exception("change_handler_error", path=event.path)

    async def create_sse_generator(
        self,
        cancelled: asyncio.Event,
    ) -> AsyncIterator[ServerSentEvent]:
        """Create the frame stream for one client connection.

        Yields the hello frame, then every frame broadcast to this client,
        until ``cancelled`` is set or the consumer stops iterating.

        Args:
            cancelled: Global cancellation signal of the watcher.

        Yields:
            Frames for the client.
        """
        channel = self.registry.register()
        logger.info(
            "sse_client_connected",
            client_id=channel.id,
            active_connections=self.registry.client_count,
        )

        stop = asyncio.ensure_future(cancelled.wait())
        receive: asyncio.Future[ServerSentEvent] | None = None
        try:
            yield HELLO_FRAME
            while not cancelled.is_set():
                receive = asyncio.ensure_future(channel.receive())
                done, _ = await asyncio.wait(
                    {receive, stop},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if stop in done:
                    break
                frame = receive.result()
                receive = None
                yield frame
        finally:
            self.registry.unregister(channel)
            for task in (receive, stop):
                if task is not None and not task.done():
                    task.cancel()
            logger.info(
                "sse_client_disconnected",
                client_id=channel.id,
                active_connections=self.registry.client_count,
            )
