"""Client registry with lossy broadcast, and the change feed."""
import asyncio
import threading
import uuid
from collections.abc import AsyncIterator

import structlog
from sse_starlette import ServerSentEvent

from reloadr.events.types import ChangeNotice

logger = structlog.get_logger()


class ClientChannel:
    """Single-slot mailbox owned by one streaming connection.

    Attributes:
        id: Identifier used in logs.
    """

    def __init__(self, size: int = 1) -> None:
        """Initialize client channel.

        Args:
            size: Number of frames the channel buffers.
        """
        self.id = str(uuid.uuid4())
        self._queue: asyncio.Queue[ServerSentEvent] = asyncio.Queue(maxsize=size)

    @property
    def pending(self) -> int:
        """Frames waiting to be read."""
        return self._queue.qsize()

    def offer(self, frame: ServerSentEvent) -> bool:
        """Send a frame without blocking.

        Args:
            frame: Frame to deliver.

        Returns:
            False if the slot was full and the frame was dropped.
        """
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            return False
        return True

    async def receive(self) -> ServerSentEvent:
        """Wait for the next frame."""
        return await self._queue.get()


class ClientRegistry:
    """Concurrency-safe set of client channels.

    Broadcasting is send-or-drop: a client whose slot still holds the
    previous frame misses the new one, and nobody waits for it.
    """

    def __init__(self, channel_size: int = 1) -> None:
        """Initialize client registry.

        Args:
            channel_size: Slot count of every registered channel.
        """
        self._channels: dict[ClientChannel, None] = {}
        self._channel_size = channel_size
        self._lock = threading.Lock()
        self._broadcast_count = 0
        self._dropped_count = 0

    @property
    def client_count(self) -> int:
        """Number of registered channels."""
        with self._lock:
            return len(self._channels)

    @property
    def broadcast_count(self) -> int:
        """Number of broadcasts performed."""
        return self._broadcast_count

    @property
    def dropped_frames(self) -> int:
        """Frames skipped because a client's slot was full."""
        return self._dropped_count

    def register(self) -> ClientChannel:
        """Create and register a fresh channel.

        Returns:
            The new channel.
        """
        channel = ClientChannel(self._channel_size)
        with self._lock:
            self._channels[channel] = None
        return channel

    def unregister(self, channel: ClientChannel) -> None:
        """Remove a channel. Unknown channels are ignored.

        Args:
            channel: Channel to remove.
        """
        with self._lock:
            self._channels.pop(channel, None)

    def broadcast(self, frame: ServerSentEvent) -> int:
        """Offer a frame to every registered channel.

        Must run on the event loop thread owning the channels.

        Args:
            frame: Frame to deliver.

        Returns:
            Number of channels that accepted the frame.
        """
        delivered = 0
        with self._lock:
            self._broadcast_count += 1
            for channel in self._channels:
                if channel.offer(frame):
                    delivered += 1
                else:
                    self._dropped_count += 1
        return delivered


class ChangeFeed:
    """Fan-out of change notices to async iterators.

    Each subscriber has a bounded queue; when it overflows the oldest
    notice is dropped. Closing the feed ends every iterator.

    Attributes:
        queue_size: Maximum size of each subscriber queue.
    """

    def __init__(self, queue_size: int = 100) -> None:
        """Initialize change feed.

        Args:
            queue_size: Maximum items per subscriber queue.
        """
        self.queue_size = queue_size
        self._subscribers: dict[str, asyncio.Queue[ChangeNotice | None]] = {}
        self._dropped_count = 0
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        """Number of active subscribers."""
        return len(self._subscribers)

    @property
    def dropped_notices(self) -> int:
        """Notices dropped due to queue overflow."""
        return self._dropped_count

    def publish(self, notice: ChangeNotice | None) -> int:
        """Deliver a notice to every subscriber, dropping oldest on overflow.

        Args:
            notice: Notice to deliver, None ends the iterators.

        Returns:
            Number of subscribers that received the notice.
        """
        delivered = 0
        for queue in list(self._subscribers.values()):
            try:
                queue.put_nowait(notice)
                delivered += 1
            except asyncio.QueueFull:
                try:
                    queue.get_nowait()
                    queue.put_nowait(notice)
                    delivered += 1
                    self._dropped_count += 1
                except asyncio.QueueEmpty:
                    pass
        return delivered

    def subscribe(self) -> tuple[str, AsyncIterator[ChangeNotice]]:
        """Subscribe to change notices.

        The subscription is live as soon as this returns, before the
        iterator is first advanced.

        Returns:
            Tuple of (subscriber_id, notice_iterator).
        """
        subscriber_id = str(uuid.uuid4())
        queue: asyncio.Queue[ChangeNotice | None] = asyncio.Queue(
            maxsize=self.queue_size,
        )
        if self._closed:
            queue.put_nowait(None)
        self._subscribers[subscriber_id] = queue

        async def notice_iterator() -> AsyncIterator[ChangeNotice]:
            try:
                while True:
                    notice = await queue.get()
                    if notice is None:
                        return
                    yield notice
            finally:
                self.unsubscribe(subscriber_id)

        return subscriber_id, notice_iterator()

    def unsubscribe(self, subscriber_id: str) -> None:
        """Remove a subscriber.

        Args:
            subscriber_id: ID of the subscriber to remove.
        """
        if self._subscribers.pop(subscriber_id, None) is not None:
            logger.debug("change_subscriber_removed", subscriber_id=subscriber_id)

    def close(self) -> None:
        """End every iterator once it has drained its queue."""
        self._closed = True
        self.publish(None)
