"""Single-timer debouncing of watch events."""

import asyncio
from collections.abc import Callable

import structlog

from reloadr.events.types import WatchEvent

logger = structlog.get_logger()


class Debouncer:
    """Coalesces bursts of watch events into one settle action.

    Holds at most one pending timer. Every pushed event cancels it and
    schedules a new one; when the timer fires, ``on_settle`` runs once with
    the most recent event. Owned by the watch loop and only ever touched
    from the event loop thread.

    Attributes:
        delay: Debounce window in seconds.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        delay: float,
        on_settle: Callable[[WatchEvent], None],
    ) -> None:
        """Initialize debouncer.

        Args:
            loop: Event loop scheduling the timer.
            delay: Debounce window in seconds.
            on_settle: Called with the last event once a burst settles.
        """
        self.delay = delay
        self._loop = loop
        self._on_settle = on_settle
        self._timer: asyncio.TimerHandle | None = None
        self._coalesced_count = 0
        self._settled_count = 0

    @property
    def pending(self) -> bool:
        """Whether a settle action is scheduled."""
        return self._timer is not None

    @property
    def coalesced_events(self) -> int:
        """Number of events absorbed into an already pending window."""
        return self._coalesced_count

    @property
    def settled(self) -> int:
        """Number of settle actions run."""
        return self._settled_count

    def push(self, event: WatchEvent) -> None:
        """Restart the debounce window with a new event.

        Args:
            event: Event that will be reported if the window settles.
        """
        if self._timer is not None:
            self._timer.cancel()
            self._coalesced_count += 1

        self._timer = self._loop.call_later(self.delay, self._fire, event)

    def cancel(self) -> None:
        """Drop the pending settle action, if any."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, event: WatchEvent) -> None:
        self._timer = None
        self._settled_count += 1
        logger.debug("debounce_settled", path=event.path, kind=event.kind)
        self._on_settle(event)
