"""Shared test helpers."""

import asyncio
import os
import threading
from collections.abc import Callable

from reloadr.events.types import WatchEvent


class ChangeRecorder:
    """Change handler that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[WatchEvent, BaseException | None]] = []
        self.threads: list[int] = []

    def __call__(self, event: WatchEvent, error: BaseException | None) -> None:
        self.calls.append((event, error))
        self.threads.append(threading.get_ident())

    @property
    def events(self) -> list[WatchEvent]:
        return [event for event, error in self.calls if error is None]

    @property
    def errors(self) -> list[BaseException]:
        return [error for _, error in self.calls if error is not None]


class FakeObserver:
    """Stand-in for a watchdog observer that records scheduled paths."""

    def __init__(
        self,
        fail_on: frozenset[str] = frozenset(),
        alive_after_start: bool = True,
    ) -> None:
        self.scheduled: list[str] = []
        self.handler = None
        self.fail_on = fail_on
        self.alive_after_start = alive_after_start
        self.stopped = False
        self._alive = False

    def schedule(self, handler, path: str, recursive: bool = False) -> None:
        assert not recursive
        if os.path.basename(path) in self.fail_on:
            raise PermissionError(f"Permission denied: {path}")
        self.handler = handler
        self.scheduled.append(path)

    def start(self) -> None:
        self._alive = self.alive_after_start

    def stop(self) -> None:
        self.stopped = True
        self._alive = False

    def join(self, timeout: float | None = None) -> None:
        pass

    def is_alive(self) -> bool:
        return self._alive


async def wait_until(
    predicate: Callable[[], bool],
    timeout: float = 3.0,
    interval: float = 0.02,
) -> bool:
    """Poll a predicate until it holds or the timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            return False
        await asyncio.sleep(interval)
    return True
