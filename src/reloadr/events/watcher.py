"""Recursive filesystem watcher built on non-recursive watchdog watches."""

import asyncio
import contextlib
import os
from collections.abc import Callable
from pathlib import Path

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from reloadr.events.normalizer import is_hidden, normalize_event
from reloadr.events.types import WatchEvent, WatchEventKind

logger = structlog.get_logger()

QueueItem = tuple[WatchEvent, BaseException | None]


def _raise(error: OSError) -> None:
    raise error


class ForwardingHandler(FileSystemEventHandler):
    """Watchdog handler passing normalized events to the event loop.

    Runs on watchdog's observer thread; the only thing it touches on the
    loop side is the queue, through ``call_soon_threadsafe``.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        queue: asyncio.Queue[QueueItem],
    ) -> None:
        """Initialize forwarding handler.

        Args:
            loop: Event loop owning the queue.
            queue: Queue read by the watch loop.
        """
        super().__init__()
        self._loop = loop
        self._queue = queue

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Forward a raw watchdog event.

        Args:
            event: Raw watchdog filesystem event.
        """
        normalized = normalize_event(event)
        if normalized is None:
            return

        # Raises once the loop has closed during shutdown.
        with contextlib.suppress(RuntimeError):
            self._loop.call_soon_threadsafe(self._queue.put_nowait, (normalized, None))


class RecursiveWatcher:
    """Watches directory trees by scheduling every directory on its own.

    The underlying watches are single level, so directories created after
    startup have to be added through ``add_tree`` as they appear. The set
    of watched directories only ever grows.

    Attributes:
        skip_hidden: Skip dot-directories below a root.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        skip_hidden: bool = True,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        """Initialize recursive watcher.

        Args:
            loop: Event loop the watch loop runs on.
            skip_hidden: Skip dot-directories below a root.
            observer_factory: Builds the watchdog observer.
        """
        self.skip_hidden = skip_hidden
        self._queue: asyncio.Queue[QueueItem] = asyncio.Queue()
        self._handler = ForwardingHandler(loop, self._queue)
        self._observer = observer_factory()
        self._watched: set[str] = set()
        self._started = False

    @property
    def watched(self) -> frozenset[str]:
        """Directories currently scheduled."""
        return frozenset(self._watched)

    def add_tree(self, root: str) -> list[str]:
        """Schedule a directory and every directory below it.

        Args:
            root: Directory to walk.

        Returns:
            Directories newly scheduled by this call.

        Raises:
            FileNotFoundError: If root does not exist.
            NotADirectoryError: If root is not a directory.
            OSError: If a directory cannot be walked or watched.
        """
        if not Path(root).exists():
            raise FileNotFoundError(f"Watch path does not exist: {root}")
        if not Path(root).is_dir():
            raise NotADirectoryError(f"Watch path is not a directory: {root}")

        added: list[str] = []
        for dirpath, dirnames, _ in os.walk(root, onerror=_raise):
            if self.skip_hidden:
                dirnames[:] = [name for name in dirnames if not name.startswith(".")]

            path = os.path.abspath(dirpath)
            if path in self._watched:
                continue
            self._observer.schedule(self._handler, path, recursive=False)
            self._watched.add(path)
            added.append(path)

        logger.debug("watcher_tree_added", root=root, directories=len(added))
        return added

    def should_follow(self, event: WatchEvent) -> str | None:
        """Return the directory a create or move event brings into view.

        Args:
            event: Normalized watch event.

        Returns:
            Directory path to register, or None.
        """
        if not event.is_directory:
            return None

        if event.kind is WatchEventKind.CREATE:
            target = event.path
        elif event.kind is WatchEventKind.RENAME and event.dest_path:
            target = event.dest_path
        else:
            return None

        if self.skip_hidden and is_hidden(target):
            return None
        return target

    def start(self) -> None:
        """Start the observer.

        Raises:
            OSError: If the watch primitive cannot be created.
        """
        self._observer.start()
        self._started = True
        logger.info("watcher_started", directories=len(self._watched))

    def stop(self) -> None:
        """Stop the observer and release its watches."""
        if self._started:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._started = False
            logger.info("watcher_stopped")

    def is_alive(self) -> bool:
        """Whether the observer thread is still running."""
        return self._observer.is_alive()

    async def next_event(self) -> QueueItem:
        """Wait for the next event from the observer.

        Returns:
            Event paired with the error it reports, if any.
        """
        return await self._queue.get()
