"""Starting, running and cancelling live reload."""

import asyncio
from collections.abc import AsyncIterator, Callable

import structlog
from sse_starlette import ServerSentEvent

from reloadr.config import Settings
from reloadr.events.bus import ChangeFeed, ClientRegistry
from reloadr.events.debounce import Debouncer
from reloadr.events.hub import BroadcastHub, ChangeHandler
from reloadr.events.types import (
    ChangeNotice,
    ConfigurationError,
    WatchError,
    WatchEvent,
    WatchEventKind,
    WatchSetupError,
)
from reloadr.events.watcher import QueueItem, RecursiveWatcher
from reloadr.lifecycle import PROCESS_STATE, LiveReloadState
from reloadr.routes.events import StreamHandler, make_stream_handler
from reloadr.script import load_script

logger = structlog.get_logger()


def log_change(event: WatchEvent, error: BaseException | None) -> None:
    """Change handler that logs reloads and errors."""
    if error is None:
        logger.info("reloaded", path=event.path, kind=event.kind)
    else:
        logger.error("live_reload_error", path=event.path, error=str(error))


class LiveReload:
    """Handle of a running live reload instance.

    Owns the watch loop task. ``handler`` serves the reload stream and has
    to be routed by the caller; ``cancel`` stops the watch loop, releases
    the watches and ends every open stream.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        watcher: RecursiveWatcher,
        hub: BroadcastHub,
        settings: Settings,
        script: bytes,
    ) -> None:
        self._loop = loop
        self._watcher = watcher
        self._hub = hub
        self._settings = settings
        self._script = script
        self._cancelled = asyncio.Event()
        self._debouncer = Debouncer(
            loop,
            settings.debounce_ms / 1000.0,
            hub.notify_change,
        )
        self._handler = make_stream_handler(
            hub,
            self._cancelled,
            settings.sse_ping_interval,
        )
        self._task: asyncio.Task[None] | None = None

    @property
    def handler(self) -> StreamHandler:
        """Endpoint streaming reload frames to one client per request."""
        return self._handler

    @property
    def script(self) -> bytes:
        """Client snippet to splice into rendered pages."""
        return self._script

    @property
    def cancelled(self) -> bool:
        """Whether cancel() has taken effect."""
        return self._cancelled.is_set()

    @property
    def watched(self) -> frozenset[str]:
        """Directories currently watched."""
        return self._watcher.watched

    @property
    def registry(self) -> ClientRegistry:
        """Registry of connected stream clients."""
        return self._hub.registry

    def run(self) -> None:
        """Spawn the watch loop task."""
        self._task = self._loop.create_task(self._watch(), name="live-reload-watch")

    def cancel(self) -> None:
        """Stop watching and end every open stream.

        Safe to call more than once and from any thread.
        """
        self._call_on_loop(self._cancelled.set)

    async def wait_closed(self) -> None:
        """Wait until the watch loop has released its resources."""
        if self._task is not None:
            await asyncio.shield(self._task)

    def stream(self) -> AsyncIterator[ServerSentEvent]:
        """Frames for one client, for serving outside of ``handler``.

        Returns:
            Async iterator ending when the instance is cancelled.
        """
        return self._hub.create_sse_generator(self._cancelled)

    def changes(self) -> AsyncIterator[ChangeNotice]:
        """Iterate change notices as an alternative to the change handler.

        The iterator ends once the instance is cancelled.

        Returns:
            Async iterator of change notices.
        """
        _, notices = self._hub.feed.subscribe()
        return notices

    def report_error(self, error: BaseException) -> None:
        """Report a failure from a collaborator, such as a page renderer.

        Can be called from any thread; the change handler always runs on
        the watch loop.

        Args:
            error: The failure, passed on to the change handler.
        """
        self._call_on_loop(self._hub.notify_error, WatchEvent(), error)

    def _call_on_loop(self, callback: Callable[..., None], *args: object) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            callback(*args)
        else:
            self._loop.call_soon_threadsafe(callback, *args)

    async def _watch(self) -> None:
        stop = asyncio.ensure_future(self._cancelled.wait())
        receive: asyncio.Future[QueueItem] | None = None
        observer_failed = False
        try:
            while True:
                if receive is None:
                    receive = asyncio.ensure_future(self._watcher.next_event())
                done, _ = await asyncio.wait(
                    {receive, stop},
                    timeout=self._settings.health_check_interval,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if stop in done:
                    return

                if receive not in done:
                    if not observer_failed and not self._watcher.is_alive():
                        observer_failed = True
                        self._handle(
                            WatchEvent(kind=WatchEventKind.ERROR),
                            WatchError("filesystem observer stopped unexpectedly"),
                        )
                    continue

                event, error = receive.result()
                receive = None
                self._handle(event, error)
        finally:
            for task in (receive, stop):
                if task is not None and not task.done():
                    task.cancel()
            self._debouncer.cancel()
            self._watcher.stop()
            self._hub.feed.close()
            logger.info("live_reload_stopped")

    def _handle(self, event: WatchEvent, error: BaseException | None) -> None:
        if event.kind is WatchEventKind.ERROR:
            self._hub.notify_error(WatchEvent(), error, broadcast=True)
            return

        directory = self._watcher.should_follow(event)
        if directory is not None:
            try:
                self._watcher.add_tree(directory)
            except OSError as exc:
                self._hub.notify_error(event, exc)
                return

        self._debouncer.push(event)


def start_live_reload(
    endpoint: str,
    on_change: ChangeHandler | None,
    *paths: str,
    state: LiveReloadState | None = None,
    settings: Settings | None = None,
    loop: asyncio.AbstractEventLoop | None = None,
) -> LiveReload:
    """Watch paths and stream reload notifications to browsers.

    The returned handle's ``handler`` must be routed at ``endpoint`` by the
    caller. Only one instance can be started per state; after cancelling,
    the same state cannot be started again.

    Args:
        endpoint: URL path the stream is served on, baked into the script.
        on_change: Called with each settled change, or a zero-value event
            and an error. Required so errors are never silently dropped;
            ``log_change`` is a ready-made choice.
        *paths: Directories to watch recursively.
        state: Shared single-instance state, ``PROCESS_STATE`` by default.
        settings: Tuning knobs, defaults from the environment.
        loop: Event loop to run on, the running loop by default.

    Returns:
        Handle of the running instance.

    Raises:
        AlreadyRunningError: If the state was already started.
        ConfigurationError: If endpoint is empty or on_change is missing.
        WatchSetupError: If a path cannot be watched.
    """
    if state is None:
        state = PROCESS_STATE
    if settings is None:
        settings = Settings()
    if loop is None:
        loop = asyncio.get_running_loop()

    state.claim()
    try:
        if not endpoint:
            raise ConfigurationError("endpoint can not be empty")
        if on_change is None or not callable(on_change):
            raise ConfigurationError(
                "on_change must be set in order to propagate errors, "
                "feel free to use reloadr.log_change",
            )

        script = load_script(endpoint)
        watcher = RecursiveWatcher(loop, skip_hidden=settings.skip_hidden)
        try:
            for path in paths:
                watcher.add_tree(path)
            watcher.start()
        except OSError as exc:
            watcher.stop()
            raise WatchSetupError(str(exc)) from exc
    except BaseException:
        state.release()
        raise

    hub = BroadcastHub(
        ClientRegistry(),
        on_change,
        ChangeFeed(settings.change_feed_size),
    )
    live_reload = LiveReload(loop, watcher, hub, settings, script)
    live_reload.run()
    logger.info(
        "live_reload_started",
        endpoint=endpoint,
        paths=list(paths),
        directories=len(watcher.watched),
    )
    return live_reload
