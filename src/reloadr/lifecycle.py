"""Single-instance guard for live reload."""
import threading

from reloadr.events.types import AlreadyRunningError


class LiveReloadState:
    """Shared record of whether a live reload instance was started.

    The watch primitive is a scarce resource, so only one instance may be
    started per state object. Starting claims the state; a claim is only
    given back when setup fails. Cancelling a running instance does not
    release it, so a state cannot be started twice.
    """

    def __init__(self) -> None:
        """Initialize an unclaimed state."""
        self._lock = threading.Lock()
        self._started = False

    @property
    def started(self) -> bool:
        """Whether an instance holds this state."""
        with self._lock:
            return self._started

    def claim(self) -> None:
        """Mark the state as started.

        Raises:
            AlreadyRunningError: If the state is already claimed.
        """
        with self._lock:
            if self._started:
                raise AlreadyRunningError("live reload is already running")
            self._started = True

    def release(self) -> None:
        """Give back a claim after a failed setup."""
        with self._lock:
            self._started = False


PROCESS_STATE = LiveReloadState()
