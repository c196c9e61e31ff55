"""Watch event model, SSE frames and error types for live reload."""
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field
from sse_starlette import ServerSentEvent

FRAME_SEPARATOR = "\n"


class WatchEventKind(str, Enum):
    """Kinds of filesystem change reported by the watcher."""

    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"
    ERROR = "error"


class WatchEvent(BaseModel):
    """A single filesystem change.

    ``WatchEvent()`` is the zero-value event handed to the change handler
    together with an error.

    Attributes:
        path: Path the change happened on.
        kind: What happened to the path, None for the zero-value event.
        is_directory: Whether the path is a directory.
        dest_path: New location for renames.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(default="", description="Changed path")
    kind: WatchEventKind | None = Field(default=None, description="Change kind")
    is_directory: bool = Field(default=False, description="Path is a directory")
    dest_path: str | None = Field(default=None, description="Rename destination")


class ChangeNotice(NamedTuple):
    """One item of the change feed: an event or an error."""

    event: WatchEvent
    error: BaseException | None


class LiveReloadError(Exception):
    """Base error for live reload."""


class ConfigurationError(LiveReloadError, ValueError):
    """Invalid arguments passed to start live reload."""


class AlreadyRunningError(LiveReloadError):
    """Live reload was already started with the given state."""


class WatchSetupError(LiveReloadError):
    """The watch primitive could not be created or a root not registered."""


class WatchError(LiveReloadError):
    """The watch primitive failed while running."""


def make_frame(message: str) -> ServerSentEvent:
    """Build a data-only SSE frame.

    Args:
        message: Frame payload.

    Returns:
        Event encoding to ``data: <message>\\n\\n``.
    """
    return ServerSentEvent(data=message, sep=FRAME_SEPARATOR)


def error_frame(error: BaseException) -> ServerSentEvent:
    """Build the frame telling clients the watcher is degraded."""
    return make_frame(f"live reload error: {error}")


HELLO_FRAME = make_frame("live server is running")
RELOAD_FRAME = make_frame("reload")
