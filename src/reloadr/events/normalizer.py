"""Translation of raw watchdog events into watch events."""

from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
)

from reloadr.events.types import WatchEvent, WatchEventKind

KIND_MAP: dict[str, WatchEventKind] = {
    EVENT_TYPE_CREATED: WatchEventKind.CREATE,
    EVENT_TYPE_MODIFIED: WatchEventKind.WRITE,
    EVENT_TYPE_DELETED: WatchEventKind.REMOVE,
    EVENT_TYPE_MOVED: WatchEventKind.RENAME,
}


def decode_path(raw_path: str | bytes) -> str:
    """Return a watchdog path as text.

    Args:
        raw_path: Path as reported by watchdog.

    Returns:
        Path string, undecodable bytes replaced.
    """
    if isinstance(raw_path, str):
        return raw_path
    return bytes(raw_path).decode("utf-8", errors="replace")


def is_hidden(path: str) -> bool:
    """Check whether the last component of a path is a dotfile.

    Args:
        path: Path to check.

    Returns:
        True if the name starts with a dot.
    """
    return Path(path).name.startswith(".")


def normalize_event(raw_event: FileSystemEvent) -> WatchEvent | None:
    """Transform a raw watchdog event into a watch event.

    Open and close notifications carry no change and are dropped, and so
    are modifications of a directory itself, which watchdog reports on
    the parent whenever one of its entries changes.

    Args:
        raw_event: Raw watchdog filesystem event.

    Returns:
        Watch event, or None if the event should be ignored.
    """
    kind = KIND_MAP.get(raw_event.event_type)
    if kind is None:
        return None
    if kind is WatchEventKind.WRITE and raw_event.is_directory:
        return None

    dest_path = None
    if kind is WatchEventKind.RENAME:
        dest_path = decode_path(raw_event.dest_path)

    return WatchEvent(
        path=decode_path(raw_event.src_path),
        kind=kind,
        is_directory=raw_event.is_directory,
        dest_path=dest_path,
    )
