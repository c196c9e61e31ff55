"""Watchdog event normalization tests."""

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from reloadr.events.normalizer import decode_path, is_hidden, normalize_event
from reloadr.events.types import WatchEventKind


def test_modified_file_is_write() -> None:
    """Modified events map to writes."""
    event = normalize_event(FileModifiedEvent("/site/index.html"))
    assert event is not None
    assert event.kind is WatchEventKind.WRITE
    assert event.path == "/site/index.html"
    assert event.is_directory is False


def test_created_and_deleted_kinds() -> None:
    """Created and deleted events map to create and remove."""
    created = normalize_event(FileCreatedEvent("/site/a.html"))
    deleted = normalize_event(FileDeletedEvent("/site/a.html"))
    assert created is not None and created.kind is WatchEventKind.CREATE
    assert deleted is not None and deleted.kind is WatchEventKind.REMOVE


def test_created_directory_keeps_directory_flag() -> None:
    """Directory creation is flagged as a directory."""
    event = normalize_event(DirCreatedEvent("/site/posts"))
    assert event is not None
    assert event.kind is WatchEventKind.CREATE
    assert event.is_directory is True


def test_modified_directory_is_dropped() -> None:
    """Parent directory modifications do not stand in for the changed file."""
    assert normalize_event(DirModifiedEvent("/site")) is None


def test_directory_delete_and_move_pass_through() -> None:
    """Structural directory changes are still reported."""
    deleted = normalize_event(DirDeletedEvent("/site/drafts"))
    moved = normalize_event(DirMovedEvent("/site/drafts", "/site/posts"))
    assert deleted is not None and deleted.kind is WatchEventKind.REMOVE
    assert moved is not None and moved.is_directory
    assert moved.dest_path == "/site/posts"


def test_moved_file_is_rename_with_destination() -> None:
    """Moves carry their destination path."""
    event = normalize_event(FileMovedEvent("/site/old.html", "/site/new.html"))
    assert event is not None
    assert event.kind is WatchEventKind.RENAME
    assert event.path == "/site/old.html"
    assert event.dest_path == "/site/new.html"


def test_closed_event_is_dropped() -> None:
    """Close notifications carry no change."""
    assert normalize_event(FileClosedEvent("/site/index.html")) is None


def test_bytes_path_is_decoded() -> None:
    """Byte paths are decoded to text."""
    assert decode_path(b"/site/index.html") == "/site/index.html"
    assert decode_path(b"/site/\xff.html") == "/site/�.html"


def test_is_hidden() -> None:
    """Only dot-prefixed names are hidden."""
    assert is_hidden("/site/.git")
    assert is_hidden(".cache")
    assert not is_hidden("/site/.git/objects")
    assert not is_hidden("/site/posts")
