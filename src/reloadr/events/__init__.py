"""Events subsystem for filesystem watching and SSE broadcasting."""
from reloadr.events.bus import ChangeFeed, ClientChannel, ClientRegistry
from reloadr.events.debounce import Debouncer
from reloadr.events.hub import BroadcastHub
from reloadr.events.types import WatchEvent, WatchEventKind
from reloadr.events.watcher import RecursiveWatcher

__all__ = [
    "BroadcastHub",
    "ChangeFeed",
    "ClientChannel",
    "ClientRegistry",
    "Debouncer",
    "RecursiveWatcher",
    "WatchEvent",
    "WatchEventKind",
]
