"""Filesystem watching and browser live reload over Server-Sent Events."""
from reloadr.events.types import (
    AlreadyRunningError,
    ChangeNotice,
    ConfigurationError,
    LiveReloadError,
    WatchError,
    WatchEvent,
    WatchEventKind,
    WatchSetupError,
)
from reloadr.lifecycle import PROCESS_STATE, LiveReloadState
from reloadr.live import LiveReload, log_change, start_live_reload
from reloadr.script import inject_script

__all__ = [
    "AlreadyRunningError",
    "ChangeNotice",
    "ConfigurationError",
    "LiveReload",
    "LiveReloadError",
    "LiveReloadState",
    "PROCESS_STATE",
    "WatchError",
    "WatchEvent",
    "WatchEventKind",
    "WatchSetupError",
    "inject_script",
    "log_change",
    "start_live_reload",
]
