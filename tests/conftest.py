"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from reloadr.config import Settings
from reloadr.lifecycle import LiveReloadState
from utils import ChangeRecorder


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Create test settings watching and serving a temporary directory."""
    return Settings(
        debug=True,
        debounce_ms=100,
        health_check_interval=0.1,
        watch_paths_raw=str(tmp_path),
        site_root=str(tmp_path),
    )


@pytest.fixture
def state() -> LiveReloadState:
    """Create an unclaimed single-instance state."""
    return LiveReloadState()


@pytest.fixture
def recorder() -> ChangeRecorder:
    """Create a change handler recording its calls."""
    return ChangeRecorder()
