"""Settings tests."""

import pytest

from reloadr.config import Settings


def test_defaults() -> None:
    """Defaults match the documented behaviour."""
    settings = Settings(_env_file=None)
    assert settings.endpoint == "/live-reload"
    assert settings.debounce_ms == 100
    assert settings.skip_hidden is True
    assert settings.watch_paths == ["."]


def test_watch_paths_are_split() -> None:
    """Comma-separated watch paths are parsed and trimmed."""
    settings = Settings(_env_file=None, watch_paths_raw=" templates, static ,,")
    assert settings.watch_paths == ["templates", "static"]


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings are read from RELOADR_ environment variables."""
    monkeypatch.setenv("RELOADR_DEBOUNCE_MS", "250")
    monkeypatch.setenv("RELOADR_ENDPOINT", "/_reload")
    settings = Settings(_env_file=None)
    assert settings.debounce_ms == 250
    assert settings.endpoint == "/_reload"
