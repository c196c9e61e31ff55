"""Live reload configuration loaded from environment variables."""
from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Live reload configuration loaded from environment variables.

    Attributes:
        host: Bind address for the dev server.
        port: Port number for the dev server.
        debug: Enable debug logging and API documentation.
        log_json: Render logs as JSON lines instead of console output.
        endpoint: URL path serving the reload stream.
        debounce_ms: Debounce window for filesystem events.
        watch_paths_raw: Comma-separated paths to watch for changes.
        site_root: Directory the dev server serves pages from.
        skip_hidden: Do not watch dot-directories below a watch path.
        health_check_interval: Seconds between watcher liveness checks.
        change_feed_size: Maximum size of each change feed queue.
        sse_ping_interval: Seconds between SSE comment pings.
        shutdown_timeout: Seconds to wait for graceful shutdown.
    """

    model_config = SettingsConfigDict(
        env_prefix="RELOADR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    log_json: bool = True

    endpoint: str = "/live-reload"
    debounce_ms: int = 100
    watch_paths_raw: str = "."
    site_root: str = "."
    skip_hidden: bool = True
    health_check_interval: float = 1.0
    change_feed_size: int = 100
    sse_ping_interval: int = 86400
    shutdown_timeout: float = 30.0

    @computed_field
    @property
    def watch_paths(self) -> list[str]:
        """Parse watch paths from comma-separated string.

        Returns:
            List of directory paths to watch for filesystem events.
        """
        return [
            path.strip()
            for path in self.watch_paths_raw.split(",")
            if path.strip()
        ]
