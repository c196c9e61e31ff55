"""Entry point for the live reload dev server."""

import asyncio
import contextlib
import signal
import socket
import sys
from types import FrameType

import structlog
import uvicorn
from fastapi import FastAPI

from reloadr.app import create_app
from reloadr.config import Settings
from reloadr.logging import configure_logging

logger = structlog.get_logger()


class DevServer(uvicorn.Server):
    """uvicorn server that ends reload streams as soon as shutdown starts.

    Reload streams stay open for as long as their page, so uvicorn's
    graceful shutdown would otherwise wait on them until it times out.
    """

    def __init__(self, config: uvicorn.Config, dev_app: FastAPI) -> None:
        super().__init__(config)
        self.dev_app = dev_app
        self._loop: asyncio.AbstractEventLoop | None = None

    async def serve(self, sockets: list[socket.socket] | None = None) -> None:
        self._loop = asyncio.get_running_loop()
        await super().serve(sockets)

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        if self._loop is not None and not self.should_exit:
            logger.info("shutdown_triggered", signal=signal.Signals(sig).name)
            self._loop.call_soon_threadsafe(self.end_streams)
        super().handle_exit(sig, frame)

    def end_streams(self) -> None:
        """Cancel live reload, which closes every open stream."""
        live_reload = getattr(self.dev_app.state, "live_reload", None)
        if live_reload is not None:
            live_reload.cancel()


async def serve(settings: Settings) -> None:
    """Run the dev server until SIGTERM or SIGINT.

    Args:
        settings: Server configuration.
    """
    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level="warning",
        access_log=False,
        timeout_graceful_shutdown=int(settings.shutdown_timeout),
    )
    await DevServer(config, app).serve()


def main() -> None:
    """Entry point for python -m reloadr."""
    settings = Settings()
    configure_logging(debug=settings.debug, json_logs=settings.log_json)
    logger.info(
        "dev_server_config",
        site_root=settings.site_root,
        watch_paths=settings.watch_paths,
        endpoint=settings.endpoint,
    )

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(serve(settings))

    sys.exit(0)


if __name__ == "__main__":
    main()
