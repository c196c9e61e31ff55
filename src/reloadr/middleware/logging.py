"""Request logging middleware for the dev server."""
import time
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = structlog.get_logger()

HEALTH_PREFIX = "/health/"


def response_kind(response: Response) -> str:
    """Classify a response as a page or a plain file.

    Args:
        response: Response about to be sent.

    Returns:
        ``"page"`` for HTML, which carries the reload snippet, else ``"file"``.
    """
    content_type = response.headers.get("content-type", "")
    return "page" if content_type.startswith("text/html") else "file"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every page and file the dev server hands out.

    The request path is bound to the log context while the request is
    handled, so failures logged by the routes carry it too. Health checks
    and the reload stream are not logged; the stream lives as long as the
    page that opened it and logs its own connects and disconnects.

    Attributes:
        stream_path: Path of the reload stream.
    """

    def __init__(self, app: ASGIApp, stream_path: str) -> None:
        super().__init__(app)
        self.stream_path = stream_path

    def is_quiet(self, path: str) -> bool:
        """Whether requests to a path are left out of the log."""
        return path.startswith(HEALTH_PREFIX) or path == self.stream_path

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Serve the request and log the outcome.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response from handler.
        """
        path = request.url.path
        if self.is_quiet(path):
            return await call_next(request)

        with structlog.contextvars.bound_contextvars(path=path):
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000

            logger.info(
                "http_request",
                method=request.method,
                path=path,
                kind=response_kind(response),
                status=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

        return response
