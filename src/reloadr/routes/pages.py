"""Dev pages served from the site root with the reload snippet injected."""
from pathlib import Path

import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse, Response

from reloadr.script import inject_script

logger = structlog.get_logger()

router = APIRouter(tags=["pages"])

HTML_SUFFIXES: frozenset[str] = frozenset({".html", ".htm"})


class SecurityError(Exception):
    """Raised when a page path escapes the site root."""

    def __init__(self, message: str, path: str) -> None:
        """Initialize security error.

        Args:
            message: Error description.
            path: The offending path value.
        """
        super().__init__(message)
        self.path = path


def resolve_page(site_root: str, page: str) -> Path:
    """Resolve a request path to a file within the site root.

    Directories resolve to their ``index.html``.

    Args:
        site_root: Directory pages are served from.
        page: Request path relative to the site root.

    Returns:
        Absolute path of the page.

    Raises:
        SecurityError: If the path contains null bytes or resolves outside
            the site root.
    """
    if "\0" in page:
        raise SecurityError("Path contains null byte", page)

    root_path = Path(site_root).resolve()
    resolved = (root_path / page).resolve()

    if not resolved.is_relative_to(root_path):
        raise SecurityError(f"Path resolves outside site root: {root_path}", page)

    if resolved.is_dir():
        resolved = resolved / "index.html"
    return resolved


@router.get("/{page:path}", include_in_schema=False)
async def serve_page(request: Request, page: str) -> Response:
    """Serve a file from the site root.

    HTML pages get the live reload snippet spliced in before ``</body>``.
    A page that cannot be read is reported to live reload and answered with
    the snippet alone.

    Args:
        request: FastAPI request object.
        page: Path relative to the site root.

    Returns:
        The page or file.

    Raises:
        HTTPException: 404 if the page does not exist or is out of bounds.
    """
    site_root: str = request.app.state.settings.site_root
    try:
        path = resolve_page(site_root, page)
    except SecurityError as e:
        logger.warning("page_path_rejected", path=e.path, reason=str(e))
        raise HTTPException(status_code=404, detail="Page not found") from e

    if not path.is_file():
        raise HTTPException(status_code=404, detail="Page not found")

    if path.suffix.lower() not in HTML_SUFFIXES:
        return FileResponse(path)

    live_reload = request.app.state.live_reload
    script = live_reload.script.decode("utf-8")
    try:
        html = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("page_read_failed", path=page, error=str(e))
        live_reload.report_error(e)
        # Snippet only, so the browser reloads once the page is readable.
        return HTMLResponse(script, status_code=500)

    return HTMLResponse(inject_script(html, script))
