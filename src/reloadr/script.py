"""Client-side reload snippet and its injection into HTML pages."""
from importlib.resources import files
from string import Template

SCRIPT_ASSET = "live_reload.html"


def load_script(endpoint: str) -> bytes:
    """Read the packaged reload snippet for an endpoint.

    Args:
        endpoint: URL path of the reload stream.

    Returns:
        Snippet bytes ready to be spliced into a page.
    """
    source = (files("reloadr") / "assets" / SCRIPT_ASSET).read_text(encoding="utf-8")
    return Template(source).substitute(endpoint=endpoint).encode("utf-8")


def inject_script(html: str, script: str) -> str:
    """Insert the snippet before the closing body tag.

    Args:
        html: Rendered page.
        script: Snippet to insert.

    Returns:
        Page with the snippet, unchanged if it has no ``</body>``.
    """
    idx = html.lower().rfind("</body>")
    if idx == -1:
        return html
    return html[:idx] + script + html[idx:]
