"""Reload snippet tests."""

from reloadr.script import inject_script, load_script


def test_load_script_fills_endpoint() -> None:
    """The packaged snippet points at the given endpoint."""
    script = load_script("/live-reload")
    assert script.startswith(b"<script>")
    assert b'new EventSource("/live-reload")' in script
    assert b"$endpoint" not in script


def test_load_script_is_stable() -> None:
    """Loading twice yields the same bytes."""
    assert load_script("/x") == load_script("/x")


def test_inject_before_last_body_end() -> None:
    """The snippet goes before the last closing body tag, any case."""
    html = "<body><pre></body></pre></Body>"
    assert inject_script(html, "<s/>") == "<body><pre></body></pre><s/></Body>"


def test_inject_without_body_is_noop() -> None:
    """Fragments without a body are returned unchanged."""
    assert inject_script("<p>fragment</p>", "<s/>") == "<p>fragment</p>"
