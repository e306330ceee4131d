"""Document shell — wraps a rendered fragment in a full HTML page.

Pure formatting: no I/O beyond the (cached) bundled template and stylesheet.
Rendered through Kida with autoescaping on, so the title is always escaped
while the already-sanitized fragment and stylesheet are marked safe.
"""

from __future__ import annotations

from functools import cache

from kida import Environment, FileSystemLoader

from mdserve.theme import get_stylesheet, get_template_dir

# SSE endpoint path for live reload
EVENTS_ENDPOINT = "/events"

_DOCUMENT_TEMPLATE = "document.html"


@cache
def _environment() -> Environment:
    """Kida environment over the bundled template directory."""
    return Environment(
        loader=FileSystemLoader(str(get_template_dir())),
        autoescape=True,
        auto_reload=False,
    )


def wrap_in_document(
    fragment: str,
    *,
    title: str = "Markdown Preview",
    live_reload: bool = False,
) -> str:
    """Wrap an HTML fragment in the full page shell.

    Args:
        fragment: Rendered document body.
        title: Page title (normally the document's file name).
        live_reload: Include the EventSource client that reloads the page.

    Returns:
        A complete HTML document.

    """
    template = _environment().get_template(_DOCUMENT_TEMPLATE)
    return template.render(
        title=title,
        content=fragment,
        stylesheet=get_stylesheet(),
        live_reload=live_reload,
        events_path=EVENTS_ENDPOINT,
    )
