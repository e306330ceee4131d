"""Markdown renderer — document file to sanitized HTML fragment.

Pipeline:
    1. Size check and UTF-8 read of the source file
    2. Strip YAML front matter
    3. Parse with Patitas (GFM extensions enabled)
    4. Drop raw HTML and unsafe URL schemes (``web_safe`` policy)
    5. Rewrite relative link/image URLs to ``/assets/...``
    6. Render with heading ids and Rosettes syntax highlighting

The renderer is a pure function of the file's bytes: identical input always
yields identical HTML.
"""

from __future__ import annotations

import dataclasses
from functools import cache
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from patitas import HtmlRenderer, Markdown, extract_body, sanitize, transform
from patitas.errors import PatitasError
from patitas.nodes import Image, Link
from patitas.sanitize import web_safe

from mdserve._errors import RenderError
from mdserve.config import DEFAULT_MAX_FILE_SIZE

if TYPE_CHECKING:
    from patitas.nodes import Node

# URL prefix the server exposes document-relative assets under
ASSETS_PREFIX = "/assets/"

# GitHub Flavored Markdown extensions
_GFM_PLUGINS = ["table", "strikethrough", "task_lists", "footnotes", "autolinks"]


@cache
def _markdown() -> Markdown:
    """Shared parser instance (config is applied per call via ContextVar)."""
    return Markdown(plugins=_GFM_PLUGINS)


def is_relative_reference(url: str) -> bool:
    """Return True if *url* points at a file next to the document.

    Empty URLs, fragment links (``#top``), protocol-relative URLs (``//host``)
    and anything carrying a scheme (``https:``, ``mailto:``) are left alone.
    """
    if not url or url.startswith(("#", "//")):
        return False
    return not urlsplit(url).scheme


def _rewrite_relative_url(node: Node) -> Node:
    """Point relative Link/Image URLs at the asset route."""
    if isinstance(node, (Link, Image)) and is_relative_reference(node.url):
        return dataclasses.replace(node, url=ASSETS_PREFIX + node.url.lstrip("/"))
    return node


def render_source(source: str, *, highlight: bool = True) -> str:
    """Render Markdown *source* text to an HTML fragment.

    Raises:
        RenderError: If the parser rejects the input.

    """
    body = extract_body(source)
    try:
        doc = _markdown().parse(body)
        doc = sanitize(doc, policy=web_safe)
        doc = transform(doc, _rewrite_relative_url)
        return HtmlRenderer(source=body, highlight=highlight).render(doc)
    except (PatitasError, RecursionError) as exc:
        msg = f"Markdown could not be rendered: {exc}"
        raise RenderError(msg) from exc


def render_markdown(
    path: Path,
    *,
    max_size: int = DEFAULT_MAX_FILE_SIZE,
    highlight: bool = True,
) -> str:
    """Render the Markdown file at *path* to an HTML fragment.

    Args:
        path: Absolute path to the document.
        max_size: Largest accepted file size in bytes.
        highlight: Enable syntax highlighting for fenced code blocks.

    Raises:
        RenderError: If the file is too large, unreadable, not valid UTF-8,
            or cannot be parsed.

    """
    try:
        size = path.stat().st_size
    except OSError as exc:
        msg = f"Cannot read {path}: {exc.strerror or exc}"
        raise RenderError(msg) from exc

    if size > max_size:
        msg = (
            f"File size ({size / 1024 / 1024:.2f}MB) exceeds maximum "
            f"allowed size ({max_size / 1024 / 1024:.0f}MB)"
        )
        raise RenderError(msg)

    try:
        source = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"{path.name} is not valid UTF-8: {exc.reason}"
        raise RenderError(msg) from exc
    except OSError as exc:
        msg = f"Cannot read {path}: {exc.strerror or exc}"
        raise RenderError(msg) from exc

    return render_source(source, highlight=highlight)
