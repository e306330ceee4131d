"""Content layer — the document on disk.

Handles Markdown rendering, the HTML page shell, asset resolution and
file watching.
"""

from mdserve.content.assets import find_asset, resolve_asset
from mdserve.content.document import wrap_in_document
from mdserve.content.renderer import render_markdown, render_source
from mdserve.content.watcher import FileWatcher

__all__ = [
    "FileWatcher",
    "find_asset",
    "render_markdown",
    "render_source",
    "resolve_asset",
    "wrap_in_document",
]
