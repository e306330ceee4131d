"""Bundled theme — page template and stylesheet.

The page shell lives in ``templates/document.html`` (rendered with Kida) and
the GitHub-style stylesheet in ``assets/markdown.css``.  Both ship inside the
package and are read-only.

Thread Safety:
    All returned values are immutable (paths, cached strings).  Safe for
    free-threading.

"""

from __future__ import annotations

from functools import cache
from pathlib import Path


def _bundled_theme_path() -> Path:
    """Return the absolute path to the bundled theme."""
    return Path(__file__).parent


def get_template_dir() -> Path:
    """Directory holding the page templates."""
    return _bundled_theme_path() / "templates"


@cache
def get_stylesheet() -> str:
    """Return the bundled stylesheet, read once and cached."""
    return (_bundled_theme_path() / "assets" / "markdown.css").read_text(encoding="utf-8")
