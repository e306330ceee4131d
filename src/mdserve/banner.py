"""Startup banner — what is being served and where.

Detects ``NO_COLOR`` / ``TERM`` for safe fallback to plain text.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdserve.config import ServeConfig


# ---------------------------------------------------------------------------
# ANSI helpers, respecting NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def format_banner(
    config: ServeConfig,
    *,
    render_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> str:
    """Build the startup banner text.

    Args:
        config: Resolved ServeConfig.
        render_ms: Time spent on the initial render in milliseconds.
        warnings: Optional warning messages to display.

    """
    from mdserve import __version__

    lines: list[str] = [
        "",
        f"  {_BOLD}mdserve{_RESET} {_DIM}v{__version__}{_RESET}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    timing = f" {_DIM}in {render_ms:.0f}ms{_RESET}" if render_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} {config.filename} rendered{timing}")
    lines.append(f"  {_DIM}├─{_RESET} assets: {_DIM}{config.base_dir}{_RESET}")

    if config.watch:
        lines.append(
            f"  {_DIM}└─{_RESET} {_GREEN}live reload{_RESET} "
            f"on {_DIM}/events{_RESET}"
        )
    else:
        lines.append(f"  {_DIM}└─{_RESET} live reload off {_DIM}(use --watch){_RESET}")

    lines.append("")
    lines.append(f"  {_clickable_url(config.url)}")

    if config.watch:
        lines.append("")
        lines.append(f"  {_DIM}Watching {config.filename} for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")
    return "\n".join(lines)


def print_banner(
    config: ServeConfig,
    *,
    render_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the startup banner to stderr."""
    print(format_banner(config, render_ms=render_ms, warnings=warnings), file=sys.stderr)
