"""mdserve CLI — mdserve FILE [--port N] [--watch] [--open].

Entry point for the ``mdserve`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from mdserve._errors import MdServeError


def _port(value: str) -> int:
    """argparse type for a TCP port."""
    try:
        port = int(value)
    except ValueError:
        port = 0
    if not 1 <= port <= 65535:
        msg = f'Invalid port number "{value}". Port must be between 1 and 65535.'
        raise argparse.ArgumentTypeError(msg)
    return port


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the mdserve CLI."""
    parser = argparse.ArgumentParser(
        prog="mdserve",
        description="Serve a Markdown file as GitHub-styled HTML with live reload.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument("file", help="Markdown file to serve")
    parser.add_argument("-p", "--port", type=_port, default=None, help="Bind port (default: 3000)")
    parser.add_argument("-H", "--host", default=None, help="Bind address (default: 127.0.0.1)")
    parser.add_argument(
        "-w", "--watch", action="store_true", default=None,
        help="Reload open browser tabs when the file changes",
    )
    parser.add_argument(
        "-o", "--open", dest="open_browser", action="store_true", default=None,
        help="Open the document in the default browser",
    )
    return parser


def _get_version() -> str:
    """Get the package version."""
    from mdserve import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    from mdserve.app import serve

    path = Path(args.file)

    try:
        serve(
            path,
            host=args.host,
            port=args.port,
            watch=args.watch,
            open_browser=args.open_browser,
        )
    except MdServeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n  Shutting down...", file=sys.stderr)


if __name__ == "__main__":
    main()
