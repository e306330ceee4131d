"""mdserve application — one Markdown document served over Chirp + Pounce.

``create_app`` wires a ReloadCoordinator into a Chirp App; ``serve`` is the
blocking entry point used by the CLI.
"""

import os
import socket
import sys
import time
import webbrowser
from pathlib import Path
from typing import TYPE_CHECKING

from mdserve._errors import StartupError
from mdserve.config_loader import load_config

if TYPE_CHECKING:
    from chirp import App

    from mdserve.config import ServeConfig
    from mdserve.observability.collector import ServeCollector
    from mdserve.reactive.coordinator import ReloadCoordinator

_MARKDOWN_SUFFIXES = frozenset({".md", ".markdown"})


def _check_readable(path: Path) -> None:
    """Raise StartupError unless *path* is an existing, readable file."""
    if not path.is_file() or not os.access(path, os.R_OK):
        msg = f"File not found or not readable: {path}"
        raise StartupError(msg)


def _startup_warnings(config: ServeConfig) -> list[str]:
    warnings: list[str] = []
    if config.file.suffix.lower() not in _MARKDOWN_SUFFIXES:
        warnings.append(f"{config.filename} does not have a .md or .markdown extension")
    return warnings


def _check_port_available(host: str, port: int) -> None:
    """Bind a throwaway socket to fail fast when the port is taken.

    Raises:
        StartupError: If the address is already in use.

    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError as exc:
            msg = f"Port {port} is already in use. Try a different port with --port <number>"
            raise StartupError(msg) from exc


def create_app(
    config: ServeConfig,
    coordinator: ReloadCoordinator,
    collector: ServeCollector | None = None,
) -> App:
    """Create a Chirp App serving *coordinator*'s document.

    When ``config.watch`` is set, a FileWatcher is attached to the coordinator
    and started/stopped through Chirp lifecycle hooks so it lives inside the
    event loop managed by Pounce.

    """
    from chirp import App, AppConfig

    from mdserve.routes import DocumentRouter
    from mdserve.theme import get_template_dir

    app = App(
        config=AppConfig(
            host=config.host,
            port=config.port,
            debug=False,
            template_dir=get_template_dir(),
            static_dir=None,
        )
    )

    router = DocumentRouter(app, coordinator, config.base_dir, live_reload=config.watch)
    router.register_all(collector)

    if config.watch:
        from mdserve.content.watcher import FileWatcher

        watcher = FileWatcher(
            config.file,
            stability_ms=config.stability_ms,
            poll_interval_ms=config.poll_interval_ms,
        )
        coordinator.watch(watcher)

        @app.on_startup
        async def _start_watcher() -> None:
            watcher.start()

    @app.on_shutdown
    async def _shutdown_coordinator() -> None:
        await coordinator.shutdown()

    return app


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def serve(file: str | Path, **kwargs: object) -> None:
    """Render *file* and serve it until interrupted.

    Launches a single-worker Pounce server so the process holds exactly one
    coordinator.  With ``watch=True`` the document is re-rendered on every
    settled save and open browser tabs reload.

    Args:
        file: Path to the Markdown document.
        **kwargs: Override ServeConfig fields.

    Raises:
        ConfigError: Invalid configuration.
        StartupError: Missing file, failed first render, or busy port.

    """
    from mdserve.banner import print_banner
    from mdserve.observability import EventLog, ServeCollector
    from mdserve.reactive.coordinator import ReloadCoordinator

    config = load_config(Path(file), **kwargs)
    _check_readable(config.file)

    collector = ServeCollector(EventLog())
    coordinator = ReloadCoordinator(
        config.file,
        max_file_size=config.max_file_size,
        highlight=config.highlight,
        collector=collector,
    )

    t0 = time.perf_counter()
    coordinator.initialize()
    render_ms = (time.perf_counter() - t0) * 1000

    _check_port_available(config.host, config.port)

    app = create_app(config, coordinator, collector)

    print_banner(config, render_ms=render_ms, warnings=_startup_warnings(config))

    if config.open_browser:
        try:
            webbrowser.open(config.url)
        except webbrowser.Error as exc:
            print(f"  Could not open browser: {exc}", file=sys.stderr)

    # Single worker: one coordinator, one viewer set.  The collector doubles
    # as Pounce's lifecycle_collector so connection events share the log.
    from pounce.config import ServerConfig
    from pounce.server import Server

    server_config = ServerConfig(host=config.host, port=config.port, workers=1)
    server = Server(server_config, app, lifecycle_collector=collector)
    server.run()
