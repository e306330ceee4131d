"""Document router — serves the rendered document as Chirp routes.

Routes:
    ``GET /``                  the current snapshot wrapped in the page shell
    ``GET /events``            live-reload SSE stream (watch mode only)
    ``GET /assets/{path}``     files next to the document
    ``GET /__mdserve/stats``   event-log summary (JSON)

Handlers only read the coordinator's current snapshot; they never render.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from chirp import EventStream, FileResponse, Request, Response

from mdserve._errors import AssetPathError
from mdserve.content.assets import find_asset
from mdserve.content.document import EVENTS_ENDPOINT, wrap_in_document
from mdserve.observability.events import DocumentRendered

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

    from chirp import App

    from mdserve.observability.collector import ServeCollector
    from mdserve.reactive.coordinator import ReloadCoordinator

DOCUMENT_ENDPOINT = "/"
ASSETS_ENDPOINT = "/assets/{path:path}"
STATS_ENDPOINT = "/__mdserve/stats"


class DocumentRouter:
    """Registers the document, live-reload, asset and stats routes.

    Args:
        app: Chirp App to register routes on (must not yet be frozen).
        coordinator: Owner of the current snapshot and the viewer set.
        base_dir: Directory assets are served from (the document's directory).
        live_reload: Register ``/events`` and inject the reload client.

    """

    def __init__(
        self,
        app: App,
        coordinator: ReloadCoordinator,
        base_dir: Path,
        *,
        live_reload: bool = False,
    ) -> None:
        self._app = app
        self._coordinator = coordinator
        self._base_dir = base_dir
        self._live_reload = live_reload

    @property
    def live_reload(self) -> bool:
        """Whether the live-reload endpoint is registered."""
        return self._live_reload

    def register_all(self, collector: ServeCollector | None = None) -> None:
        """Register every route this server exposes."""
        self.register_document()
        self.register_assets()
        if self._live_reload:
            self.register_events()
        if collector is not None:
            self.register_stats(collector)

    def register_document(self) -> None:
        """Register ``GET /``: the current snapshot as a full HTML page."""
        coordinator = self._coordinator
        live_reload = self._live_reload

        def document_handler(request: Request) -> Response:
            snapshot = coordinator.current_snapshot()
            page = wrap_in_document(
                snapshot.html,
                title=coordinator.filename,
                live_reload=live_reload,
            )
            return Response(body=page, content_type="text/html; charset=utf-8")

        document_handler.__name__ = "mdserve_document"
        document_handler.__qualname__ = "DocumentRouter.mdserve_document"

        self._app.route(DOCUMENT_ENDPOINT, name="mdserve:document")(document_handler)

    def register_events(self) -> None:
        """Register ``GET /events``: one viewer connection per request.

        The connection is removed when the stream ends, whether the browser
        disconnected or the server is shutting down.

        """
        coordinator = self._coordinator

        async def events_handler(request: Request) -> EventStream:
            conn = coordinator.subscribe()

            async def generate() -> AsyncIterator[Any]:
                try:
                    async for event in coordinator.broadcaster.client_generator(conn):
                        yield event
                finally:
                    coordinator.unsubscribe(conn)

            return EventStream(generate())

        events_handler.__name__ = "mdserve_events"
        events_handler.__qualname__ = "DocumentRouter.mdserve_events"

        self._app.route(EVENTS_ENDPOINT, name="mdserve:events")(events_handler)

    def register_assets(self) -> None:
        """Register ``GET /assets/{path}``: files inside the document directory."""
        base_dir = self._base_dir

        def assets_handler(request: Request, path: str) -> FileResponse | Response:
            try:
                target = find_asset(base_dir, path)
            except AssetPathError as exc:
                reason = "Forbidden" if exc.status == 403 else "Not Found"
                return Response(body=reason, status=exc.status, content_type="text/plain")
            return FileResponse(path=target)

        assets_handler.__name__ = "mdserve_assets"
        assets_handler.__qualname__ = "DocumentRouter.mdserve_assets"

        self._app.route(ASSETS_ENDPOINT, name="mdserve:assets")(assets_handler)

    def register_stats(self, collector: ServeCollector) -> None:
        """Register ``GET /__mdserve/stats``: event-log summary as JSON."""
        coordinator = self._coordinator

        def stats_handler(request: Request) -> Response:
            snapshot = coordinator.current_snapshot()
            last = collector.log.latest(DocumentRendered)
            payload = json.dumps(
                {
                    "document": {
                        "file": coordinator.filename,
                        "version": snapshot.version,
                        "viewers": coordinator.subscriber_count,
                        "last_render_ms": round(last.render_ms, 2) if last else None,
                    },
                    "event_log": collector.log.stats(),
                },
                indent=2,
            )
            return Response(body=payload, status=200, content_type="application/json")

        stats_handler.__name__ = "mdserve_stats"
        stats_handler.__qualname__ = "DocumentRouter.mdserve_stats"

        self._app.route(STATS_ENDPOINT, name="mdserve:stats")(stats_handler)
