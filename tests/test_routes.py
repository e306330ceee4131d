"""Tests for mdserve.routes — HTTP surface over Chirp's test client."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from chirp import App, AppConfig
from chirp.testing.client import TestClient

from mdserve.observability import EventLog, ServeCollector
from mdserve.reactive.coordinator import ReloadCoordinator
from mdserve.routes import DocumentRouter
from mdserve.theme import get_template_dir
from tests.conftest import FakeRenderer


def _text(response: object) -> str:
    body = response.body  # type: ignore[attr-defined]
    return body.decode() if isinstance(body, bytes) else body


def _make_app(
    doc: Path,
    coordinator: ReloadCoordinator,
    *,
    live_reload: bool = False,
    collector: ServeCollector | None = None,
) -> App:
    app = App(config=AppConfig(template_dir=get_template_dir(), static_dir=None))
    DocumentRouter(app, coordinator, doc.parent, live_reload=live_reload).register_all(collector)
    return app


@pytest.fixture
def coordinator(doc: Path) -> ReloadCoordinator:
    coordinator = ReloadCoordinator(doc)
    coordinator.initialize()
    return coordinator


class TestRouteRegistration:
    """Routes land on the app under stable names."""

    def test_names_without_live_reload(self, doc: Path, coordinator: ReloadCoordinator) -> None:
        app = _make_app(doc, coordinator)
        names = {r.name for r in app._pending_routes if hasattr(r, "name")}
        assert {"mdserve:document", "mdserve:assets"} <= names
        assert "mdserve:events" not in names
        assert "mdserve:stats" not in names

    def test_names_with_live_reload_and_stats(
        self, doc: Path, coordinator: ReloadCoordinator
    ) -> None:
        app = _make_app(doc, coordinator, live_reload=True, collector=ServeCollector())
        names = {r.name for r in app._pending_routes if hasattr(r, "name")}
        assert {"mdserve:document", "mdserve:assets", "mdserve:events", "mdserve:stats"} <= names


class TestDocumentRoute:
    """GET / — current snapshot in the page shell."""

    @pytest.mark.asyncio
    async def test_serves_rendered_document(
        self, doc: Path, coordinator: ReloadCoordinator
    ) -> None:
        app = _make_app(doc, coordinator)
        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.status == 200
        assert "text/html" in response.content_type
        body = _text(response)
        assert "<title>README.md</title>" in body
        assert "Hello World" in body
        assert "/assets/img/logo.png" in body
        assert "EventSource" not in body

    @pytest.mark.asyncio
    async def test_reload_client_when_live(
        self, doc: Path, coordinator: ReloadCoordinator
    ) -> None:
        app = _make_app(doc, coordinator, live_reload=True)
        async with TestClient(app) as client:
            response = await client.get("/")
        assert "EventSource('/events')" in _text(response)

    @pytest.mark.asyncio
    async def test_serves_latest_snapshot(self, doc: Path) -> None:
        renderer = FakeRenderer()
        coordinator = ReloadCoordinator(doc, renderer=renderer)
        coordinator.initialize()
        app = _make_app(doc, coordinator)

        async with TestClient(app) as client:
            first = _text(await client.get("/"))
            await coordinator.on_file_changed()
            second = _text(await client.get("/"))

        assert "render 1" in first
        assert "render 2" in second

    @pytest.mark.asyncio
    async def test_failed_rerender_keeps_page(self, doc: Path) -> None:
        renderer = FakeRenderer()
        coordinator = ReloadCoordinator(doc, renderer=renderer)
        coordinator.initialize()
        app = _make_app(doc, coordinator)

        async with TestClient(app) as client:
            renderer.fail = True
            await coordinator.on_file_changed()
            response = await client.get("/")

        assert response.status == 200
        assert "render 1" in _text(response)


class TestAssetsRoute:
    """GET /assets/{path} — contained files only."""

    @pytest.mark.asyncio
    async def test_serves_existing_asset(
        self, doc: Path, coordinator: ReloadCoordinator
    ) -> None:
        app = _make_app(doc, coordinator)
        async with TestClient(app) as client:
            response = await client.get("/assets/img/logo.png")
        assert response.status == 200
        body = response.body if isinstance(response.body, bytes) else response.body.encode()
        assert body.endswith(b"fake")

    @pytest.mark.asyncio
    async def test_missing_asset_is_404(self, doc: Path, coordinator: ReloadCoordinator) -> None:
        app = _make_app(doc, coordinator)
        async with TestClient(app) as client:
            response = await client.get("/assets/img/nope.png")
        assert response.status == 404

    @pytest.mark.asyncio
    async def test_traversal_is_403(
        self, doc: Path, coordinator: ReloadCoordinator, tmp_path: Path
    ) -> None:
        app = _make_app(doc, coordinator)
        async with TestClient(app) as client:
            literal = await client.get("/assets/../../etc/passwd")
        assert literal.status == 403
        assert "root:" not in _text(literal)

    @pytest.mark.asyncio
    async def test_handler_does_not_decode_again(
        self, doc: Path, coordinator: ReloadCoordinator
    ) -> None:
        # The test client hands the path over as-is, like Pounce after its
        # single decode, so "%2e%2e" here is a literal file name.
        (doc.parent / "a%41.png").write_bytes(b"literal")
        app = _make_app(doc, coordinator)
        async with TestClient(app) as client:
            named = await client.get("/assets/a%41.png")
            dotted = await client.get("/assets/%2e%2e/%2e%2e/etc/passwd")
        assert named.status == 200
        body = named.body if isinstance(named.body, bytes) else named.body.encode()
        assert body == b"literal"
        assert dotted.status == 404


class TestEventsRoute:
    """GET /events — one reload event per successful re-render."""

    @pytest.mark.asyncio
    async def test_not_registered_without_live_reload(
        self, doc: Path, coordinator: ReloadCoordinator
    ) -> None:
        app = _make_app(doc, coordinator)
        async with TestClient(app) as client:
            response = await client.get("/events")
        assert response.status == 404

    @pytest.mark.asyncio
    async def test_reload_event_streamed(self, doc: Path) -> None:
        renderer = FakeRenderer()
        coordinator = ReloadCoordinator(doc, renderer=renderer)
        coordinator.initialize()
        app = _make_app(doc, coordinator, live_reload=True)

        async def rerender_once_subscribed() -> None:
            while coordinator.subscriber_count == 0:
                await asyncio.sleep(0.01)
            await coordinator.on_file_changed()

        async with TestClient(app) as client:
            pusher = asyncio.create_task(rerender_once_subscribed())
            result = await client.sse("/events", max_events=1, disconnect_after=5.0)
            await asyncio.wait_for(pusher, timeout=5.0)

        assert result.status == 200
        assert len(result.events) == 1
        assert result.events[0].data == "reload"
        assert result.events[0].id == "2"

    @pytest.mark.asyncio
    async def test_viewer_removed_on_disconnect(
        self, doc: Path, coordinator: ReloadCoordinator
    ) -> None:
        app = _make_app(doc, coordinator, live_reload=True)
        async with TestClient(app) as client:
            await client.sse("/events", max_events=1, disconnect_after=0.2)

        for _ in range(100):
            if coordinator.subscriber_count == 0:
                break
            await asyncio.sleep(0.01)
        assert coordinator.subscriber_count == 0


class TestStatsRoute:
    """GET /__mdserve/stats — event-log summary."""

    @pytest.mark.asyncio
    async def test_stats_json(self, doc: Path) -> None:
        collector = ServeCollector(EventLog())
        coordinator = ReloadCoordinator(doc, collector=collector)
        coordinator.initialize()
        app = _make_app(doc, coordinator, collector=collector)

        async with TestClient(app) as client:
            response = await client.get("/__mdserve/stats")

        assert response.status == 200
        data = response.json
        assert data["document"]["file"] == "README.md"
        assert data["document"]["version"] == 1
        assert data["event_log"]["by_type"]["DocumentRendered"] == 1
        assert data["document"]["last_render_ms"] >= 0
        assert data["event_log"]["evicted"] == 0
