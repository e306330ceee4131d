"""Reload coordinator — render, store, and fan out.

Connects the pieces of the live-reload loop:
    1. FileWatcher signals a settled change
    2. The document is re-rendered off the event loop
    3. The snapshot store is replaced (never partially)
    4. Every open viewer gets one ``reload`` event
    5. ``on_reload`` subscribers receive the new snapshot

Re-renders never overlap.  A change that arrives while a render is running
only sets a pending flag; when the render finishes exactly one more render
runs, however many changes arrived in between.

State machine::

    uninitialized --initialize()--> ready
    ready: idle <--> rendering   (pending flag consumed on return to idle)

"""

from __future__ import annotations

import asyncio
import inspect
import sys
import threading
import time
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from mdserve._errors import RenderError, StartupError, WatchError
from mdserve.config import DEFAULT_MAX_FILE_SIZE
from mdserve.reactive.broadcaster import Broadcaster
from mdserve.reactive.snapshot import Snapshot, SnapshotStore

if TYPE_CHECKING:
    from mdserve._types import CoordinatorState, ReloadHandler, Renderer
    from mdserve.content.watcher import FileWatcher
    from mdserve.observability.collector import ServeCollector
    from mdserve.reactive.broadcaster import ViewerConnection


class ReloadCoordinator:
    """Owns the current snapshot and the viewer set for one document.

    Args:
        path: The Markdown document.
        renderer: ``Path -> HTML`` function; defaults to ``render_markdown``.
        max_file_size: Size limit passed to the default renderer.
        highlight: Syntax highlighting for the default renderer.
        collector: Optional event collector for observability.

    """

    def __init__(
        self,
        path: Path | str,
        *,
        renderer: Renderer | None = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        highlight: bool = True,
        collector: ServeCollector | None = None,
    ) -> None:
        self._path = Path(path).resolve()
        if renderer is None:
            from mdserve.content.renderer import render_markdown

            renderer = partial(render_markdown, max_size=max_file_size, highlight=highlight)
        self._renderer = renderer
        self._collector = collector
        self._store = SnapshotStore(self._path.name)
        self._broadcaster = Broadcaster()
        self._reload_handlers: list[ReloadHandler] = []
        self._watcher: FileWatcher | None = None

        # Render state flags; only mutated under the lock.
        self._state_lock = threading.Lock()
        self._rendering = False
        self._pending = False

    # ----- Properties -----

    @property
    def path(self) -> Path:
        """Absolute path of the document."""
        return self._path

    @property
    def filename(self) -> str:
        """Document file name (page title)."""
        return self._store.filename

    @property
    def state(self) -> CoordinatorState:
        """``"uninitialized"`` until the first render succeeded, then ``"ready"``."""
        return "ready" if self._store.get() is not None else "uninitialized"

    @property
    def is_rendering(self) -> bool:
        """Whether a re-render is in flight."""
        with self._state_lock:
            return self._rendering

    @property
    def subscriber_count(self) -> int:
        """Number of open viewer connections."""
        return self._broadcaster.subscriber_count

    @property
    def broadcaster(self) -> Broadcaster:
        """The viewer set (used by the SSE route to drain connections)."""
        return self._broadcaster

    # ----- Startup -----

    def initialize(self) -> Snapshot:
        """Render the document for the first time.

        Blocking.  The server must not accept requests before this returns.
        Calling it again once ready returns the current snapshot.

        Raises:
            StartupError: If the first render fails.

        """
        current = self._store.get()
        if current is not None:
            return current

        start = time.perf_counter()
        try:
            html = self._renderer(self._path)
        except RenderError as exc:
            msg = f"Failed to render {self._path.name}: {exc}"
            raise StartupError(msg) from exc

        snapshot = Snapshot(html=html, version=1)
        self._store.set(snapshot)
        self._record_render(snapshot, start)
        return snapshot

    def current_snapshot(self) -> Snapshot:
        """Return the latest completed render.  Never renders, never waits.

        Raises:
            RuntimeError: If called before ``initialize()``.

        """
        snapshot = self._store.get()
        if snapshot is None:
            msg = "ReloadCoordinator.initialize() must be called first"
            raise RuntimeError(msg)
        return snapshot

    # ----- Change handling -----

    async def on_file_changed(self) -> None:
        """Handle a ``changed`` signal from the watcher.

        Starts a render if idle; otherwise marks one more render as pending
        and returns immediately.

        """
        if self.state != "ready":
            return

        with self._state_lock:
            if self._rendering:
                self._pending = True
                return
            self._rendering = True

        try:
            while True:
                await self._rerender_once()
                with self._state_lock:
                    if not self._pending:
                        self._rendering = False
                        return
                    self._pending = False
        except BaseException:
            with self._state_lock:
                self._rendering = False
                self._pending = False
            raise

    async def _rerender_once(self) -> None:
        previous = self.current_snapshot()
        start = time.perf_counter()
        try:
            html = await asyncio.to_thread(self._renderer, self._path)
        except RenderError as exc:
            print(f"  Render error: {self._path.name}: {exc}", file=sys.stderr)
            if self._collector is not None:
                self._collector.record_render_failure(str(self._path), exc)
            return

        snapshot = Snapshot(html=html, version=previous.version + 1)
        self._store.set(snapshot)
        self._record_render(snapshot, start)

        notified = self.notify_all()
        await self._run_reload_handlers(snapshot)

        elapsed_ms = (time.perf_counter() - start) * 1000
        print(
            f"  Reloaded {self._path.name} (v{snapshot.version}, {elapsed_ms:.0f}ms, "
            f"{notified} viewer{'s' if notified != 1 else ''})",
            file=sys.stderr,
        )

    def _record_render(self, snapshot: Snapshot, start: float) -> None:
        if self._collector is None:
            return
        self._collector.record_render(
            str(self._path),
            version=snapshot.version,
            size_bytes=len(snapshot.html.encode("utf-8")),
            render_ms=(time.perf_counter() - start) * 1000,
        )

    async def _run_reload_handlers(self, snapshot: Snapshot) -> None:
        for handler in tuple(self._reload_handlers):
            try:
                result = handler(snapshot)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                name = getattr(handler, "__qualname__", repr(handler))
                print(f"  Reload handler {name} failed: {exc}", file=sys.stderr)

    # ----- Viewers -----

    def subscribe(self) -> ViewerConnection:
        """Open a viewer connection.  The caller must ``unsubscribe`` on close."""
        conn = self._broadcaster.subscribe()
        if self._collector is not None:
            self._collector.record_viewer_connected(conn.client_id)
        return conn

    def unsubscribe(self, conn: ViewerConnection) -> None:
        """Remove a viewer connection.  Idempotent."""
        removed = self._broadcaster.unsubscribe(conn)
        if removed and self._collector is not None:
            self._collector.record_viewer_disconnected(conn.client_id)

    def notify_all(self) -> int:
        """Send a reload signal to every open viewer.

        A viewer that cannot take the signal is removed; the rest are still
        notified.

        Returns:
            Number of viewers reached.

        """
        version = self.current_snapshot().version
        notified, dropped = self._broadcaster.push_reload(version)
        if self._collector is not None:
            self._collector.record_broadcast(
                version, viewers_notified=notified, viewers_dropped=len(dropped),
            )
            for conn in dropped:
                self._collector.record_viewer_disconnected(conn.client_id)
        return notified

    def on_reload(self, handler: ReloadHandler) -> None:
        """Subscribe to successful re-renders; *handler* gets the new snapshot."""
        self._reload_handlers.append(handler)

    # ----- Watcher -----

    def watch(self, watcher: FileWatcher) -> None:
        """Attach a watcher: re-render on change, report watch errors."""
        self._watcher = watcher
        watcher.on_changed(self.on_file_changed)
        watcher.on_error(self._on_watch_error)

    def _on_watch_error(self, error: WatchError) -> None:
        print(f"  Watch error: {error}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_watch_error(str(self._path), error)

    # ----- Shutdown -----

    async def shutdown(self) -> None:
        """Stop the attached watcher and close every viewer."""
        if self._watcher is not None:
            await self._watcher.stop()
        for conn in self._broadcaster.close_all():
            if self._collector is not None:
                self._collector.record_viewer_disconnected(conn.client_id)
