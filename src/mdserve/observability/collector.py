"""Serve collector — records render, reload and watch events.

Implements Pounce's ``LifecycleCollector`` protocol so it can be passed
directly to the Pounce server.  Also provides methods for recording
coordinator and watcher events.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent use from the event loop and render threads.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mdserve.observability.events import (
    DocumentRendered,
    ReloadBroadcast,
    RenderFailed,
    ViewerConnected,
    ViewerDisconnected,
    WatchFailed,
    now_ns,
)
from mdserve.observability.log import EventLog

if TYPE_CHECKING:
    from pounce.lifecycle import LifecycleEvent


class ServeCollector:
    """Event collector for one server instance.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Pounce LifecycleCollector protocol -----

    def record(self, event: LifecycleEvent) -> None:
        """Record a Pounce lifecycle event (frozen dataclass, stored as-is)."""
        self._log.append(event)

    # ----- Render events -----

    def record_render(
        self,
        path: str,
        *,
        version: int,
        size_bytes: int = 0,
        render_ms: float = 0.0,
    ) -> None:
        """Record a successful render."""
        self._log.append(
            DocumentRendered(
                path=path,
                version=version,
                size_bytes=size_bytes,
                render_ms=render_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_render_failure(self, path: str, error: BaseException) -> None:
        """Record a failed re-render."""
        self._log.append(RenderFailed(path=path, error=str(error), timestamp_ns=now_ns()))

    # ----- Live-reload events -----

    def record_broadcast(
        self,
        version: int,
        *,
        viewers_notified: int = 0,
        viewers_dropped: int = 0,
    ) -> None:
        """Record a reload fan-out."""
        self._log.append(
            ReloadBroadcast(
                version=version,
                viewers_notified=viewers_notified,
                viewers_dropped=viewers_dropped,
                timestamp_ns=now_ns(),
            )
        )

    def record_viewer_connected(self, client_id: str) -> None:
        self._log.append(ViewerConnected(client_id=client_id, timestamp_ns=now_ns()))

    def record_viewer_disconnected(self, client_id: str) -> None:
        self._log.append(ViewerDisconnected(client_id=client_id, timestamp_ns=now_ns()))

    # ----- Watch events -----

    def record_watch_error(self, path: str, error: BaseException) -> None:
        """Record a watcher error."""
        self._log.append(WatchFailed(path=path, error=str(error), timestamp_ns=now_ns()))
