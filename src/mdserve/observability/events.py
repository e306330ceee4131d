"""Event model for the render-serve-watch loop.

Pounce lifecycle events are stored as-is next to these.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Render events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DocumentRendered:
    """The document was rendered and published as a new snapshot.

    Attributes:
        path: Absolute path to the document.
        version: Version of the published snapshot.
        size_bytes: Size of the rendered HTML fragment in bytes.
        render_ms: Time spent rendering in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    version: int
    size_bytes: int
    render_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RenderFailed:
    """A re-render failed; the previous snapshot stays in place."""

    path: str
    error: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Live-reload events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReloadBroadcast:
    """A reload notification was fanned out to connected viewers.

    Attributes:
        version: Snapshot version the viewers were told about.
        viewers_notified: Viewers that accepted the notification.
        viewers_dropped: Viewers evicted because delivery failed.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    version: int
    viewers_notified: int
    viewers_dropped: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ViewerConnected:
    """A browser tab opened the live-reload stream."""

    client_id: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ViewerDisconnected:
    """A browser tab's live-reload stream was closed or evicted."""

    client_id: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Watch events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WatchFailed:
    """The file watcher reported an error."""

    path: str
    error: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type ServeEvent = (
    DocumentRendered
    | RenderFailed
    | ReloadBroadcast
    | ViewerConnected
    | ViewerDisconnected
    | WatchFailed
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
