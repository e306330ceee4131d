"""Observability — structured event log for the render-serve-watch loop.

Aggregates events from:
- **Pounce**: Connection lifecycle (open, request, response, disconnect, close)
- **Coordinator**: Renders, render failures, reload broadcasts, viewers
- **Watcher**: Watch errors

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from multiple threads.

Quick Start:
    >>> from mdserve.observability import ServeCollector, EventLog
    >>> log = EventLog()
    >>> collector = ServeCollector(log)
    >>> # Pass collector to Pounce as lifecycle_collector
    >>> # The coordinator records events via collector.record_render(...)

"""

from mdserve.observability.collector import ServeCollector
from mdserve.observability.events import (
    DocumentRendered,
    ReloadBroadcast,
    RenderFailed,
    ServeEvent,
    ViewerConnected,
    ViewerDisconnected,
    WatchFailed,
    now_ns,
)
from mdserve.observability.log import EventLog

__all__ = [
    "DocumentRendered",
    "EventLog",
    "ReloadBroadcast",
    "RenderFailed",
    "ServeCollector",
    "ServeEvent",
    "ViewerConnected",
    "ViewerDisconnected",
    "WatchFailed",
    "now_ns",
]
