"""Event log for one server run.

Holds the most recent ``ServeEvent`` records produced by the coordinator
and the watcher, interleaved with the ``LifecycleEvent`` records Pounce
emits for each connection.  Once full, every new record pushes out the
oldest one and the push-out is counted, so ``/__mdserve/stats`` can tell a
quiet server from one whose history has rolled over.

Thread Safety:
    Renders finish on worker threads while Pounce records connection
    events on the event loop; every method takes the same lock.

"""

from __future__ import annotations

import threading
from collections import Counter, deque
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pounce.lifecycle import LifecycleEvent

    from mdserve.observability.events import ServeEvent

type LoggedEvent = ServeEvent | LifecycleEvent


class EventLog:
    """Capacity-bounded, most-recent-wins store of logged events.

    Args:
        capacity: How many records to keep before the oldest are evicted.

    """

    __slots__ = ("_capacity", "_evicted", "_lock", "_records")

    def __init__(self, capacity: int = 5_000) -> None:
        if capacity < 1:
            msg = f"EventLog capacity must be at least 1, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._records: deque[LoggedEvent] = deque(maxlen=capacity)
        self._evicted = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, event: LoggedEvent) -> None:
        with self._lock:
            if len(self._records) == self._capacity:
                self._evicted += 1
            self._records.append(event)

    def query[E](self, event_type: type[E], *, limit: int | None = None) -> list[E]:
        """Return logged events of *event_type*, newest first.

        Args:
            event_type: Event class to select (subclasses match too).
            limit: Stop after this many matches; ``None`` returns them all.

        """
        with self._lock:
            snapshot = tuple(self._records)

        matches: list[E] = []
        for event in reversed(snapshot):
            if isinstance(event, event_type):
                matches.append(event)
                if limit is not None and len(matches) == limit:
                    break
        return matches

    def latest[E](self, event_type: type[E]) -> E | None:
        """The most recent event of *event_type*, if any was logged."""
        found = self.query(event_type, limit=1)
        return found[0] if found else None

    def recent(self, n: int = 20) -> list[LoggedEvent]:
        """The last *n* events in the order they were logged."""
        if n <= 0:
            return []
        with self._lock:
            return list(self._records)[-n:]

    def clear(self) -> int:
        """Drop every record; returns how many were held."""
        with self._lock:
            held = len(self._records)
            self._records.clear()
            self._evicted = 0
            return held

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def stats(self) -> dict[str, Any]:
        """Counts per event class plus capacity and eviction figures."""
        with self._lock:
            by_type = Counter(type(event).__name__ for event in self._records)
            held = len(self._records)
            evicted = self._evicted

        return {
            "total": held,
            "capacity": self._capacity,
            "evicted": evicted,
            "by_type": dict(by_type),
        }
