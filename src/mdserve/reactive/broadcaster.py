"""SSE broadcaster — pushes reload signals to connected browser tabs.

Every open tab holds one ``ViewerConnection`` with a bounded queue.  The
HTTP layer drains that queue through Chirp's ``EventStream``; the broadcaster
only enqueues.  A viewer whose queue cannot take another event is dropped
without affecting delivery to the others.
"""

from __future__ import annotations

import asyncio
import threading
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from mdserve._errors import DeliveryError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

# Pending reload signals a single tab may hold before it counts as stuck
VIEWER_QUEUE_SIZE = 16


def _new_client_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(slots=True, eq=False)
class ViewerConnection:
    """One live-reload channel (one per browser tab).

    Identity-hashed so the viewer set is keyed by connection, not by value.

    Attributes:
        client_id: Unique identifier for this connection.
        queue: Bounded queue drained by the SSE response generator.
        closed: True once the connection was removed.

    """

    client_id: str = field(default_factory=_new_client_id)
    queue: asyncio.Queue[Any] = field(
        default_factory=lambda: asyncio.Queue(maxsize=VIEWER_QUEUE_SIZE)
    )
    closed: bool = False

    def deliver(self, event: Any) -> None:
        """Enqueue *event* without waiting.

        Raises:
            DeliveryError: If the connection is closed or its queue is full.

        """
        if self.closed:
            msg = f"Viewer {self.client_id} is closed"
            raise DeliveryError(msg)
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull as exc:
            msg = f"Viewer {self.client_id} is not keeping up"
            raise DeliveryError(msg) from exc

    def close(self) -> None:
        """Mark closed and wake the generator so the stream ends."""
        if self.closed:
            return
        self.closed = True
        try:
            self.queue.put_nowait(None)
        except asyncio.QueueFull:
            # Generator checks ``closed`` after every event
            pass


class Broadcaster:
    """Manages the set of viewer connections and fans out reload events.

    Thread-safe: the viewer set is protected by a lock and iterated over a
    snapshot copy.

    """

    def __init__(self) -> None:
        self._viewers: set[ViewerConnection] = set()
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        """Number of open viewer connections."""
        with self._lock:
            return len(self._viewers)

    def subscribe(self, conn: ViewerConnection | None = None) -> ViewerConnection:
        """Register a viewer (creating one when not given) and return it."""
        if conn is None:
            conn = ViewerConnection()
        with self._lock:
            self._viewers.add(conn)
        return conn

    def unsubscribe(self, conn: ViewerConnection) -> bool:
        """Remove a viewer.  Idempotent; returns True if it was registered."""
        with self._lock:
            present = conn in self._viewers
            self._viewers.discard(conn)
        conn.close()
        return present

    def get_subscribers(self) -> frozenset[ViewerConnection]:
        """Snapshot of the viewer set (no lock held on return)."""
        with self._lock:
            return frozenset(self._viewers)

    def push_reload(self, version: int) -> tuple[int, tuple[ViewerConnection, ...]]:
        """Send a ``reload`` event to every viewer.

        Viewers that cannot take the event are unsubscribed.

        Returns:
            The number of viewers notified and the connections evicted.

        """
        from chirp import SSEEvent

        event = SSEEvent(data="reload", id=str(version))
        notified = 0
        dropped: list[ViewerConnection] = []
        for conn in self.get_subscribers():
            try:
                conn.deliver(event)
            except DeliveryError:
                self.unsubscribe(conn)
                dropped.append(conn)
            else:
                notified += 1
        return notified, tuple(dropped)

    def close_all(self) -> tuple[ViewerConnection, ...]:
        """Close and remove every viewer.  Returns the closed connections."""
        with self._lock:
            viewers = tuple(self._viewers)
            self._viewers.clear()
        for conn in viewers:
            conn.close()
        return viewers

    async def client_generator(self, conn: ViewerConnection) -> AsyncIterator[Any]:
        """Async generator that yields events from a connection's queue.

        Used as the generator for Chirp's ``EventStream``.  Ends when the
        connection is closed.  ``CancelledError`` (client disconnect) and
        ``GeneratorExit`` end the stream quietly.

        """
        try:
            while not conn.closed:
                event = await conn.queue.get()
                if event is None or conn.closed:
                    return
                yield event
        except (asyncio.CancelledError, GeneratorExit):
            return
