"""Snapshot store — the one current rendering of the document.

A snapshot is replaced wholesale after every successful render and never
mutated, so readers only ever see a completed render.  ``get()`` never waits
on a render in flight: the lock is held for a reference swap only.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Snapshot:
    """One completed rendering of the document.

    Attributes:
        html: Rendered document body (HTML fragment, no page shell).
        version: Ordering token, 1 for the initial render, +1 per re-render.
        rendered_at_ns: Monotonic timestamp of the render (informational).

    """

    html: str
    version: int
    rendered_at_ns: int = field(default_factory=time.monotonic_ns)


class SnapshotStore:
    """Holds the current snapshot plus the document file name.

    Thread-safe: the current reference is swapped under a lock.

    """

    __slots__ = ("_filename", "_lock", "_snapshot")

    def __init__(self, filename: str) -> None:
        self._filename = filename
        self._snapshot: Snapshot | None = None
        self._lock = threading.Lock()

    @property
    def filename(self) -> str:
        """Document file name, used for the page title."""
        return self._filename

    def get(self) -> Snapshot | None:
        """Return the current snapshot (None before the first render)."""
        with self._lock:
            return self._snapshot

    def set(self, snapshot: Snapshot) -> None:
        """Replace the current snapshot."""
        with self._lock:
            self._snapshot = snapshot
