"""File watcher — signals one ``changed`` event per settled edit.

Watches the document's parent directory (non-recursive) with watchfiles,
filtered to the document's file name, so editors that save by writing a temp
file and renaming it over the original are still seen.

Debounce happens in two stages:

- watchfiles groups raw events until no new event arrived for ``step`` ms
- the file size and mtime are then polled until they stay unchanged for the
  stability window, so a large file still being written produces a single
  signal

Raw events that queue up inside watchfiles while a settle is running are
already covered by that settle.  The settled stat is remembered at emit time
and a later batch that settles on the same stat emits nothing.

The watcher never reads the file content and never crashes the process:
backend failures and a vanished file are reported through ``on_error``.
"""

from __future__ import annotations

import asyncio
import inspect
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import awatch

from mdserve._errors import WatchError

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from watchfiles import Change

    from mdserve._types import ChangedHandler, WatchErrorHandler


class FileWatcher:
    """Watches one file and notifies subscribers after each settled write.

    Args:
        path: The file to watch (resolved to an absolute path).
        stability_ms: Quiet period the file size must stay unchanged.
        poll_interval_ms: How often the size is polled while settling.

    """

    def __init__(
        self,
        path: Path | str,
        *,
        stability_ms: int = 100,
        poll_interval_ms: int = 100,
    ) -> None:
        self._path = Path(path).resolve()
        self._stability_ms = stability_ms
        self._poll_interval_ms = poll_interval_ms
        self._changed_handlers: list[ChangedHandler] = []
        self._error_handlers: list[WatchErrorHandler] = []
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None
        self._handler_tasks: set[asyncio.Task[None]] = set()
        self._last_emitted: tuple[int, int] | None = None

    @property
    def path(self) -> Path:
        """The absolute path being watched."""
        return self._path

    @property
    def is_running(self) -> bool:
        """Whether the watch task is active."""
        return self._task is not None and not self._task.done()

    # ----- Subscriptions -----

    def on_changed(self, handler: ChangedHandler) -> None:
        """Register a callback for settled changes (sync or async, no args)."""
        self._changed_handlers.append(handler)

    def on_error(self, handler: WatchErrorHandler) -> None:
        """Register a callback receiving ``WatchError`` instances."""
        self._error_handlers.append(handler)

    # ----- Lifecycle -----

    def start(self) -> None:
        """Start watching.  Must be called from a running event loop.

        Raises:
            WatchError: If the file does not exist or is not readable.

        """
        if self.is_running:
            return

        if not self._path.is_file() or not os.access(self._path, os.R_OK):
            msg = f"Cannot watch {self._path}: file not found or not readable"
            raise WatchError(msg)

        loop = asyncio.get_running_loop()
        self._last_emitted = None
        self._stop_event = asyncio.Event()
        self._task = loop.create_task(self._watch_loop(), name="mdserve-watcher")

    async def stop(self) -> None:
        """Release the watch.  Safe when never started or already stopped."""
        if self._stop_event is not None:
            self._stop_event.set()

        pending = [t for t in (self._task, *self._handler_tasks) if t is not None]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        self._task = None
        self._stop_event = None
        self._handler_tasks.clear()

    # ----- Internals -----

    def _matches(self, change: Change, path: str) -> bool:
        """watchfiles filter: only events for the watched file name."""
        return os.path.basename(path) == self._path.name

    async def _watch_loop(self) -> None:
        assert self._stop_event is not None
        try:
            async for _changes in awatch(
                self._path.parent,
                watch_filter=self._matches,
                step=self._stability_ms,
                stop_event=self._stop_event,
                recursive=False,
            ):
                settled = await self._await_write_finish()
                if settled is None:
                    self._last_emitted = None
                    msg = f"{self._path.name} was removed; waiting for it to reappear"
                    self._spawn(self._emit_error(WatchError(msg)))
                elif settled != self._last_emitted:
                    self._last_emitted = settled
                    self._spawn(self._emit_changed())
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error = WatchError(f"File watcher failed: {exc}")
            error.__cause__ = exc
            await self._emit_error(error)

    def _file_stat(self) -> tuple[int, int] | None:
        try:
            st = self._path.stat()
        except OSError:
            return None
        return st.st_size, st.st_mtime_ns

    async def _await_write_finish(self) -> tuple[int, int] | None:
        """Poll size and mtime until both hold still for the stability window.

        Returns the settled ``(size, mtime_ns)``, or None if the file is
        still missing at the end of the window.
        """
        interval = self._poll_interval_ms / 1000
        window = self._stability_ms / 1000
        last = self._file_stat()
        stable_for = 0.0
        while stable_for < window:
            await asyncio.sleep(interval)
            current = self._file_stat()
            if current == last:
                stable_for += interval
            else:
                stable_for = 0.0
                last = current
        return last

    def _spawn(self, coro: Coroutine[None, None, None]) -> None:
        # The watch loop never awaits handlers directly
        task = asyncio.ensure_future(coro)
        self._handler_tasks.add(task)
        task.add_done_callback(self._handler_tasks.discard)

    async def _emit_changed(self) -> None:
        for handler in tuple(self._changed_handlers):
            await _call_handler(handler)

    async def _emit_error(self, error: WatchError) -> None:
        for handler in tuple(self._error_handlers):
            await _call_handler(handler, error)


async def _call_handler(handler: object, *args: object) -> None:
    """Invoke a sync or async handler; report failures without stopping."""
    try:
        result = handler(*args)  # type: ignore[operator]
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        name = getattr(handler, "__qualname__", repr(handler))
        print(f"  Watch handler {name} failed: {exc}", file=sys.stderr)
