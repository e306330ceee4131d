"""Shared type definitions for mdserve."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from pathlib import Path

    from mdserve._errors import WatchError
    from mdserve.reactive.snapshot import Snapshot

# Rendered HTML fragment (document body, no page shell)
type HtmlFragment = str

# Coordinator lifecycle
type CoordinatorState = Literal["uninitialized", "ready"]

# Pure renderer: absolute document path -> HTML fragment
type Renderer = Callable[[Path], HtmlFragment]

# Notifier callbacks (sync or async)
type ChangedHandler = Callable[[], Awaitable[None] | None]
type WatchErrorHandler = Callable[[WatchError], Awaitable[None] | None]

# Coordinator -> transport callback
type ReloadHandler = Callable[[Snapshot], Awaitable[None] | None]
