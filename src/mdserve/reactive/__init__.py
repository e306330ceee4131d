"""Reactive layer — snapshot, viewer fan-out and the reload loop.

Connects document changes to browser reloads through the snapshot store and
SSE broadcasting.
"""

from mdserve.reactive.broadcaster import Broadcaster, ViewerConnection
from mdserve.reactive.coordinator import ReloadCoordinator
from mdserve.reactive.snapshot import Snapshot, SnapshotStore

__all__ = [
    "Broadcaster",
    "ReloadCoordinator",
    "Snapshot",
    "SnapshotStore",
    "ViewerConnection",
]
