"""Where the controller looks when deciding each tick.

``CachedView`` answers from the last snapshot the mirror received, so a
tick may act once on stale data while a remote write is still on its way.
``FreshView`` pays for a point read on every call instead.
"""

from typing import Optional

from gitwars.store import DocumentStore
from .mirror import StateMirror
from .state import TimerState


class CachedView:

    def __init__(self, mirror: StateMirror):
        self.mirror = mirror

    def read(self) -> Optional[TimerState]:
        return self.mirror.cache


class FreshView:

    def __init__(self, store: DocumentStore, path: str):
        self.store = store
        self.path = path

    def read(self) -> Optional[TimerState]:
        snapshot = self.store.get(self.path)
        if not snapshot.exists:
            return None
        return TimerState.from_fields(snapshot.data)


def make_view(mode: str, mirror: StateMirror, store: DocumentStore, path: str):
    if mode == 'cached':
        return CachedView(mirror)
    if mode == 'fresh':
        return FreshView(store, path)
    raise ValueError(f"Unknown timer consistency mode: {mode!r}")
