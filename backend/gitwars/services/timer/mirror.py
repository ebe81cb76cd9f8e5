import logging
from typing import Callable, List, Optional

from gitwars.store import DocumentExists, DocumentStore, Snapshot, StoreError, Subscription
from .state import DEFAULT_DURATION_SEC, TimerState


logger = logging.getLogger(__name__)


class StateMirror:
    """Keeps a local copy of the shared timer record in sync with the store.

    Each snapshot replaces the cache wholesale. A missing record is created
    with defaults. After every update the display callback and any watchers
    see the new state.
    """

    def __init__(self, store: DocumentStore, path: str,
                 on_display: Optional[Callable[[int], None]] = None,
                 default_duration: int = DEFAULT_DURATION_SEC):
        self.store = store
        self.path = path
        self.on_display = on_display
        self.default_duration = default_duration
        self._cache: Optional[TimerState] = None
        self._watchers: List[Callable[[TimerState], None]] = []
        self._subscription: Optional[Subscription] = None

    @property
    def cache(self) -> Optional[TimerState]:
        return self._cache

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def watch(self, fn: Callable[[TimerState], None]) -> None:
        self._watchers.append(fn)

    def start(self) -> bool:
        if self.subscribed:
            return True
        try:
            self._subscription = self.store.subscribe(self.path, self._on_snapshot)
        except StoreError as exc:
            # No retry: the display keeps whatever it showed last
            logger.error(f"[mirror-subscribe-failed] path={self.path} error={exc}")
            self._subscription = None
            return False
        return True

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_snapshot(self, snapshot: Snapshot) -> None:
        if not snapshot.exists:
            self._create_default()
            return
        state = TimerState.from_fields(snapshot.data)
        self._cache = state
        if self.on_display is not None:
            self.on_display(state.timer)
        for fn in list(self._watchers):
            fn(state)

    def _create_default(self) -> None:
        defaults = TimerState.default(self.default_duration)
        try:
            self.store.create(self.path, defaults.to_fields())
            logger.info(f"[mirror-init] created {self.path} with timer={defaults.timer}")
        except DocumentExists:
            logger.debug(f"[mirror-init] {self.path} created concurrently by another client")
        except StoreError as exc:
            logger.error(f"[mirror-init-failed] path={self.path} error={exc}")
