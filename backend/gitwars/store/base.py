"""Document store contract shared by every backend.

A store holds JSON-like documents addressed by ``collection/doc_id`` paths.
Besides plain reads and writes it offers push subscriptions: a subscriber
gets one snapshot immediately and one more after every write to the path,
in the order the store applied the writes.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple


logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for document store failures."""


class DocumentNotFound(StoreError):
    pass


class DocumentExists(StoreError):
    pass


class PermissionDenied(StoreError):
    pass


class InvalidPath(StoreError):
    pass


@dataclass
class Snapshot:
    path: str
    exists: bool
    data: Dict[str, Any] = field(default_factory=dict)
    # Position of the write that produced this snapshot in the path's apply order
    version: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'path': self.path, 'exists': self.exists, 'data': dict(self.data)}


SnapshotCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[[StoreError], None]


def split_path(path: str) -> Tuple[str, str]:
    parts = (path or '').split('/')
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise InvalidPath(f"Expected 'collection/doc_id', got {path!r}")
    return parts[0], parts[1]


class Subscription:
    """Handle returned by :meth:`DocumentStore.subscribe`.

    Deliveries are serialised per subscription and never go backwards: a
    snapshot older than the last one handed to the callback is dropped.
    """

    def __init__(self, store: 'DocumentStore', path: str, callback: SnapshotCallback):
        self.store = store
        self.path = path
        self.callback = callback
        self.active = True
        self.last_version = -1
        self._deliver_lock = threading.RLock()

    def deliver(self, snapshot: Snapshot) -> bool:
        with self._deliver_lock:
            if not self.active or snapshot.version <= self.last_version:
                return False
            self.last_version = snapshot.version
            self.callback(snapshot)
            return True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self.store._remove(self)


class DocumentStore:
    """Abstract store. Subclasses implement the ``_read``/``_write`` primitives."""

    def __init__(self, collections: Optional[Iterable[str]] = None):
        # None means every collection is accessible
        self.collections = set(collections) if collections is not None else None
        self._subscribers: Dict[str, List[Subscription]] = {}
        self._versions: Dict[str, int] = {}
        self._lock = threading.RLock()

    # ---- access control ----

    def check_access(self, path: str) -> None:
        collection, _ = split_path(path)
        if self.collections is not None and collection not in self.collections:
            raise PermissionDenied(f"Access to collection '{collection}' is denied")

    # ---- public API ----

    def subscribe(self, path: str, on_snapshot: SnapshotCallback,
                  on_error: Optional[ErrorCallback] = None) -> Subscription:
        sub = Subscription(self, path, on_snapshot)
        # Register under the lock so no write slips between the read and the registration
        with self._lock:
            try:
                self.check_access(path)
                initial = self._read(path)
            except StoreError as exc:
                if on_error is not None:
                    on_error(exc)
                raise
            initial.version = self._versions.get(path, 0)
            self._subscribers.setdefault(path, []).append(sub)
        sub.deliver(initial)
        return sub

    def get(self, path: str) -> Snapshot:
        self.check_access(path)
        with self._lock:
            snapshot = self._read(path)
            snapshot.version = self._versions.get(path, 0)
        return snapshot

    def create(self, path: str, fields: Dict[str, Any]) -> Snapshot:
        self.check_access(path)
        with self._lock:
            snapshot = self._stamp(self._create(path, dict(fields)))
        self._notify(snapshot)
        return snapshot

    def update(self, path: str, fields: Dict[str, Any]) -> Snapshot:
        self.check_access(path)
        with self._lock:
            snapshot = self._stamp(self._update(path, dict(fields)))
        self._notify(snapshot)
        return snapshot

    def increment(self, path: str, field_name: str, delta: int,
                  floor: Optional[int] = None) -> Snapshot:
        """Atomically add ``delta`` to a numeric field.

        With ``floor`` set the result is clamped so it never drops below it.
        """
        self.check_access(path)
        with self._lock:
            snapshot = self._stamp(self._increment(path, field_name, delta, floor))
        self._notify(snapshot)
        return snapshot

    def subscriber_count(self, path: str) -> int:
        with self._lock:
            return len(self._subscribers.get(path, []))

    # ---- fan-out ----

    def _stamp(self, snapshot: Snapshot) -> Snapshot:
        # Called under the write lock, so versions follow apply order
        version = self._versions.get(snapshot.path, 0) + 1
        self._versions[snapshot.path] = version
        snapshot.version = version
        return snapshot

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subscribers.get(sub.path, [])
            if sub in subs:
                subs.remove(sub)
            if not subs:
                self._subscribers.pop(sub.path, None)

    def _notify(self, snapshot: Snapshot) -> None:
        with self._lock:
            subs = list(self._subscribers.get(snapshot.path, []))
        for sub in subs:
            self._dispatch(sub, snapshot)

    def _dispatch(self, sub: Subscription, snapshot: Snapshot) -> None:
        try:
            sub.deliver(Snapshot(snapshot.path, snapshot.exists, dict(snapshot.data), snapshot.version))
        except Exception:
            # One broken listener must not starve the others
            logger.exception(f"[store-notify] subscriber for {snapshot.path} failed")

    # ---- primitives ----

    def _read(self, path: str) -> Snapshot:
        raise NotImplementedError

    def _create(self, path: str, fields: Dict[str, Any]) -> Snapshot:
        raise NotImplementedError

    def _update(self, path: str, fields: Dict[str, Any]) -> Snapshot:
        raise NotImplementedError

    def _increment(self, path: str, field_name: str, delta: int,
                   floor: Optional[int]) -> Snapshot:
        raise NotImplementedError


def apply_increment(data: Dict[str, Any], field_name: str, delta: int,
                    floor: Optional[int]) -> Dict[str, Any]:
    current = data.get(field_name) or 0
    if not isinstance(current, (int, float)) or isinstance(current, bool):
        raise StoreError(f"Field '{field_name}' is not numeric")
    value = current + delta
    if floor is not None and value < floor:
        value = floor
    updated = dict(data)
    updated[field_name] = value
    return updated
