"""In-process document store.

Used by tests and by local simulations of several clients sharing one
record. With ``auto_flush=False`` notifications queue up until
:meth:`MemoryStore.flush`, which stands in for the propagation delay
between the service applying a write and a client hearing about it.
"""

import copy
from collections import deque
from typing import Any, Deque, Dict, Iterable, Optional, Tuple

from .base import (
    DocumentExists,
    DocumentNotFound,
    DocumentStore,
    Snapshot,
    StoreError,
    Subscription,
    apply_increment,
    split_path,
)


class MemoryStore(DocumentStore):

    def __init__(self, collections: Optional[Iterable[str]] = None, auto_flush: bool = True):
        super().__init__(collections)
        self.auto_flush = auto_flush
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.writes: list = []
        self._pending: Deque[Tuple[Subscription, Snapshot]] = deque()
        self._fail_next: Deque[StoreError] = deque()

    def fail_next_write(self, error: Optional[StoreError] = None) -> None:
        """Make the next write raise ``error``."""
        self._fail_next.append(error or StoreError('simulated write failure'))

    def flush(self) -> int:
        """Deliver queued notifications in order; returns how many were sent."""
        sent = 0
        while self._pending:
            sub, snapshot = self._pending.popleft()
            super()._dispatch(sub, snapshot)
            sent += 1
        return sent

    def _dispatch(self, sub, snapshot):
        if self.auto_flush:
            super()._dispatch(sub, snapshot)
        else:
            self._pending.append((sub, snapshot))

    def _maybe_fail(self):
        if self._fail_next:
            raise self._fail_next.popleft()

    def _snapshot(self, path):
        data = self.documents.get(path)
        if data is None:
            return Snapshot(path, False, {})
        return Snapshot(path, True, copy.deepcopy(data))

    def _read(self, path):
        split_path(path)
        return self._snapshot(path)

    def _create(self, path, fields):
        split_path(path)
        with self._lock:
            self._maybe_fail()
            if path in self.documents:
                raise DocumentExists(f"Document {path} already exists")
            self.documents[path] = copy.deepcopy(fields)
            self.writes.append(('create', path, dict(fields)))
            return self._snapshot(path)

    def _update(self, path, fields):
        split_path(path)
        with self._lock:
            self._maybe_fail()
            if path not in self.documents:
                raise DocumentNotFound(f"Document {path} does not exist")
            self.documents[path].update(copy.deepcopy(fields))
            self.writes.append(('update', path, dict(fields)))
            return self._snapshot(path)

    def _increment(self, path, field_name, delta, floor):
        split_path(path)
        with self._lock:
            self._maybe_fail()
            if path not in self.documents:
                raise DocumentNotFound(f"Document {path} does not exist")
            self.documents[path] = apply_increment(self.documents[path], field_name, delta, floor)
            self.writes.append(('increment', path, {field_name: delta}))
            return self._snapshot(path)
