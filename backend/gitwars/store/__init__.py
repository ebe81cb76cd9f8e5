"""Document service: the shared record store every client reads, writes and watches."""

from .base import (
    DocumentExists,
    DocumentNotFound,
    DocumentStore,
    InvalidPath,
    PermissionDenied,
    Snapshot,
    StoreError,
    Subscription,
    split_path,
)
from .memory import MemoryStore

__all__ = [
    "DocumentExists",
    "DocumentNotFound",
    "DocumentStore",
    "InvalidPath",
    "MemoryStore",
    "PermissionDenied",
    "Snapshot",
    "StoreError",
    "Subscription",
    "split_path",
]
