"""In-memory store adapters for local development and tests.

Both stores honour the full error contract of ``stores.base`` and
support failure injection, so partial-failure paths of the workflows
can be exercised without a real backend::

    blobs = InMemoryBlobStore()
    blobs.inject_failure("move_blob", StoreError("memory", "disk full"))
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict, deque

from geo_moderation.models.coordinate import Coordinate
from geo_moderation.models.items import PendingItem, PublishedItem
from geo_moderation.stores.base import (
    BlobExistsError,
    BlobNotFoundError,
    BlobStore,
    DuplicateRecordError,
    MetadataStore,
    RecordNotFoundError,
)

logger = logging.getLogger("geo_moderation.stores.memory")

BACKEND = "memory"


class _FailureInjector:
    """Queue of errors to raise from named operations."""

    def __init__(self) -> None:
        self._failures: dict[str, deque[Exception]] = defaultdict(deque)

    def inject_failure(self, operation: str, error: Exception, *, times: int = 1) -> None:
        """Make the next *times* calls of *operation* raise *error*."""
        for _ in range(times):
            self._failures[operation].append(error)

    def clear_failures(self) -> None:
        self._failures.clear()

    def _maybe_fail(self, operation: str) -> None:
        queue = self._failures.get(operation)
        if queue:
            error = queue.popleft()
            logger.debug("Injected failure | operation=%s | error=%s", operation, error)
            raise error


class InMemoryMetadataStore(_FailureInjector, MetadataStore):
    """Pending and published tables held in insertion-ordered dicts."""

    backend = BACKEND

    def __init__(self, pending: list[PendingItem] | None = None) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._pending: dict[str, PendingItem] = {item.id: item for item in pending or []}
        self._published: dict[str, PublishedItem] = {}

    def add_pending(self, item: PendingItem) -> None:
        """Seed a pending item (stands in for the upload pipeline)."""
        with self._lock:
            self._pending[item.id] = item

    def list_pending(self) -> list[PendingItem]:
        self._maybe_fail("list_pending")
        with self._lock:
            return list(self._pending.values())

    def insert_published(self, item_id: str, coordinate: Coordinate) -> None:
        self._maybe_fail("insert_published")
        with self._lock:
            if item_id in self._published:
                msg = f"Published record {item_id!r} already exists"
                raise DuplicateRecordError(BACKEND, msg, key=item_id)
            self._published[item_id] = PublishedItem(
                item_id, coordinate.latitude, coordinate.longitude
            )

    def delete_pending(self, item_id: str) -> None:
        self._maybe_fail("delete_pending")
        with self._lock:
            if self._pending.pop(item_id, None) is None:
                msg = f"Pending record {item_id!r} not found"
                raise RecordNotFoundError(BACKEND, msg, key=item_id)

    def get_pending(self, item_id: str) -> PendingItem | None:
        self._maybe_fail("get_pending")
        with self._lock:
            return self._pending.get(item_id)

    def get_published(self, item_id: str) -> PublishedItem | None:
        with self._lock:
            return self._published.get(item_id)

    def list_published(self) -> list[PublishedItem]:
        with self._lock:
            return list(self._published.values())


class InMemoryBlobStore(_FailureInjector, BlobStore):
    """Blob contents held in a dict keyed by blob key."""

    backend = BACKEND

    def __init__(
        self,
        blobs: dict[str, bytes] | None = None,
        *,
        base_url: str = "memory://blobs",
    ) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._blobs: dict[str, bytes] = dict(blobs or {})
        self._base_url = base_url.rstrip("/")

    def put(self, key: str, data: bytes = b"") -> None:
        """Seed a blob."""
        with self._lock:
            self._blobs[key] = data

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._blobs.get(key)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._blobs)

    def move_blob(self, src_key: str, dst_key: str) -> None:
        self._maybe_fail("move_blob")
        with self._lock:
            if src_key not in self._blobs:
                raise BlobNotFoundError(BACKEND, f"Blob {src_key!r} not found", key=src_key)
            if dst_key in self._blobs:
                raise BlobExistsError(BACKEND, f"Blob {dst_key!r} already exists", key=dst_key)
            self._blobs[dst_key] = self._blobs.pop(src_key)

    def delete_blob(self, key: str) -> None:
        self._maybe_fail("delete_blob")
        with self._lock:
            if self._blobs.pop(key, None) is None:
                raise BlobNotFoundError(BACKEND, f"Blob {key!r} not found", key=key)

    def exists(self, key: str) -> bool:
        self._maybe_fail("exists")
        with self._lock:
            return key in self._blobs

    def same_content(self, key_a: str, key_b: str) -> bool:
        self._maybe_fail("same_content")
        with self._lock:
            for key in (key_a, key_b):
                if key not in self._blobs:
                    raise BlobNotFoundError(BACKEND, f"Blob {key!r} not found", key=key)
            return self._blobs[key_a] == self._blobs[key_b]

    def public_url(self, key: str) -> str:
        return f"{self._base_url}/{key}"
