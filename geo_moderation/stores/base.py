"""Storage collaborator contracts: ``MetadataStore`` and ``BlobStore``.

The workflows interact exclusively with these interfaces — they never
know which concrete backend (Supabase, Azure Blob Storage, in-memory)
sits behind them.

Each failure mode the workflows need to distinguish has its own
exception so "already applied" can be told apart from a genuine
failure:

- ``DuplicateRecordError``  — published row already exists.
- ``RecordNotFoundError``   — pending row already gone.
- ``BlobNotFoundError``     — source blob absent.
- ``BlobExistsError``       — destination blob already present.
- ``StoreError``            — anything else.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from geo_moderation.core.exceptions import ModerationError

if TYPE_CHECKING:
    from geo_moderation.models.coordinate import Coordinate
    from geo_moderation.models.items import PendingItem, PublishedItem


# ---------------------------------------------------------------------------
# Store exceptions
# ---------------------------------------------------------------------------


class StoreError(ModerationError):
    """Base exception for storage adapter errors.

    Attributes:
        backend: Name of the backend that raised the error.
        message: Human-readable error description.
    """

    default_stage = "store"
    default_code = "STORE_ERROR"

    def __init__(self, backend: str, message: str, *, key: str = "") -> None:
        self.backend = backend
        self.key = key
        super().__init__(message, retryable=True, item_id=key)

    def __str__(self) -> str:
        return f"[{self.backend}] {self.message}"


class DuplicateRecordError(StoreError):
    """A published record for the id already exists."""

    default_code = "DUPLICATE_RECORD"


class RecordNotFoundError(StoreError):
    """The pending record for the id does not exist."""

    default_code = "RECORD_NOT_FOUND"


class BlobNotFoundError(StoreError):
    """The addressed blob does not exist."""

    default_code = "BLOB_NOT_FOUND"


class BlobExistsError(StoreError):
    """The destination blob of a move already exists."""

    default_code = "BLOB_EXISTS"


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


class MetadataStore(abc.ABC):
    """Durable pending and published tables keyed by item id."""

    #: Backend name used in error messages and logs.
    backend: str = "metadata"

    @abc.abstractmethod
    def list_pending(self) -> list[PendingItem]:
        """Return every pending item, in store order.

        Raises:
            StoreError: On any backend failure.
        """

    @abc.abstractmethod
    def insert_published(self, item_id: str, coordinate: Coordinate) -> None:
        """Insert a published record.

        Raises:
            DuplicateRecordError: If a published record for *item_id* exists.
            StoreError: On any other backend failure.
        """

    @abc.abstractmethod
    def delete_pending(self, item_id: str) -> None:
        """Delete the pending record for *item_id*.

        Raises:
            RecordNotFoundError: If no pending record exists.
            StoreError: On any other backend failure.
        """

    @abc.abstractmethod
    def get_pending(self, item_id: str) -> PendingItem | None:
        """Return the pending record for *item_id*, or ``None``.

        Raises:
            StoreError: On any backend failure.
        """

    @abc.abstractmethod
    def get_published(self, item_id: str) -> PublishedItem | None:
        """Return the published record for *item_id*, or ``None``."""


class BlobStore(abc.ABC):
    """Keyed image storage with pending and published locations."""

    backend: str = "blob"

    @abc.abstractmethod
    def move_blob(self, src_key: str, dst_key: str) -> None:
        """Relocate *src_key* to *dst_key*.

        Raises:
            BlobNotFoundError: If *src_key* does not exist.
            BlobExistsError: If *dst_key* already exists.
            StoreError: On any other backend failure.
        """

    @abc.abstractmethod
    def delete_blob(self, key: str) -> None:
        """Delete *key*.

        Raises:
            BlobNotFoundError: If *key* does not exist.
            StoreError: On any other backend failure.
        """

    @abc.abstractmethod
    def exists(self, key: str) -> bool:
        """Return whether *key* exists.

        Raises:
            StoreError: If existence cannot be determined.
        """

    @abc.abstractmethod
    def same_content(self, key_a: str, key_b: str) -> bool:
        """Return whether *key_a* and *key_b* hold identical bytes.

        Raises:
            BlobNotFoundError: If either blob does not exist.
            StoreError: If the comparison cannot be made.
        """

    @abc.abstractmethod
    def public_url(self, key: str) -> str:
        """Return the public URL of *key* (no existence check)."""
