"""Supabase adapters: Postgres tables via PostgREST, images via Storage.

Table layout (columns ``filename``, ``lat``, ``lng``)::

    need_approval   pending submissions
    locs            published submissions (``filename`` is unique)

Storage layout: one bucket (``locs``) with ``not_approved/`` and
``image/`` prefixes.

PostgREST reports a unique violation as ``APIError`` code ``23505``;
that is mapped to ``DuplicateRecordError``.  Storage errors do not carry
a stable type across client versions, so they are classified from their
status code and message.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from postgrest.exceptions import APIError

from geo_moderation.core.constants import ID_COLUMN
from geo_moderation.models.items import PendingItem, PublishedItem
from geo_moderation.stores.base import (
    BlobExistsError,
    BlobNotFoundError,
    BlobStore,
    DuplicateRecordError,
    MetadataStore,
    RecordNotFoundError,
    StoreError,
)

if TYPE_CHECKING:
    from supabase import Client

    from geo_moderation.models.coordinate import Coordinate

logger = logging.getLogger("geo_moderation.stores.supabase")

BACKEND = "supabase"

#: Postgres SQLSTATE for unique_violation.
UNIQUE_VIOLATION = "23505"

_NOT_FOUND_MARKERS = ("not_found", "not found", "does not exist", "nosuchkey")
_EXISTS_MARKERS = ("already exists", "duplicate", "resource_already_exists")


class SupabaseMetadataStore(MetadataStore):
    """Pending/published tables in a Supabase Postgres database."""

    backend = BACKEND

    def __init__(
        self,
        client: Client,
        *,
        pending_table: str,
        published_table: str,
    ) -> None:
        self._client = client
        self._pending_table = pending_table
        self._published_table = published_table

    def list_pending(self) -> list[PendingItem]:
        try:
            response = self._client.table(self._pending_table).select("*").execute()
        except APIError as exc:
            msg = f"Failed to list {self._pending_table}: {_api_message(exc)}"
            raise StoreError(BACKEND, msg) from exc

        rows = response.data or []
        logger.debug("Listed pending rows | table=%s | count=%d", self._pending_table, len(rows))
        return [PendingItem.from_row(row) for row in rows]

    def insert_published(self, item_id: str, coordinate: Coordinate) -> None:
        row = PublishedItem(item_id, coordinate.latitude, coordinate.longitude).to_row()
        try:
            self._client.table(self._published_table).insert(row).execute()
        except APIError as exc:
            if str(getattr(exc, "code", "")) == UNIQUE_VIOLATION:
                msg = f"Published record {item_id!r} already exists in {self._published_table}"
                raise DuplicateRecordError(BACKEND, msg, key=item_id) from exc
            msg = f"Failed to insert {item_id!r} into {self._published_table}: {_api_message(exc)}"
            raise StoreError(BACKEND, msg, key=item_id) from exc

    def delete_pending(self, item_id: str) -> None:
        try:
            response = (
                self._client.table(self._pending_table)
                .delete()
                .eq(ID_COLUMN, item_id)
                .execute()
            )
        except APIError as exc:
            msg = f"Failed to delete {item_id!r} from {self._pending_table}: {_api_message(exc)}"
            raise StoreError(BACKEND, msg, key=item_id) from exc

        if not response.data:
            msg = f"Pending record {item_id!r} not found in {self._pending_table}"
            raise RecordNotFoundError(BACKEND, msg, key=item_id)

    def get_pending(self, item_id: str) -> PendingItem | None:
        rows = self._select_one(self._pending_table, item_id)
        return PendingItem.from_row(rows[0]) if rows else None

    def get_published(self, item_id: str) -> PublishedItem | None:
        rows = self._select_one(self._published_table, item_id)
        return PublishedItem.from_row(rows[0]) if rows else None

    def _select_one(self, table: str, item_id: str) -> list[dict[str, Any]]:
        try:
            response = (
                self._client.table(table)
                .select("*")
                .eq(ID_COLUMN, item_id)
                .limit(1)
                .execute()
            )
        except APIError as exc:
            msg = f"Failed to read {item_id!r} from {table}: {_api_message(exc)}"
            raise StoreError(BACKEND, msg, key=item_id) from exc
        return response.data or []


class SupabaseBlobStore(BlobStore):
    """Images in a Supabase Storage bucket."""

    backend = BACKEND

    def __init__(self, client: Client, *, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    @property
    def _storage(self) -> Any:
        return self._client.storage.from_(self._bucket)

    def move_blob(self, src_key: str, dst_key: str) -> None:
        try:
            self._storage.move(src_key, dst_key)
        except Exception as exc:
            if _looks_like(exc, _NOT_FOUND_MARKERS, 404):
                msg = f"Blob {self._bucket}/{src_key} not found"
                raise BlobNotFoundError(BACKEND, msg, key=src_key) from exc
            if _looks_like(exc, _EXISTS_MARKERS, 409):
                msg = f"Blob {self._bucket}/{dst_key} already exists"
                raise BlobExistsError(BACKEND, msg, key=dst_key) from exc
            msg = f"Failed to move {self._bucket}/{src_key} to {dst_key}: {exc}"
            raise StoreError(BACKEND, msg, key=src_key) from exc

    def delete_blob(self, key: str) -> None:
        try:
            removed = self._storage.remove([key])
        except Exception as exc:
            if _looks_like(exc, _NOT_FOUND_MARKERS, 404):
                msg = f"Blob {self._bucket}/{key} not found"
                raise BlobNotFoundError(BACKEND, msg, key=key) from exc
            msg = f"Failed to delete {self._bucket}/{key}: {exc}"
            raise StoreError(BACKEND, msg, key=key) from exc

        # Storage answers a remove of a missing object with an empty list.
        if not removed:
            msg = f"Blob {self._bucket}/{key} not found"
            raise BlobNotFoundError(BACKEND, msg, key=key)

    def exists(self, key: str) -> bool:
        folder, _, name = key.rpartition("/")
        try:
            entries = self._storage.list(folder, {"search": name})
        except Exception as exc:
            msg = f"Failed to list {self._bucket}/{folder}: {exc}"
            raise StoreError(BACKEND, msg, key=key) from exc
        return any(isinstance(e, dict) and e.get("name") == name for e in entries or [])

    def same_content(self, key_a: str, key_b: str) -> bool:
        return self._download(key_a) == self._download(key_b)

    def _download(self, key: str) -> bytes:
        try:
            return bytes(self._storage.download(key))
        except Exception as exc:
            if _looks_like(exc, _NOT_FOUND_MARKERS, 404):
                msg = f"Blob {self._bucket}/{key} not found"
                raise BlobNotFoundError(BACKEND, msg, key=key) from exc
            msg = f"Failed to download {self._bucket}/{key}: {exc}"
            raise StoreError(BACKEND, msg, key=key) from exc

    def public_url(self, key: str) -> str:
        result = self._storage.get_public_url(key)
        if isinstance(result, dict):
            url = result.get("publicUrl") or result.get("publicURL") or result.get("public_url")
            return str(url or "")
        return str(result or "")


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------


def _api_message(exc: APIError) -> str:
    return str(getattr(exc, "message", "") or exc)


def _looks_like(exc: Exception, markers: tuple[str, ...], status: int) -> bool:
    """Classify a storage exception by status code or message text."""
    details: list[object] = [exc]
    for attr in ("status", "status_code", "statusCode", "code", "error", "message"):
        details.append(getattr(exc, attr, ""))
    for arg in exc.args:
        if isinstance(arg, dict):
            details.extend(arg.values())
        else:
            details.append(arg)

    for detail in details:
        if str(detail) == str(status):
            return True
        text = str(detail).lower()
        if any(marker in text for marker in markers):
            return True
    return False
