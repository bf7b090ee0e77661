"""Tests for the Azure Blob Storage adapter.

Uses a mocked ``BlobServiceClient``; each key gets its own mock blob
client so source and destination calls can be asserted separately.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
)

from geo_moderation.stores.azure_blob import AzureBlobStore
from geo_moderation.stores.base import BlobExistsError, BlobNotFoundError, StoreError

SRC = "not_approved/IMG_1.jpg"
DST = "image/IMG_1.jpg"


def _store() -> tuple[AzureBlobStore, dict[str, MagicMock]]:
    clients: dict[str, MagicMock] = {}

    def get_blob_client(container: str, blob: str) -> MagicMock:
        assert container == "locs"
        return clients.setdefault(blob, MagicMock())

    service = MagicMock()
    service.get_blob_client.side_effect = get_blob_client
    return AzureBlobStore(service, container="locs"), clients


class TestMoveBlob:
    """download -> upload(overwrite=False) -> delete."""

    def test_move(self) -> None:
        store, clients = _store()
        store.move_blob(SRC, DST)
        clients[SRC].download_blob.return_value.readall.assert_called_once()
        data = clients[SRC].download_blob.return_value.readall.return_value
        clients[DST].upload_blob.assert_called_once_with(data, overwrite=False)
        clients[SRC].delete_blob.assert_called_once()

    def test_source_missing(self) -> None:
        store, clients = _store()
        clients[SRC] = MagicMock()
        clients[SRC].download_blob.side_effect = ResourceNotFoundError("gone")
        with pytest.raises(BlobNotFoundError):
            store.move_blob(SRC, DST)

    def test_destination_exists_keeps_source(self) -> None:
        store, clients = _store()
        clients[DST] = MagicMock()
        clients[DST].upload_blob.side_effect = ResourceExistsError("exists")
        with pytest.raises(BlobExistsError):
            store.move_blob(SRC, DST)
        clients[SRC].delete_blob.assert_not_called()

    def test_upload_failure(self) -> None:
        store, clients = _store()
        clients[DST] = MagicMock()
        clients[DST].upload_blob.side_effect = HttpResponseError("500")
        with pytest.raises(StoreError) as ctx:
            store.move_blob(SRC, DST)
        assert type(ctx.value) is StoreError
        clients[SRC].delete_blob.assert_not_called()

    def test_source_vanished_after_copy_is_tolerated(self) -> None:
        store, clients = _store()
        clients[SRC] = MagicMock()
        clients[SRC].delete_blob.side_effect = ResourceNotFoundError("gone")
        store.move_blob(SRC, DST)
        clients[DST].upload_blob.assert_called_once()

    def test_source_delete_failure(self) -> None:
        store, clients = _store()
        clients[SRC] = MagicMock()
        clients[SRC].delete_blob.side_effect = HttpResponseError("503")
        with pytest.raises(StoreError, match="failed to delete the source"):
            store.move_blob(SRC, DST)


class TestDeleteAndExists:
    """Single-blob operations."""

    def test_delete(self) -> None:
        store, clients = _store()
        store.delete_blob(SRC)
        clients[SRC].delete_blob.assert_called_once()

    def test_delete_missing(self) -> None:
        store, clients = _store()
        clients[SRC] = MagicMock()
        clients[SRC].delete_blob.side_effect = ResourceNotFoundError("gone")
        with pytest.raises(BlobNotFoundError):
            store.delete_blob(SRC)

    def test_exists(self) -> None:
        store, clients = _store()
        clients[DST] = MagicMock()
        clients[DST].exists.return_value = False
        assert store.exists(DST) is False

    def test_exists_failure(self) -> None:
        store, clients = _store()
        clients[DST] = MagicMock()
        clients[DST].exists.side_effect = HttpResponseError("500")
        with pytest.raises(StoreError):
            store.exists(DST)

    def test_public_url(self) -> None:
        store, clients = _store()
        clients[SRC] = MagicMock()
        clients[SRC].url = "https://acct.blob.core.windows.net/locs/not_approved/IMG_1.jpg"
        assert store.public_url(SRC).endswith("/locs/not_approved/IMG_1.jpg")


def _props(clients: dict[str, MagicMock], key: str, size: int, md5: bytes | None) -> MagicMock:
    client = clients.setdefault(key, MagicMock())
    props = client.get_blob_properties.return_value
    props.size = size
    props.content_settings.content_md5 = md5
    return client


class TestSameContent:
    """Size and Content-MD5 comparison with a download fallback."""

    def test_different_sizes(self) -> None:
        store, clients = _store()
        _props(clients, SRC, 10, b"aaaa")
        _props(clients, DST, 12, b"aaaa")
        assert store.same_content(SRC, DST) is False
        clients[SRC].download_blob.assert_not_called()

    def test_equal_hashes(self) -> None:
        store, clients = _store()
        _props(clients, SRC, 10, bytearray(b"aaaa"))
        _props(clients, DST, 10, b"aaaa")
        assert store.same_content(SRC, DST) is True
        clients[DST].download_blob.assert_not_called()

    def test_different_hashes(self) -> None:
        store, clients = _store()
        _props(clients, SRC, 10, b"aaaa")
        _props(clients, DST, 10, b"bbbb")
        assert store.same_content(SRC, DST) is False

    def test_missing_hash_downloads_both(self) -> None:
        store, clients = _store()
        _props(clients, SRC, 3, None).download_blob.return_value.readall.return_value = b"new"
        _props(clients, DST, 3, b"x").download_blob.return_value.readall.return_value = b"old"
        assert store.same_content(SRC, DST) is False
        clients[SRC].download_blob.assert_called_once()

    def test_missing_blob(self) -> None:
        store, clients = _store()
        clients[DST] = MagicMock()
        clients[DST].get_blob_properties.side_effect = ResourceNotFoundError("gone")
        _props(clients, SRC, 3, b"x")
        with pytest.raises(BlobNotFoundError):
            store.same_content(SRC, DST)

    def test_properties_failure(self) -> None:
        store, clients = _store()
        clients[SRC] = MagicMock()
        clients[SRC].get_blob_properties.side_effect = HttpResponseError("503")
        with pytest.raises(StoreError):
            store.same_content(SRC, DST)
