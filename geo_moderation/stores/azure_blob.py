"""Azure Blob Storage adapter for moderated images.

Blob Storage has no native rename, so a move is three calls::

    download(src) -> upload(dst, overwrite=False) -> delete(src)

A crash between upload and delete leaves both blobs present; the next
move attempt then fails with ``BlobExistsError`` and the approval
workflow completes the relocation by deleting the source, but only
after ``same_content`` confirms both blobs hold the same image.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azure.core.exceptions import (
    AzureError,
    ResourceExistsError,
    ResourceNotFoundError,
)

from geo_moderation.stores.base import (
    BlobExistsError,
    BlobNotFoundError,
    BlobStore,
    StoreError,
)

if TYPE_CHECKING:
    from azure.storage.blob import BlobServiceClient

logger = logging.getLogger("geo_moderation.stores.azure_blob")

BACKEND = "azure"


class AzureBlobStore(BlobStore):
    """Images in a single Azure Blob Storage container."""

    backend = BACKEND

    def __init__(
        self,
        blob_service_client: BlobServiceClient,
        *,
        container: str,
    ) -> None:
        self._service = blob_service_client
        self._container = container

    def _blob(self, key: str):  # noqa: ANN202
        return self._service.get_blob_client(container=self._container, blob=key)

    def move_blob(self, src_key: str, dst_key: str) -> None:
        src = self._blob(src_key)
        dst = self._blob(dst_key)

        data = self._read(src_key)

        try:
            dst.upload_blob(data, overwrite=False)
        except ResourceExistsError as exc:
            msg = f"Blob {self._container}/{dst_key} already exists"
            raise BlobExistsError(BACKEND, msg, key=dst_key) from exc
        except AzureError as exc:
            msg = f"Failed to upload {self._container}/{dst_key}: {exc}"
            raise StoreError(BACKEND, msg, key=dst_key) from exc

        try:
            src.delete_blob()
        except ResourceNotFoundError:
            logger.warning(
                "Source vanished during move | container=%s | src=%s | dst=%s",
                self._container,
                src_key,
                dst_key,
            )
        except AzureError as exc:
            msg = f"Copied {src_key} to {dst_key} but failed to delete the source: {exc}"
            raise StoreError(BACKEND, msg, key=src_key) from exc

        logger.debug(
            "Moved blob | container=%s | src=%s | dst=%s | size=%d bytes",
            self._container,
            src_key,
            dst_key,
            len(data),
        )

    def delete_blob(self, key: str) -> None:
        try:
            self._blob(key).delete_blob()
        except ResourceNotFoundError as exc:
            msg = f"Blob {self._container}/{key} not found"
            raise BlobNotFoundError(BACKEND, msg, key=key) from exc
        except AzureError as exc:
            msg = f"Failed to delete {self._container}/{key}: {exc}"
            raise StoreError(BACKEND, msg, key=key) from exc

    def exists(self, key: str) -> bool:
        try:
            return bool(self._blob(key).exists())
        except AzureError as exc:
            msg = f"Failed to check {self._container}/{key}: {exc}"
            raise StoreError(BACKEND, msg, key=key) from exc

    def same_content(self, key_a: str, key_b: str) -> bool:
        """Compare size and Content-MD5; download both when a hash is missing."""
        props_a = self._properties(key_a)
        props_b = self._properties(key_b)
        if props_a.size != props_b.size:
            return False
        md5_a = props_a.content_settings.content_md5
        md5_b = props_b.content_settings.content_md5
        if md5_a and md5_b:
            return bytes(md5_a) == bytes(md5_b)
        return self._read(key_a) == self._read(key_b)

    def _properties(self, key: str):  # noqa: ANN202
        try:
            return self._blob(key).get_blob_properties()
        except ResourceNotFoundError as exc:
            msg = f"Blob {self._container}/{key} not found"
            raise BlobNotFoundError(BACKEND, msg, key=key) from exc
        except AzureError as exc:
            msg = f"Failed to read properties of {self._container}/{key}: {exc}"
            raise StoreError(BACKEND, msg, key=key) from exc

    def _read(self, key: str) -> bytes:
        try:
            return self._blob(key).download_blob().readall()
        except ResourceNotFoundError as exc:
            msg = f"Blob {self._container}/{key} not found"
            raise BlobNotFoundError(BACKEND, msg, key=key) from exc
        except AzureError as exc:
            msg = f"Failed to download {self._container}/{key}: {exc}"
            raise StoreError(BACKEND, msg, key=key) from exc

    def public_url(self, key: str) -> str:
        return str(self._blob(key).url)
