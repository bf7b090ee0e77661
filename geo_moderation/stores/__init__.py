"""Storage collaborators.

- base: ``MetadataStore`` / ``BlobStore`` contracts and store exceptions
- supabase: Supabase Postgres + Storage adapters
- azure_blob: Azure Blob Storage adapter
- memory: In-memory adapters with failure injection
- factory: Backend selection by name
"""

from geo_moderation.stores.base import (
    BlobExistsError,
    BlobNotFoundError,
    BlobStore,
    DuplicateRecordError,
    MetadataStore,
    RecordNotFoundError,
    StoreError,
)

__all__ = [
    "BlobExistsError",
    "BlobNotFoundError",
    "BlobStore",
    "DuplicateRecordError",
    "MetadataStore",
    "RecordNotFoundError",
    "StoreError",
]
