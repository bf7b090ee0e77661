"""Store factory — selects metadata and blob backends by name.

The factory keeps one registry per store kind.  Each entry maps a
backend name to a loader ``(config) -> store``; imports happen inside
the loader so the Supabase and Azure SDKs are only loaded when that
backend is selected.

Usage::

    from geo_moderation.stores.factory import get_blob_store, get_metadata_store

    metadata = get_metadata_store(config)
    blobs = get_blob_store(config)

Instances are cached per backend name so a Functions worker reuses its
SDK connections across invocations; ``clear_store_cache()`` resets it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geo_moderation.core.constants import AZURE_BACKEND, MEMORY_BACKEND, SUPABASE_BACKEND
from geo_moderation.stores.base import BlobStore, MetadataStore, StoreError

if TYPE_CHECKING:
    from collections.abc import Callable

    from geo_moderation.core.config import ModerationConfig

logger = logging.getLogger(__name__)

_METADATA_REGISTRY: dict[str, Callable[[ModerationConfig], MetadataStore]] = {}
_BLOB_REGISTRY: dict[str, Callable[[ModerationConfig], BlobStore]] = {}

_METADATA_CACHE: dict[str, MetadataStore] = {}
_BLOB_CACHE: dict[str, BlobStore] = {}


def _register_builtin_stores() -> None:
    """Register the built-in backends as lazy-import thunks."""

    def _supabase_metadata(config: ModerationConfig) -> MetadataStore:
        from geo_moderation.core.ingress import get_supabase_client
        from geo_moderation.stores.supabase import SupabaseMetadataStore

        return SupabaseMetadataStore(
            get_supabase_client(config),
            pending_table=config.pending_table,
            published_table=config.published_table,
        )

    def _memory_metadata(config: ModerationConfig) -> MetadataStore:
        from geo_moderation.stores.memory import InMemoryMetadataStore

        return InMemoryMetadataStore()

    def _supabase_blob(config: ModerationConfig) -> BlobStore:
        from geo_moderation.core.ingress import get_supabase_client
        from geo_moderation.stores.supabase import SupabaseBlobStore

        return SupabaseBlobStore(get_supabase_client(config), bucket=config.bucket)

    def _azure_blob(config: ModerationConfig) -> BlobStore:
        from geo_moderation.core.ingress import get_blob_service_client
        from geo_moderation.stores.azure_blob import AzureBlobStore

        return AzureBlobStore(get_blob_service_client(), container=config.bucket)

    def _memory_blob(config: ModerationConfig) -> BlobStore:
        from geo_moderation.stores.memory import InMemoryBlobStore

        return InMemoryBlobStore()

    _METADATA_REGISTRY[SUPABASE_BACKEND] = _supabase_metadata
    _METADATA_REGISTRY[MEMORY_BACKEND] = _memory_metadata
    _BLOB_REGISTRY[SUPABASE_BACKEND] = _supabase_blob
    _BLOB_REGISTRY[AZURE_BACKEND] = _azure_blob
    _BLOB_REGISTRY[MEMORY_BACKEND] = _memory_blob


def _ensure_registry() -> None:
    """Initialise the registries once (idempotent)."""
    if not _METADATA_REGISTRY and not _BLOB_REGISTRY:
        _register_builtin_stores()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def register_metadata_store(
    name: str,
    loader: Callable[[ModerationConfig], MetadataStore],
) -> None:
    """Register a custom metadata backend.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        msg = "Store backend name must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    _METADATA_REGISTRY[name] = loader
    _METADATA_CACHE.pop(name, None)
    logger.debug("Registered metadata store: %s", name)


def register_blob_store(
    name: str,
    loader: Callable[[ModerationConfig], BlobStore],
) -> None:
    """Register a custom blob backend.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        msg = "Store backend name must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    _BLOB_REGISTRY[name] = loader
    _BLOB_CACHE.pop(name, None)
    logger.debug("Registered blob store: %s", name)


def get_metadata_store(config: ModerationConfig) -> MetadataStore:
    """Return the (cached) metadata store for ``config.metadata_backend``.

    Raises:
        StoreError: If the backend is not registered.
    """
    _ensure_registry()
    name = config.metadata_backend
    cached = _METADATA_CACHE.get(name)
    if cached is not None:
        return cached

    loader = _METADATA_REGISTRY.get(name)
    if loader is None:
        available = ", ".join(list_metadata_stores())
        msg = f"Unknown metadata store: {name!r}. Available: {available}"
        raise StoreError(name, msg)

    logger.info("Creating metadata store: %s", name)
    store = loader(config)
    _METADATA_CACHE[name] = store
    return store


def get_blob_store(config: ModerationConfig) -> BlobStore:
    """Return the (cached) blob store for ``config.blob_backend``.

    Raises:
        StoreError: If the backend is not registered.
    """
    _ensure_registry()
    name = config.blob_backend
    cached = _BLOB_CACHE.get(name)
    if cached is not None:
        return cached

    loader = _BLOB_REGISTRY.get(name)
    if loader is None:
        available = ", ".join(list_blob_stores())
        msg = f"Unknown blob store: {name!r}. Available: {available}"
        raise StoreError(name, msg)

    logger.info("Creating blob store: %s", name)
    store = loader(config)
    _BLOB_CACHE[name] = store
    return store


def list_metadata_stores() -> list[str]:
    """Return the names of all registered metadata backends."""
    _ensure_registry()
    return sorted(_METADATA_REGISTRY)


def list_blob_stores() -> list[str]:
    """Return the names of all registered blob backends."""
    _ensure_registry()
    return sorted(_BLOB_REGISTRY)


def clear_store_cache() -> None:
    """Drop cached store instances (tests, credential rotation)."""
    _METADATA_CACHE.clear()
    _BLOB_CACHE.clear()
