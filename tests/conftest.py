"""Shared pytest fixtures for the moderation test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from geo_moderation.models.items import PendingItem
from geo_moderation.stores.factory import clear_store_cache
from geo_moderation.stores.memory import InMemoryBlobStore, InMemoryMetadataStore
from geo_moderation.utils.blob_paths import BlobLayout

# ---------------------------------------------------------------------------
# Sample items
# ---------------------------------------------------------------------------

ITEM_A = PendingItem("IMG_0001", 1.348399, 103.683099)
ITEM_B = PendingItem("IMG_0002", -33.868820, 151.209295)
ITEM_C = PendingItem("IMG_0003", 51.507351, -0.127758)


@pytest.fixture()
def layout() -> BlobLayout:
    """Default ``not_approved/`` → ``image/`` layout with ``.jpg`` keys."""
    return BlobLayout()


@pytest.fixture()
def pending_items() -> list[PendingItem]:
    return [ITEM_A, ITEM_B, ITEM_C]


@pytest.fixture()
def metadata_store(pending_items: list[PendingItem]) -> InMemoryMetadataStore:
    """Metadata store seeded with three pending items."""
    return InMemoryMetadataStore(pending_items)


@pytest.fixture()
def blob_store(pending_items: list[PendingItem], layout: BlobLayout) -> InMemoryBlobStore:
    """Blob store holding one pending image per seeded item."""
    store = InMemoryBlobStore()
    for item in pending_items:
        store.put(layout.pending_key(item.id), f"jpeg:{item.id}".encode())
    return store


@pytest.fixture(autouse=True)
def _reset_store_cache() -> Iterator[None]:
    clear_store_cache()
    yield
    clear_store_cache()
