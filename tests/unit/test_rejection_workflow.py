"""Tests for the rejection workflow."""

from __future__ import annotations

import logging

import pytest

from geo_moderation.core.exceptions import CleanupIncompleteError, ResourceError
from geo_moderation.models.outcomes import RejectionResult, StepOutcome
from geo_moderation.stores.base import StoreError
from geo_moderation.stores.memory import InMemoryBlobStore, InMemoryMetadataStore
from geo_moderation.utils.blob_paths import InvalidItemIdError
from geo_moderation.workflows.rejection import (
    STEP_DELETE_BLOB,
    STEP_DELETE_PENDING,
    RejectionWorkflow,
)

ITEM = "IMG_0002"


@pytest.fixture()
def workflow(
    metadata_store: InMemoryMetadataStore, blob_store: InMemoryBlobStore
) -> RejectionWorkflow:
    return RejectionWorkflow(metadata_store, blob_store)


def _pending_ids(store: InMemoryMetadataStore) -> list[str]:
    return [item.id for item in store.list_pending()]


class TestReject:
    """Successful rejection purges both stores."""

    def test_removes_record_and_blob(
        self,
        workflow: RejectionWorkflow,
        metadata_store: InMemoryMetadataStore,
        blob_store: InMemoryBlobStore,
    ) -> None:
        result = workflow.reject(ITEM)

        assert ITEM not in _pending_ids(metadata_store)
        assert not blob_store.exists("not_approved/IMG_0002.jpg")
        assert metadata_store.get_published(ITEM) is None
        assert [(s.step, s.outcome) for s in result.steps] == [
            (STEP_DELETE_PENDING, StepOutcome.APPLIED),
            (STEP_DELETE_BLOB, StepOutcome.APPLIED),
        ]
        assert result.cleanup_complete is True

    def test_nothing_published(
        self,
        workflow: RejectionWorkflow,
        blob_store: InMemoryBlobStore,
    ) -> None:
        workflow.reject(ITEM)
        assert not any(key.startswith("image/") for key in blob_store.keys())

    def test_repeat_rejection_already_applied(self, workflow: RejectionWorkflow) -> None:
        workflow.reject(ITEM)
        result = workflow.reject(ITEM)
        assert all(s.outcome is StepOutcome.ALREADY_APPLIED for s in result.steps)
        assert result.cleanup_complete is True

    def test_missing_blob_already_applied(self, metadata_store: InMemoryMetadataStore) -> None:
        result = RejectionWorkflow(metadata_store, InMemoryBlobStore()).reject(ITEM)
        assert result.steps[0].outcome is StepOutcome.APPLIED
        assert result.steps[1].outcome is StepOutcome.ALREADY_APPLIED

    def test_invalid_item_id(self, workflow: RejectionWorkflow) -> None:
        with pytest.raises(InvalidItemIdError):
            workflow.reject("")


class TestRejectFailures:
    """Partial failures."""

    def test_pending_delete_failure_changes_nothing(
        self,
        workflow: RejectionWorkflow,
        metadata_store: InMemoryMetadataStore,
        blob_store: InMemoryBlobStore,
    ) -> None:
        metadata_store.inject_failure("delete_pending", StoreError("memory", "down"))

        with pytest.raises(ResourceError) as ctx:
            workflow.reject(ITEM)

        assert ctx.value.step == STEP_DELETE_PENDING
        assert ctx.value.retryable is True
        assert ctx.value.stage == "reject"
        assert ITEM in _pending_ids(metadata_store)
        assert blob_store.exists("not_approved/IMG_0002.jpg")

    def test_blob_delete_failure_is_cleanup_incomplete(
        self,
        workflow: RejectionWorkflow,
        metadata_store: InMemoryMetadataStore,
        blob_store: InMemoryBlobStore,
    ) -> None:
        blob_store.inject_failure("delete_blob", StoreError("memory", "locked"))

        with pytest.raises(CleanupIncompleteError) as ctx:
            workflow.reject(ITEM)

        err = ctx.value
        assert err.item_id == ITEM
        assert err.retryable is False
        assert isinstance(err.cause, StoreError)
        assert isinstance(err.result, RejectionResult)
        assert err.result.cleanup_complete is False
        assert err.result.steps[0].outcome is StepOutcome.APPLIED
        assert err.result.steps[1].outcome is StepOutcome.FAILED

        assert ITEM not in _pending_ids(metadata_store)
        assert blob_store.exists("not_approved/IMG_0002.jpg")

    def test_orphaned_blob_logged(
        self,
        workflow: RejectionWorkflow,
        blob_store: InMemoryBlobStore,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        blob_store.inject_failure("delete_blob", StoreError("memory", "locked"))
        with (
            caplog.at_level(logging.WARNING, logger="geo_moderation.workflows.rejection"),
            pytest.raises(CleanupIncompleteError),
        ):
            workflow.reject(ITEM)
        assert any("reject left orphaned blob" in r.getMessage() for r in caplog.records)

    def test_rerun_after_cleanup_failure_removes_blob(
        self,
        workflow: RejectionWorkflow,
        blob_store: InMemoryBlobStore,
    ) -> None:
        blob_store.inject_failure("delete_blob", StoreError("memory", "locked"))
        with pytest.raises(CleanupIncompleteError):
            workflow.reject(ITEM)

        result = workflow.reject(ITEM)
        assert result.steps[0].outcome is StepOutcome.ALREADY_APPLIED
        assert result.steps[1].outcome is StepOutcome.APPLIED
        assert not blob_store.exists("not_approved/IMG_0002.jpg")
