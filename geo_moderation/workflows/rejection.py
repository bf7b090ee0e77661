"""Rejection workflow — purge a pending item without publishing it.

Two steps, in order:

1. ``delete_pending`` — remove the pending row.  A missing row counts as
   already applied.  Any other failure aborts with nothing changed.
2. ``delete_blob`` — remove the pending image.  A missing blob counts as
   already applied.  Any other failure raises ``CleanupIncompleteError``:
   the item is no longer pending, but its image is orphaned in the
   pending location.  No cleanup retry is attempted here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geo_moderation.core.exceptions import CleanupIncompleteError, ResourceError
from geo_moderation.models.outcomes import RejectionResult, StepOutcome, StepResult
from geo_moderation.stores.base import BlobNotFoundError, RecordNotFoundError, StoreError
from geo_moderation.utils.blob_paths import BlobLayout, validate_item_id

if TYPE_CHECKING:
    from geo_moderation.stores.base import BlobStore, MetadataStore

logger = logging.getLogger("geo_moderation.workflows.rejection")

STAGE = "reject"

STEP_DELETE_PENDING = "delete_pending"
STEP_DELETE_BLOB = "delete_blob"


class RejectionWorkflow:
    """Orchestrates the delete-pending → delete-blob purge."""

    def __init__(
        self,
        metadata_store: MetadataStore,
        blob_store: BlobStore,
        *,
        layout: BlobLayout | None = None,
    ) -> None:
        self._metadata = metadata_store
        self._blobs = blob_store
        self._layout = layout or BlobLayout()

    def reject(self, item_id: str) -> RejectionResult:
        """Purge *item_id* from the pending table and the pending location.

        Returns:
            ``RejectionResult`` with both steps confirmed.

        Raises:
            InvalidItemIdError: Before any side effect, on an unusable id.
            ResourceError: The pending row could not be deleted; nothing
                changed and the item is still pending.
            CleanupIncompleteError: The row is gone but the image could not
                be deleted; ``exc.result`` carries the partial result.
        """
        item_id = validate_item_id(item_id)
        logger.info("reject started | item=%s", item_id)

        steps: list[StepResult] = []

        try:
            self._metadata.delete_pending(item_id)
        except RecordNotFoundError:
            logger.warning(
                "reject step already applied | item=%s | step=%s", item_id, STEP_DELETE_PENDING
            )
            steps.append(StepResult(STEP_DELETE_PENDING, StepOutcome.ALREADY_APPLIED))
        except StoreError as exc:
            logger.error("reject failed | item=%s | step=%s", item_id, STEP_DELETE_PENDING)
            msg = f"Failed to delete pending record for {item_id!r}: {exc}"
            raise ResourceError(
                msg,
                store="metadata",
                step=STEP_DELETE_PENDING,
                cause=exc,
                stage=STAGE,
                item_id=item_id,
            ) from exc
        else:
            steps.append(StepResult(STEP_DELETE_PENDING, StepOutcome.APPLIED))

        key = self._layout.pending_key(item_id)
        try:
            self._blobs.delete_blob(key)
        except BlobNotFoundError:
            logger.warning(
                "reject step already applied | item=%s | step=%s", item_id, STEP_DELETE_BLOB
            )
            steps.append(StepResult(STEP_DELETE_BLOB, StepOutcome.ALREADY_APPLIED))
        except StoreError as exc:
            steps.append(StepResult(STEP_DELETE_BLOB, StepOutcome.FAILED, exc))
            result = RejectionResult(item_id=item_id, steps=steps)
            logger.warning(
                "reject left orphaned blob | item=%s | key=%s | error=%s", item_id, key, exc
            )
            msg = f"Item {item_id!r} rejected but its image {key!r} could not be deleted: {exc}"
            raise CleanupIncompleteError(
                msg, result=result, cause=exc, item_id=item_id
            ) from exc
        else:
            steps.append(StepResult(STEP_DELETE_BLOB, StepOutcome.APPLIED))

        result = RejectionResult(item_id=item_id, steps=steps)
        logger.info(
            "reject completed | item=%s | steps=%s",
            item_id,
            ",".join(f"{s.step}:{s.outcome.value}" for s in steps),
        )
        return result
