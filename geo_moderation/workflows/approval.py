"""Approval workflow — promote a pending item to published.

The id must be pending (or already published, for a re-run); an id
known to neither table is refused with ``ItemNotPendingError`` before any
write.  Then three steps, strictly in order, each confirmed (freshly or
as already applied) before the next starts:

1. ``insert_published`` — write the published row with the reviewed
   coordinate.  A duplicate row means a previous attempt got this far.
2. ``relocate_blob`` — move the image from the pending to the published
   location.  A missing source with a present destination means a
   previous attempt got this far.  When both copies exist the source is
   removed only if the two hold identical bytes; a different image at the
   destination is a failure and both are kept.
3. ``delete_pending`` — remove the pending row.  A missing row means a
   previous attempt finished.

There is no rollback.  If step 2 fails the published row stays, the
pending row stays, and ``InconsistentStateError`` tells the caller to
re-run the whole approval; step 1 then reports ``ALREADY_APPLIED``.  The
pending row is never deleted unless steps 1 and 2 are both confirmed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geo_moderation.core.exceptions import (
    InconsistentStateError,
    ResourceError,
    ValidationError,
)
from geo_moderation.models.outcomes import ApprovalResult, StepOutcome, StepResult
from geo_moderation.stores.base import (
    BlobExistsError,
    BlobNotFoundError,
    DuplicateRecordError,
    RecordNotFoundError,
    StoreError,
)
from geo_moderation.utils.blob_paths import BlobLayout, validate_item_id

if TYPE_CHECKING:
    from geo_moderation.models.coordinate import Coordinate
    from geo_moderation.stores.base import BlobStore, MetadataStore

logger = logging.getLogger("geo_moderation.workflows.approval")

STAGE = "approve"

STEP_CHECK_PENDING = "check_pending"
STEP_INSERT_PUBLISHED = "insert_published"
STEP_RELOCATE_BLOB = "relocate_blob"
STEP_DELETE_PENDING = "delete_pending"


class ItemNotPendingError(ValidationError):
    """Raised when approval names an id that is neither pending nor published."""

    default_stage = STAGE
    default_code = "ITEM_NOT_PENDING"


class ApprovalWorkflow:
    """Orchestrates the publish → relocate → delete-pending transition.

    Example usage::

        workflow = ApprovalWorkflow(metadata_store, blob_store)
        result = workflow.approve("IMG_0042", Coordinate(1.348399, 103.683099))
    """

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

    def approve(self, item_id: str, coordinate: Coordinate) -> ApprovalResult:
        """Publish *item_id* at *coordinate*.

        Args:
            item_id: Identifier of a pending item.
            coordinate: Reviewed coordinate (already truncated by the editor).

        Returns:
            ``ApprovalResult`` with one ``StepResult`` per step.  When every
            step was already applied the item had been published before and
            ``already_published`` is true.

        Raises:
            CoordinateValidationError: Before any side effect, on a
                non-finite or out-of-range coordinate.
            InvalidItemIdError: Before any side effect, on an unusable id.
            ItemNotPendingError: Before any side effect, when the id is
                neither pending nor published.
            ResourceError: The lookup, step 1 or step 3 failed; safe to retry.
            InconsistentStateError: Step 2 failed after step 1 succeeded;
                the pending row is intact; safe to retry.
        """
        item_id = validate_item_id(item_id)
        coordinate.validate(item_id=item_id)
        self._require_pending_or_published(item_id)

        logger.info(
            "approve started | item=%s | lat=%s | lng=%s",
            item_id,
            coordinate.latitude,
            coordinate.longitude,
        )

        steps: list[StepResult] = []

        published = self._insert_published(item_id, coordinate)
        steps.append(published)
        if not published.succeeded:
            msg = f"Failed to write published record for {item_id!r}: {published.error}"
            logger.error("approve failed | item=%s | step=%s", item_id, STEP_INSERT_PUBLISHED)
            raise ResourceError(
                msg,
                store="metadata",
                step=STEP_INSERT_PUBLISHED,
                cause=published.error,
                stage=STAGE,
                item_id=item_id,
            ) from published.error

        relocated = self._relocate_blob(item_id)
        steps.append(relocated)
        if not relocated.succeeded:
            msg = (
                f"Published record for {item_id!r} exists but the image was not relocated "
                f"({relocated.error}); pending record kept, retry the approval"
            )
            logger.error(
                "approve inconsistent | item=%s | step=%s | published=%s",
                item_id,
                STEP_RELOCATE_BLOB,
                published.outcome.value,
            )
            raise InconsistentStateError(
                msg,
                store="blob",
                step=STEP_RELOCATE_BLOB,
                cause=relocated.error,
                stage=STAGE,
                item_id=item_id,
            ) from relocated.error

        deleted = self._delete_pending(item_id)
        steps.append(deleted)
        if not deleted.succeeded:
            msg = f"Item {item_id!r} is published but its pending record remains: {deleted.error}"
            logger.error("approve failed | item=%s | step=%s", item_id, STEP_DELETE_PENDING)
            raise ResourceError(
                msg,
                store="metadata",
                step=STEP_DELETE_PENDING,
                cause=deleted.error,
                stage=STAGE,
                item_id=item_id,
            ) from deleted.error

        result = ApprovalResult(item_id=item_id, coordinate=coordinate, steps=steps)
        logger.info(
            "approve completed | item=%s | already_published=%s | steps=%s",
            item_id,
            result.already_published,
            ",".join(f"{s.step}:{s.outcome.value}" for s in steps),
        )
        return result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _require_pending_or_published(self, item_id: str) -> None:
        """Refuse ids unknown to both tables before any side effect."""
        try:
            if self._metadata.get_pending(item_id) is not None:
                return
            if self._metadata.get_published(item_id) is not None:
                return
        except StoreError as exc:
            msg = f"Failed to look up {item_id!r}: {exc}"
            raise ResourceError(
                msg,
                store="metadata",
                step=STEP_CHECK_PENDING,
                cause=exc,
                stage=STAGE,
                item_id=item_id,
            ) from exc
        msg = f"Item {item_id!r} is not pending approval"
        raise ItemNotPendingError(msg, item_id=item_id)

    def _insert_published(self, item_id: str, coordinate: Coordinate) -> StepResult:
        try:
            self._metadata.insert_published(item_id, coordinate)
        except DuplicateRecordError:
            logger.warning(
                "approve step already applied | item=%s | step=%s", item_id, STEP_INSERT_PUBLISHED
            )
            return StepResult(STEP_INSERT_PUBLISHED, StepOutcome.ALREADY_APPLIED)
        except StoreError as exc:
            return StepResult(STEP_INSERT_PUBLISHED, StepOutcome.FAILED, exc)
        return StepResult(STEP_INSERT_PUBLISHED, StepOutcome.APPLIED)

    def _relocate_blob(self, item_id: str) -> StepResult:
        src = self._layout.pending_key(item_id)
        dst = self._layout.published_key(item_id)
        try:
            self._blobs.move_blob(src, dst)
        except BlobNotFoundError as exc:
            return self._confirm_relocated(item_id, dst, exc)
        except BlobExistsError as exc:
            return self._finish_interrupted_move(item_id, src, dst, exc)
        except StoreError as exc:
            return StepResult(STEP_RELOCATE_BLOB, StepOutcome.FAILED, exc)
        return StepResult(STEP_RELOCATE_BLOB, StepOutcome.APPLIED)

    def _confirm_relocated(self, item_id: str, dst: str, cause: StoreError) -> StepResult:
        """Source is gone: already applied only if the destination is present."""
        try:
            present = self._blobs.exists(dst)
        except StoreError as exc:
            return StepResult(STEP_RELOCATE_BLOB, StepOutcome.FAILED, exc)
        if not present:
            return StepResult(STEP_RELOCATE_BLOB, StepOutcome.FAILED, cause)
        logger.warning(
            "approve step already applied | item=%s | step=%s", item_id, STEP_RELOCATE_BLOB
        )
        return StepResult(STEP_RELOCATE_BLOB, StepOutcome.ALREADY_APPLIED)

    def _finish_interrupted_move(
        self, item_id: str, src: str, dst: str, cause: StoreError
    ) -> StepResult:
        """Both copies exist: the source is removed only if the copies are identical."""
        try:
            identical = self._blobs.same_content(src, dst)
        except BlobNotFoundError:
            return self._confirm_relocated(item_id, dst, cause)
        except StoreError as exc:
            return StepResult(STEP_RELOCATE_BLOB, StepOutcome.FAILED, exc)
        if not identical:
            logger.error(
                "approve destination holds a different image | item=%s | src=%s | dst=%s",
                item_id,
                src,
                dst,
            )
            return StepResult(STEP_RELOCATE_BLOB, StepOutcome.FAILED, cause)

        logger.warning(
            "approve completing interrupted move | item=%s | src=%s | cause=%s",
            item_id,
            src,
            cause,
        )
        try:
            self._blobs.delete_blob(src)
        except BlobNotFoundError:
            pass
        except StoreError as exc:
            return StepResult(STEP_RELOCATE_BLOB, StepOutcome.FAILED, exc)
        return StepResult(STEP_RELOCATE_BLOB, StepOutcome.ALREADY_APPLIED)

    def _delete_pending(self, item_id: str) -> StepResult:
        try:
            self._metadata.delete_pending(item_id)
        except RecordNotFoundError:
            logger.warning(
                "approve step already applied | item=%s | step=%s", item_id, STEP_DELETE_PENDING
            )
            return StepResult(STEP_DELETE_PENDING, StepOutcome.ALREADY_APPLIED)
        except StoreError as exc:
            return StepResult(STEP_DELETE_PENDING, StepOutcome.FAILED, exc)
        return StepResult(STEP_DELETE_PENDING, StepOutcome.APPLIED)
