"""Moderation queue — in-memory pending items, selection and edit session.

The queue is the single owner of reviewer-session state.  It is only
mutated through its methods, triggered either by a reviewer action
(select, edit) or by the outcome of a workflow call (approve, reject).

Selection rule: whenever the selected id changes, the previous edit
session is discarded and a fresh ``VIEWING`` editor is built from the
newly selected item's coordinate.  Drafts are never carried across
items.

Outcome rule: a successful approval or rejection removes the item, and
clears the selection when that item was selected.  A failed one leaves
the queue untouched, except for a rejection whose image cleanup failed:
that item is gone from the pending table, so it leaves the queue and the
error is re-raised as a warning for the reviewer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geo_moderation.core.exceptions import CleanupIncompleteError, ValidationError
from geo_moderation.review.editor import PositionEditor
from geo_moderation.utils.blob_paths import BlobLayout
from geo_moderation.workflows.approval import ApprovalWorkflow
from geo_moderation.workflows.rejection import RejectionWorkflow

if TYPE_CHECKING:
    from geo_moderation.models.items import PendingItem
    from geo_moderation.models.outcomes import ApprovalResult, RejectionResult
    from geo_moderation.stores.base import BlobStore, MetadataStore

logger = logging.getLogger("geo_moderation.review.queue")


class UnknownItemError(ValidationError):
    """Raised when an operation names an id that is not in the queue."""

    default_stage = "queue"
    default_code = "UNKNOWN_ITEM"


class NoSelectionError(ValidationError):
    """Raised when an operation needs a selected item and there is none."""

    default_stage = "queue"
    default_code = "NO_SELECTION"


class ModerationQueue:
    """Reviewer session over the pending items.

    Example usage::

        queue = ModerationQueue(metadata_store, blob_store)
        queue.load()                      # selects the first item
        queue.enter_edit()
        queue.pick_position(1.34839991, 103.68310012)
        queue.save_edit()
        queue.approve()                   # uses the saved coordinate
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
        self._approval = ApprovalWorkflow(metadata_store, blob_store, layout=self._layout)
        self._rejection = RejectionWorkflow(metadata_store, blob_store, layout=self._layout)
        self._items: dict[str, PendingItem] = {}
        self._selected_id: str | None = None
        self._editor: PositionEditor | None = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[PendingItem]:
        return list(self._items.values())

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_item(self) -> PendingItem | None:
        if self._selected_id is None:
            return None
        return self._items.get(self._selected_id)

    @property
    def editor(self) -> PositionEditor | None:
        """Edit session of the selected item, ``None`` without a selection."""
        return self._editor

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def get(self, item_id: str) -> PendingItem:
        try:
            return self._items[item_id]
        except KeyError:
            msg = f"Item {item_id!r} is not in the moderation queue"
            raise UnknownItemError(msg, item_id=item_id) from None

    def thumbnail_url(self, item_id: str) -> str:
        """Public URL of the pending image for *item_id*."""
        return self._blobs.public_url(self._layout.pending_key(item_id))

    # ------------------------------------------------------------------
    # Loading and selection
    # ------------------------------------------------------------------

    def load(self) -> list[PendingItem]:
        """Replace the queue with the store's pending items.

        Selects the first item, or nothing when the queue is empty.

        Raises:
            StoreError: If the pending items cannot be listed; the queue
                is left unchanged.
        """
        pending = self._metadata.list_pending()
        self._items = {item.id: item for item in pending}
        self._selected_id = None
        self._editor = None
        if pending:
            self.select(pending[0].id)
        logger.info("Moderation queue loaded | items=%d", len(self._items))
        return self.items

    def select(self, item_id: str | None) -> None:
        """Focus *item_id*, discarding any edit session of the previous item.

        Raises:
            UnknownItemError: If *item_id* is not in the queue.
        """
        if item_id is None:
            self._selected_id = None
            self._editor = None
            return
        item = self.get(item_id)
        if item_id == self._selected_id:
            return
        if self._editor is not None and self._editor.active:
            logger.debug(
                "Discarding unsaved edit | item=%s | next=%s", self._selected_id, item_id
            )
        self._selected_id = item_id
        self._editor = PositionEditor.for_coordinate(item.coordinate)

    # ------------------------------------------------------------------
    # Edit session
    # ------------------------------------------------------------------

    def enter_edit(self) -> PositionEditor:
        self._editor = self._require_editor().enter_edit()
        return self._editor

    def pick_position(self, latitude: float, longitude: float) -> PositionEditor:
        """Forward a map click; ignored unless editing."""
        self._editor = self._require_editor().select_point(latitude, longitude)
        return self._editor

    def save_edit(self) -> PositionEditor:
        """Commit the tentative coordinate to the in-memory item."""
        editor = self._require_editor()
        if not editor.active:
            return editor
        self._editor = editor.save()
        item_id = self._resolve(None)
        self._items[item_id] = self._items[item_id].with_coordinate(self._editor.committed)
        logger.info(
            "Position saved | item=%s | lat=%s | lng=%s",
            item_id,
            self._editor.committed.latitude,
            self._editor.committed.longitude,
        )
        return self._editor

    def cancel_edit(self) -> PositionEditor:
        self._editor = self._require_editor().cancel()
        return self._editor

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def approve(self, item_id: str | None = None) -> ApprovalResult:
        """Approve *item_id* (default: the selection) at its committed coordinate.

        An unsaved tentative coordinate is never used.

        Raises:
            NoSelectionError / UnknownItemError: Before any side effect.
            ModerationError: Any workflow error; the queue is unchanged.
        """
        item_id = self._resolve(item_id)
        if item_id == self._selected_id and self._editor is not None:
            coordinate = self._editor.committed
        else:
            coordinate = self._items[item_id].coordinate
        result = self._approval.approve(item_id, coordinate)
        self._remove(item_id)
        return result

    def reject(self, item_id: str | None = None) -> RejectionResult:
        """Reject *item_id* (default: the selection).

        Raises:
            NoSelectionError / UnknownItemError: Before any side effect.
            CleanupIncompleteError: The item was removed from the queue but
                its image is orphaned.
            ModerationError: Any other workflow error; the queue is unchanged.
        """
        item_id = self._resolve(item_id)
        try:
            result = self._rejection.reject(item_id)
        except CleanupIncompleteError:
            self._remove(item_id)
            logger.warning("Item removed with orphaned image | item=%s", item_id)
            raise
        self._remove(item_id)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_editor(self) -> PositionEditor:
        if self._editor is None:
            msg = "No item is selected"
            raise NoSelectionError(msg)
        return self._editor

    def _resolve(self, item_id: str | None) -> str:
        if item_id is None:
            if self._selected_id is None:
                msg = "No item is selected"
                raise NoSelectionError(msg)
            return self._selected_id
        self.get(item_id)
        return item_id

    def _remove(self, item_id: str) -> None:
        self._items.pop(item_id, None)
        if item_id == self._selected_id:
            self._selected_id = None
            self._editor = None
