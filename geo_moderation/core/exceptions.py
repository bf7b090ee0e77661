"""Unified moderation exception taxonomy.

Every domain exception inherits from ``ModerationError`` and carries
structured context fields (stage, code, item id, retryability) so the
presentation layer can decide whether re-issuing an operation is safe.

Taxonomy categories
-------------------
- ``ValidationError``        — bad input, rejected before any side effect.
- ``ResourceError``          — a store call failed genuinely; retryable.
- ``InconsistentStateError`` — approval published the record but could not
  relocate the blob; retry the whole approval.
- ``CleanupIncompleteError`` — rejection removed the record but left the
  blob behind; the item is no longer pending.
- ``ContractError``          — request payload drift, never retryable.

"Already applied" is not an exception: workflows report it as a step
outcome (see ``geo_moderation.models.outcomes``).

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for HTTP responses and logging.
"""

from __future__ import annotations


class ModerationError(Exception):
    """Base exception for all moderation-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Operation where the error occurred
            (e.g. ``"approve"``, ``"reject"``, ``"config"``).
        code: Machine-readable error code (e.g. ``"RESOURCE_FAILED"``).
        retryable: Whether re-issuing the whole operation is safe.
        item_id: Identifier of the item being moderated, if any.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        item_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.item_id = item_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, InconsistentStateError):
            return "inconsistent"
        if isinstance(self, CleanupIncompleteError):
            return "cleanup_incomplete"
        if isinstance(self, ResourceError):
            return "resource"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "item_id": self.item_id,
        }


# ---------------------------------------------------------------------------
# Category classes
# ---------------------------------------------------------------------------


class ValidationError(ModerationError):
    """Input or domain-model validation failure. Never retryable."""

    default_code = "VALIDATION_FAILED"

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(ModerationError):
    """Request payload does not match the expected schema. Never retryable."""

    default_code = "CONTRACT_VIOLATION"

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ResourceError(ModerationError):
    """A metadata or blob store call failed genuinely.

    Attributes:
        store: Which collaborator failed (``"metadata"`` or ``"blob"``).
        step: Workflow step that was executing.
        cause: The underlying store exception.
    """

    default_code = "RESOURCE_FAILED"

    def __init__(
        self,
        message: str,
        *,
        store: str,
        step: str,
        cause: BaseException | None = None,
        **kwargs: object,
    ) -> None:
        self.store = store
        self.step = step
        self.cause = cause
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["store"] = self.store
        payload["step"] = self.step
        return payload


class InconsistentStateError(ResourceError):
    """Blob relocation failed after the published record was written.

    The pending record is intact and the item stays in the queue.
    Re-running the whole approval converges: the published insert is
    detected as already applied and only the relocation is retried.
    """

    default_code = "APPROVAL_INCONSISTENT"


class CleanupIncompleteError(ModerationError):
    """Rejection deleted the pending record but not its blob.

    The item is logically rejected and must leave the reviewer's queue;
    the orphaned blob is left for a background cleanup job.

    Attributes:
        result: The partial rejection result.
        cause: The underlying blob store exception.
    """

    default_stage = "reject"
    default_code = "REJECT_CLEANUP_INCOMPLETE"

    def __init__(
        self,
        message: str,
        *,
        result: object = None,
        cause: BaseException | None = None,
        **kwargs: object,
    ) -> None:
        self.result = result
        self.cause = cause
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]
