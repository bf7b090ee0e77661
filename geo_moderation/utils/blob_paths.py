"""Deterministic blob key generation for moderated images.

Every item id maps to exactly two keys inside the configured bucket:

    {pending_prefix}/{item_id}{extension}      e.g. not_approved/IMG_0042.jpg
    {published_prefix}/{item_id}{extension}    e.g. image/IMG_0042.jpg

Same id, same keys: relocation and purge can be re-issued safely.
"""

from __future__ import annotations

from dataclasses import dataclass

from geo_moderation.core.constants import (
    DEFAULT_BLOB_EXTENSION,
    DEFAULT_PENDING_PREFIX,
    DEFAULT_PUBLISHED_PREFIX,
)
from geo_moderation.core.exceptions import ValidationError


class InvalidItemIdError(ValidationError):
    """Raised when an item id cannot be turned into a blob key."""

    default_stage = "blob_paths"
    default_code = "ITEM_ID_INVALID"


def validate_item_id(item_id: str) -> str:
    """Return *item_id* stripped, or raise if it is unusable as a key segment.

    Raises:
        InvalidItemIdError: If the id is empty or contains a path separator.
    """
    cleaned = (item_id or "").strip()
    if not cleaned:
        msg = "Item id must be non-empty"
        raise InvalidItemIdError(msg)
    if "/" in cleaned or "\\" in cleaned or cleaned in {".", ".."}:
        msg = f"Item id {item_id!r} must not contain path separators"
        raise InvalidItemIdError(msg, item_id=cleaned)
    return cleaned


@dataclass(frozen=True, slots=True)
class BlobLayout:
    """Key layout of pending and published images within one bucket."""

    pending_prefix: str = DEFAULT_PENDING_PREFIX
    published_prefix: str = DEFAULT_PUBLISHED_PREFIX
    extension: str = DEFAULT_BLOB_EXTENSION

    @classmethod
    def from_config(cls, config: object) -> BlobLayout:
        """Build from a ``ModerationConfig``."""
        return cls(
            pending_prefix=config.pending_prefix,  # type: ignore[attr-defined]
            published_prefix=config.published_prefix,  # type: ignore[attr-defined]
            extension=config.blob_extension,  # type: ignore[attr-defined]
        )

    def pending_key(self, item_id: str) -> str:
        """Key of the image awaiting review."""
        return _join(self.pending_prefix, validate_item_id(item_id) + self.extension)

    def published_key(self, item_id: str) -> str:
        """Key of the image after approval."""
        return _join(self.published_prefix, validate_item_id(item_id) + self.extension)


def _join(prefix: str, name: str) -> str:
    prefix = prefix.strip("/")
    return f"{prefix}/{name}" if prefix else name
