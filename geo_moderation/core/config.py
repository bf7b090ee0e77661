"""Moderation configuration loaded from environment variables.

Azure Functions app settings (or ``local.settings.json`` for local dev)
are the source of truth.  ``from_env()`` validates eagerly and raises
``ConfigValidationError`` so a misconfigured deployment fails at startup
instead of halfway through an approval.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from geo_moderation.core.constants import (
    BLOB_BACKENDS,
    DEFAULT_BLOB_EXTENSION,
    DEFAULT_BUCKET,
    DEFAULT_PENDING_PREFIX,
    DEFAULT_PENDING_TABLE,
    DEFAULT_PUBLISHED_PREFIX,
    DEFAULT_PUBLISHED_TABLE,
    METADATA_BACKENDS,
    SUPABASE_BACKEND,
)
from geo_moderation.core.exceptions import ModerationError


class ConfigValidationError(ModerationError):
    """Raised when configuration values are invalid.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ModerationConfig:
    """Immutable moderation configuration.

    Attributes:
        pending_table: Metadata table of submissions awaiting review.
        published_table: Metadata table of approved submissions.
        bucket: Bucket / container holding pending and published blobs.
        pending_prefix: Blob prefix for pending images.
        published_prefix: Blob prefix for published images.
        blob_extension: File extension appended to item ids to form blob keys.
        metadata_backend: ``supabase`` or ``memory``.
        blob_backend: ``supabase``, ``azure`` or ``memory``.
        supabase_url: Supabase project URL.
        supabase_key: Supabase service (or anon) key.
    """

    pending_table: str = DEFAULT_PENDING_TABLE
    published_table: str = DEFAULT_PUBLISHED_TABLE
    bucket: str = DEFAULT_BUCKET
    pending_prefix: str = DEFAULT_PENDING_PREFIX
    published_prefix: str = DEFAULT_PUBLISHED_PREFIX
    blob_extension: str = DEFAULT_BLOB_EXTENSION
    metadata_backend: str = SUPABASE_BACKEND
    blob_backend: str = SUPABASE_BACKEND
    supabase_url: str = ""
    supabase_key: str = ""

    @classmethod
    def from_env(cls) -> ModerationConfig:
        """Load and validate configuration from environment variables.

        ``SUPABASE_SERVICE_KEY`` takes precedence over ``SUPABASE_ANON_KEY``
        for server-side use.

        Raises:
            ConfigValidationError: If a value is empty, unknown or the
                chosen backend is missing its credentials.
        """
        config = cls(
            pending_table=os.getenv("MODERATION_PENDING_TABLE", DEFAULT_PENDING_TABLE),
            published_table=os.getenv("MODERATION_PUBLISHED_TABLE", DEFAULT_PUBLISHED_TABLE),
            bucket=os.getenv("MODERATION_BUCKET", DEFAULT_BUCKET),
            pending_prefix=os.getenv("MODERATION_PENDING_PREFIX", DEFAULT_PENDING_PREFIX),
            published_prefix=os.getenv("MODERATION_PUBLISHED_PREFIX", DEFAULT_PUBLISHED_PREFIX),
            blob_extension=os.getenv("MODERATION_BLOB_EXTENSION", DEFAULT_BLOB_EXTENSION),
            metadata_backend=os.getenv("MODERATION_METADATA_BACKEND", SUPABASE_BACKEND),
            blob_backend=os.getenv("MODERATION_BLOB_BACKEND", SUPABASE_BACKEND),
            supabase_url=os.getenv("SUPABASE_URL", "").strip(),
            supabase_key=(
                os.getenv("SUPABASE_SERVICE_KEY", "").strip()
                or os.getenv("SUPABASE_ANON_KEY", "").strip()
            ),
        )
        _validate(config)
        return config

    @property
    def uses_supabase(self) -> bool:
        """Whether either store is backed by Supabase."""
        return SUPABASE_BACKEND in (self.metadata_backend, self.blob_backend)


def _validate(config: ModerationConfig) -> None:
    """Validate configuration values.  Raises ``ConfigValidationError``."""
    for key, value in (
        ("MODERATION_PENDING_TABLE", config.pending_table),
        ("MODERATION_PUBLISHED_TABLE", config.published_table),
        ("MODERATION_BUCKET", config.bucket),
        ("MODERATION_PENDING_PREFIX", config.pending_prefix),
        ("MODERATION_PUBLISHED_PREFIX", config.published_prefix),
    ):
        if not value.strip():
            raise ConfigValidationError(key, value, "must not be empty")

    if config.pending_table == config.published_table:
        raise ConfigValidationError(
            "MODERATION_PUBLISHED_TABLE",
            config.published_table,
            "must differ from MODERATION_PENDING_TABLE",
        )

    if config.pending_prefix.strip("/") == config.published_prefix.strip("/"):
        raise ConfigValidationError(
            "MODERATION_PUBLISHED_PREFIX",
            config.published_prefix,
            "must differ from MODERATION_PENDING_PREFIX",
        )

    if config.blob_extension and not config.blob_extension.startswith("."):
        raise ConfigValidationError(
            "MODERATION_BLOB_EXTENSION",
            config.blob_extension,
            "must start with '.' (or be empty)",
        )

    if config.metadata_backend not in METADATA_BACKENDS:
        raise ConfigValidationError(
            "MODERATION_METADATA_BACKEND",
            config.metadata_backend,
            f"must be one of {', '.join(sorted(METADATA_BACKENDS))}",
        )

    if config.blob_backend not in BLOB_BACKENDS:
        raise ConfigValidationError(
            "MODERATION_BLOB_BACKEND",
            config.blob_backend,
            f"must be one of {', '.join(sorted(BLOB_BACKENDS))}",
        )

    if config.uses_supabase:
        if not config.supabase_url:
            raise ConfigValidationError(
                "SUPABASE_URL", config.supabase_url, "required for the supabase backend"
            )
        if not config.supabase_key:
            raise ConfigValidationError(
                "SUPABASE_SERVICE_KEY",
                "",
                "required for the supabase backend (or set SUPABASE_ANON_KEY)",
            )
