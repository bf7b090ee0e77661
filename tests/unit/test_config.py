"""Tests for moderation configuration loading and validation."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from geo_moderation.core.config import ConfigValidationError, ModerationConfig
from geo_moderation.core.constants import (
    DEFAULT_BUCKET,
    DEFAULT_PENDING_PREFIX,
    DEFAULT_PENDING_TABLE,
    DEFAULT_PUBLISHED_PREFIX,
    DEFAULT_PUBLISHED_TABLE,
)

_SUPABASE_ENV = {
    "SUPABASE_URL": "https://example.supabase.co",
    "SUPABASE_SERVICE_KEY": "service-key",
}

_MEMORY_ENV = {
    "MODERATION_METADATA_BACKEND": "memory",
    "MODERATION_BLOB_BACKEND": "memory",
}


class TestDefaults:
    """Default values match the production layout."""

    def test_dataclass_defaults(self) -> None:
        config = ModerationConfig()
        assert config.pending_table == DEFAULT_PENDING_TABLE == "need_approval"
        assert config.published_table == DEFAULT_PUBLISHED_TABLE == "locs"
        assert config.bucket == DEFAULT_BUCKET == "locs"
        assert config.pending_prefix == DEFAULT_PENDING_PREFIX == "not_approved"
        assert config.published_prefix == DEFAULT_PUBLISHED_PREFIX == "image"
        assert config.blob_extension == ".jpg"
        assert config.uses_supabase is True

    def test_frozen(self) -> None:
        config = ModerationConfig()
        with pytest.raises(AttributeError):
            config.bucket = "other"  # type: ignore[misc]


class TestFromEnv:
    """Environment loading."""

    def test_supabase_defaults(self) -> None:
        with patch.dict(os.environ, _SUPABASE_ENV, clear=True):
            config = ModerationConfig.from_env()
        assert config.supabase_url == "https://example.supabase.co"
        assert config.supabase_key == "service-key"
        assert config.metadata_backend == "supabase"

    def test_anon_key_fallback(self) -> None:
        env = {"SUPABASE_URL": "https://example.supabase.co", "SUPABASE_ANON_KEY": "anon"}
        with patch.dict(os.environ, env, clear=True):
            config = ModerationConfig.from_env()
        assert config.supabase_key == "anon"

    def test_service_key_wins_over_anon(self) -> None:
        env = {**_SUPABASE_ENV, "SUPABASE_ANON_KEY": "anon"}
        with patch.dict(os.environ, env, clear=True):
            config = ModerationConfig.from_env()
        assert config.supabase_key == "service-key"

    def test_memory_backends_need_no_credentials(self) -> None:
        with patch.dict(os.environ, _MEMORY_ENV, clear=True):
            config = ModerationConfig.from_env()
        assert config.uses_supabase is False

    def test_overrides(self) -> None:
        env = {
            **_MEMORY_ENV,
            "MODERATION_PENDING_TABLE": "queue",
            "MODERATION_PUBLISHED_TABLE": "published",
            "MODERATION_BUCKET": "photos",
            "MODERATION_PENDING_PREFIX": "incoming",
            "MODERATION_PUBLISHED_PREFIX": "public",
            "MODERATION_BLOB_EXTENSION": ".png",
        }
        with patch.dict(os.environ, env, clear=True):
            config = ModerationConfig.from_env()
        assert config.pending_table == "queue"
        assert config.published_table == "published"
        assert config.bucket == "photos"
        assert config.pending_prefix == "incoming"
        assert config.published_prefix == "public"
        assert config.blob_extension == ".png"

    def test_azure_blob_with_supabase_metadata(self) -> None:
        env = {**_SUPABASE_ENV, "MODERATION_BLOB_BACKEND": "azure"}
        with patch.dict(os.environ, env, clear=True):
            config = ModerationConfig.from_env()
        assert config.blob_backend == "azure"


class TestValidation:
    """Invalid values raise ConfigValidationError."""

    def _load(self, **overrides: str) -> ModerationConfig:
        with patch.dict(os.environ, {**_MEMORY_ENV, **overrides}, clear=True):
            return ModerationConfig.from_env()

    def test_missing_supabase_url(self) -> None:
        with (
            patch.dict(os.environ, {"SUPABASE_SERVICE_KEY": "k"}, clear=True),
            pytest.raises(ConfigValidationError, match="SUPABASE_URL"),
        ):
            ModerationConfig.from_env()

    def test_missing_supabase_key(self) -> None:
        with (
            patch.dict(os.environ, {"SUPABASE_URL": "https://x.supabase.co"}, clear=True),
            pytest.raises(ConfigValidationError, match="SUPABASE_SERVICE_KEY"),
        ):
            ModerationConfig.from_env()

    def test_empty_bucket(self) -> None:
        with pytest.raises(ConfigValidationError, match="MODERATION_BUCKET"):
            self._load(MODERATION_BUCKET="  ")

    def test_same_tables(self) -> None:
        with pytest.raises(ConfigValidationError, match="MODERATION_PUBLISHED_TABLE"):
            self._load(MODERATION_PENDING_TABLE="locs", MODERATION_PUBLISHED_TABLE="locs")

    def test_same_prefixes(self) -> None:
        with pytest.raises(ConfigValidationError, match="MODERATION_PUBLISHED_PREFIX"):
            self._load(MODERATION_PENDING_PREFIX="image/", MODERATION_PUBLISHED_PREFIX="image")

    def test_extension_without_dot(self) -> None:
        with pytest.raises(ConfigValidationError, match="MODERATION_BLOB_EXTENSION"):
            self._load(MODERATION_BLOB_EXTENSION="jpg")

    def test_empty_extension_allowed(self) -> None:
        assert self._load(MODERATION_BLOB_EXTENSION="").blob_extension == ""

    def test_unknown_metadata_backend(self) -> None:
        with pytest.raises(ConfigValidationError, match="MODERATION_METADATA_BACKEND"):
            self._load(MODERATION_METADATA_BACKEND="azure")

    def test_unknown_blob_backend(self) -> None:
        with pytest.raises(ConfigValidationError, match="MODERATION_BLOB_BACKEND"):
            self._load(MODERATION_BLOB_BACKEND="s3")

    def test_error_attributes(self) -> None:
        with pytest.raises(ConfigValidationError) as ctx:
            self._load(MODERATION_BLOB_BACKEND="s3")
        assert ctx.value.key == "MODERATION_BLOB_BACKEND"
        assert ctx.value.value == "s3"
