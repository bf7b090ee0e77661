"""Thin ingress boundary helpers for the HTTP entrypoints.

Keeps ``function_app.py`` down to bindings and handoff:

- **decode_json_body** — normalises an HTTP body (bytes, str or an
  already-parsed dict) into a dict, raising ``ContractError`` on junk.
- **get_supabase_client** — creates a Supabase client from config.
- **get_blob_service_client** — creates an ``azure.storage.blob``
  client from the ``AzureWebJobsStorage`` environment variable.
"""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any

from geo_moderation.core.exceptions import ContractError

if TYPE_CHECKING:
    from azure.storage.blob import BlobServiceClient
    from supabase import Client

    from geo_moderation.core.config import ModerationConfig

logger = logging.getLogger("geo_moderation.core.ingress")


# ---------------------------------------------------------------------------
# Request body decoding
# ---------------------------------------------------------------------------


def decode_json_body(raw: bytes | str | dict[str, Any] | None, *, operation: str) -> dict[str, Any]:
    """Normalise an HTTP request body to a plain dict.

    An empty body decodes to ``{}``.

    Raises:
        ContractError: If *raw* is not a JSON object.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"{operation}: request body is not UTF-8"
            raise ContractError(msg, stage=operation, code="INVALID_JSON") from exc
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, ValueError) as exc:
            msg = f"{operation}: request body is not valid JSON: {exc}"
            raise ContractError(msg, stage=operation, code="INVALID_JSON") from exc
        if not isinstance(parsed, dict):
            msg = f"{operation}: request body must be a JSON object, got {type(parsed).__name__}"
            raise ContractError(msg, stage=operation, code="INVALID_INPUT_TYPE")
        return parsed
    msg = f"{operation}: unexpected request body type: {type(raw).__name__}"
    raise ContractError(msg, stage=operation, code="INVALID_INPUT_TYPE")


# ---------------------------------------------------------------------------
# Storage client factories
# ---------------------------------------------------------------------------


def get_supabase_client(config: ModerationConfig) -> Client:
    """Create a Supabase client from the configured URL and key.

    Raises:
        ContractError: If the URL or key is not configured.
    """
    from supabase import create_client

    if not config.supabase_url or not config.supabase_key:
        msg = "SUPABASE_URL and SUPABASE_SERVICE_KEY (or SUPABASE_ANON_KEY) must be set"
        raise ContractError(msg, stage="ingress", code="MISSING_SUPABASE_CREDENTIALS")

    logger.debug("Creating Supabase client | url=%s", config.supabase_url)
    return create_client(config.supabase_url, config.supabase_key)


def get_blob_service_client() -> BlobServiceClient:
    """Create a ``BlobServiceClient`` from the ``AzureWebJobsStorage`` env var.

    Raises:
        ContractError: If the environment variable is not set.
    """
    from azure.storage.blob import BlobServiceClient

    connection_string = os.environ.get("AzureWebJobsStorage", "")  # noqa: SIM112
    if not connection_string:
        msg = "AzureWebJobsStorage environment variable is not set"
        raise ContractError(msg, stage="ingress", code="MISSING_CONNECTION_STRING")

    return BlobServiceClient.from_connection_string(connection_string)
