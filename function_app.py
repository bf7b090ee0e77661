"""Azure Functions entry point — geotagged photo moderation API.

Registers the HTTP routes the reviewer UI calls, using the Python v2
programming model.  All business logic lives in the ``geo_moderation``
package; this file only binds requests to workflows and renders
results.

Routes:
    GET  /api/pending                      pending items + thumbnail URLs
    POST /api/pending/{item_id}/approve    body ``{"lat": ..., "lng": ...}``
    POST /api/pending/{item_id}/reject
"""

from __future__ import annotations

import json
import logging

import azure.functions as func

from geo_moderation.core.config import ModerationConfig
from geo_moderation.core.exceptions import (
    CleanupIncompleteError,
    ContractError,
    ModerationError,
    ValidationError,
)
from geo_moderation.core.ingress import decode_json_body
from geo_moderation.models.payloads import (
    ApproveRequest,
    PendingItemView,
    PendingListResponse,
    parse_payload,
)
from geo_moderation.stores.factory import get_blob_store, get_metadata_store
from geo_moderation.utils.blob_paths import BlobLayout
from geo_moderation.workflows.approval import ApprovalWorkflow, ItemNotPendingError
from geo_moderation.workflows.rejection import RejectionWorkflow

app = func.FunctionApp(http_auth_level=func.AuthLevel.FUNCTION)

logger = logging.getLogger("geo_moderation.function_app")


def _json_response(payload: object, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(payload),
        status_code=status_code,
        mimetype="application/json",
    )


def _error_response(exc: ModerationError) -> func.HttpResponse:
    """Map the error taxonomy onto HTTP status codes."""
    if isinstance(exc, ItemNotPendingError):
        status = 404
    elif isinstance(exc, ContractError | ValidationError):
        status = 400
    elif exc.retryable:
        status = 503
    else:
        status = 500
    return _json_response({"error": exc.to_error_dict()}, status_code=status)


# ---------------------------------------------------------------------------
# HTTP: Pending listing
# ---------------------------------------------------------------------------


@app.function_name("list_pending")
@app.route(route="pending", methods=["GET"])
def list_pending(req: func.HttpRequest) -> func.HttpResponse:
    """Return every pending item with the public URL of its image."""
    try:
        config = ModerationConfig.from_env()
        layout = BlobLayout.from_config(config)
        blobs = get_blob_store(config)
        items = get_metadata_store(config).list_pending()
    except ModerationError as exc:
        logger.exception("list_pending failed")
        return _error_response(exc)

    response = PendingListResponse(
        items=[
            PendingItemView(
                filename=item.id,
                lat=item.latitude,
                lng=item.longitude,
                thumbnail_url=blobs.public_url(layout.pending_key(item.id)),
            )
            for item in items
        ],
        count=len(items),
    )
    logger.info("list_pending completed | count=%d", response.count)
    return _json_response(response.model_dump())


# ---------------------------------------------------------------------------
# HTTP: Approve
# ---------------------------------------------------------------------------


@app.function_name("approve_item")
@app.route(route="pending/{item_id}/approve", methods=["POST"])
def approve_item(req: func.HttpRequest) -> func.HttpResponse:
    """Publish a pending item at the reviewed coordinate."""
    item_id = req.route_params.get("item_id", "")
    try:
        body = decode_json_body(req.get_body(), operation="approve")
        request = parse_payload(body, ApproveRequest, operation="approve", item_id=item_id)
        config = ModerationConfig.from_env()
        workflow = ApprovalWorkflow(
            get_metadata_store(config),
            get_blob_store(config),
            layout=BlobLayout.from_config(config),
        )
        result = workflow.approve(item_id, request.to_coordinate())
    except ModerationError as exc:
        logger.warning("approve_item failed | item=%s | code=%s", item_id, exc.code)
        return _error_response(exc)

    return _json_response(result.to_dict())


# ---------------------------------------------------------------------------
# HTTP: Reject
# ---------------------------------------------------------------------------


@app.function_name("reject_item")
@app.route(route="pending/{item_id}/reject", methods=["POST"])
def reject_item(req: func.HttpRequest) -> func.HttpResponse:
    """Purge a pending item.

    A rejection whose image cleanup failed still answers 200: the item is
    no longer pending.  The body carries the warning for the reviewer.
    """
    item_id = req.route_params.get("item_id", "")
    try:
        config = ModerationConfig.from_env()
        workflow = RejectionWorkflow(
            get_metadata_store(config),
            get_blob_store(config),
            layout=BlobLayout.from_config(config),
        )
        result = workflow.reject(item_id)
    except CleanupIncompleteError as exc:
        logger.warning(
            "reject_item left orphaned blob | item=%s | code=%s | error=%s",
            item_id,
            exc.code,
            exc.message,
        )
        payload = exc.result.to_dict() if exc.result is not None else {"item_id": item_id}
        payload["warning"] = exc.to_error_dict()
        return _json_response(payload)
    except ModerationError as exc:
        logger.warning("reject_item failed | item=%s | code=%s", item_id, exc.code)
        return _error_response(exc)

    return _json_response(result.to_dict())
