"""Typed request/response payloads for the HTTP wiring layer.

Request bodies are parsed with pydantic so that key or type drift from
the reviewer UI is caught at the boundary and reported as a
``ContractError`` rather than surfacing deep inside a workflow.

Usage::

    from geo_moderation.models.payloads import ApproveRequest, parse_payload

    body = parse_payload(req.get_json(), ApproveRequest, operation="approve")
    coordinate = body.to_coordinate()
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from geo_moderation.core.exceptions import ContractError
from geo_moderation.models.coordinate import Coordinate

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApproveRequest(BaseModel):
    """Reviewer UI → approve endpoint.

    The coordinate is the committed editor coordinate, already cut to
    six decimal places on the client side.  Accepts ``lat``/``lng`` or
    ``latitude``/``longitude``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    latitude: float = Field(alias="lat")
    longitude: float = Field(alias="lng")

    def to_coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


class PendingItemView(BaseModel):
    """One row of the pending listing, with its thumbnail URL."""

    filename: str
    lat: float
    lng: float
    thumbnail_url: str = ""


class PendingListResponse(BaseModel):
    """Pending listing returned to the reviewer UI."""

    items: list[PendingItemView] = Field(default_factory=list)
    count: int = 0


def parse_payload(
    payload: dict[str, Any] | None,
    model: type[ModelT],
    *,
    operation: str,
    item_id: str = "",
) -> ModelT:
    """Validate *payload* against *model*.

    Raises:
        ContractError: If the payload is missing or does not match.
    """
    if payload is None:
        msg = f"{operation}: request body is required"
        raise ContractError(msg, stage=operation, code="MISSING_BODY", item_id=item_id)
    if not isinstance(payload, dict):
        msg = f"{operation}: request body must be a JSON object, got {type(payload).__name__}"
        raise ContractError(msg, stage=operation, code="INVALID_BODY", item_id=item_id)
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        msg = f"{operation}: invalid request body ({', '.join(fields)})"
        raise ContractError(msg, stage=operation, code="INVALID_BODY", item_id=item_id) from exc
