"""Tests for the typed HTTP payload models."""

from __future__ import annotations

import pytest

from geo_moderation.core.exceptions import ContractError
from geo_moderation.models.coordinate import Coordinate
from geo_moderation.models.payloads import (
    ApproveRequest,
    PendingItemView,
    PendingListResponse,
    parse_payload,
)


class TestApproveRequest:
    """Approve body parsing."""

    def test_short_keys(self) -> None:
        request = parse_payload({"lat": 1.5, "lng": 2.5}, ApproveRequest, operation="approve")
        assert request.to_coordinate() == Coordinate(1.5, 2.5)

    def test_long_keys(self) -> None:
        request = parse_payload(
            {"latitude": 1.5, "longitude": 2.5}, ApproveRequest, operation="approve"
        )
        assert request.to_coordinate() == Coordinate(1.5, 2.5)

    def test_numeric_strings_coerced(self) -> None:
        request = parse_payload({"lat": "1.5", "lng": "2"}, ApproveRequest, operation="approve")
        assert request.to_coordinate() == Coordinate(1.5, 2.0)

    def test_extra_keys_ignored(self) -> None:
        request = parse_payload(
            {"lat": 1.5, "lng": 2.5, "filename": "IMG_1"}, ApproveRequest, operation="approve"
        )
        assert request.latitude == 1.5

    def test_missing_field(self) -> None:
        with pytest.raises(ContractError, match="lng") as exc_info:
            parse_payload({"lat": 1.5}, ApproveRequest, operation="approve", item_id="IMG_1")
        assert exc_info.value.code == "INVALID_BODY"
        assert exc_info.value.item_id == "IMG_1"

    def test_non_numeric(self) -> None:
        with pytest.raises(ContractError):
            parse_payload({"lat": "north", "lng": 2.5}, ApproveRequest, operation="approve")

    def test_missing_body(self) -> None:
        with pytest.raises(ContractError) as exc_info:
            parse_payload(None, ApproveRequest, operation="approve")
        assert exc_info.value.code == "MISSING_BODY"

    def test_not_an_object(self) -> None:
        with pytest.raises(ContractError, match="JSON object"):
            parse_payload([1, 2], ApproveRequest, operation="approve")  # type: ignore[arg-type]


class TestPendingListResponse:
    """Listing serialisation."""

    def test_model_dump(self) -> None:
        response = PendingListResponse(
            items=[PendingItemView(filename="IMG_1", lat=1.5, lng=2.5, thumbnail_url="u")],
            count=1,
        )
        assert response.model_dump() == {
            "items": [{"filename": "IMG_1", "lat": 1.5, "lng": 2.5, "thumbnail_url": "u"}],
            "count": 1,
        }

    def test_defaults(self) -> None:
        assert PendingListResponse().model_dump() == {"items": [], "count": 0}
