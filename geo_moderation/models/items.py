"""Pending and published item models.

Items are keyed by their filename without extension; the same id
addresses the metadata row and the image blob.
"""

from __future__ import annotations

from dataclasses import dataclass

from geo_moderation.core.constants import ID_COLUMN, LATITUDE_COLUMN, LONGITUDE_COLUMN
from geo_moderation.core.exceptions import ContractError
from geo_moderation.models.coordinate import Coordinate


@dataclass(frozen=True, slots=True)
class PendingItem:
    """A submission awaiting a reviewer decision.

    Attributes:
        id: Unique, stable identifier derived from the blob key.
        latitude: Submitted latitude in decimal degrees.
        longitude: Submitted longitude in decimal degrees.
    """

    id: str
    latitude: float
    longitude: float

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    def with_coordinate(self, coordinate: Coordinate) -> PendingItem:
        """Return a copy carrying *coordinate* (in-memory only)."""
        return PendingItem(self.id, coordinate.latitude, coordinate.longitude)

    @classmethod
    def from_row(cls, row: dict[str, object]) -> PendingItem:
        """Build from a metadata row (``filename``, ``lat``, ``lng``).

        Raises:
            ContractError: If the id is missing or a coordinate is not numeric.
        """
        item_id, latitude, longitude = _parse_row(row, "PendingItem")
        return cls(item_id, latitude, longitude)


@dataclass(frozen=True, slots=True)
class PublishedItem:
    """A submission promoted to the public-facing record."""

    id: str
    latitude: float
    longitude: float

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    def to_row(self) -> dict[str, object]:
        return {
            ID_COLUMN: self.id,
            LATITUDE_COLUMN: self.latitude,
            LONGITUDE_COLUMN: self.longitude,
        }

    @classmethod
    def from_row(cls, row: dict[str, object]) -> PublishedItem:
        item_id, latitude, longitude = _parse_row(row, "PublishedItem")
        return cls(item_id, latitude, longitude)


def _parse_row(row: dict[str, object], model: str) -> tuple[str, float, float]:
    item_id = str(row.get(ID_COLUMN) or "").strip()
    if not item_id:
        msg = f"{model} row is missing {ID_COLUMN!r}: {row!r}"
        raise ContractError(msg, stage="metadata", code="INVALID_ROW")
    try:
        latitude = float(row[LATITUDE_COLUMN])  # type: ignore[arg-type]
        longitude = float(row[LONGITUDE_COLUMN])  # type: ignore[arg-type]
    except (KeyError, TypeError, ValueError) as exc:
        msg = f"{model} row {item_id!r} has a missing or non-numeric coordinate"
        raise ContractError(msg, stage="metadata", code="INVALID_ROW", item_id=item_id) from exc
    return item_id, latitude, longitude
