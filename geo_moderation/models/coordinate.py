"""WGS 84 coordinate model and six-decimal truncation.

Coordinates picked on the map arrive with arbitrary precision.  They are
cut to six decimal places once, when they enter the position editor,
using ``floor(x * 1e6) / 1e6``: positive values are truncated, negative
values step toward negative infinity (``-0.0000009 -> -0.000001``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from geo_moderation.core.constants import COORDINATE_SCALE
from geo_moderation.core.exceptions import ValidationError

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0


class CoordinateValidationError(ValidationError):
    """Raised when a coordinate is non-finite or out of range."""

    default_stage = "coordinate"
    default_code = "COORDINATE_INVALID"


def truncate_6dp(value: float) -> float:
    """Cut *value* to six decimal places with floor semantics.

    Args:
        value: Latitude or longitude in decimal degrees.

    Returns:
        ``math.floor(value * 1e6) / 1e6``.  Non-finite input is returned
        unchanged so validation can report it.
    """
    if not math.isfinite(value):
        return value
    return math.floor(value * COORDINATE_SCALE) / COORDINATE_SCALE


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A (latitude, longitude) pair in decimal degrees.

    Attributes:
        latitude: Degrees north, -90..90.
        longitude: Degrees east, -180..180.
    """

    latitude: float
    longitude: float

    @classmethod
    def truncated(cls, latitude: float, longitude: float) -> Coordinate:
        """Build a coordinate with both fields cut to six decimal places."""
        return cls(truncate_6dp(float(latitude)), truncate_6dp(float(longitude)))

    def validate(self, *, item_id: str = "") -> Coordinate:
        """Check both fields are finite and in range.

        Returns:
            ``self``, to allow chaining.

        Raises:
            CoordinateValidationError: On NaN, infinity or out-of-range values.
        """
        _check("latitude", self.latitude, MIN_LATITUDE, MAX_LATITUDE, item_id)
        _check("longitude", self.longitude, MIN_LONGITUDE, MAX_LONGITUDE, item_id)
        return self

    def to_dict(self) -> dict[str, float]:
        """Serialise using the storage column names."""
        return {"lat": self.latitude, "lng": self.longitude}


def _check(name: str, value: float, low: float, high: float, item_id: str) -> None:
    if not isinstance(value, int | float) or isinstance(value, bool):
        msg = f"{name} must be a number, got {type(value).__name__}"
        raise CoordinateValidationError(msg, item_id=item_id)
    if not math.isfinite(value):
        msg = f"{name}={value!r} is not finite"
        raise CoordinateValidationError(msg, item_id=item_id)
    if not low <= value <= high:
        msg = f"{name}={value!r} is outside [{low}, {high}]"
        raise CoordinateValidationError(msg, item_id=item_id)
