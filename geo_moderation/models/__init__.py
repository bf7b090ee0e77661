"""Data models.

- Coordinate: WGS 84 pair with six-decimal truncation
- PendingItem / PublishedItem: metadata rows keyed by item id
- StepOutcome / StepResult: tagged workflow step outcomes
- ApprovalResult / RejectionResult: workflow results
"""

from geo_moderation.models.coordinate import (
    Coordinate,
    CoordinateValidationError,
    truncate_6dp,
)
from geo_moderation.models.items import PendingItem, PublishedItem
from geo_moderation.models.outcomes import (
    ApprovalResult,
    RejectionResult,
    StepOutcome,
    StepResult,
)

__all__ = [
    "ApprovalResult",
    "Coordinate",
    "CoordinateValidationError",
    "PendingItem",
    "PublishedItem",
    "RejectionResult",
    "StepOutcome",
    "StepResult",
    "truncate_6dp",
]
