"""Tagged step outcomes for the approval and rejection workflows.

Each workflow step reports one of three outcomes instead of a boolean,
which keeps the skip-on-already-applied logic explicit:

- ``APPLIED``         — the step made its durable change just now.
- ``ALREADY_APPLIED`` — the durable change was found to exist already.
- ``FAILED``          — the store call failed genuinely.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from geo_moderation.models.coordinate import Coordinate


class StepOutcome(enum.Enum):
    """Result tag of a single workflow step."""

    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StepResult:
    """Outcome of one workflow step.

    Attributes:
        step: Step name (e.g. ``"insert_published"``).
        outcome: The outcome tag.
        error: The store exception for ``FAILED`` steps.
    """

    step: str
    outcome: StepOutcome
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is not StepOutcome.FAILED

    def to_dict(self) -> dict[str, object]:
        return {
            "step": self.step,
            "outcome": self.outcome.value,
            "error": str(self.error) if self.error is not None else "",
        }


@dataclass(frozen=True, slots=True)
class ApprovalResult:
    """Completed approval of one item."""

    item_id: str
    coordinate: Coordinate
    steps: list[StepResult] = field(default_factory=list)

    @property
    def already_published(self) -> bool:
        """True when every step found its effect already in place."""
        return bool(self.steps) and all(
            s.outcome is StepOutcome.ALREADY_APPLIED for s in self.steps
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "item_id": self.item_id,
            "coordinate": self.coordinate.to_dict(),
            "already_published": self.already_published,
            "steps": [s.to_dict() for s in self.steps],
        }


@dataclass(frozen=True, slots=True)
class RejectionResult:
    """Rejection of one item, possibly with an orphaned blob."""

    item_id: str
    steps: list[StepResult] = field(default_factory=list)

    @property
    def cleanup_complete(self) -> bool:
        return all(s.succeeded for s in self.steps)

    def to_dict(self) -> dict[str, object]:
        return {
            "item_id": self.item_id,
            "cleanup_complete": self.cleanup_complete,
            "steps": [s.to_dict() for s in self.steps],
        }
