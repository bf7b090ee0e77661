"""Position editor — the reviewer's coordinate edit session.

The editor is an immutable value.  Every transition returns a new
editor, so the committed coordinate can only change through ``save()``
and an abandoned session cannot leak into the next item::

    VIEWING --enter_edit()--> EDITING
    EDITING --select_point()--> EDITING     (tentative replaced, truncated)
    EDITING --save()--------> VIEWING       (committed <- tentative)
    EDITING --cancel()------> VIEWING       (tentative <- committed)

Pointer selections while ``VIEWING`` are ignored.  ``save()`` does not
persist anything; the committed coordinate is only written by a later
approval.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from geo_moderation.models.coordinate import Coordinate


class EditorState(enum.Enum):
    """Edit-session state."""

    VIEWING = "viewing"
    EDITING = "editing"


@dataclass(frozen=True, slots=True)
class PositionEditor:
    """Committed and tentative coordinate of the selected item.

    Attributes:
        committed: Coordinate that approval will use.
        tentative: In-progress edit; authoritative only while editing.
        state: Current edit-session state.
    """

    committed: Coordinate
    tentative: Coordinate
    state: EditorState = EditorState.VIEWING

    @classmethod
    def for_coordinate(cls, coordinate: Coordinate) -> PositionEditor:
        """Fresh session for a newly selected item."""
        return cls(committed=coordinate, tentative=coordinate)

    @property
    def active(self) -> bool:
        return self.state is EditorState.EDITING

    @property
    def displayed(self) -> Coordinate:
        """Coordinate the map marker should show."""
        return self.tentative if self.active else self.committed

    def enter_edit(self) -> PositionEditor:
        if self.active:
            return self
        return replace(self, state=EditorState.EDITING)

    def select_point(self, latitude: float, longitude: float) -> PositionEditor:
        """Replace the tentative coordinate with a picked map point."""
        if not self.active:
            return self
        return replace(self, tentative=Coordinate.truncated(latitude, longitude))

    def save(self) -> PositionEditor:
        if not self.active:
            return self
        return PositionEditor(committed=self.tentative, tentative=self.tentative)

    def cancel(self) -> PositionEditor:
        if not self.active:
            return self
        return PositionEditor(committed=self.committed, tentative=self.committed)
