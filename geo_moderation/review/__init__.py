"""Reviewer session state: position editor and moderation queue."""

from geo_moderation.review.editor import EditorState, PositionEditor
from geo_moderation.review.queue import ModerationQueue, NoSelectionError, UnknownItemError

__all__ = [
    "EditorState",
    "ModerationQueue",
    "NoSelectionError",
    "PositionEditor",
    "UnknownItemError",
]
