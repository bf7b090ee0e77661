"""Moderation workflows spanning the metadata and blob stores."""

from geo_moderation.workflows.approval import ApprovalWorkflow, ItemNotPendingError
from geo_moderation.workflows.rejection import RejectionWorkflow

__all__ = ["ApprovalWorkflow", "ItemNotPendingError", "RejectionWorkflow"]
