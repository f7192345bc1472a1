"""
Workflow Status Enum.

Lifecycle of a persisted workflow record.
"""
from enum import Enum


class WorkflowStatus(str, Enum):
    """Workflow status values."""

    PENDING = "pending"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
