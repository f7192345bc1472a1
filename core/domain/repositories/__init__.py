"""Domain repository interfaces."""
from .workflow_repository import UPDATABLE_FIELDS, WorkflowRepository, check_updatable_fields

__all__ = ["UPDATABLE_FIELDS", "WorkflowRepository", "check_updatable_fields"]
