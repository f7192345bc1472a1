"""In-memory persistence adapters."""
from .in_memory_directory import InMemoryEntitySnapshotSource, InMemoryRecipientDirectory, InMemoryTemplateRepository
from .in_memory_workflow_repository import InMemoryDeliveryLog, InMemoryWorkflowRepository

__all__ = [
    "InMemoryDeliveryLog",
    "InMemoryEntitySnapshotSource",
    "InMemoryRecipientDirectory",
    "InMemoryTemplateRepository",
    "InMemoryWorkflowRepository",
]
