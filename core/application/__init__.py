"""Application layer - services, dispatchers, interfaces, and DTOs."""

from .dtos import NotificationRequestDTO, NotificationResultDTO, WorkflowDTO
from .interfaces import (
    IDeliveryLog,
    IEmailGateway,
    IEntitySnapshotSource,
    IPushGateway,
    IRecipientDirectory,
    ITemplateRepository,
)

__all__ = [
    # DTOs
    "NotificationRequestDTO",
    "NotificationResultDTO",
    "WorkflowDTO",
    # Interfaces
    "IDeliveryLog",
    "IEmailGateway",
    "IEntitySnapshotSource",
    "IPushGateway",
    "IRecipientDirectory",
    "ITemplateRepository",
]
