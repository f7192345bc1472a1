"""Application DTOs."""

from .notification_dto import (
    ButtonDTO,
    ChannelOutcomeDTO,
    EmailOptionsDTO,
    GroupMembersRecipientsDTO,
    NotificationRequestDTO,
    NotificationResultDTO,
    RecipientFailureDTO,
    RsvpRecipientsDTO,
    UserIdsRecipientsDTO,
    parse_notification_request,
    request_snapshot,
    result_snapshot,
)
from .workflow_dto import (
    RescheduleWorkflowDTO,
    RetryWorkflowDTO,
    RunDueResponseDTO,
    WorkflowActionDTO,
    WorkflowDTO,
    WorkflowListDTO,
    new_workflow_record,
)

__all__ = [
    "ButtonDTO",
    "ChannelOutcomeDTO",
    "EmailOptionsDTO",
    "GroupMembersRecipientsDTO",
    "NotificationRequestDTO",
    "NotificationResultDTO",
    "RecipientFailureDTO",
    "RsvpRecipientsDTO",
    "RescheduleWorkflowDTO",
    "RetryWorkflowDTO",
    "RunDueResponseDTO",
    "UserIdsRecipientsDTO",
    "WorkflowActionDTO",
    "WorkflowDTO",
    "WorkflowListDTO",
    "new_workflow_record",
    "parse_notification_request",
    "request_snapshot",
    "result_snapshot",
]
