"""Domain entities."""
from .content import ContentTemplate, RenderedContent
from .orchestration_request import OrchestrationRequest
from .outcome import ChannelOutcome, OrchestrationResult, RecipientFailure
from .recipient import RecipientResolution, ResolvedRecipient, UserContact
from .workflow_record import WorkflowRecord

__all__ = [
    "ChannelOutcome",
    "ContentTemplate",
    "OrchestrationRequest",
    "OrchestrationResult",
    "RecipientFailure",
    "RecipientResolution",
    "RenderedContent",
    "ResolvedRecipient",
    "UserContact",
    "WorkflowRecord",
]
