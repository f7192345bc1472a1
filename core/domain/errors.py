"""
Domain errors.

Request and persistence errors are raised and surface to the caller.
Recipient and channel problems are never raised: they are captured as
``RecipientFailure`` entries on the orchestration result.
"""
from typing import Optional


class NotificationError(Exception):
    """Base class for all notification orchestration errors."""

    code = "NotificationError"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


# =============================================================================
# REQUEST ERRORS (fatal, nothing dispatched)
# =============================================================================

class InvalidRequest(NotificationError):
    """Ambiguous or incomplete orchestration request."""

    code = "InvalidRequest"


class TemplateNotFound(NotificationError):
    """No content template matches the requested key."""

    code = "TemplateNotFound"

    def __init__(self, template_key: str, channel: Optional[str] = None):
        where = f" for channel '{channel}'" if channel else ""
        super().__init__(f"Content template '{template_key}' not found{where}")
        self.template_key = template_key
        self.channel = channel


class UnknownScope(NotificationError):
    """A gathering or group referenced by a recipient spec does not exist."""

    code = "UnknownScope"

    def __init__(self, scope: str, scope_id: str):
        super().__init__(f"Unknown {scope}: {scope_id}")
        self.scope = scope
        self.scope_id = scope_id


class FailedContent(NotificationError):
    """Fetching dynamic data for template rendering failed."""

    code = "FailedContent"


class DataSourceUnavailable(NotificationError):
    """The recipient directory could not be queried."""

    code = "DataSourceUnavailable"


# =============================================================================
# PERSISTENCE ERRORS
# =============================================================================

class WorkflowPersistenceError(NotificationError):
    """Workflow record could not be written or read."""

    code = "WorkflowPersistenceError"


class WorkflowNotFound(NotificationError):
    """No workflow record with the given ID."""

    code = "WorkflowNotFound"

    def __init__(self, workflow_id: str):
        super().__init__(f"Workflow {workflow_id} not found")
        self.workflow_id = workflow_id


REQUEST_ERRORS = (
    InvalidRequest,
    TemplateNotFound,
    UnknownScope,
    FailedContent,
    DataSourceUnavailable,
)
