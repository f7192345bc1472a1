"""Application services."""
from .content_template_resolver import ContentTemplateResolver, find_placeholders, render_text
from .recipient_resolver import RecipientResolver
from .workflow_service import WorkflowService

__all__ = ["ContentTemplateResolver", "RecipientResolver", "WorkflowService", "find_placeholders", "render_text"]
