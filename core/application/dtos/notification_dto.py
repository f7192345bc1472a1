"""
DTOs for notification requests and results.

Wire (JSON) form of OrchestrationRequest and OrchestrationResult. The
request DTO is also the payload snapshot stored on workflow records.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from core.domain.entities import ChannelOutcome, OrchestrationRequest, OrchestrationResult, RecipientFailure
from core.domain.enums import Channel, OrchestrationMode
from core.domain.errors import InvalidRequest
from core.domain.value_objects import (
    ActionButton,
    Decoration,
    EmailDecoration,
    ExplicitRecipients,
    LiteralContent,
    MembershipRecipients,
    RsvpRecipients,
    TemplateContent,
)


# =============================================================================
# REQUEST DTOs
# =============================================================================

class UserIdsRecipientsDTO(BaseModel):
    """Explicit list of user IDs."""

    type: Literal["user_ids"] = "user_ids"
    user_ids: List[str] = Field(..., min_length=1, description="User IDs")

    model_config = {"frozen": True}


class RsvpRecipientsDTO(BaseModel):
    """Users who answered a gathering RSVP with the given status."""

    type: Literal["rsvp_list"] = "rsvp_list"
    gathering_id: str = Field(..., min_length=1, description="Gathering ID")
    rsvp_status: Literal["yes", "no", "maybe"] = Field(default="yes", description="RSVP filter")

    model_config = {"frozen": True}


class GroupMembersRecipientsDTO(BaseModel):
    """All members of a gyld."""

    type: Literal["group_members"] = "group_members"
    group_id: str = Field(..., min_length=1, description="Group (gyld) ID")

    model_config = {"frozen": True}


RecipientsDTO = Union[UserIdsRecipientsDTO, RsvpRecipientsDTO, GroupMembersRecipientsDTO]


class ButtonDTO(BaseModel):
    text: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)

    model_config = {"frozen": True}


class EmailOptionsDTO(BaseModel):
    """Email metadata; unset fields use configured defaults."""

    template_name: Optional[str] = None
    email_type: Optional[str] = None
    sender_name: Optional[str] = None
    reply_to_address: Optional[str] = None
    unsubscribe_url: Optional[str] = None
    header_image: Optional[str] = None
    body_image: Optional[str] = None

    model_config = {"frozen": True}


class NotificationRequestDTO(BaseModel):
    """
    Request DTO for ``POST /notify``.

    Content is either literal (``title`` + ``body``) or a template
    reference (``template_key`` + ``variables``), never both.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "mode": "push_preferred",
                "recipients": {"type": "rsvp_list", "gathering_id": "g-42", "rsvp_status": "yes"},
                "template_key": "gathering_reminder",
                "variables": {"first_name": "Sam"},
                "gathering_id": "g-42",
                "deep_link": "gyld://gatherings/g-42",
                "buttons": [{"text": "View", "url": "https://app.gyld.org/g/g-42"}],
                "initiated_by": "host-7",
            }
        },
    )

    mode: OrchestrationMode = Field(..., description="push_preferred or both")
    recipients: RecipientsDTO = Field(..., discriminator="type", description="Recipient specification")

    title: Optional[str] = Field(default=None, description="Literal title")
    body: Optional[str] = Field(default=None, description="Literal body")
    subtitle: Optional[str] = Field(default=None, description="Literal push subtitle")
    secondary_body: Optional[str] = Field(default=None, description="Literal second email paragraph")

    template_key: Optional[str] = Field(default=None, description="Content template key")
    variables: Dict[str, Union[str, int, float, None]] = Field(
        default_factory=dict, description="Template variables"
    )
    template_gathering_id: Optional[str] = Field(
        default=None, description="Gathering whose data fills the template; defaults to gathering_id"
    )
    template_candidate_id: Optional[str] = Field(
        default=None, description="Candidate whose data fills the template; defaults to candidate_id"
    )

    scheduled_for: Optional[datetime] = Field(default=None, description="Send time; omit to send now")
    deep_link: Optional[str] = Field(default=None, description="Deep link opened from the push")
    buttons: List[ButtonDTO] = Field(default_factory=list, max_length=3, description="Action buttons")
    email: EmailOptionsDTO = Field(default_factory=EmailOptionsDTO, description="Email metadata")

    initiated_by: str = Field(..., min_length=1, description="Audit identity of the sender")
    gathering_id: Optional[str] = Field(default=None, description="Associated gathering")
    candidate_id: Optional[str] = Field(default=None, description="Associated candidate")

    @model_validator(mode="after")
    def _exactly_one_content(self) -> "NotificationRequestDTO":
        has_literal = any(
            value is not None for value in (self.title, self.body, self.subtitle, self.secondary_body)
        )
        has_template = self.template_key is not None
        if has_literal and has_template:
            raise ValueError(
                "Set either literal content (title/body/subtitle/secondary_body) or template_key, not both"
            )
        if not has_literal and not has_template:
            raise ValueError("Content is required: set title and body, or template_key")
        if has_literal and (not self.title or not self.body):
            raise ValueError("Literal content requires both title and body")
        if has_template and not self.template_key:
            raise ValueError("template_key must not be empty")
        if has_literal and (self.template_gathering_id is not None or self.template_candidate_id is not None):
            raise ValueError("template_gathering_id and template_candidate_id apply only to template content")
        return self

    def to_domain(self) -> OrchestrationRequest:
        recipients = self.recipients
        if isinstance(recipients, UserIdsRecipientsDTO):
            recipient_spec = ExplicitRecipients(user_ids=tuple(recipients.user_ids))
        elif isinstance(recipients, RsvpRecipientsDTO):
            recipient_spec = RsvpRecipients(gathering_id=recipients.gathering_id, rsvp_status=recipients.rsvp_status)
        else:
            recipient_spec = MembershipRecipients(group_id=recipients.group_id)

        if self.template_key is not None:
            content = TemplateContent(
                template_key=self.template_key,
                variables=dict(self.variables),
                gathering_id=self._template_entity("template_gathering_id", self.gathering_id),
                candidate_id=self._template_entity("template_candidate_id", self.candidate_id),
            )
        else:
            content = LiteralContent(
                title=self.title,
                body=self.body,
                subtitle=self.subtitle,
                secondary_body=self.secondary_body,
            )

        decoration = Decoration(
            deep_link=self.deep_link,
            buttons=tuple(ActionButton(text=b.text, url=b.url) for b in self.buttons),
            email=EmailDecoration(**self.email.model_dump()),
        )
        return OrchestrationRequest(
            mode=self.mode,
            recipients=recipient_spec,
            content=content,
            initiated_by=self.initiated_by,
            scheduled_for=self.scheduled_for,
            decoration=decoration,
            gathering_id=self.gathering_id,
            candidate_id=self.candidate_id,
        )

    def _template_entity(self, field_name: str, fallback: Optional[str]) -> Optional[str]:
        # An explicit value, None included, wins over the associated entity.
        if field_name in self.model_fields_set:
            return getattr(self, field_name)
        return fallback

    @classmethod
    def from_domain(cls, request: OrchestrationRequest) -> "NotificationRequestDTO":
        spec = request.recipients
        if isinstance(spec, ExplicitRecipients):
            recipients: RecipientsDTO = UserIdsRecipientsDTO(user_ids=list(spec.user_ids))
        elif isinstance(spec, RsvpRecipients):
            recipients = RsvpRecipientsDTO(gathering_id=spec.gathering_id, rsvp_status=spec.rsvp_status)
        else:
            recipients = GroupMembersRecipientsDTO(group_id=spec.group_id)

        content: Dict[str, Any] = {}
        if isinstance(request.content, TemplateContent):
            content["template_key"] = request.content.template_key
            content["variables"] = dict(request.content.variables)
            content["template_gathering_id"] = request.content.gathering_id
            content["template_candidate_id"] = request.content.candidate_id
        else:
            content["title"] = request.content.title
            content["body"] = request.content.body
            content["subtitle"] = request.content.subtitle
            content["secondary_body"] = request.content.secondary_body

        deco = request.decoration
        return cls(
            mode=request.mode,
            recipients=recipients,
            scheduled_for=request.scheduled_for,
            deep_link=deco.deep_link,
            buttons=[ButtonDTO(text=b.text, url=b.url) for b in deco.buttons],
            email=EmailOptionsDTO(
                template_name=deco.email.template_name,
                email_type=deco.email.email_type,
                sender_name=deco.email.sender_name,
                reply_to_address=deco.email.reply_to_address,
                unsubscribe_url=deco.email.unsubscribe_url,
                header_image=deco.email.header_image,
                body_image=deco.email.body_image,
            ),
            initiated_by=request.initiated_by,
            gathering_id=request.gathering_id,
            candidate_id=request.candidate_id,
            **content,
        )


def parse_notification_request(payload: Any) -> OrchestrationRequest:
    """
    Parse an untyped payload into an OrchestrationRequest.

    Raises:
        InvalidRequest: The payload is malformed or ambiguous
    """
    if not isinstance(payload, dict):
        raise InvalidRequest("Request body must be a JSON object")
    try:
        return NotificationRequestDTO.model_validate(payload).to_domain()
    except ValidationError as exc:
        raise InvalidRequest("Invalid notification request", detail=format_validation_errors(exc)) from exc
    except ValueError as exc:
        raise InvalidRequest("Invalid notification request", detail=str(exc)) from exc


def format_validation_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "invalid")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def request_snapshot(request: OrchestrationRequest) -> Dict[str, Any]:
    """JSON-safe snapshot of a request, as stored on workflow records."""
    return NotificationRequestDTO.from_domain(request).model_dump(mode="json")


# =============================================================================
# RESULT DTOs
# =============================================================================

class RecipientFailureDTO(BaseModel):
    user_id: str
    reason: str
    endpoint: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def from_domain(cls, failure: RecipientFailure) -> "RecipientFailureDTO":
        return cls(user_id=failure.user_id, reason=failure.reason, endpoint=failure.endpoint)


class ChannelOutcomeDTO(BaseModel):
    """Outcome of one channel."""

    channel: Channel
    attempted: bool = False
    attempted_count: int = 0
    succeeded_count: int = 0
    failed_count: int = 0
    failures: List[RecipientFailureDTO] = Field(default_factory=list)
    receipt_ids: List[str] = Field(default_factory=list)
    recipient_ids_succeeded: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def from_domain(cls, outcome: ChannelOutcome) -> "ChannelOutcomeDTO":
        return cls(
            channel=outcome.channel,
            attempted=outcome.attempted,
            attempted_count=outcome.attempted_count,
            succeeded_count=outcome.succeeded_count,
            failed_count=outcome.failed_count,
            failures=[RecipientFailureDTO.from_domain(f) for f in outcome.failures],
            receipt_ids=list(outcome.receipt_ids),
            recipient_ids_succeeded=list(outcome.recipient_ids_succeeded),
            error=outcome.error,
        )


class NotificationResultDTO(BaseModel):
    """Response DTO for ``POST /notify``."""

    success: bool
    message: str
    state: str
    push: ChannelOutcomeDTO
    email: ChannelOutcomeDTO
    unresolved: List[RecipientFailureDTO] = Field(default_factory=list)
    execution_id: Optional[str] = None
    workflow_id: Optional[str] = None
    error: Optional[str] = None
    detail: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def from_domain(cls, result: OrchestrationResult) -> "NotificationResultDTO":
        return cls(
            success=result.success,
            message=result.message,
            state=result.state.value,
            push=ChannelOutcomeDTO.from_domain(result.push),
            email=ChannelOutcomeDTO.from_domain(result.email),
            unresolved=[RecipientFailureDTO.from_domain(f) for f in result.unresolved],
            execution_id=result.execution_id,
            workflow_id=result.workflow_id,
            error=result.error,
            detail=result.detail,
        )


def result_snapshot(result: OrchestrationResult) -> Dict[str, Any]:
    """JSON-safe snapshot of a result, as stored on workflow records."""
    return NotificationResultDTO.from_domain(result).model_dump(mode="json")
