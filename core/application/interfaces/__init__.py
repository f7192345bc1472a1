"""Application layer interfaces."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from core.domain.entities import ChannelOutcome, ContentTemplate, RenderedContent, UserContact
from core.domain.enums import Channel


# =============================================================================
# DATA SOURCES
# =============================================================================

class IRecipientDirectory(ABC):
    """
    Interface for looking up users and their contact endpoints.

    Scope lookups return ``None`` when the gathering or group does not
    exist, and an empty list when it exists but matches nobody.
    """

    @abstractmethod
    async def get_contacts(self, user_ids: Sequence[str]) -> List[UserContact]:
        """
        Get contact data for the given users.

        Args:
            user_ids: User IDs to look up

        Returns:
            One contact per known user. Unknown IDs are omitted. Only push
            tokens whose owner has push enabled are included.
        """
        pass

    @abstractmethod
    async def get_rsvp_user_ids(self, gathering_id: str, rsvp_status: str) -> Optional[List[str]]:
        """
        Get users whose RSVP to a gathering matches ``rsvp_status``.

        Returns:
            User IDs, or None if the gathering does not exist
        """
        pass

    @abstractmethod
    async def get_group_member_ids(self, group_id: str) -> Optional[List[str]]:
        """
        Get all members of a group.

        Returns:
            User IDs, or None if the group does not exist
        """
        pass


class ITemplateRepository(ABC):
    """Interface for content template storage."""

    @abstractmethod
    async def get_template(
        self, content_key: str, channel: Optional[str]
    ) -> Optional[ContentTemplate]:
        """
        Exact-match lookup of a template.

        Args:
            content_key: Template key
            channel: Channel value, or None for the channel-agnostic variant

        Returns:
            Template if found, None otherwise
        """
        pass


@dataclass(frozen=True)
class GatheringSnapshot:
    """Current state of a gathering, as used for template variables."""

    gathering_id: str
    title: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    attendee_count: int = 0


@dataclass(frozen=True)
class CandidateSnapshot:
    """Current state of a membership candidate."""

    candidate_id: str
    name: Optional[str] = None
    status: Optional[str] = None


class IEntitySnapshotSource(ABC):
    """Interface for fetching fresh entity data at render time."""

    @abstractmethod
    async def get_gathering(self, gathering_id: str) -> Optional[GatheringSnapshot]:
        pass

    @abstractmethod
    async def get_candidate(self, candidate_id: str) -> Optional[CandidateSnapshot]:
        pass


# =============================================================================
# CHANNEL GATEWAYS
# =============================================================================

@dataclass(frozen=True)
class PushMessage:
    """One push message addressed to one device token."""

    to: str
    title: str
    body: str
    subtitle: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    sound: str = "default"
    priority: str = "high"
    image_url: Optional[str] = None


@dataclass(frozen=True)
class PushTicket:
    """Provider acknowledgement for one push message."""

    status: str
    id: Optional[str] = None
    message: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class IPushGateway(ABC):
    """Interface for a push provider."""

    @abstractmethod
    async def send_batch(self, messages: Sequence[PushMessage]) -> List[PushTicket]:
        """
        Send one batch of push messages.

        Returns:
            Tickets positionally aligned with ``messages``. A shorter list
            means the trailing messages were not acknowledged.

        Raises:
            Exception: If the whole batch could not be sent
        """
        pass


@dataclass(frozen=True)
class EmailPersonalization:
    """One email recipient and their merge fields."""

    email: str
    user_id: str
    first: Optional[str] = None


@dataclass(frozen=True)
class TemplatedEmail:
    """
    A templated email addressed to one or more recipients.

    Content fields are shared by every recipient; per-recipient merge
    fields travel in ``personalizations``.
    """

    template_name: str
    email_type: str
    from_email: str
    from_name: str
    reply_to: str
    subject: str
    body: str
    personalizations: List[EmailPersonalization]
    secondary_body: Optional[str] = None
    button_text: Optional[str] = None
    button_url: Optional[str] = None
    unsubscribe_url: Optional[str] = None
    header_image: Optional[str] = None
    body_image: Optional[str] = None


@dataclass(frozen=True)
class EmailRecipientResult:
    """Per-recipient acceptance reported by an email provider."""

    email: str
    accepted: bool
    error_code: Optional[str] = None


@dataclass(frozen=True)
class EmailSendReceipt:
    """Provider response for one templated email."""

    accepted: bool
    message_id: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    recipient_results: Optional[List[EmailRecipientResult]] = None


class IEmailGateway(ABC):
    """Interface for an email provider."""

    @abstractmethod
    async def send(self, email: TemplatedEmail) -> EmailSendReceipt:
        """
        Send one templated email.

        Returns:
            Receipt. ``recipient_results`` is None when the provider only
            reports whole-send acceptance.

        Raises:
            Exception: If the provider could not be reached
        """
        pass


# =============================================================================
# AUDIT
# =============================================================================

class IDeliveryLog(ABC):
    """Interface for recording what was sent to whom."""

    @abstractmethod
    async def record(
        self,
        execution_id: str,
        channel: Channel,
        content: RenderedContent,
        outcome: ChannelOutcome,
    ) -> None:
        """
        Record the sent and failed recipients of one channel dispatch.

        Args:
            execution_id: Orchestration execution ID
            channel: Channel that was dispatched
            content: Rendered content that was sent
            outcome: Channel outcome
        """
        pass


__all__ = [
    "CandidateSnapshot",
    "EmailPersonalization",
    "EmailRecipientResult",
    "EmailSendReceipt",
    "GatheringSnapshot",
    "IDeliveryLog",
    "IEmailGateway",
    "IEntitySnapshotSource",
    "IPushGateway",
    "IRecipientDirectory",
    "ITemplateRepository",
    "PushMessage",
    "PushTicket",
    "TemplatedEmail",
]
