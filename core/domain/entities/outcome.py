"""Per-channel outcomes and the aggregate orchestration result."""

from dataclasses import dataclass, field
from typing import List, Optional

from core.domain.enums import Channel, OrchestrationState


@dataclass(frozen=True)
class RecipientFailure:
    """One failed delivery unit, with a reason code."""

    user_id: str
    reason: str
    endpoint: Optional[str] = None


@dataclass
class ChannelOutcome:
    """
    Result of one channel dispatch.

    ``attempted`` is True whenever the dispatcher was invoked, even if every
    recipient was excluded before the provider call. ``attempted_count`` only
    counts units handed to the provider; exclusions show up in ``failures``.
    """

    channel: Channel
    attempted: bool = False
    attempted_count: int = 0
    succeeded_count: int = 0
    failures: List[RecipientFailure] = field(default_factory=list)
    receipt_ids: List[str] = field(default_factory=list)
    recipient_ids_succeeded: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def success(self) -> bool:
        return self.succeeded_count > 0

    @property
    def failed_user_ids(self) -> List[str]:
        seen: List[str] = []
        for failure in self.failures:
            if failure.user_id not in seen:
                seen.append(failure.user_id)
        return seen

    def record_success(self, user_id: str, receipt_id: Optional[str] = None) -> None:
        self.attempted_count += 1
        self.succeeded_count += 1
        if user_id not in self.recipient_ids_succeeded:
            self.recipient_ids_succeeded.append(user_id)
        if receipt_id:
            self.receipt_ids.append(receipt_id)

    def record_failure(self, user_id: str, reason: str, endpoint: Optional[str] = None) -> None:
        self.attempted_count += 1
        self.failures.append(RecipientFailure(user_id=user_id, reason=reason, endpoint=endpoint))

    def record_excluded(self, user_id: str, reason: str, endpoint: Optional[str] = None) -> None:
        """Failure for a unit dropped before the provider call."""
        self.failures.append(RecipientFailure(user_id=user_id, reason=reason, endpoint=endpoint))

    @classmethod
    def not_attempted(cls, channel: Channel) -> "ChannelOutcome":
        return cls(channel=channel, attempted=False)


@dataclass
class OrchestrationResult:
    """Aggregate of both channel outcomes for one request."""

    success: bool
    message: str
    push: ChannelOutcome = field(default_factory=lambda: ChannelOutcome.not_attempted(Channel.PUSH))
    email: ChannelOutcome = field(default_factory=lambda: ChannelOutcome.not_attempted(Channel.EMAIL))
    unresolved: List[RecipientFailure] = field(default_factory=list)
    state: OrchestrationState = OrchestrationState.DONE
    execution_id: Optional[str] = None
    workflow_id: Optional[str] = None
    error: Optional[str] = None
    detail: Optional[str] = None

    @property
    def dispatched(self) -> bool:
        return self.push.attempted or self.email.attempted

    @classmethod
    def failed(
        cls,
        error: str,
        message: str,
        detail: Optional[str] = None,
        execution_id: Optional[str] = None,
    ) -> "OrchestrationResult":
        """Result for a request that never reached dispatch."""
        return cls(
            success=False,
            message=message,
            state=OrchestrationState.FAILED,
            error=error,
            detail=detail,
            execution_id=execution_id,
        )
