"""Channel dispatcher contract."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from core.domain.entities import ChannelOutcome, RenderedContent, ResolvedRecipient
from core.domain.enums import Channel
from core.domain.value_objects import Decoration


@dataclass(frozen=True)
class DispatchContext:
    """Request metadata forwarded to providers alongside the content."""

    execution_id: str
    initiated_by: str
    gathering_id: Optional[str] = None
    candidate_id: Optional[str] = None


class ChannelDispatcher(ABC):
    """
    Sends rendered content to recipients over one channel.

    Implementations never raise for recipient or provider problems; those
    are reported as failures on the returned outcome.
    """

    channel: Channel

    @abstractmethod
    async def send(
        self,
        content: RenderedContent,
        recipients: Sequence[ResolvedRecipient],
        decoration: Decoration,
        context: DispatchContext,
    ) -> ChannelOutcome:
        pass
