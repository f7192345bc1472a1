"""
Recipient Resolver.

Expands a RecipientSpec into deduplicated recipients with their push
tokens and email address.
"""
import asyncio
from typing import Dict, List, Sequence

from core.application.interfaces import IRecipientDirectory
from core.domain.entities import RecipientResolution, ResolvedRecipient
from core.domain.errors import DataSourceUnavailable, NotificationError, UnknownScope
from core.domain.value_objects import (
    ExplicitRecipients,
    MembershipRecipients,
    RecipientSpec,
    RsvpRecipients,
)
from gyld_sdk.logging import get_logger

logger = get_logger(__name__)


def _unique(values: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(values))


class RecipientResolver:
    """Resolves recipient specs against the recipient directory."""

    def __init__(self, directory: IRecipientDirectory, lookup_timeout: float = 10.0):
        self._directory = directory
        self._lookup_timeout = lookup_timeout

    async def resolve(self, spec: RecipientSpec) -> RecipientResolution:
        """
        Resolve ``spec`` to recipients.

        Raises:
            UnknownScope: The gathering or group does not exist
            DataSourceUnavailable: The directory failed or timed out
        """
        try:
            user_ids = await self._user_ids_for(spec)
            contacts = await self._call(self._directory.get_contacts(user_ids)) if user_ids else []
        except asyncio.TimeoutError as exc:
            raise DataSourceUnavailable("Recipient directory timed out") from exc
        except NotificationError:
            raise
        except Exception as exc:
            raise DataSourceUnavailable("Recipient directory unavailable", detail=str(exc)) from exc

        by_id: Dict[str, ResolvedRecipient] = {}
        for contact in contacts:
            recipient = ResolvedRecipient.from_contact(contact)
            existing = by_id.get(contact.user_id)
            by_id[contact.user_id] = existing.merged_with(recipient) if existing else recipient

        recipients = [by_id[user_id] for user_id in user_ids if user_id in by_id]
        unknown = [user_id for user_id in user_ids if user_id not in by_id]

        logger.info(
            "recipients_resolved",
            source=spec.kind,
            recipient_count=len(recipients),
            unknown_count=len(unknown),
        )
        return RecipientResolution(recipients=recipients, unknown_user_ids=unknown)

    async def _user_ids_for(self, spec: RecipientSpec) -> List[str]:
        if isinstance(spec, ExplicitRecipients):
            return _unique(spec.user_ids)
        if isinstance(spec, RsvpRecipients):
            user_ids = await self._call(self._directory.get_rsvp_user_ids(spec.gathering_id, spec.rsvp_status))
            if user_ids is None:
                raise UnknownScope("gathering", spec.gathering_id)
            return _unique(user_ids)
        if isinstance(spec, MembershipRecipients):
            user_ids = await self._call(self._directory.get_group_member_ids(spec.group_id))
            if user_ids is None:
                raise UnknownScope("group", spec.group_id)
            return _unique(user_ids)
        raise TypeError(f"Unsupported recipient spec: {type(spec).__name__}")

    async def _call(self, awaitable):
        return await asyncio.wait_for(awaitable, timeout=self._lookup_timeout)
