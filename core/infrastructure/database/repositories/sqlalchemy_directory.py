"""
SQLAlchemy Recipient Directory and Entity Snapshot Source.

Read-only queries over users, push tokens, RSVPs, gyld memberships,
gatherings and candidates.
"""
from typing import Dict, List, Optional, Sequence

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.interfaces import (
    CandidateSnapshot,
    GatheringSnapshot,
    IEntitySnapshotSource,
    IRecipientDirectory,
)
from core.domain.entities import UserContact
from core.infrastructure.database.models import (
    CandidateModel,
    GatheringModel,
    GatheringRsvpModel,
    GyldMemberModel,
    GyldModel,
    UserModel,
    UserPushTokenModel,
)
from gyld_sdk.utils.datetime import ensure_utc

GATHERING_DATE_FORMAT = "%A, %B %d, %Y at %H:%M UTC"


class SQLAlchemyRecipientDirectory(IRecipientDirectory):
    """Recipient directory backed by the directory tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_contacts(self, user_ids: Sequence[str]) -> List[UserContact]:
        if not user_ids:
            return []
        async with self.session_factory() as session:
            users = (
                await session.execute(select(UserModel).where(UserModel.id.in_(list(user_ids))))
            ).scalars().all()

            token_rows = (
                await session.execute(
                    select(UserPushTokenModel.user_id, UserPushTokenModel.push_token)
                    .join(UserModel, UserModel.id == UserPushTokenModel.user_id)
                    .where(
                        and_(
                            UserPushTokenModel.user_id.in_(list(user_ids)),
                            UserModel.push_enabled.is_(True),
                        )
                    )
                    .order_by(UserPushTokenModel.id)
                )
            ).all()

        tokens: Dict[str, List[str]] = {}
        for user_id, token in token_rows:
            if token:
                tokens.setdefault(user_id, []).append(token)

        return [
            UserContact(
                user_id=user.id,
                email=user.email,
                first_name=user.first_name,
                push_tokens=tuple(tokens.get(user.id, [])),
            )
            for user in users
        ]

    async def get_rsvp_user_ids(self, gathering_id: str, rsvp_status: str) -> Optional[List[str]]:
        async with self.session_factory() as session:
            if await session.get(GatheringModel, gathering_id) is None:
                return None
            result = await session.execute(
                select(GatheringRsvpModel.user_id)
                .where(
                    and_(
                        GatheringRsvpModel.gathering_id == gathering_id,
                        GatheringRsvpModel.status == rsvp_status,
                    )
                )
                .order_by(GatheringRsvpModel.created_at, GatheringRsvpModel.user_id)
            )
            return list(result.scalars().all())

    async def get_group_member_ids(self, group_id: str) -> Optional[List[str]]:
        async with self.session_factory() as session:
            if await session.get(GyldModel, group_id) is None:
                return None
            result = await session.execute(
                select(GyldMemberModel.user_id)
                .where(GyldMemberModel.gyld_id == group_id)
                .order_by(GyldMemberModel.joined_at, GyldMemberModel.user_id)
            )
            return list(result.scalars().all())


class SQLAlchemyEntitySnapshotSource(IEntitySnapshotSource):
    """Fresh gathering and candidate data for template variables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_gathering(self, gathering_id: str) -> Optional[GatheringSnapshot]:
        async with self.session_factory() as session:
            gathering = await session.get(GatheringModel, gathering_id)
            if gathering is None:
                return None
            attendee_count = (
                await session.execute(
                    select(func.count())
                    .select_from(GatheringRsvpModel)
                    .where(
                        and_(
                            GatheringRsvpModel.gathering_id == gathering_id,
                            GatheringRsvpModel.status == "yes",
                        )
                    )
                )
            ).scalar_one()

        starts_at = ensure_utc(gathering.starts_at)
        return GatheringSnapshot(
            gathering_id=gathering.id,
            title=gathering.title,
            date=starts_at.strftime(GATHERING_DATE_FORMAT) if starts_at else None,
            location=gathering.location,
            attendee_count=attendee_count,
        )

    async def get_candidate(self, candidate_id: str) -> Optional[CandidateSnapshot]:
        async with self.session_factory() as session:
            candidate = await session.get(CandidateModel, candidate_id)
        if candidate is None:
            return None
        return CandidateSnapshot(candidate_id=candidate.id, name=candidate.name, status=candidate.status)
