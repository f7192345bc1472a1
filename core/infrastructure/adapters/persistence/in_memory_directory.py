"""
In-memory directory, template and snapshot sources.

Used for local runs without a database and as fakes in tests.
"""
from typing import Dict, List, Optional, Sequence, Tuple

from core.application.interfaces import (
    CandidateSnapshot,
    GatheringSnapshot,
    IEntitySnapshotSource,
    IRecipientDirectory,
    ITemplateRepository,
)
from core.domain.entities import ContentTemplate, UserContact


class InMemoryRecipientDirectory(IRecipientDirectory):
    """Directory held in dictionaries."""

    def __init__(self):
        self.users: Dict[str, UserContact] = {}
        self.rsvps: Dict[str, List[Tuple[str, str]]] = {}
        self.groups: Dict[str, List[str]] = {}
        self.calls: List[str] = []

    def add_user(
        self,
        user_id: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        push_tokens: Sequence[str] = (),
    ) -> UserContact:
        contact = UserContact(user_id=user_id, email=email, first_name=first_name, push_tokens=tuple(push_tokens))
        self.users[user_id] = contact
        return contact

    def add_gathering(self, gathering_id: str, rsvps: Sequence[Tuple[str, str]] = ()) -> None:
        self.rsvps[gathering_id] = list(rsvps)

    def add_group(self, group_id: str, member_ids: Sequence[str] = ()) -> None:
        self.groups[group_id] = list(member_ids)

    async def get_contacts(self, user_ids: Sequence[str]) -> List[UserContact]:
        self.calls.append("get_contacts")
        return [self.users[u] for u in user_ids if u in self.users]

    async def get_rsvp_user_ids(self, gathering_id: str, rsvp_status: str) -> Optional[List[str]]:
        self.calls.append("get_rsvp_user_ids")
        if gathering_id not in self.rsvps:
            return None
        return [user_id for user_id, status in self.rsvps[gathering_id] if status == rsvp_status]

    async def get_group_member_ids(self, group_id: str) -> Optional[List[str]]:
        self.calls.append("get_group_member_ids")
        if group_id not in self.groups:
            return None
        return list(self.groups[group_id])


class InMemoryTemplateRepository(ITemplateRepository):
    """Templates keyed by (content_key, channel)."""

    def __init__(self, templates: Sequence[ContentTemplate] = ()):
        self.templates: Dict[Tuple[str, Optional[str]], ContentTemplate] = {}
        for template in templates:
            self.add(template)

    def add(self, template: ContentTemplate) -> None:
        self.templates[(template.content_key, template.channel)] = template

    async def get_template(self, content_key: str, channel: Optional[str]) -> Optional[ContentTemplate]:
        return self.templates.get((content_key, channel))


class InMemoryEntitySnapshotSource(IEntitySnapshotSource):
    """Gathering and candidate snapshots held in dictionaries."""

    def __init__(self):
        self.gatherings: Dict[str, GatheringSnapshot] = {}
        self.candidates: Dict[str, CandidateSnapshot] = {}

    async def get_gathering(self, gathering_id: str) -> Optional[GatheringSnapshot]:
        return self.gatherings.get(gathering_id)

    async def get_candidate(self, candidate_id: str) -> Optional[CandidateSnapshot]:
        return self.candidates.get(candidate_id)
