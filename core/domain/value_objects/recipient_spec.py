"""
Recipient specifications.

A request names its audience with exactly one of these variants. The union
``RecipientSpec`` is the only type the resolver accepts, so "exactly one
variant" holds by construction.
"""
from dataclasses import dataclass
from typing import Tuple, Union

RSVP_STATUSES = ("yes", "no", "maybe")


@dataclass(frozen=True)
class ExplicitRecipients:
    """A fixed list of user IDs."""

    user_ids: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "user_ids", tuple(self.user_ids))
        if any(not isinstance(u, str) or not u.strip() for u in self.user_ids):
            raise ValueError("user_ids must be non-empty strings")

    @property
    def kind(self) -> str:
        return "user_ids"


@dataclass(frozen=True)
class RsvpRecipients:
    """Users whose RSVP to a gathering matches ``rsvp_status``."""

    gathering_id: str
    rsvp_status: str = "yes"

    def __post_init__(self):
        if not self.gathering_id:
            raise ValueError("gathering_id is required for an RSVP recipient list")
        if self.rsvp_status not in RSVP_STATUSES:
            raise ValueError(
                f"rsvp_status must be one of {', '.join(RSVP_STATUSES)}, got: {self.rsvp_status}"
            )

    @property
    def kind(self) -> str:
        return "rsvp_list"


@dataclass(frozen=True)
class MembershipRecipients:
    """Every member of a community group (gyld)."""

    group_id: str

    def __post_init__(self):
        if not self.group_id:
            raise ValueError("group_id is required for a membership recipient list")

    @property
    def kind(self) -> str:
        return "group_members"


RecipientSpec = Union[ExplicitRecipients, RsvpRecipients, MembershipRecipients]
