"""Resolved recipients and the contact data the resolver returns."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class UserContact:
    """Contact endpoints as stored for one user account."""

    user_id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    push_tokens: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "push_tokens", tuple(self.push_tokens))


@dataclass(frozen=True)
class ResolvedRecipient:
    """A user identity paired with every endpoint usable for it."""

    user_id: str
    push_tokens: Tuple[str, ...] = ()
    email: Optional[str] = None
    first_name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "push_tokens", tuple(self.push_tokens))

    @property
    def has_push(self) -> bool:
        return len(self.push_tokens) > 0

    @property
    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())

    def merged_with(self, other: "ResolvedRecipient") -> "ResolvedRecipient":
        """Union of endpoints for the same user; first non-empty values win."""
        tokens = list(self.push_tokens)
        tokens.extend(t for t in other.push_tokens if t not in tokens)
        return ResolvedRecipient(
            user_id=self.user_id,
            push_tokens=tuple(tokens),
            email=self.email if self.has_email else other.email,
            first_name=self.first_name or other.first_name,
        )

    @classmethod
    def from_contact(cls, contact: UserContact) -> "ResolvedRecipient":
        return cls(
            user_id=contact.user_id,
            push_tokens=contact.push_tokens,
            email=contact.email,
            first_name=contact.first_name,
        )


@dataclass(frozen=True)
class RecipientResolution:
    """Output of recipient resolution."""

    recipients: Tuple[ResolvedRecipient, ...] = ()
    unknown_user_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "recipients", tuple(self.recipients))
        object.__setattr__(self, "unknown_user_ids", tuple(self.unknown_user_ids))

    @property
    def is_empty(self) -> bool:
        return len(self.recipients) == 0

    @property
    def user_ids(self) -> List[str]:
        return [r.user_id for r in self.recipients]

    def __len__(self) -> int:
        return len(self.recipients)

    def __iter__(self):
        return iter(self.recipients)
