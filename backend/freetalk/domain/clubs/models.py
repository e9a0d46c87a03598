"""Domain models for club membership audits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class UserRef:
    id: Optional[Any]
    name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Any) -> Optional["UserRef"]:
        """Build a reference from a populated user document or a bare id."""
        if doc is None:
            return None
        if isinstance(doc, Mapping):
            user_id = doc.get("_id", doc.get("id"))
            return cls(id=user_id, name=doc.get("name"), email=doc.get("email"))
        return cls(id=doc)

    @property
    def key(self) -> Optional[str]:
        # ObjectId and its hex string identify the same user
        return None if self.id is None else str(self.id)


@dataclass(frozen=True)
class Membership:
    user: Optional[UserRef]

    @classmethod
    def from_document(cls, doc: Any) -> "Membership":
        if not isinstance(doc, Mapping):
            return cls(user=None)
        return cls(user=UserRef.from_document(doc.get("user")))

    @property
    def user_key(self) -> Optional[str]:
        return self.user.key if self.user is not None else None


@dataclass
class Club:
    id: Any
    name: str
    members: List[Membership] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Club":
        raw_members = doc.get("members") or []
        return cls(
            id=doc.get("_id", doc.get("id")),
            name=doc.get("name") or "",
            members=[Membership.from_document(member) for member in raw_members],
        )

    @property
    def skipped_memberships(self) -> int:
        """Memberships without a resolvable user id; the audit ignores them."""
        return sum(1 for member in self.members if member.user_key is None)


@dataclass(frozen=True)
class DuplicateEntry:
    count: int
    display_name: str


@dataclass
class Finding:
    club_id: Any
    club_name: str
    total_members: int
    unique_members: int
    duplicates: Dict[str, DuplicateEntry]

    @property
    def extra_memberships(self) -> int:
        return self.total_members - self.unique_members


@dataclass(frozen=True)
class Summary:
    total_clubs: int
    clubs_with_duplicates: int
    extra_memberships: int

    @property
    def has_duplicates(self) -> bool:
        return self.clubs_with_duplicates > 0
