# ==========================================
# apps/groups/domain.py
# ==========================================

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Member:
    """A group member reference with an optionally resolved display name."""

    id: str
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class Group:
    """Household group: the root aggregate owning chores and payments."""

    id: str
    code: str
    owner_id: str
    members: Tuple[Member, ...] = ()

    @property
    def member_ids(self) -> List[str]:
        return [member.id for member in self.members]

    def has_member(self, user_id: str) -> bool:
        return any(member.id == user_id for member in self.members)

    def get_member(self, user_id: str) -> Optional[Member]:
        for member in self.members:
            if member.id == user_id:
                return member
        return None

    def member_name(self, user_id: str) -> str:
        """Display name for a member id, or the id itself when unresolved."""
        member = self.get_member(user_id)
        return member.display_name if member else user_id

    def with_members(self, members: Iterable[Member]) -> 'Group':
        return replace(self, members=tuple(members))

    @classmethod
    def from_document(cls, document_id: str, fields: Dict[str, Any]) -> 'Group':
        member_ids = fields.get('members') or []
        return cls(
            id=document_id,
            code=fields.get('code', ''),
            owner_id=fields.get('ownerId', ''),
            members=tuple(Member(id=str(uid)) for uid in member_ids),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'ownerId': self.owner_id,
            'members': self.member_ids,
        }
