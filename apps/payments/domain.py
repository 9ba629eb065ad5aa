# ==========================================
# apps/payments/domain.py
# ==========================================

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from django.db import models
from django.utils.dateparse import parse_datetime


class SplitMode(models.TextChoices):
    EQUAL = 'equal', 'Split equally'
    CUSTOM = 'custom', 'Custom amounts'


@dataclass(frozen=True)
class Share:
    """One member's portion of a payment."""

    amount: float
    paid: bool = False

    @classmethod
    def from_document(cls, fields: Dict[str, Any]) -> Optional['Share']:
        """Return None for malformed entries, which are skipped on read."""
        if not isinstance(fields, dict):
            return None
        amount = fields.get('amount')
        paid = fields.get('paid')
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            return None
        if not isinstance(paid, bool):
            return None
        return cls(amount=float(amount), paid=paid)

    def to_document(self) -> Dict[str, Any]:
        return {'amount': self.amount, 'paid': self.paid}


@dataclass(frozen=True)
class Payment:
    """A shared expense created by one member and split among others."""

    id: str
    item_name: str
    description: str = ''
    total_amount: float = 0.0
    set_by_uid: str = ''
    set_by_name: str = ''
    created_at: Optional[datetime] = None
    shares: Mapping[str, Share] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'shares', MappingProxyType(dict(self.shares)))

    def share_for(self, member_id: str) -> Optional[Share]:
        return self.shares.get(member_id)

    def unpaid_share_for(self, member_id: str) -> Optional[Share]:
        share = self.shares.get(member_id)
        if share is None or share.paid:
            return None
        return share

    def with_share_paid(self, member_id: str, paid: bool) -> 'Payment':
        shares = dict(self.shares)
        shares[member_id] = replace(shares[member_id], paid=paid)
        return replace(self, shares=shares)

    @classmethod
    def from_document(cls, document_id: str, fields: Dict[str, Any]) -> 'Payment':
        shares = {}
        for uid, share_fields in (fields.get('shares') or {}).items():
            share = Share.from_document(share_fields)
            if share is not None:
                shares[uid] = share

        created_at = fields.get('createdAt')
        if isinstance(created_at, str):
            created_at = parse_datetime(created_at)

        amount = fields.get('amount', 0.0)
        return cls(
            id=document_id,
            item_name=fields.get('itemName', ''),
            description=fields.get('description', ''),
            total_amount=float(amount) if isinstance(amount, (int, float)) else 0.0,
            set_by_uid=fields.get('setByUid', ''),
            set_by_name=fields.get('setByName', ''),
            created_at=created_at if isinstance(created_at, datetime) else None,
            shares=shares,
        )

    def to_document(self) -> Dict[str, Any]:
        """Fields as written on creation; ``createdAt`` is added by the store."""
        return {
            'itemName': self.item_name,
            'description': self.description,
            'amount': self.total_amount,
            'setByUid': self.set_by_uid,
            'setByName': self.set_by_name,
            'shares': {uid: share.to_document() for uid, share in self.shares.items()},
        }
