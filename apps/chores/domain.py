# ==========================================
# apps/chores/domain.py
# ==========================================

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional

from django.db import models
from django.utils import timezone
from django.utils.dateparse import parse_datetime


class RepeatPolicy(models.TextChoices):
    NEVER = 'Never', 'Never'
    DAILY = 'Daily', 'Daily'
    WEEKLY = 'Weekly', 'Weekly'
    MONTHLY = 'Monthly', 'Monthly'

    @classmethod
    def parse(cls, value):
        """Stored values outside the known policies read as NEVER."""
        try:
            return cls(value)
        except ValueError:
            return cls.NEVER


class ChoreFilter(models.TextChoices):
    ALL = 'all', 'All'
    WEEK = 'week', 'Due This Week'
    COMPLETED = 'completed', 'Completed'
    PAST_DEADLINE = 'past_deadline', 'Past Deadline'


def _as_datetime(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return parse_datetime(value)
    return None


def aware_datetime(value: datetime) -> datetime:
    """Naive datetimes are read in the current time zone."""
    if timezone.is_naive(value):
        return timezone.make_aware(value)
    return value

@dataclass(frozen=True)
class Chore:
    """A household task scoped to one group."""

    id: str
    title: str
    description: str = ''
    due_date: Optional[datetime] = None
    repeat: RepeatPolicy = RepeatPolicy.NEVER
    assigned_to: str = ''
    set_by: str = ''
    created_at: Optional[datetime] = None
    completed: bool = False

    @property
    def is_repeating(self) -> bool:
        return self.repeat != RepeatPolicy.NEVER

    def with_completed(self, completed: bool) -> 'Chore':
        return replace(self, completed=completed)

    @classmethod
    def from_document(cls, document_id: str, fields: Dict[str, Any]) -> 'Chore':
        return cls(
            id=document_id,
            title=fields.get('title', ''),
            description=fields.get('description', ''),
            due_date=_as_datetime(fields.get('dueDate')),
            repeat=RepeatPolicy.parse(fields.get('repeat', RepeatPolicy.NEVER)),
            assigned_to=fields.get('assignedTo', ''),
            set_by=fields.get('setBy', ''),
            created_at=_as_datetime(fields.get('createdAt')),
            completed=bool(fields.get('completed', False)),
        )

    def to_document(self) -> Dict[str, Any]:
        """Fields as written on creation; ``createdAt`` is added by the store."""
        document = {
            'title': self.title,
            'description': self.description,
            'repeat': str(self.repeat),
            'assignedTo': self.assigned_to,
            'setBy': self.set_by,
            'completed': self.completed,
        }
        if self.due_date is not None:
            document['dueDate'] = self.due_date
        return document
