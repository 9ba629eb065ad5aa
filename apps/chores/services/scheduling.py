"""
Repeat scheduling for chores.

Occurrences are always computed from the original due date, so a monthly
chore due on the 31st falls on the last day of shorter months and returns
to the 31st afterwards.
"""

from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from django.utils import timezone

from apps.chores.domain import Chore, RepeatPolicy, aware_datetime

_INTERVALS = {
    RepeatPolicy.DAILY: relativedelta(days=1),
    RepeatPolicy.WEEKLY: relativedelta(weeks=1),
    RepeatPolicy.MONTHLY: relativedelta(months=1),
}


def _occurrence(due: datetime, repeat: RepeatPolicy, steps: int) -> datetime:
    return due + _INTERVALS[repeat] * steps


def next_due_date(due: Optional[datetime], repeat) -> Optional[datetime]:
    """The due date one repeat interval after ``due``, or None for Never."""
    repeat = RepeatPolicy.parse(repeat)
    if due is None or repeat == RepeatPolicy.NEVER:
        return None
    return _occurrence(due, repeat, 1)


def next_occurrence(chore: Chore, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    First occurrence of a repeating chore strictly after ``now``.

    Returns None for non-repeating or undated chores.
    A naive ``now`` or due date is read in the current time zone.
    """
    if not chore.is_repeating or chore.due_date is None:
        return None

    now = aware_datetime(now or timezone.now())
    due = aware_datetime(chore.due_date)
    if due > now:
        return due

    # Jump close to ``now`` for fixed-length intervals, then step.
    steps = 1
    if chore.repeat != RepeatPolicy.MONTHLY:
        interval = timedelta(days=1) if chore.repeat == RepeatPolicy.DAILY else timedelta(weeks=1)
        steps = max(1, (now - due) // interval)

    occurrence = _occurrence(due, chore.repeat, steps)
    while occurrence <= now:
        steps += 1
        occurrence = _occurrence(due, chore.repeat, steps)
    return occurrence
