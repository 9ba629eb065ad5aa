"""
Chore filtering service.

Filtered views over a snapshot of a group's chores. Every filter returns a
new list in input order and leaves the input untouched.
"""

from datetime import datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

from django.conf import settings
from django.utils import timezone

from apps.chores.domain import Chore, ChoreFilter, aware_datetime

DAYS_IN_WEEK = 7


def week_bounds(now: Optional[datetime] = None, first_weekday: Optional[int] = None) -> Tuple[datetime, datetime]:
    """
    Start and end of the local calendar week containing ``now``.

    The week runs from midnight of its first day (``CHORES_FIRST_WEEKDAY``,
    0 = Monday) for seven days; the end bound is exclusive.
    """
    if first_weekday is None:
        first_weekday = getattr(settings, 'CHORES_FIRST_WEEKDAY', 0)

    local_now = timezone.localtime(aware_datetime(now or timezone.now()))
    offset = (local_now.weekday() - first_weekday) % DAYS_IN_WEEK
    first_day = local_now.date() - timedelta(days=offset)

    start = timezone.make_aware(datetime.combine(first_day, time.min))
    end = timezone.make_aware(datetime.combine(first_day + timedelta(days=DAYS_IN_WEEK), time.min))
    return start, end


def is_due_this_week(chore: Chore, now: Optional[datetime] = None) -> bool:
    if chore.due_date is None:
        return False
    start, end = week_bounds(now)
    return start <= aware_datetime(chore.due_date) < end


def is_past_deadline(chore: Chore, now: Optional[datetime] = None) -> bool:
    if chore.due_date is None or chore.completed:
        return False
    return aware_datetime(chore.due_date) < aware_datetime(now or timezone.now())


def filter_chores(
    chores: Iterable[Chore],
    selected: str = ChoreFilter.ALL,
    now: Optional[datetime] = None,
) -> List[Chore]:
    """
    Apply one of the chore filters.

    Args:
        chores: Chores in snapshot order
        selected: A ChoreFilter value
        now: Reference time, defaults to the current time

    Returns:
        The matching chores, order preserved

    Raises:
        ValueError: If ``selected`` is not a ChoreFilter value
    """
    selected = ChoreFilter(selected)
    now = now or timezone.now()
    chores = list(chores)

    if selected == ChoreFilter.ALL:
        return chores
    if selected == ChoreFilter.WEEK:
        return [chore for chore in chores if is_due_this_week(chore, now)]
    if selected == ChoreFilter.COMPLETED:
        return [chore for chore in chores if chore.completed]
    return [chore for chore in chores if is_past_deadline(chore, now)]
