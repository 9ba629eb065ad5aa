"""
Chores app services layer.

Chore writes go through the document store; filters and scheduling are
pure functions over chore snapshots.
"""

from .exceptions import (
    AdapterError,
    ChoreValidationError,
    ChoreNotFoundError,
)

from .chore_management import (
    create_chore,
    get_chore,
    list_chores,
    toggle_chore_completion,
    mark_complete,
)

from .chore_filters import (
    filter_chores,
    is_due_this_week,
    is_past_deadline,
    week_bounds,
)

from .scheduling import (
    next_due_date,
    next_occurrence,
)


__all__ = [
    # Exceptions
    'AdapterError',
    'ChoreValidationError',
    'ChoreNotFoundError',

    # Chore Management
    'create_chore',
    'get_chore',
    'list_chores',
    'toggle_chore_completion',
    'mark_complete',

    # Filters
    'filter_chores',
    'is_due_this_week',
    'is_past_deadline',
    'week_bounds',

    # Scheduling
    'next_due_date',
    'next_occurrence',
]
