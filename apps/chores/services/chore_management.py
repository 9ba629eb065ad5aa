"""
Chore management service.

Handles creating chores and moving them between Pending and Done. A chore
becomes Done by toggle or mark-complete and returns to Pending only by
toggle. Chores are never deleted.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from django.utils import timezone

from apps.chores.domain import Chore, RepeatPolicy
from apps.groups.domain import Group
from apps.groups.services.exceptions import NotMemberError
from apps.sync.adapter import SERVER_TIMESTAMP, DocumentStore, chores_collection
from apps.sync.exceptions import DocumentNotFoundError

from .exceptions import ChoreNotFoundError, ChoreValidationError

logger = logging.getLogger(__name__)


def create_chore(
    *,
    store: DocumentStore,
    group: Group,
    title: str,
    set_by: str,
    description: str = '',
    due_date: Optional[datetime] = None,
    repeat: str = RepeatPolicy.NEVER,
    assigned_to: str = '',
) -> Chore:
    """
    Create a pending chore in a group.

    Args:
        store: Document store to write to
        group: Group the chore belongs to
        title: Chore title (required)
        set_by: Creator's display name
        description: Optional free text
        due_date: Optional due date; naive values are read as local time
        repeat: One of the RepeatPolicy values
        assigned_to: Member id of the assignee, or blank for nobody

    Returns:
        The Chore as written, carrying its new document id

    Raises:
        ChoreValidationError: If the title is blank or the repeat policy unknown
        NotMemberError: If the assignee is not a group member
        AdapterError: If the store write fails
    """
    title = (title or '').strip()
    if not title:
        raise ChoreValidationError('Title is required.')

    if repeat not in RepeatPolicy.values:
        raise ChoreValidationError(f"Unknown repeat policy: {repeat}")

    assigned_to = assigned_to or ''
    if assigned_to and not group.has_member(assigned_to):
        raise NotMemberError(f"User {assigned_to} is not a member of this group")

    if due_date is not None and timezone.is_naive(due_date):
        due_date = timezone.make_aware(due_date)

    chore = Chore(
        id='',
        title=title,
        description=description or '',
        due_date=due_date,
        repeat=RepeatPolicy(repeat),
        assigned_to=assigned_to,
        set_by=set_by,
        completed=False,
    )

    fields = chore.to_document()
    fields['createdAt'] = SERVER_TIMESTAMP
    chore_id = store.insert(chores_collection(group.id), fields)

    logger.info("Chore %s created in group %s (repeat=%s)", chore_id, group.id, chore.repeat)
    return replace(chore, id=chore_id)


def get_chore(*, store: DocumentStore, group_id: str, chore_id: str) -> Chore:
    try:
        fields = store.get(chores_collection(group_id), chore_id)
    except DocumentNotFoundError:
        raise ChoreNotFoundError(f"Chore {chore_id} not found")
    return Chore.from_document(chore_id, fields)


def list_chores(*, store: DocumentStore, group_id: str) -> List[Chore]:
    """All chores of a group, oldest first."""
    return [
        Chore.from_document(snapshot.document_id, snapshot.fields)
        for snapshot in store.fetch(chores_collection(group_id))
    ]


def _write_completed(store: DocumentStore, group_id: str, chore: Chore, completed: bool) -> Chore:
    try:
        store.update(chores_collection(group_id), chore.id, {'completed': completed})
    except DocumentNotFoundError:
        raise ChoreNotFoundError(f"Chore {chore.id} not found")

    logger.info("Chore %s in group %s marked %s", chore.id, group_id, 'done' if completed else 'pending')
    return chore.with_completed(completed)


def toggle_chore_completion(*, store: DocumentStore, group_id: str, chore: Chore) -> Chore:
    """
    Flip a chore between Pending and Done.

    Returns:
        The chore with its new completed flag

    Raises:
        ChoreNotFoundError: If the chore no longer exists
        AdapterError: If the store write fails
    """
    return _write_completed(store, group_id, chore, not chore.completed)


def mark_complete(*, store: DocumentStore, group_id: str, chore: Chore) -> Chore:
    """Move a pending chore to Done. An already completed chore is returned without a write."""
    if chore.completed:
        return chore
    return _write_completed(store, group_id, chore, True)
