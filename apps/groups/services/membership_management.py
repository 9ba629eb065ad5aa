"""
Membership management service.

Joining by code uses ``merge_write``, which unions the member list inside
the store, so concurrent joins on the same group keep every member.
"""

import logging

from apps.groups.domain import Group
from apps.sync.adapter import GROUPS_COLLECTION, DocumentStore

from .exceptions import GroupNotFoundError, InvalidGroupCodeError
from .group_management import get_group

logger = logging.getLogger(__name__)


def normalize_group_code(code: str) -> str:
    return (code or '').strip().upper()


def join_group(
    *,
    store: DocumentStore,
    code: str,
    user_id: str
) -> Group:
    """
    Join a group using its join code.

    Joining a group the user already belongs to returns the group without
    writing anything.

    Args:
        store: Document store
        code: Join code as typed; surrounding blanks and case are ignored
        user_id: Member id of the joining user

    Returns:
        The joined Group, re-read after the write

    Raises:
        InvalidGroupCodeError: If the code is blank
        GroupNotFoundError: If no group has that code
        AdapterError: If the store fails
    """
    code = normalize_group_code(code)
    if not code:
        raise InvalidGroupCodeError()

    matches = store.query(GROUPS_COLLECTION, 'code', code)
    if not matches:
        logger.info("Join attempt with unknown code by %s", user_id)
        raise GroupNotFoundError()

    snapshot = matches[0]
    group = Group.from_document(snapshot.document_id, snapshot.fields)
    if group.has_member(user_id):
        return group

    store.merge_write(GROUPS_COLLECTION, group.id, {'members': [user_id]})
    logger.info("User %s joined group %s", user_id, group.id)
    return get_group(store=store, group_id=group.id)
