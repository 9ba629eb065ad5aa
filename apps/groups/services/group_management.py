"""
Group management service.

Handles group creation and lookup against the ``groups`` collection.
"""

import logging
import secrets
import string
from typing import List

from apps.groups.domain import Group, Member
from apps.sync.adapter import GROUPS_COLLECTION, DocumentStore, QueryOp
from apps.sync.exceptions import DocumentNotFoundError

from .exceptions import GroupNotFoundError

logger = logging.getLogger(__name__)

GROUP_CODE_ALPHABET = string.ascii_uppercase + string.digits
GROUP_CODE_LENGTH = 6


def generate_group_code(length: int = GROUP_CODE_LENGTH) -> str:
    """Random join code drawn from A-Z and 0-9."""
    return ''.join(secrets.choice(GROUP_CODE_ALPHABET) for _ in range(length))


def create_group(
    *,
    store: DocumentStore,
    owner_id: str,
    max_retries: int = 5
) -> Group:
    """
    Create a new group with the creator as its only member.

    Args:
        store: Document store to write to
        owner_id: Member id of the creator
        max_retries: Maximum attempts to find an unused join code

    Returns:
        Created Group

    Raises:
        RuntimeError: If no unused join code is found after retries
        AdapterError: If the store fails
    """
    for attempt in range(max_retries):
        code = generate_group_code()

        if store.query(GROUPS_COLLECTION, 'code', code):
            logger.warning("Group code collision on attempt %d", attempt + 1)
            continue

        group = Group(id='', code=code, owner_id=owner_id, members=(Member(id=owner_id),))
        group_id = store.insert(GROUPS_COLLECTION, group.to_document())
        logger.info("Group %s created by %s", group_id, owner_id)
        return Group(id=group_id, code=code, owner_id=owner_id, members=group.members)

    raise RuntimeError(
        f"Failed to generate unique group code after {max_retries} attempts"
    )


def get_group(*, store: DocumentStore, group_id: str) -> Group:
    """
    Get a group by id.

    Raises:
        GroupNotFoundError: If the group doesn't exist
    """
    try:
        fields = store.get(GROUPS_COLLECTION, group_id)
    except DocumentNotFoundError:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")
    return Group.from_document(group_id, fields)


def list_groups_for_member(*, store: DocumentStore, user_id: str) -> List[Group]:
    """Groups whose member list contains ``user_id``, oldest first."""
    return [
        Group.from_document(snapshot.document_id, snapshot.fields)
        for snapshot in store.query(GROUPS_COLLECTION, 'members', user_id, op=QueryOp.ARRAY_CONTAINS)
    ]
