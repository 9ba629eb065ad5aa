"""
Member name resolution.

Groups store member ids only. Display names are looked up concurrently,
with a bound on in-flight lookups and a per-lookup timeout; any lookup that
fails, times out or finds nothing leaves the member showing its id.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from asgiref.sync import async_to_sync, sync_to_async
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError

from apps.accounts.models import User
from apps.groups.domain import Group, Member

logger = logging.getLogger(__name__)

NameLookup = Callable[[str], Awaitable[Optional[str]]]


def placeholder_members(member_ids: Iterable[str]) -> List[Member]:
    """Id-only members, shown until names are resolved."""
    return [Member(id=member_id) for member_id in member_ids]


def _display_name_for(member_id: str) -> Optional[str]:
    try:
        user = User.objects.get(pk=member_id)
    except (User.DoesNotExist, DjangoValidationError, ValueError):
        return None
    return user.get_display_name()


async def lookup_display_name(member_id: str) -> Optional[str]:
    """Default lookup: the account's display name, or None if there is no account."""
    return await sync_to_async(_display_name_for, thread_sensitive=True)(member_id)


async def resolve_member_names(
    member_ids: Iterable[str],
    lookup: NameLookup = lookup_display_name,
    max_concurrency: Optional[int] = None,
    timeout: Optional[float] = None,
) -> List[Member]:
    """
    Resolve display names for ``member_ids``, preserving their order.

    Args:
        member_ids: Member ids in group order
        lookup: Coroutine function returning a name or None
        max_concurrency: Lookups allowed in flight at once
            (``MEMBER_LOOKUP_CONCURRENCY``)
        timeout: Seconds allowed per lookup (``MEMBER_LOOKUP_TIMEOUT``)

    Returns:
        One Member per id; ``name`` is None where resolution failed
    """
    member_ids = list(member_ids)
    if max_concurrency is None:
        max_concurrency = getattr(settings, 'MEMBER_LOOKUP_CONCURRENCY', 8)
    if timeout is None:
        timeout = getattr(settings, 'MEMBER_LOOKUP_TIMEOUT', 5)

    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def resolve(member_id: str) -> Optional[str]:
        async with semaphore:
            return await asyncio.wait_for(lookup(member_id), timeout=timeout)

    results = await asyncio.gather(
        *(resolve(member_id) for member_id in member_ids),
        return_exceptions=True,
    )

    members = []
    for member_id, result in zip(member_ids, results):
        if isinstance(result, BaseException):
            logger.warning("Name lookup failed for member %s: %r", member_id, result)
            result = None
        members.append(Member(id=member_id, name=result or None))
    return members


def resolve_group_members(group: Group, lookup: NameLookup = lookup_display_name) -> Group:
    """Return ``group`` with member names filled in."""
    members = async_to_sync(resolve_member_names)(group.member_ids, lookup)
    return group.with_members(members)
