"""
Service layer unit tests for groups app.

Tests cover:
- Group creation and join-code collisions
- Joining by code
- Member name resolution
"""

import asyncio
from unittest.mock import patch

import pytest
from asgiref.sync import async_to_sync

from apps.groups.domain import Group, Member
from apps.groups.services import (
    create_group,
    generate_group_code,
    get_group,
    join_group,
    list_groups_for_member,
    lookup_display_name,
    placeholder_members,
    resolve_group_members,
    resolve_member_names,
)
from apps.groups.services import group_management
from apps.groups.services.exceptions import GroupNotFoundError, InvalidGroupCodeError
from apps.sync.adapter import GROUPS_COLLECTION


# =============================================================================
# Group Management Service Tests
# =============================================================================

class TestGenerateGroupCode:
    """Tests for generate_group_code()."""

    def test_code_shape(self):
        code = generate_group_code()

        assert len(code) == 6
        assert all(char in group_management.GROUP_CODE_ALPHABET for char in code)

    def test_custom_length(self):
        assert len(generate_group_code(length=8)) == 8


@pytest.mark.django_db
class TestGroupManagement:
    """Tests for group_management.py service functions."""

    def test_create_group_owner_is_only_member(self, store):
        group = create_group(store=store, owner_id='alice')

        stored = store.get(GROUPS_COLLECTION, group.id)
        assert stored == {'code': group.code, 'ownerId': 'alice', 'members': ['alice']}
        assert group.member_ids == ['alice']

    def test_create_group_retries_on_collision(self, store):
        store.insert(GROUPS_COLLECTION, {'code': 'TAKEN1', 'ownerId': 'x', 'members': ['x']})

        with patch.object(group_management, 'generate_group_code', side_effect=['TAKEN1', 'FRESH1']):
            group = create_group(store=store, owner_id='alice')

        assert group.code == 'FRESH1'

    def test_create_group_gives_up_after_retries(self, store):
        store.insert(GROUPS_COLLECTION, {'code': 'TAKEN1', 'ownerId': 'x', 'members': ['x']})

        with patch.object(group_management, 'generate_group_code', return_value='TAKEN1'):
            with pytest.raises(RuntimeError):
                create_group(store=store, owner_id='alice', max_retries=3)

        assert len(store.fetch(GROUPS_COLLECTION)) == 1

    def test_get_group_missing(self, store):
        with pytest.raises(GroupNotFoundError):
            get_group(store=store, group_id='missing')

    def test_list_groups_for_member(self, store):
        mine = create_group(store=store, owner_id='alice')
        create_group(store=store, owner_id='bob')

        groups = list_groups_for_member(store=store, user_id='alice')

        assert [group.id for group in groups] == [mine.id]


# =============================================================================
# Membership Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestJoinGroup:
    """Tests for join_group()."""

    def test_join_adds_member(self, store):
        created = create_group(store=store, owner_id='alice')

        group = join_group(store=store, code=created.code, user_id='bob')

        assert group.member_ids == ['alice', 'bob']
        assert store.get(GROUPS_COLLECTION, created.id)['members'] == ['alice', 'bob']

    def test_join_normalizes_code(self, store):
        created = create_group(store=store, owner_id='alice')

        group = join_group(store=store, code=f"  {created.code.lower()} ", user_id='bob')

        assert group.id == created.id

    def test_unknown_code(self, store):
        """Joining with a code nobody uses changes nothing."""
        create_group(store=store, owner_id='alice')
        before = store.fetch(GROUPS_COLLECTION)

        with pytest.raises(GroupNotFoundError) as excinfo:
            join_group(store=store, code='ABC123', user_id='bob')

        assert str(excinfo.value) == 'No group found with that code.'
        assert store.fetch(GROUPS_COLLECTION) == before
        assert list_groups_for_member(store=store, user_id='bob') == []

    def test_blank_code(self, store):
        with pytest.raises(InvalidGroupCodeError):
            join_group(store=store, code='   ', user_id='bob')

    def test_already_member_writes_nothing(self, store):
        created = create_group(store=store, owner_id='alice')

        with patch.object(store, 'merge_write') as merge_write:
            group = join_group(store=store, code=created.code, user_id='alice')

        merge_write.assert_not_called()
        assert group.member_ids == ['alice']

    def test_concurrent_style_joins_keep_everyone(self, store):
        created = create_group(store=store, owner_id='alice')

        # Both joiners read the same snapshot before either writes.
        store.merge_write(GROUPS_COLLECTION, created.id, {'members': ['bob']})
        store.merge_write(GROUPS_COLLECTION, created.id, {'members': ['carol']})

        assert get_group(store=store, group_id=created.id).member_ids == ['alice', 'bob', 'carol']


# =============================================================================
# Member Directory Tests
# =============================================================================

class TestResolveMemberNames:
    """Tests for resolve_member_names()."""

    def test_order_preserved_with_fallbacks(self):
        names = {'a': 'Alice', 'c': 'Carol'}

        async def lookup(member_id):
            if member_id == 'boom':
                raise RuntimeError('lookup failed')
            # Later ids finish first.
            await asyncio.sleep(0.01 if member_id == 'a' else 0)
            return names.get(member_id)

        members = async_to_sync(resolve_member_names)(['a', 'b', 'boom', 'c'], lookup)

        assert [member.id for member in members] == ['a', 'b', 'boom', 'c']
        assert [member.display_name for member in members] == ['Alice', 'b', 'boom', 'Carol']
        assert members[1].name is None

    def test_timeout_falls_back_to_id(self):
        async def slow(member_id):
            await asyncio.sleep(1)
            return 'Too late'

        members = async_to_sync(resolve_member_names)(['a'], slow, timeout=0.01)

        assert members == [Member(id='a')]

    def test_concurrency_bounded(self):
        in_flight = 0
        peak = 0

        async def lookup(member_id):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return member_id.upper()

        members = async_to_sync(resolve_member_names)(
            [str(i) for i in range(10)], lookup, max_concurrency=3,
        )

        assert peak <= 3
        assert len(members) == 10

    def test_placeholder_members(self):
        assert placeholder_members(['a', 'b']) == [Member(id='a'), Member(id='b')]


@pytest.mark.django_db
class TestLookupDisplayName:
    """Tests for the account-backed default lookup."""

    def test_resolves_account_names(self, group_owner, member_user):
        group = Group(id='g', code='X', owner_id=group_owner.member_id, members=(
            Member(id=group_owner.member_id),
            Member(id=member_user.member_id),
            Member(id='not-a-user'),
        ))

        resolved = resolve_group_members(group)

        assert [member.display_name for member in resolved.members] == [
            'Olivia Owner', 'Max', 'not-a-user',
        ]

    def test_missing_account(self):
        assert async_to_sync(lookup_display_name)('00000000-0000-0000-0000-000000000000') is None
