from datetime import datetime, timezone as dt_timezone

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
from apps.chores.domain import Chore, RepeatPolicy
from apps.groups.domain import Group, Member
from apps.sync.adapter import GROUPS_COLLECTION
from apps.sync.store import DjangoDocumentStore

# Wednesday
NOW = datetime(2024, 5, 15, 12, 0, tzinfo=dt_timezone.utc)


def make_chore(chore_id, due_date=None, completed=False, repeat=RepeatPolicy.NEVER, title=None):
    return Chore(
        id=chore_id,
        title=title or f"Chore {chore_id}",
        due_date=due_date,
        repeat=repeat,
        completed=completed,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store(db):
    """Return a document store backed by the test database."""
    return DjangoDocumentStore()


@pytest.fixture
def household():
    return Group(
        id='g1',
        code='ABC123',
        owner_id='alice',
        members=(Member(id='alice', name='Alice'), Member(id='bob', name='Bob')),
    )


# =============================================================================
# API fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a group member."""
    return User.objects.create_user(
        email='alice@example.com',
        password='TestPass123!',
        first_name='Alice',
        last_name='Smith',
    )


@pytest.fixture
def other_user(db):
    """Create and return a user not in the group."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def group_id(store, user):
    """A stored group with ``user`` as its only member."""
    return store.insert(GROUPS_COLLECTION, {
        'code': 'CHORE1',
        'ownerId': user.member_id,
        'members': [user.member_id],
    })


@pytest.fixture
def authenticated_client(api_client, user):
    """Return API client authenticated as the member."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def other_client(other_user):
    """Return API client authenticated as a non-member."""
    client = APIClient()
    refresh = RefreshToken.for_user(other_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
