import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
from apps.sync.adapter import GROUPS_COLLECTION
from apps.sync.store import DjangoDocumentStore


@pytest.fixture
def store(db):
    """Return a document store backed by the test database."""
    return DjangoDocumentStore()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def group_owner(db):
    """Create and return a test user (group owner)."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        first_name='Olivia',
        last_name='Owner',
    )


@pytest.fixture
def member_user(db):
    """Create and return a member user."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        first_name='Max',
    )


@pytest.fixture
def group_other_user(db):
    """Create and return a user not in any group."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def group(store, group_owner, member_user):
    """A stored group with owner and member, returned as (id, code)."""
    group_id = store.insert(GROUPS_COLLECTION, {
        'code': 'ABC234',
        'ownerId': group_owner.member_id,
        'members': [group_owner.member_id, member_user.member_id],
    })
    return group_id, 'ABC234'


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def authenticated_client(group_owner):
    """Return API client authenticated as group owner."""
    return _client_for(group_owner)


@pytest.fixture
def member_client(member_user):
    """Return API client authenticated as a group member."""
    return _client_for(member_user)


@pytest.fixture
def other_client(group_other_user):
    """Return API client authenticated as non-member."""
    return _client_for(group_other_user)
