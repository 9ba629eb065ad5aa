import pytest
from rest_framework.test import APIClient
from apps.accounts.models import User


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        first_name='Test',
        last_name='User',
    )


@pytest.fixture
def nameless_user(db):
    """Create and return a user with no name set."""
    return User.objects.create_user(
        email='nameless@example.com',
        password='TestPass123!',
    )
