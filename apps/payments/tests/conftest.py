import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
from apps.groups.domain import Group, Member
from apps.payments.domain import Payment, Share
from apps.sync.adapter import GROUPS_COLLECTION
from apps.sync.store import DjangoDocumentStore


def make_payment(payment_id, set_by, shares, amount=None, item_name='Groceries'):
    """Build a payment from ``{member_id: (amount, paid)}``."""
    return Payment(
        id=payment_id,
        item_name=item_name,
        total_amount=amount if amount is not None else sum(a for a, _ in shares.values()),
        set_by_uid=set_by,
        set_by_name=set_by.title(),
        shares={uid: Share(amount=a, paid=paid) for uid, (a, paid) in shares.items()},
    )


@pytest.fixture
def store(db):
    """Return a document store backed by the test database."""
    return DjangoDocumentStore()


@pytest.fixture
def household():
    """Alice, Bob and Carol sharing a house."""
    return Group(
        id='g1',
        code='ABC123',
        owner_id='alice',
        members=(
            Member(id='alice', name='Alice'),
            Member(id='bob', name='Bob'),
            Member(id='carol', name='Carol'),
        ),
    )


@pytest.fixture
def alice(household):
    return household.get_member('alice')


# =============================================================================
# API fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def payer(db):
    """Create and return the user who pays."""
    return User.objects.create_user(
        email='alice@example.com',
        password='TestPass123!',
        first_name='Alice',
    )


@pytest.fixture
def housemate(db):
    """Create and return a second member."""
    return User.objects.create_user(
        email='bob@example.com',
        password='TestPass123!',
        first_name='Bob',
    )


@pytest.fixture
def outsider(db):
    """Create and return a user not in the group."""
    return User.objects.create_user(
        email='mallory@example.com',
        password='TestPass123!',
        first_name='Mallory',
    )


@pytest.fixture
def third_member(db):
    return User.objects.create_user(
        email='carol@example.com',
        password='TestPass123!',
        first_name='Carol',
    )


@pytest.fixture
def group_id(store, payer, housemate, third_member):
    """A stored group containing payer, housemate and a third member."""
    return store.insert(GROUPS_COLLECTION, {
        'code': 'HOUSE1',
        'ownerId': payer.member_id,
        'members': [payer.member_id, housemate.member_id, third_member.member_id],
    })


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def payer_client(payer):
    """Return API client authenticated as the payer."""
    return _client_for(payer)


@pytest.fixture
def housemate_client(housemate):
    """Return API client authenticated as the housemate."""
    return _client_for(housemate)


@pytest.fixture
def third_member_client(third_member):
    return _client_for(third_member)


@pytest.fixture
def outsider_client(outsider):
    """Return API client authenticated as a non-member."""
    return _client_for(outsider)
