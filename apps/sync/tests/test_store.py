"""
Tests for the Django document store.

Tests cover:
- Reads and writes of schemaless documents
- Dotted-path updates and list-union merges
- Live subscriptions and their cancellation
- Delivery only after the writing transaction commits
- Storage failures surfacing as AdapterError
"""

from datetime import datetime, timezone as dt_timezone
from unittest.mock import patch

import pytest
from django.db import DatabaseError, transaction

from apps.sync.adapter import SERVER_TIMESTAMP, QueryOp
from apps.sync.codec import TIMESTAMP_TAG, decode_value, encode_value
from apps.sync.exceptions import AdapterError, DocumentNotFoundError, InvalidFieldPathError
from apps.sync.models import StoredDocument
from apps.sync.store import DjangoDocumentStore, get_document_store


# =============================================================================
# Codec Tests
# =============================================================================

class TestCodec:
    """Tests for timestamp encoding in document bodies."""

    def test_server_timestamp_replaced_with_clock(self):
        now = datetime(2024, 3, 1, 12, 0, tzinfo=dt_timezone.utc)
        encoded = encode_value({'createdAt': SERVER_TIMESTAMP}, now)

        assert encoded == {'createdAt': {TIMESTAMP_TAG: now.isoformat()}}
        assert decode_value(encoded)['createdAt'] == now

    def test_nested_values_pass_through(self):
        value = {'shares': {'u1': {'amount': 2.5, 'paid': False}}, 'members': ['a', 'b']}
        assert decode_value(encode_value(value)) == value


# =============================================================================
# Read/Write Tests
# =============================================================================

@pytest.mark.django_db
class TestDocumentWrites:
    """Tests for insert, get, update and merge_write."""

    def test_insert_and_get(self, store):
        document_id = store.insert('groups', {'code': 'ABC123', 'members': ['u1']})

        assert len(document_id) == 20
        assert store.get('groups', document_id) == {'code': 'ABC123', 'members': ['u1']}

    def test_insert_resolves_server_timestamp(self, store):
        document_id = store.insert('things', {'createdAt': SERVER_TIMESTAMP})

        created_at = store.get('things', document_id)['createdAt']
        row = StoredDocument.objects.get(document_id=document_id)
        assert isinstance(created_at, datetime)
        assert created_at == row.created_at

    def test_get_missing_document(self, store):
        with pytest.raises(DocumentNotFoundError):
            store.get('groups', 'missing')

    def test_update_dotted_path_keeps_siblings(self, store):
        document_id = store.insert('payments', {
            'itemName': 'Milk',
            'shares': {
                'u1': {'amount': 1.0, 'paid': False},
                'u2': {'amount': 1.0, 'paid': False},
            },
        })

        store.update('payments', document_id, {'shares.u1.paid': True})

        fields = store.get('payments', document_id)
        assert fields['shares']['u1'] == {'amount': 1.0, 'paid': True}
        assert fields['shares']['u2'] == {'amount': 1.0, 'paid': False}
        assert fields['itemName'] == 'Milk'

    def test_update_missing_document(self, store):
        with pytest.raises(DocumentNotFoundError):
            store.update('payments', 'missing', {'completed': True})

    def test_update_through_scalar_rejected(self, store):
        document_id = store.insert('chores', {'title': 'Bins'})

        with pytest.raises(InvalidFieldPathError):
            store.update('chores', document_id, {'title.text': 'x'})

    def test_update_empty_path_segment_rejected(self, store):
        document_id = store.insert('chores', {'title': 'Bins'})

        with pytest.raises(InvalidFieldPathError):
            store.update('chores', document_id, {'shares..paid': True})

    def test_merge_write_creates_document(self, store):
        store.merge_write('groups', 'g1', {'members': ['u1']})

        assert store.get('groups', 'g1') == {'members': ['u1']}

    def test_merge_write_unions_lists(self, store):
        store.merge_write('groups', 'g1', {'code': 'ABC123', 'members': ['u1', 'u2']})
        store.merge_write('groups', 'g1', {'members': ['u2', 'u3']})

        fields = store.get('groups', 'g1')
        assert fields['members'] == ['u1', 'u2', 'u3']
        assert fields['code'] == 'ABC123'

    def test_merge_write_overwrites_scalars(self, store):
        store.merge_write('groups', 'g1', {'code': 'ABC123'})
        store.merge_write('groups', 'g1', {'code': 'XYZ789'})

        assert store.get('groups', 'g1')['code'] == 'XYZ789'


@pytest.mark.django_db
class TestDocumentQueries:
    """Tests for fetch and query."""

    def test_fetch_orders_by_creation(self, store):
        first = store.insert('chores', {'title': 'First'})
        second = store.insert('chores', {'title': 'Second'})
        store.insert('other', {'title': 'Elsewhere'})

        documents = store.fetch('chores')

        assert [document.document_id for document in documents] == [first, second]

    def test_query_equals(self, store):
        match = store.insert('groups', {'code': 'ABC123'})
        store.insert('groups', {'code': 'ZZZ999'})

        documents = store.query('groups', 'code', 'ABC123')

        assert [document.document_id for document in documents] == [match]

    def test_query_array_contains(self, store):
        mine = store.insert('groups', {'members': ['u1', 'u2']})
        store.insert('groups', {'members': ['u3']})
        store.insert('groups', {'members': 'u1'})

        documents = store.query('groups', 'members', 'u1', op=QueryOp.ARRAY_CONTAINS)

        assert [document.document_id for document in documents] == [mine]

    def test_query_unknown_operator(self, store):
        with pytest.raises(ValueError):
            store.query('groups', 'code', 'x', op='>')


# =============================================================================
# Subscription Tests
# =============================================================================

@pytest.mark.django_db(transaction=True)
class TestSubscriptions:
    """Tests for live collection snapshots."""

    def test_subscribe_delivers_immediately(self, store, collector):
        existing = store.insert('chores', {'title': 'Bins'})

        subscription = store.subscribe('chores', collector)
        subscription.cancel()

        assert len(collector.snapshots) == 1
        assert collector.latest_ids == [existing]

    def test_subscribe_delivers_full_snapshot_on_change(self, store, collector):
        subscription = store.subscribe('chores', collector)
        first = store.insert('chores', {'title': 'Bins'})
        store.update('chores', first, {'completed': True})
        subscription.cancel()

        assert len(collector.snapshots) == 3
        assert collector.snapshots[0] == []
        assert collector.snapshots[-1][0].fields['completed'] is True

    def test_other_collections_do_not_notify(self, store, collector):
        subscription = store.subscribe('chores', collector)
        store.insert('payments', {'itemName': 'Milk'})
        subscription.cancel()

        assert len(collector.snapshots) == 1

    def test_cancel_stops_deliveries(self, store, collector):
        subscription = store.subscribe('chores', collector)
        subscription.cancel()
        store.insert('chores', {'title': 'Bins'})

        assert len(collector.snapshots) == 1
        assert subscription.active is False

    def test_cancel_twice_is_harmless(self, store, collector):
        subscription = store.subscribe('chores', collector)
        subscription.cancel()
        subscription.cancel()

        assert subscription.active is False

    def test_failing_subscriber_does_not_break_writer(self, store, collector):
        def explode(documents):
            if documents:
                raise RuntimeError('subscriber bug')

        subscription = store.subscribe('chores', explode, on_error=collector.on_error)
        document_id = store.insert('chores', {'title': 'Bins'})
        subscription.cancel()

        assert store.get('chores', document_id)['title'] == 'Bins'
        assert len(collector.errors) == 1
        assert isinstance(collector.errors[0], RuntimeError)

    def test_fetch_failure_reported_to_on_error(self, store, collector):
        with patch.object(DjangoDocumentStore, '_load_collection', side_effect=AdapterError('offline')):
            subscription = store.subscribe('chores', collector, on_error=collector.on_error)
        subscription.cancel()

        assert collector.snapshots == []
        assert str(collector.errors[0]) == 'offline'

    def test_rolled_back_write_not_delivered(self, store, collector):
        subscription = store.subscribe('chores', collector)

        with pytest.raises(RuntimeError):
            with transaction.atomic():
                store.insert('chores', {'title': 'Bins'})
                raise RuntimeError('request failed')
        subscription.cancel()

        assert collector.snapshots == [[]]
        assert store.fetch('chores') == []

    def test_delivered_after_outer_commit(self, store, collector):
        subscription = store.subscribe('chores', collector)

        with transaction.atomic():
            document_id = store.insert('chores', {'title': 'Bins'})
            store.update('chores', document_id, {'completed': True})
            assert len(collector.snapshots) == 1
        subscription.cancel()

        assert len(collector.snapshots) == 3
        assert collector.snapshots[-1][0].fields['completed'] is True

    def test_single_document_subscription(self, store, collector):
        followed = store.insert('groups', {'code': 'AAA111'})
        store.insert('groups', {'code': 'BBB222'})

        subscription = store.subscribe('groups', collector, document_id=followed)
        other = store.insert('groups', {'code': 'CCC333'})
        store.update('groups', other, {'code': 'DDD444'})
        assert len(collector.snapshots) == 1

        store.update('groups', followed, {'code': 'EEE555'})
        subscription.cancel()

        assert len(collector.snapshots) == 2
        assert collector.latest_ids == [followed]
        assert collector.snapshots[-1][0].fields['code'] == 'EEE555'


# =============================================================================
# Failure Tests
# =============================================================================

@pytest.mark.django_db
class TestStorageFailures:
    """Database errors surface as AdapterError."""

    def test_insert_failure(self, store):
        with patch('apps.sync.store.StoredDocument.objects.create', side_effect=DatabaseError('disk full')):
            with pytest.raises(AdapterError):
                store.insert('chores', {'title': 'Bins'})

    def test_fetch_failure(self, store):
        with patch('apps.sync.store.StoredDocument.objects.filter', side_effect=DatabaseError('gone')):
            with pytest.raises(AdapterError):
                store.fetch('chores')


def test_get_document_store_uses_configured_backend():
    assert isinstance(get_document_store(), DjangoDocumentStore)
    assert get_document_store() is get_document_store()
