import pytest

from apps.sync.store import DjangoDocumentStore


@pytest.fixture
def store(db):
    """Return a document store backed by the test database."""
    return DjangoDocumentStore()


@pytest.fixture
def collector():
    """Collects every snapshot delivered to a subscriber."""

    class Collector:
        def __init__(self):
            self.snapshots = []
            self.errors = []

        def __call__(self, documents):
            self.snapshots.append(documents)

        def on_error(self, error):
            self.errors.append(error)

        @property
        def latest_ids(self):
            return [document.document_id for document in self.snapshots[-1]]

    return Collector()
