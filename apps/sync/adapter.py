"""
Document synchronization adapter contract.

The household services never talk to a database directly. They read and
write collections of schemaless documents through a ``DocumentStore`` and
receive live updates as full-collection snapshots.

Collections:
    groups                          {code, ownerId, members}
    groups/<group id>/chores        {title, description, dueDate, repeat,
                                     assignedTo, setBy, createdAt, completed}
    groups/<group id>/payments      {itemName, description, amount, setByUid,
                                     setByName, createdAt, shares}

Example:
    Following a group's payments::

        store = get_document_store()
        subscription = store.subscribe(
            payments_collection(group_id),
            on_snapshot=lambda docs: print(len(docs)),
        )
        ...
        subscription.cancel()
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from django.db import models

from .codec import SERVER_TIMESTAMP


GROUPS_COLLECTION = 'groups'


def chores_collection(group_id: str) -> str:
    return f"{GROUPS_COLLECTION}/{group_id}/chores"


def payments_collection(group_id: str) -> str:
    return f"{GROUPS_COLLECTION}/{group_id}/payments"


class QueryOp(models.TextChoices):
    EQUALS = '==', 'Equals'
    ARRAY_CONTAINS = 'array-contains', 'Array contains'


@dataclass(frozen=True)
class DocumentSnapshot:
    """A document id and its decoded fields at one point in time."""
    document_id: str
    fields: Dict[str, Any] = field(default_factory=dict)


SnapshotCallback = Callable[[List[DocumentSnapshot]], None]
ErrorCallback = Callable[[Exception], None]


class Subscription:
    """
    Handle for a live collection subscription.

    Cancelling stops further deliveries. Cancelling twice is harmless.
    """

    def __init__(self, collection: str, on_cancel: Callable[[], None]):
        self.collection = collection
        self._on_cancel = on_cancel
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self._on_cancel()

    def __repr__(self):
        state = 'active' if self.active else 'cancelled'
        return f"<Subscription {self.collection} ({state})>"


class DocumentStore(ABC):
    """
    Abstract document store.

    Implementations raise ``AdapterError`` for every storage failure and
    ``DocumentNotFoundError`` when a single addressed document is missing.
    """

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
        document_id: Optional[str] = None,
    ) -> Subscription:
        """
        Deliver the whole collection now and after every committed change.

        Snapshots are ordered by ``createdAt`` ascending and always describe
        the full collection; consumers replace their state with each one.
        With ``document_id`` the subscription follows that single document:
        snapshots hold it alone (or nothing when it is missing) and writes
        to its siblings are not delivered.
        """

    @abstractmethod
    def fetch(self, collection: str) -> List[DocumentSnapshot]:
        """Read the whole collection once, ordered by ``createdAt`` ascending."""

    @abstractmethod
    def get(self, collection: str, document_id: str) -> Dict[str, Any]:
        """Read one document's fields."""

    @abstractmethod
    def query(
        self,
        collection: str,
        field_name: str,
        value: Any,
        op: str = QueryOp.EQUALS,
    ) -> List[DocumentSnapshot]:
        """Return documents whose field equals, or whose list field contains, ``value``."""

    @abstractmethod
    def insert(self, collection: str, fields: Dict[str, Any]) -> str:
        """Create a document with a generated id and return the id."""

    @abstractmethod
    def update(self, collection: str, document_id: str, fields: Dict[str, Any]) -> None:
        """
        Update selected fields of an existing document.

        Keys may be dotted paths into nested maps, e.g. ``shares.<uid>.paid``,
        so that one nested value changes without rewriting its parent map.
        """

    @abstractmethod
    def merge_write(self, collection: str, document_id: str, fields: Dict[str, Any]) -> None:
        """
        Merge fields into a document, creating it when absent.

        List fields are unioned with the stored list instead of replaced.
        """


__all__ = [
    'GROUPS_COLLECTION',
    'SERVER_TIMESTAMP',
    'DocumentSnapshot',
    'DocumentStore',
    'QueryOp',
    'Subscription',
    'chores_collection',
    'payments_collection',
]
