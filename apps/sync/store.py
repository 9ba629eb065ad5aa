"""
Django ORM implementation of the document store.

Documents live in the ``StoredDocument`` table. Live subscriptions are
driven by Django model signals, so every write that goes through this store
(from any request in the process) triggers a fresh snapshot for the
subscribers of the touched collection once the write commits.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, List

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models.signals import post_delete, post_save
from django.utils import timezone
from django.utils.crypto import get_random_string
from django.utils.module_loading import import_string

from .adapter import DocumentSnapshot, DocumentStore, QueryOp, Subscription
from .codec import decode_value, encode_value
from .exceptions import AdapterError, DocumentNotFoundError, InvalidFieldPathError
from .models import StoredDocument

logger = logging.getLogger(__name__)

DOCUMENT_ID_LENGTH = 20


class DjangoDocumentStore(DocumentStore):
    """
    Document store backed by the project database.

    ``merge_write`` and ``update`` lock the target row for the duration of
    the read-modify-write, so concurrent joins on the same group cannot drop
    each other's members.
    """

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def subscribe(self, collection, on_snapshot, on_error=None, document_id=None):
        dispatch_uid = f"document-subscription-{get_random_string(16)}"

        def deliver():
            try:
                snapshots = self._load_collection(collection, document_id)
            except AdapterError as e:
                logger.warning("Snapshot delivery failed for %s: %s", collection, e)
                if on_error is not None:
                    on_error(e)
                return
            on_snapshot(snapshots)

        def notify():
            if not subscription.active:
                return
            try:
                deliver()
            except Exception as e:
                # A failing subscriber must not fail the writer's commit.
                logger.exception("Subscriber for %s raised while handling a snapshot", collection)
                if on_error is not None:
                    on_error(e)

        def on_change(sender, instance, **kwargs):
            if instance.collection != collection:
                return
            if document_id is not None and instance.document_id != document_id:
                return
            # Subscribers only ever see committed writes.
            transaction.on_commit(notify)

        post_save.connect(on_change, sender=StoredDocument, weak=False, dispatch_uid=dispatch_uid)
        post_delete.connect(on_change, sender=StoredDocument, weak=False, dispatch_uid=dispatch_uid)

        def disconnect():
            post_save.disconnect(sender=StoredDocument, dispatch_uid=dispatch_uid)
            post_delete.disconnect(sender=StoredDocument, dispatch_uid=dispatch_uid)
            logger.debug("Subscription to %s cancelled", collection)

        subscription = Subscription(collection, disconnect)
        logger.debug("Subscribed to %s", collection)
        deliver()
        return subscription

    def fetch(self, collection):
        return self._load_collection(collection)

    def get(self, collection, document_id):
        return self._to_snapshot(self._get_row(collection, document_id)).fields

    def query(self, collection, field_name, value, op=QueryOp.EQUALS):
        if op == QueryOp.EQUALS:
            def matches(fields):
                return fields.get(field_name) == value
        elif op == QueryOp.ARRAY_CONTAINS:
            def matches(fields):
                candidates = fields.get(field_name)
                return isinstance(candidates, list) and value in candidates
        else:
            raise ValueError(f"Unsupported query operator: {op}")

        return [
            snapshot
            for snapshot in self._load_collection(collection)
            if matches(snapshot.fields)
        ]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def insert(self, collection, fields):
        now = timezone.now()
        document_id = get_random_string(DOCUMENT_ID_LENGTH)

        try:
            StoredDocument.objects.create(
                collection=collection,
                document_id=document_id,
                data=encode_value(fields, now),
                created_at=now,
            )
        except DatabaseError as e:
            raise AdapterError(f"Error writing to {collection}: {e}") from e

        logger.info("Inserted %s/%s", collection, document_id)
        return document_id

    def update(self, collection, document_id, fields):
        now = timezone.now()

        try:
            with transaction.atomic():
                row = self._get_row(collection, document_id, for_update=True)
                data = row.data
                for path, value in fields.items():
                    _assign_path(data, path, encode_value(value, now))
                row.data = data
                row.save(update_fields=['data', 'updated_at'])
        except DatabaseError as e:
            raise AdapterError(f"Error updating {collection}/{document_id}: {e}") from e

        logger.info("Updated %s/%s fields=%s", collection, document_id, sorted(fields))

    def merge_write(self, collection, document_id, fields):
        now = timezone.now()
        incoming = encode_value(fields, now)

        try:
            with transaction.atomic():
                try:
                    row = (
                        StoredDocument.objects
                        .select_for_update()
                        .get(collection=collection, document_id=document_id)
                    )
                except StoredDocument.DoesNotExist:
                    StoredDocument.objects.create(
                        collection=collection,
                        document_id=document_id,
                        data=_merge(dict(), incoming),
                        created_at=now,
                    )
                else:
                    row.data = _merge(row.data, incoming)
                    row.save(update_fields=['data', 'updated_at'])
        except DatabaseError as e:
            raise AdapterError(f"Error writing to {collection}/{document_id}: {e}") from e

        logger.info("Merged into %s/%s fields=%s", collection, document_id, sorted(fields))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _get_row(self, collection, document_id, for_update=False):
        queryset = StoredDocument.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(collection=collection, document_id=document_id)
        except StoredDocument.DoesNotExist:
            raise DocumentNotFoundError(collection, document_id)
        except DatabaseError as e:
            raise AdapterError(f"Error reading {collection}/{document_id}: {e}") from e

    def _load_collection(self, collection, document_id=None) -> List[DocumentSnapshot]:
        try:
            queryset = StoredDocument.objects.filter(collection=collection)
            if document_id is not None:
                queryset = queryset.filter(document_id=document_id)
            rows = list(queryset.order_by('created_at', 'id'))
        except DatabaseError as e:
            raise AdapterError(f"Error fetching {collection}: {e}") from e
        return [self._to_snapshot(row) for row in rows]

    @staticmethod
    def _to_snapshot(row) -> DocumentSnapshot:
        return DocumentSnapshot(document_id=row.document_id, fields=decode_value(row.data))


def _assign_path(data: Dict[str, Any], path: str, value: Any) -> None:
    """Set ``value`` at a dotted path, creating intermediate maps."""
    parts = path.split('.')
    if not all(parts):
        raise InvalidFieldPathError(f"Invalid field path: {path!r}")

    target = data
    for part in parts[:-1]:
        child = target.setdefault(part, {})
        if not isinstance(child, dict):
            raise InvalidFieldPathError(
                f"Cannot update {path!r}: {part!r} is not a map"
            )
        target = child
    target[parts[-1]] = value


def _merge(existing: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """Overwrite scalar fields, union list fields preserving stored order."""
    merged = dict(existing)
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(value, list):
            base = list(current) if isinstance(current, list) else []
            for item in value:
                if item not in base:
                    base.append(item)
            merged[key] = base
        else:
            merged[key] = value
    return merged


@lru_cache(maxsize=None)
def get_document_store() -> DocumentStore:
    """Return the process-wide store configured by ``DOCUMENT_STORE_BACKEND``."""
    backend = getattr(settings, 'DOCUMENT_STORE_BACKEND', 'apps.sync.store.DjangoDocumentStore')
    return import_string(backend)()
