# ==========================================
# apps/sync/models.py
# ==========================================

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


class StoredDocument(models.Model):
    """
    One document of a collection in the shared document store.

    Collections are addressed by slash-separated paths such as ``groups`` or
    ``groups/<group id>/payments``. The document body is schemaless JSON;
    field names inside ``data`` are the wire contract shared by every client.
    """

    collection = models.CharField(max_length=255, db_index=True)
    document_id = models.CharField(max_length=64)
    data = models.JSONField(default=dict, encoder=DjangoJSONEncoder)

    # Server clock, used for snapshot ordering
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stored_documents'
        unique_together = [['collection', 'document_id']]
        indexes = [
            models.Index(fields=['collection', 'created_at']),
        ]
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.collection}/{self.document_id}"
