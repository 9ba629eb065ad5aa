# ==========================================
# apps/sync/admin.py
# ==========================================

from django.contrib import admin
from .models import StoredDocument


@admin.register(StoredDocument)
class StoredDocumentAdmin(admin.ModelAdmin):
    """Read-mostly view of raw documents, for support and debugging."""

    list_display = ['collection', 'document_id', 'created_at', 'updated_at']
    list_filter = ['created_at']
    search_fields = ['collection', 'document_id']
    readonly_fields = ['collection', 'document_id', 'created_at', 'updated_at']
    ordering = ['-created_at']
