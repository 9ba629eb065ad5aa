"""
Domain exceptions for the document sync app.

Storage failures surface as ``AdapterError`` from the shared taxonomy;
this module adds the sync-specific refinements.
"""

from apps.common.exceptions import AdapterError, NotFoundError, ValidationError


class DocumentNotFoundError(NotFoundError):
    """Raised when a document id does not exist in its collection."""

    def __init__(self, collection, document_id):
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"Document {collection}/{document_id} not found")


class InvalidFieldPathError(ValidationError):
    """Raised when a dotted update path cannot be applied to a document."""
    pass


__all__ = [
    'AdapterError',
    'DocumentNotFoundError',
    'InvalidFieldPathError',
]
