"""
Shared exception taxonomy for household services.

Every app-specific service error derives from one of three roots so that
callers can tell user mistakes, missing records and storage failures apart
without knowing which app raised them.

Exception Hierarchy:
    HouseholdServiceError (base)
    ├── ValidationError    - bad input, rejected before any write
    ├── NotFoundError      - the referenced group/chore/payment does not exist
    └── AdapterError       - the document store failed to read or write

Usage:
    from apps.common import exceptions

    try:
        join_group(store=store, code=code, user_id=user_id)
    except exceptions.NotFoundError as e:
        return Response({'error': str(e)}, status=404)
"""


class HouseholdServiceError(Exception):
    """Base exception for all household service errors."""

    default_message = 'The operation could not be completed.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return str(self)


class ValidationError(HouseholdServiceError):
    """
    Raised when caller input breaks a business rule.

    Validation always happens before the document store is touched, so a
    ValidationError guarantees nothing was written.
    """

    default_message = 'Invalid input.'


class NotFoundError(HouseholdServiceError):
    """Raised when a referenced record does not exist."""

    default_message = 'Not found.'


class AdapterError(HouseholdServiceError):
    """
    Raised when the document store fails (network, database, subscription).

    Not retried automatically; the caller may re-invoke the operation.
    """

    default_message = 'The document store is unavailable.'
