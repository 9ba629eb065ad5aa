"""
Domain-specific exceptions for groups app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""

from apps.common.exceptions import AdapterError, NotFoundError, ValidationError


class GroupNotFoundError(NotFoundError):
    """Raised when a group id or join code matches no group."""

    default_message = 'No group found with that code.'


class InvalidGroupCodeError(ValidationError):
    """Raised when a join code is blank or malformed."""

    default_message = 'Please enter a group code.'


class NotMemberError(ValidationError):
    """Raised when a member id used in an operation is not in the group."""
    pass


__all__ = [
    'AdapterError',
    'GroupNotFoundError',
    'InvalidGroupCodeError',
    'NotMemberError',
]
