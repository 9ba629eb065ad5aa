"""
Domain exceptions for chores app.

Exception Hierarchy:
    ValidationError
    └── ChoreValidationError
    NotFoundError
    └── ChoreNotFoundError
"""

from apps.common.exceptions import AdapterError, NotFoundError, ValidationError


class ChoreValidationError(ValidationError):
    """Raised when chore details are missing or malformed."""
    pass


class ChoreNotFoundError(NotFoundError):
    """Raised when a chore does not exist in the group."""
    pass


__all__ = [
    'AdapterError',
    'ChoreValidationError',
    'ChoreNotFoundError',
]
