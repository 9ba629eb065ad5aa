"""
Domain exceptions for payments app.

Each exception extends one of the shared roots in ``apps.common.exceptions``
so views can map them to HTTP responses by category.

Exception Hierarchy:
    ValidationError
    ├── PaymentValidationError
    ├── InvalidAmountError
    ├── NoMembersSelectedError
    ├── ShareSumMismatchError
    └── InvalidCounterpartyError
    NotFoundError
    ├── PaymentNotFoundError
    └── ShareNotFoundError
"""

from apps.common.exceptions import AdapterError, NotFoundError, ValidationError


class PaymentValidationError(ValidationError):
    """Raised when payment details are missing or malformed."""
    pass


class InvalidAmountError(ValidationError):
    """Raised when an amount is not a finite, non-negative number."""
    pass


class NoMembersSelectedError(ValidationError):
    """Raised when a payment is split among nobody."""

    default_message = 'Please select at least one member to split with.'


class ShareSumMismatchError(ValidationError):
    """Raised when custom shares do not add up to the payment total."""

    def __init__(self, shares_total, total_amount, currency_symbol='£'):
        self.shares_total = shares_total
        self.total_amount = total_amount
        super().__init__(
            f"The sum of shares ({currency_symbol}{shares_total:.2f}) does not equal "
            f"the total amount ({currency_symbol}{total_amount:.2f})."
        )


class InvalidCounterpartyError(ValidationError):
    """Raised when a balance is requested against the current user."""
    pass


class PaymentNotFoundError(NotFoundError):
    """Raised when a payment does not exist in the group."""
    pass


class ShareNotFoundError(NotFoundError):
    """Raised when a member holds no share in a payment."""
    pass


__all__ = [
    'AdapterError',
    'PaymentValidationError',
    'InvalidAmountError',
    'NoMembersSelectedError',
    'ShareSumMismatchError',
    'InvalidCounterpartyError',
    'PaymentNotFoundError',
    'ShareNotFoundError',
]
