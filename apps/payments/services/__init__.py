"""
Payments app services layer.

Payment creation and share settlement write through the document store;
the balance engine is a pure projection over payment snapshots.
"""

from .exceptions import (
    AdapterError,
    PaymentValidationError,
    InvalidAmountError,
    NoMembersSelectedError,
    ShareSumMismatchError,
    InvalidCounterpartyError,
    PaymentNotFoundError,
    ShareNotFoundError,
)

from .payment_management import (
    SHARE_SUM_TOLERANCE,
    parse_amount,
    calculate_equal_shares,
    calculate_custom_shares,
    create_payment,
    get_payment,
    list_payments,
    toggle_share_paid,
)

from .balances import (
    BalanceSheet,
    MemberBalance,
    PaymentsBetween,
    compute_balances,
    describe_net,
    format_amount,
    is_settled,
    member_balances,
    net_balance,
    owed_to_you,
    payments_between,
    settlement_target,
    you_owe,
)


__all__ = [
    # Exceptions
    'AdapterError',
    'PaymentValidationError',
    'InvalidAmountError',
    'NoMembersSelectedError',
    'ShareSumMismatchError',
    'InvalidCounterpartyError',
    'PaymentNotFoundError',
    'ShareNotFoundError',

    # Payment Management
    'SHARE_SUM_TOLERANCE',
    'parse_amount',
    'calculate_equal_shares',
    'calculate_custom_shares',
    'create_payment',
    'get_payment',
    'list_payments',
    'toggle_share_paid',

    # Balances
    'BalanceSheet',
    'MemberBalance',
    'PaymentsBetween',
    'compute_balances',
    'describe_net',
    'format_amount',
    'is_settled',
    'member_balances',
    'net_balance',
    'owed_to_you',
    'payments_between',
    'settlement_target',
    'you_owe',
]
