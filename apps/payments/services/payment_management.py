"""
Payment management service.

Creates split payments and settles individual shares. Every check runs
before the document store is touched, so a rejected payment never
reaches the store.
"""

import logging
import math
from dataclasses import replace
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence

from django.conf import settings

from apps.groups.domain import Group, Member
from apps.groups.services.exceptions import NotMemberError
from apps.payments.domain import Payment, Share, SplitMode
from apps.sync.adapter import SERVER_TIMESTAMP, DocumentStore, payments_collection
from apps.sync.exceptions import DocumentNotFoundError

from .exceptions import (
    InvalidAmountError,
    NoMembersSelectedError,
    PaymentNotFoundError,
    PaymentValidationError,
    ShareNotFoundError,
    ShareSumMismatchError,
)

logger = logging.getLogger(__name__)

# Custom shares may differ from the total by at most this much (inclusive).
SHARE_SUM_TOLERANCE = Decimal('0.01')


def parse_amount(value, *, error_message='Please enter a valid total amount.') -> float:
    """
    Parse a user-entered amount into a float.

    Accepts numbers and numeric strings. Rejects booleans, blanks, NaN,
    infinities and negative values.

    Raises:
        InvalidAmountError: If the value is not a finite, non-negative number.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(error_message)

    if isinstance(value, (int, float, Decimal)):
        amount = float(value)
    else:
        try:
            amount = float(str(value).strip())
        except ValueError:
            raise InvalidAmountError(error_message)

    if not math.isfinite(amount) or amount < 0:
        raise InvalidAmountError(error_message)
    return amount


def _as_decimal(amount: float) -> Decimal:
    return Decimal(str(amount))


def calculate_equal_shares(total_amount: float, member_ids: Sequence[str]) -> Dict[str, Share]:
    """
    Divide the total evenly with plain float division.

    No cent correction is applied: 10.00 among 3 members gives three shares
    of 3.3333...
    """
    if not member_ids:
        raise NoMembersSelectedError()

    amount = total_amount / len(member_ids)
    return {member_id: Share(amount=amount) for member_id in member_ids}


def calculate_custom_shares(
    total_amount: float,
    member_ids: Sequence[str],
    custom_shares: Mapping[str, object],
) -> Dict[str, Share]:
    """
    Validate caller-entered shares for the selected members.

    Entries for members outside ``member_ids`` are ignored.

    Raises:
        InvalidAmountError: If a selected member has no valid amount.
        ShareSumMismatchError: If the amounts miss the total by more than
            ``SHARE_SUM_TOLERANCE``.
    """
    if not member_ids:
        raise NoMembersSelectedError()

    error_message = 'Please enter valid share amounts for all selected members.'
    amounts = {}
    for member_id in member_ids:
        if member_id not in custom_shares:
            raise InvalidAmountError(error_message)
        amounts[member_id] = parse_amount(custom_shares[member_id], error_message=error_message)

    # Summed and compared in Decimal; a gap of exactly one penny is accepted.
    shares_total = sum(_as_decimal(amount) for amount in amounts.values())
    if abs(shares_total - _as_decimal(total_amount)) > SHARE_SUM_TOLERANCE:
        raise ShareSumMismatchError(
            float(shares_total),
            total_amount,
            currency_symbol=getattr(settings, 'CURRENCY_SYMBOL', '£'),
        )

    return {member_id: Share(amount=amount) for member_id, amount in amounts.items()}


def create_payment(
    *,
    store: DocumentStore,
    group: Group,
    created_by: Member,
    item_name: str,
    total_amount,
    selected_members: Sequence[str],
    split_mode: str = SplitMode.EQUAL,
    custom_shares: Optional[Mapping[str, object]] = None,
    description: str = '',
) -> Payment:
    """
    Create a payment and split it among the selected members.

    Every share starts unpaid. The creator does not have to be among the
    selected members.

    Args:
        store: Document store to write to
        group: Group the payment belongs to
        created_by: Member creating the payment (becomes setByUid/setByName)
        item_name: What was bought
        total_amount: Total as a number or numeric string
        selected_members: Member ids to split among, in display order
        split_mode: SplitMode.EQUAL or SplitMode.CUSTOM
        custom_shares: Member id -> amount, required for SplitMode.CUSTOM
        description: Optional free text

    Returns:
        The Payment as written, carrying its new document id

    Raises:
        PaymentValidationError: If the item name is blank or the split mode unknown
        InvalidAmountError: If the total or a custom share is not a valid amount
        NoMembersSelectedError: If no members are selected
        NotMemberError: If the creator or a selected member is not in the group
        ShareSumMismatchError: If custom shares do not add up to the total
        AdapterError: If the store write fails
    """
    item_name = (item_name or '').strip()
    if not item_name:
        raise PaymentValidationError('Item name is required.')

    total = parse_amount(total_amount)

    if not group.has_member(created_by.id):
        raise NotMemberError(f"User {created_by.id} is not a member of this group")

    member_ids = list(dict.fromkeys(selected_members))
    if not member_ids:
        raise NoMembersSelectedError()

    outsiders = [member_id for member_id in member_ids if not group.has_member(member_id)]
    if outsiders:
        raise NotMemberError(f"Not members of this group: {', '.join(outsiders)}")

    if split_mode == SplitMode.EQUAL:
        shares = calculate_equal_shares(total, member_ids)
    elif split_mode == SplitMode.CUSTOM:
        if custom_shares is None:
            raise InvalidAmountError('Please enter valid share amounts for all selected members.')
        shares = calculate_custom_shares(total, member_ids, custom_shares)
    else:
        raise PaymentValidationError(f"Unknown split mode: {split_mode}")

    payment = Payment(
        id='',
        item_name=item_name,
        description=description or '',
        total_amount=total,
        set_by_uid=created_by.id,
        set_by_name=created_by.display_name,
        shares=shares,
    )

    fields = payment.to_document()
    fields['createdAt'] = SERVER_TIMESTAMP
    payment_id = store.insert(payments_collection(group.id), fields)

    logger.info(
        "Payment %s created in group %s by %s: %.2f among %d members (%s)",
        payment_id, group.id, created_by.id, total, len(member_ids), split_mode,
    )
    return replace(payment, id=payment_id)


def get_payment(*, store: DocumentStore, group_id: str, payment_id: str) -> Payment:
    try:
        fields = store.get(payments_collection(group_id), payment_id)
    except DocumentNotFoundError:
        raise PaymentNotFoundError(f"Payment {payment_id} not found")
    return Payment.from_document(payment_id, fields)


def list_payments(*, store: DocumentStore, group_id: str) -> List[Payment]:
    """All payments of a group, oldest first."""
    return [
        Payment.from_document(snapshot.document_id, snapshot.fields)
        for snapshot in store.fetch(payments_collection(group_id))
    ]


def toggle_share_paid(
    *,
    store: DocumentStore,
    group_id: str,
    payment_id: str,
    member_id: str,
    paid: bool,
) -> None:
    """
    Set one member's share paid flag.

    Issues a single nested-field update so concurrent toggles of other
    shares are not overwritten; concurrent toggles of the same share resolve
    last-write-wins in the store. Balances are not recomputed here: they
    change when the next payments snapshot arrives.

    Raises:
        PaymentNotFoundError: If the payment does not exist
        ShareNotFoundError: If the member holds no share in the payment
        AdapterError: If the store fails (not retried)
    """
    payment = get_payment(store=store, group_id=group_id, payment_id=payment_id)

    if '.' in member_id or payment.share_for(member_id) is None:
        raise ShareNotFoundError(f"Member {member_id} has no share in this payment")

    try:
        store.update(
            payments_collection(group_id),
            payment_id,
            {f"shares.{member_id}.paid": bool(paid)},
        )
    except DocumentNotFoundError:
        raise PaymentNotFoundError(f"Payment {payment_id} not found")

    logger.info(
        "Share of %s in payment %s marked %s",
        member_id, payment_id, 'paid' if paid else 'unpaid',
    )
