"""
Balance engine.

Pure projections over a snapshot of a group's payments, always taken from
the point of view of one user:

* ``owed_to_you`` - for payments the user created, every other member's
  unpaid share, summed per member.
* ``you_owe``     - for payments someone else created, the user's own unpaid
  share, summed per creator.
* ``net``         - ``owed_to_you[c] - you_owe[c]``; positive means the
  counterparty owes the user.

Only shares with ``paid == False`` contribute. Nothing here writes to the
store: callers re-run the projection whenever a new payments snapshot
arrives (a share toggle is only visible once its snapshot does).

Example:
    Per-counterparty view::

        sheet = compute_balances(user_id, payments)
        for member_id in sheet.counterparties():
            print(member_id, describe_net(sheet.net(member_id), member_id))
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from apps.groups.domain import Member
from apps.payments.domain import Payment

from .exceptions import InvalidCounterpartyError

# Nets that would print as 0.00 are settled.
SETTLED_TOLERANCE = 0.005


@dataclass(frozen=True)
class BalanceSheet:
    """Owed/owing totals between one user and every counterparty."""

    user_id: str
    owed_to_you: Dict[str, float] = field(default_factory=dict)
    you_owe: Dict[str, float] = field(default_factory=dict)

    def owes_you(self, counterparty: str) -> float:
        return self.owed_to_you.get(counterparty, 0.0)

    def you_owe_to(self, counterparty: str) -> float:
        return self.you_owe.get(counterparty, 0.0)

    def net(self, counterparty: str) -> float:
        _check_counterparty(self.user_id, counterparty)
        return self.owes_you(counterparty) - self.you_owe_to(counterparty)

    def counterparties(self) -> List[str]:
        """Members with any outstanding amount in either direction."""
        seen = dict.fromkeys(self.owed_to_you)
        seen.update(dict.fromkeys(self.you_owe))
        return list(seen)

    @property
    def total_owed_to_you(self) -> float:
        return sum(self.owed_to_you.values())

    @property
    def total_you_owe(self) -> float:
        return sum(self.you_owe.values())


@dataclass(frozen=True)
class PaymentsBetween:
    """Outstanding payments between the user and one counterparty."""

    they_owe_you: Tuple[Payment, ...] = ()
    you_owe_them: Tuple[Payment, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.they_owe_you and not self.you_owe_them


@dataclass(frozen=True)
class MemberBalance:
    member: Member
    owes_you: float
    you_owe: float

    @property
    def net(self) -> float:
        return self.owes_you - self.you_owe


def _check_counterparty(user_id: str, counterparty: str) -> None:
    if counterparty == user_id:
        raise InvalidCounterpartyError("You cannot hold a balance with yourself")


def owed_to_you(user_id: str, payments: Iterable[Payment]) -> Dict[str, float]:
    totals = defaultdict(float)
    for payment in payments:
        if payment.set_by_uid != user_id:
            continue
        for member_id, share in payment.shares.items():
            if member_id != user_id and not share.paid:
                totals[member_id] += share.amount
    return dict(totals)


def you_owe(user_id: str, payments: Iterable[Payment]) -> Dict[str, float]:
    totals = defaultdict(float)
    for payment in payments:
        if payment.set_by_uid == user_id:
            continue
        share = payment.unpaid_share_for(user_id)
        if share is not None:
            totals[payment.set_by_uid] += share.amount
    return dict(totals)


def compute_balances(user_id: str, payments: Iterable[Payment]) -> BalanceSheet:
    payments = list(payments)
    return BalanceSheet(
        user_id=user_id,
        owed_to_you=owed_to_you(user_id, payments),
        you_owe=you_owe(user_id, payments),
    )


def net_balance(user_id: str, counterparty: str, payments: Iterable[Payment]) -> float:
    return compute_balances(user_id, payments).net(counterparty)


def payments_between(
    user_id: str,
    counterparty: str,
    payments: Iterable[Payment],
) -> PaymentsBetween:
    """
    Split the payments that are still open between two members.

    "They owe you" holds payments the user created where the counterparty's
    share is unpaid; "you owe them" holds payments the counterparty created
    where the user's share is unpaid. Input order is preserved.
    """
    _check_counterparty(user_id, counterparty)

    they_owe_you = []
    you_owe_them = []
    for payment in payments:
        if payment.set_by_uid == user_id and payment.unpaid_share_for(counterparty):
            they_owe_you.append(payment)
        elif payment.set_by_uid == counterparty and payment.unpaid_share_for(user_id):
            you_owe_them.append(payment)

    return PaymentsBetween(they_owe_you=tuple(they_owe_you), you_owe_them=tuple(you_owe_them))


def member_balances(
    user_id: str,
    members: Sequence[Member],
    payments: Iterable[Payment],
) -> List[MemberBalance]:
    """One row per group member other than the user, zeros included."""
    sheet = compute_balances(user_id, payments)
    return [
        MemberBalance(
            member=member,
            owes_you=sheet.owes_you(member.id),
            you_owe=sheet.you_owe_to(member.id),
        )
        for member in members
        if member.id != user_id
    ]


def settlement_target(payment: Payment, user_id: str, counterparty: str) -> Optional[str]:
    """
    Whose share a settle action between two members refers to.

    When the user created the payment, it is the counterparty's share; when
    the counterparty created it, it is the user's own share.
    """
    if payment.set_by_uid == user_id:
        return counterparty
    if payment.set_by_uid == counterparty:
        return user_id
    return None


def is_settled(net: float) -> bool:
    return abs(net) < SETTLED_TOLERANCE


def format_amount(amount: float, currency_symbol: str = '£') -> str:
    return f"{currency_symbol}{abs(amount):.2f}"


def describe_net(net: float, counterparty_name: str, currency_symbol: str = '£') -> str:
    if is_settled(net):
        return "Settled"
    if net > 0:
        return f"{counterparty_name} owes you {format_amount(net, currency_symbol)}"
    return f"You owe {counterparty_name} {format_amount(net, currency_symbol)}"
