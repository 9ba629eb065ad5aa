"""
Live view of one group for one user.

``GroupDashboard`` follows the group document, its chores and its payments
through store subscriptions. Each snapshot replaces the matching tuple
wholesale; balances and the visible chore list are derived on read.

Example:
    with GroupDashboard(store, group_id, user_id) as dashboard:
        dashboard.chore_filter = ChoreFilter.PAST_DEADLINE
        for chore in dashboard.visible_chores:
            dashboard.mark_chore_complete(chore.id)
"""

import logging
from typing import List, Optional, Tuple

from apps.chores.domain import Chore, ChoreFilter
from apps.chores.services import (
    ChoreNotFoundError,
    filter_chores,
    mark_complete,
    toggle_chore_completion,
)
from apps.common.exceptions import HouseholdServiceError
from apps.groups.domain import Group
from apps.payments.domain import Payment
from apps.payments.services import (
    BalanceSheet,
    MemberBalance,
    PaymentNotFoundError,
    ShareNotFoundError,
    compute_balances,
    member_balances,
    toggle_share_paid,
)
from apps.sync.adapter import (
    GROUPS_COLLECTION,
    DocumentStore,
    chores_collection,
    payments_collection,
)

from .member_directory import NameLookup, placeholder_members, resolve_group_members

logger = logging.getLogger(__name__)


class GroupDashboard:
    """
    Latest-snapshot state of a group as seen by ``user_id``.

    Operations never raise service errors: they store the error text in
    ``message`` and return False, leaving the last snapshot in place.
    """

    def __init__(
        self,
        store: DocumentStore,
        group_id: str,
        user_id: str,
        chore_filter: str = ChoreFilter.ALL,
        name_lookup: Optional[NameLookup] = None,
    ):
        self.store = store
        self.group_id = group_id
        self.user_id = user_id
        self.chore_filter = ChoreFilter(chore_filter)
        self.name_lookup = name_lookup

        self.group: Optional[Group] = None
        self.chores: Tuple[Chore, ...] = ()
        self.payments: Tuple[Payment, ...] = ()
        self.message: Optional[str] = None

        self._subscriptions = []

    # -------------------------------------------------------------------------
    # Lifetime
    # -------------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return bool(self._subscriptions)

    def open(self) -> 'GroupDashboard':
        if self.is_open:
            return self

        self._subscriptions = [
            self.store.subscribe(
                GROUPS_COLLECTION, self._on_groups, self._on_error, document_id=self.group_id,
            ),
            self.store.subscribe(chores_collection(self.group_id), self._on_chores, self._on_error),
            self.store.subscribe(payments_collection(self.group_id), self._on_payments, self._on_error),
        ]
        logger.debug("Dashboard opened for group %s user %s", self.group_id, self.user_id)
        return self

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        logger.debug("Dashboard closed for group %s user %s", self.group_id, self.user_id)

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # -------------------------------------------------------------------------
    # Snapshot handlers
    # -------------------------------------------------------------------------

    def _on_groups(self, snapshots) -> None:
        for snapshot in snapshots:
            if snapshot.document_id != self.group_id:
                continue
            group = Group.from_document(snapshot.document_id, snapshot.fields)
            if self.group is not None and self.group.member_ids == group.member_ids:
                # Keep names already resolved for an unchanged member list.
                group = group.with_members(self.group.members)
            else:
                group = group.with_members(placeholder_members(group.member_ids))
                if self.name_lookup is not None:
                    group = resolve_group_members(group, self.name_lookup)
            self.group = group
            return

    def _on_chores(self, snapshots) -> None:
        self.chores = tuple(
            Chore.from_document(snapshot.document_id, snapshot.fields)
            for snapshot in snapshots
        )

    def _on_payments(self, snapshots) -> None:
        self.payments = tuple(
            Payment.from_document(snapshot.document_id, snapshot.fields)
            for snapshot in snapshots
        )

    def _on_error(self, error: Exception) -> None:
        logger.warning("Dashboard for group %s lost a snapshot: %s", self.group_id, error)
        self.message = str(error)

    # -------------------------------------------------------------------------
    # Projections
    # -------------------------------------------------------------------------

    @property
    def visible_chores(self) -> List[Chore]:
        return filter_chores(self.chores, self.chore_filter)

    @property
    def balances(self) -> BalanceSheet:
        return compute_balances(self.user_id, self.payments)

    @property
    def member_balances(self) -> List[MemberBalance]:
        if self.group is None:
            return []
        return member_balances(self.user_id, self.group.members, self.payments)

    def member_name(self, member_id: str) -> str:
        if self.group is None:
            return member_id
        return self.group.member_name(member_id)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def _find_chore(self, chore_id: str) -> Chore:
        for chore in self.chores:
            if chore.id == chore_id:
                return chore
        raise ChoreNotFoundError(f"Chore {chore_id} not found")

    def _find_payment(self, payment_id: str) -> Payment:
        for payment in self.payments:
            if payment.id == payment_id:
                return payment
        raise PaymentNotFoundError(f"Payment {payment_id} not found")

    def _run(self, operation, *args) -> bool:
        try:
            operation(*args)
        except HouseholdServiceError as e:
            logger.info("Dashboard operation failed in group %s: %s", self.group_id, e)
            self.message = e.message
            return False
        self.message = None
        return True

    def toggle_chore(self, chore_id: str) -> bool:
        def toggle():
            toggle_chore_completion(
                store=self.store, group_id=self.group_id, chore=self._find_chore(chore_id),
            )
        return self._run(toggle)

    def mark_chore_complete(self, chore_id: str) -> bool:
        def complete():
            mark_complete(store=self.store, group_id=self.group_id, chore=self._find_chore(chore_id))
        return self._run(complete)

    def toggle_share(self, payment_id: str, member_id: str, paid: Optional[bool] = None) -> bool:
        """Set a share's paid flag; with ``paid`` omitted the current flag is flipped."""
        def toggle():
            if paid is None:
                share = self._find_payment(payment_id).share_for(member_id)
                if share is None:
                    raise ShareNotFoundError(f"Member {member_id} has no share in this payment")
                new_paid = not share.paid
            else:
                new_paid = paid
            toggle_share_paid(
                store=self.store,
                group_id=self.group_id,
                payment_id=payment_id,
                member_id=member_id,
                paid=new_paid,
            )
        return self._run(toggle)
