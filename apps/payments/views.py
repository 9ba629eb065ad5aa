from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.common.exceptions import HouseholdServiceError
from apps.common.responses import service_error_response
from apps.groups.mixins import GroupContextMixin
from apps.groups.permissions import IsGroupMember
from apps.groups.services import resolve_group_members

from .serializers import (
    BalanceDetailSerializer,
    MemberBalanceSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    SharePaidSerializer,
)

from apps.payments.services import (
    create_payment,
    get_payment,
    list_payments,
    member_balances,
    net_balance,
    payments_between,
    toggle_share_paid,
)


class PaymentViewSet(GroupContextMixin, viewsets.ViewSet):
    """
    ViewSet for a group's payments.

    list: Get the group's payments, oldest first
    create: Create a payment split among selected members
    retrieve: Get a specific payment
    set_share_paid: Mark one member's share paid or unpaid
    """

    permission_classes = [IsAuthenticated, IsGroupMember]

    def get_serializer_context(self):
        return {'request': self.request, 'group': resolve_group_members(self.get_group())}

    @extend_schema(responses=PaymentSerializer(many=True))
    def list(self, request, group_id=None):
        """Get all payments of the group."""
        try:
            payments = list_payments(store=self.get_store(), group_id=group_id)
        except HouseholdServiceError as e:
            return service_error_response(e)

        serializer = PaymentSerializer(payments, many=True, context=self.get_serializer_context())
        return Response(serializer.data)

    @extend_schema(request=PaymentCreateSerializer, responses=PaymentSerializer)
    def create(self, request, group_id=None):
        """Create a new payment."""
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = create_payment(
                store=self.get_store(),
                group=self.get_group(),
                created_by=self.get_current_member(),
                **serializer.validated_data
            )
        except HouseholdServiceError as e:
            return service_error_response(e)

        output_serializer = PaymentSerializer(payment, context=self.get_serializer_context())
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=PaymentSerializer)
    def retrieve(self, request, group_id=None, pk=None):
        """Get payment details."""
        try:
            payment = get_payment(store=self.get_store(), group_id=group_id, payment_id=pk)
        except HouseholdServiceError as e:
            return service_error_response(e)

        serializer = PaymentSerializer(payment, context=self.get_serializer_context())
        return Response(serializer.data)

    @extend_schema(request=SharePaidSerializer, responses=PaymentSerializer)
    @action(detail=True, methods=['post'], url_path=r'shares/(?P<member_id>[^/.]+)', url_name='share')
    def set_share_paid(self, request, group_id=None, pk=None, member_id=None):
        """
        Set a share's paid flag.

        Only the payment's creator or the share's owner may change it.
        """
        serializer = SharePaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        store = self.get_store()
        try:
            payment = get_payment(store=store, group_id=group_id, payment_id=pk)
        except HouseholdServiceError as e:
            return service_error_response(e)

        user_id = request.user.member_id
        if user_id not in (payment.set_by_uid, member_id):
            return Response(
                {'error': 'Only the payment creator or the share owner can change this share.'},
                status=status.HTTP_403_FORBIDDEN
            )

        try:
            toggle_share_paid(
                store=store,
                group_id=group_id,
                payment_id=pk,
                member_id=member_id,
                paid=serializer.validated_data['paid']
            )
            payment = get_payment(store=store, group_id=group_id, payment_id=pk)
        except HouseholdServiceError as e:
            return service_error_response(e)

        output_serializer = PaymentSerializer(payment, context=self.get_serializer_context())
        return Response(output_serializer.data)


class BalanceViewSet(GroupContextMixin, viewsets.ViewSet):
    """
    Balances between the requesting user and the other group members.

    list: One row per other member with owes-you / you-owe / net
    retrieve: Net balance with one member and the payments behind it
    """

    permission_classes = [IsAuthenticated, IsGroupMember]

    def _load(self, group_id):
        group = resolve_group_members(self.get_group())
        payments = list_payments(store=self.get_store(), group_id=group_id)
        return group, payments

    @extend_schema(responses=MemberBalanceSerializer(many=True))
    def list(self, request, group_id=None):
        """Get per-member balances."""
        try:
            group, payments = self._load(group_id)
        except HouseholdServiceError as e:
            return service_error_response(e)

        rows = member_balances(request.user.member_id, group.members, payments)
        serializer = MemberBalanceSerializer(rows, many=True)
        return Response(serializer.data)

    @extend_schema(responses=BalanceDetailSerializer)
    def retrieve(self, request, group_id=None, pk=None):
        """Get the balance with one member."""
        user_id = request.user.member_id
        try:
            group, payments = self._load(group_id)
            member = group.get_member(pk)
            if member is None:
                return Response(
                    {'error': 'User is not a member of this group'},
                    status=status.HTTP_404_NOT_FOUND
                )
            between = payments_between(user_id, pk, payments)
            net = net_balance(user_id, pk, payments)
        except HouseholdServiceError as e:
            return service_error_response(e)

        serializer = BalanceDetailSerializer(
            {
                'member': member,
                'net': net,
                'they_owe_you': between.they_owe_you,
                'you_owe_them': between.you_owe_them,
            },
            context={'request': request, 'group': group},
        )
        return Response(serializer.data)
