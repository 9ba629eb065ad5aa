from django.conf import settings
from rest_framework import serializers

from apps.groups.serializers import MemberSerializer

from .domain import SplitMode
from .services import describe_net


def _currency_symbol():
    return getattr(settings, 'CURRENCY_SYMBOL', '£')


class PaymentSerializer(serializers.Serializer):
    """Payment with its shares keyed by member id."""

    id = serializers.CharField(read_only=True)
    item_name = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    total_amount = serializers.FloatField(read_only=True)
    set_by_uid = serializers.CharField(read_only=True)
    set_by_name = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)
    shares = serializers.SerializerMethodField()

    def get_shares(self, obj):
        group = self.context.get('group')
        return {
            member_id: {
                'amount': share.amount,
                'paid': share.paid,
                'member_name': group.member_name(member_id) if group else member_id,
            }
            for member_id, share in obj.shares.items()
        }


class PaymentCreateSerializer(serializers.Serializer):
    """Serializer for creating payments. Amounts are validated by the service."""

    item_name = serializers.CharField(max_length=200, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    total_amount = serializers.CharField()
    selected_members = serializers.ListField(child=serializers.CharField(), allow_empty=True)
    split_mode = serializers.ChoiceField(choices=SplitMode.choices, default=SplitMode.EQUAL)
    custom_shares = serializers.DictField(child=serializers.CharField(), required=False, allow_null=True, default=None)


class SharePaidSerializer(serializers.Serializer):
    """Serializer for setting a share's paid flag."""

    paid = serializers.BooleanField(required=True)


class MemberBalanceSerializer(serializers.Serializer):
    """One row of the per-member balance overview."""

    member = MemberSerializer(read_only=True)
    owes_you = serializers.FloatField(read_only=True)
    you_owe = serializers.FloatField(read_only=True)
    net = serializers.FloatField(read_only=True)
    description = serializers.SerializerMethodField()

    def get_description(self, obj):
        return describe_net(obj.net, obj.member.display_name, _currency_symbol())


class BalanceDetailSerializer(serializers.Serializer):
    """Net balance with one member and the payments behind it."""

    member = MemberSerializer(read_only=True)
    net = serializers.FloatField(read_only=True)
    description = serializers.SerializerMethodField()
    they_owe_you = PaymentSerializer(many=True, read_only=True)
    you_owe_them = PaymentSerializer(many=True, read_only=True)

    def get_description(self, obj):
        return describe_net(obj['net'], obj['member'].display_name, _currency_symbol())
