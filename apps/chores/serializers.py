from rest_framework import serializers

from .domain import ChoreFilter, RepeatPolicy
from .services import is_past_deadline, next_occurrence


class ChoreSerializer(serializers.Serializer):
    """Chore as shown in the group's chore list."""

    id = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    due_date = serializers.DateTimeField(read_only=True, allow_null=True)
    repeat = serializers.CharField(read_only=True)
    assigned_to = serializers.CharField(read_only=True)
    assigned_to_name = serializers.SerializerMethodField()
    set_by = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)
    completed = serializers.BooleanField(read_only=True)
    is_past_deadline = serializers.SerializerMethodField()
    next_occurrence = serializers.SerializerMethodField()

    def get_assigned_to_name(self, obj):
        group = self.context.get('group')
        if not obj.assigned_to:
            return None
        return group.member_name(obj.assigned_to) if group else obj.assigned_to

    def get_is_past_deadline(self, obj):
        return is_past_deadline(obj)

    def get_next_occurrence(self, obj):
        occurrence = next_occurrence(obj)
        return serializers.DateTimeField().to_representation(occurrence) if occurrence else None


class ChoreCreateSerializer(serializers.Serializer):
    """Serializer for creating chores."""

    title = serializers.CharField(max_length=200, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    due_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    repeat = serializers.ChoiceField(choices=RepeatPolicy.choices, default=RepeatPolicy.NEVER)
    assigned_to = serializers.CharField(required=False, allow_blank=True, default='')


class ChoreFilterSerializer(serializers.Serializer):
    """Query parameters for the chore list."""

    filter = serializers.ChoiceField(choices=ChoreFilter.choices, default=ChoreFilter.ALL)
