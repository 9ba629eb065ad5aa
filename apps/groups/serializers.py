from rest_framework import serializers


class MemberSerializer(serializers.Serializer):
    """Group member with its resolved name."""

    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True, allow_null=True)
    display_name = serializers.CharField(read_only=True)


class GroupSerializer(serializers.Serializer):
    """Main serializer for groups."""

    id = serializers.CharField(read_only=True)
    code = serializers.CharField(read_only=True)
    owner_id = serializers.CharField(read_only=True)
    members = MemberSerializer(many=True, read_only=True)
    member_count = serializers.SerializerMethodField()
    is_owner = serializers.SerializerMethodField()

    def get_member_count(self, obj):
        return len(obj.members)

    def get_is_owner(self, obj):
        """Whether the requesting user owns the group."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.owner_id == request.user.member_id
        return False


class JoinGroupSerializer(serializers.Serializer):
    """Serializer for joining a group with its code."""

    code = serializers.CharField(max_length=16, required=True, allow_blank=True)
