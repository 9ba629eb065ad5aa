import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.common.exceptions import HouseholdServiceError
from apps.common.responses import service_error_response

from .mixins import GroupContextMixin
from .permissions import IsGroupMember
from .serializers import GroupSerializer, JoinGroupSerializer

from apps.groups.services import (
    create_group,
    join_group,
    list_groups_for_member,
    resolve_group_members,
)

logger = logging.getLogger(__name__)


class GroupViewSet(GroupContextMixin, viewsets.ViewSet):
    """
    ViewSet for household groups.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all groups the user is a member of
    create: Create a new group owned by the user
    retrieve: Get a specific group (members only)
    join: Join a group by its code
    """

    permission_classes = [IsAuthenticated]
    group_lookup_kwarg = 'pk'

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action == 'retrieve':
            return [IsAuthenticated(), IsGroupMember()]
        return [IsAuthenticated()]

    @extend_schema(responses=GroupSerializer(many=True))
    def list(self, request):
        """Get groups where the user is a member, with member names."""
        try:
            groups = list_groups_for_member(store=self.get_store(), user_id=request.user.member_id)
        except HouseholdServiceError as e:
            return service_error_response(e)

        groups = [resolve_group_members(group) for group in groups]
        serializer = GroupSerializer(groups, many=True, context={'request': request})
        return Response(serializer.data)

    @extend_schema(request=None, responses=GroupSerializer)
    def create(self, request):
        """Create a new group."""
        try:
            group = create_group(store=self.get_store(), owner_id=request.user.member_id)
        except HouseholdServiceError as e:
            return service_error_response(e)
        except RuntimeError as e:
            logger.error("Group creation failed for %s: %s", request.user.member_id, e)
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        group = resolve_group_members(group)
        output_serializer = GroupSerializer(group, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=GroupSerializer)
    def retrieve(self, request, pk=None):
        """Get group details with members."""
        group = resolve_group_members(self.get_group())
        serializer = GroupSerializer(group, context={'request': request})
        return Response(serializer.data)

    @extend_schema(request=JoinGroupSerializer, responses=GroupSerializer)
    @action(detail=False, methods=['post'])
    def join(self, request):
        """Join a group using its code."""
        serializer = JoinGroupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            group = join_group(
                store=self.get_store(),
                code=serializer.validated_data['code'],
                user_id=request.user.member_id
            )
        except HouseholdServiceError as e:
            return service_error_response(e)

        group = resolve_group_members(group)
        output_serializer = GroupSerializer(group, context={'request': request})
        return Response(output_serializer.data)
