from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.common.exceptions import HouseholdServiceError
from apps.common.responses import service_error_response
from apps.groups.mixins import GroupContextMixin
from apps.groups.permissions import IsGroupMember
from apps.groups.services import resolve_group_members

from .domain import ChoreFilter
from .serializers import ChoreCreateSerializer, ChoreFilterSerializer, ChoreSerializer

from apps.chores.services import (
    create_chore,
    filter_chores,
    get_chore,
    list_chores,
    mark_complete,
    toggle_chore_completion,
)


class ChoreViewSet(GroupContextMixin, viewsets.ViewSet):
    """
    ViewSet for a group's chores.

    list: Get the group's chores, optionally filtered
    create: Create a chore
    retrieve: Get a specific chore
    toggle: Flip a chore between pending and done
    complete: Mark a chore done
    """

    permission_classes = [IsAuthenticated, IsGroupMember]

    def get_serializer_context(self, group=None):
        return {'request': self.request, 'group': group or self.get_group()}

    @extend_schema(
        parameters=[OpenApiParameter('filter', str, enum=ChoreFilter.values)],
        responses=ChoreSerializer(many=True),
    )
    def list(self, request, group_id=None):
        """Get chores, oldest first, through the selected filter."""
        params = ChoreFilterSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        try:
            chores = list_chores(store=self.get_store(), group_id=group_id)
        except HouseholdServiceError as e:
            return service_error_response(e)

        chores = filter_chores(chores, params.validated_data['filter'])
        group = resolve_group_members(self.get_group())
        serializer = ChoreSerializer(chores, many=True, context=self.get_serializer_context(group))
        return Response(serializer.data)

    @extend_schema(request=ChoreCreateSerializer, responses=ChoreSerializer)
    def create(self, request, group_id=None):
        """Create a new chore."""
        serializer = ChoreCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            chore = create_chore(
                store=self.get_store(),
                group=self.get_group(),
                set_by=request.user.get_display_name(),
                **serializer.validated_data
            )
        except HouseholdServiceError as e:
            return service_error_response(e)

        output_serializer = ChoreSerializer(chore, context=self.get_serializer_context())
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=ChoreSerializer)
    def retrieve(self, request, group_id=None, pk=None):
        """Get chore details."""
        try:
            chore = get_chore(store=self.get_store(), group_id=group_id, chore_id=pk)
        except HouseholdServiceError as e:
            return service_error_response(e)

        serializer = ChoreSerializer(chore, context=self.get_serializer_context())
        return Response(serializer.data)

    @extend_schema(request=None, responses=ChoreSerializer)
    @action(detail=True, methods=['post'])
    def toggle(self, request, group_id=None, pk=None):
        """Toggle a chore's completion."""
        try:
            chore = get_chore(store=self.get_store(), group_id=group_id, chore_id=pk)
            chore = toggle_chore_completion(store=self.get_store(), group_id=group_id, chore=chore)
        except HouseholdServiceError as e:
            return service_error_response(e)

        serializer = ChoreSerializer(chore, context=self.get_serializer_context())
        return Response(serializer.data)

    @extend_schema(request=None, responses=ChoreSerializer)
    @action(detail=True, methods=['post'])
    def complete(self, request, group_id=None, pk=None):
        """Mark a chore as complete; completed chores are left as they are."""
        try:
            chore = get_chore(store=self.get_store(), group_id=group_id, chore_id=pk)
            chore = mark_complete(store=self.get_store(), group_id=group_id, chore=chore)
        except HouseholdServiceError as e:
            return service_error_response(e)

        serializer = ChoreSerializer(chore, context=self.get_serializer_context())
        return Response(serializer.data)
