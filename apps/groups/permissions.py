from rest_framework import permissions


class IsGroupMember(permissions.BasePermission):
    """
    Permission: User must be a member of the group in the URL.

    The view must provide ``get_group()`` (see ``GroupContextMixin``).
    """

    message = 'You are not a member of this group.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return view.get_group().has_member(request.user.member_id)
