"""
View helpers for endpoints nested under ``/api/groups/{group_id}/``.
"""

from rest_framework.exceptions import APIException, NotFound

from apps.common.exceptions import AdapterError
from apps.groups.domain import Group, Member
from apps.sync.store import get_document_store

from .services import GroupNotFoundError, get_group


class StoreUnavailable(APIException):
    status_code = 503
    default_detail = 'The document store is unavailable.'
    default_code = 'store_unavailable'


class GroupContextMixin:
    """
    Loads the group named in the URL once per request.

    ``group_lookup_kwarg`` names the URL kwarg holding the group id.
    """

    group_lookup_kwarg = 'group_id'

    def get_store(self):
        return get_document_store()

    def get_group(self) -> Group:
        if getattr(self, '_group', None) is None:
            group_id = self.kwargs[self.group_lookup_kwarg]
            try:
                self._group = get_group(store=self.get_store(), group_id=group_id)
            except GroupNotFoundError as e:
                raise NotFound(str(e))
            except AdapterError as e:
                raise StoreUnavailable(str(e))
        return self._group

    def get_current_member(self) -> Member:
        user = self.request.user
        return Member(id=user.member_id, name=user.get_display_name())
