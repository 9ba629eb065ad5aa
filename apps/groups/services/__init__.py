"""
Groups app services layer.

Services contain business logic and read and write groups through the
document store. The live ``GroupDashboard`` depends on the chores and
payments services and is imported from ``apps.groups.services.dashboard``.
"""

from .exceptions import (
    AdapterError,
    GroupNotFoundError,
    InvalidGroupCodeError,
    NotMemberError,
)

from .group_management import (
    generate_group_code,
    create_group,
    get_group,
    list_groups_for_member,
)

from .membership_management import (
    normalize_group_code,
    join_group,
)

from .member_directory import (
    lookup_display_name,
    placeholder_members,
    resolve_group_members,
    resolve_member_names,
)


__all__ = [
    # Exceptions
    'AdapterError',
    'GroupNotFoundError',
    'InvalidGroupCodeError',
    'NotMemberError',

    # Group Management
    'generate_group_code',
    'create_group',
    'get_group',
    'list_groups_for_member',

    # Membership Management
    'normalize_group_code',
    'join_group',

    # Member Directory
    'lookup_display_name',
    'placeholder_members',
    'resolve_group_members',
    'resolve_member_names',
]
