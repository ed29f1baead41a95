"""Principal resolution for authenticated requests.

Authentication itself is Django's; this only maps a user to a role.
"""

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from ticketing.conf import ticketing_settings
from ticketing.domain import Principal, Role


def principal_for(user) -> Principal | None:
    """Superusers are admins, members of the organizer group are organizers."""
    if user is None or not user.is_authenticated:
        return None
    if user.is_superuser:
        return Principal(id=user.pk, role=Role.ADMIN)
    if user.groups.filter(name=ticketing_settings().organizer_group).exists():
        return Principal(id=user.pk, role=Role.ORGANIZER)
    return None


class IsOrganizerOrAdmin(BasePermission):
    """Allows organizers and admins only."""

    message = "You do not have permission to perform this action"

    def has_permission(self, request: Request, view) -> bool:
        return principal_for(request.user) is not None
