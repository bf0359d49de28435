"""
Custom permission classes for the logbook app.

Querysets are already scoped to the requesting user, so another user's ids
resolve to 404 before these run; the object checks here are the second
line of ownership enforcement and the lock guard for unbundled-only writes.
"""
from rest_framework.permissions import BasePermission


class IsEntityOwner(BasePermission):
    """
    Allow access only to the owner of a log entry or bundle.

    Usage:
        class BundleViewSet(viewsets.GenericViewSet):
            permission_classes = [IsAuthenticated, IsEntityOwner]
    """

    message = 'You do not have permission to access this record.'

    def has_object_permission(self, request, view, obj):
        return obj.user_id == request.user.pk


class IsUnlockedLogEntry(BasePermission):
    """
    Allow changes only to log entries that are not bundled.

    Usage:
        def get_permissions(self):
            if self.action in ['update', 'partial_update', 'destroy']:
                return [IsAuthenticated(), IsEntityOwner(), IsUnlockedLogEntry()]
            return super().get_permissions()
    """

    message = 'This entry is part of a submitted RMP and cannot be changed.'
    code = 'log_entry_locked'

    def has_object_permission(self, request, view, obj):
        return obj.bundle_id is None
