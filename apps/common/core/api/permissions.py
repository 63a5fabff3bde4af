"""Common Core - DRF Permissions."""
from rest_framework import permissions


class IsAdminOrReadOnly(permissions.BasePermission):
    """Allow admin to modify, others can only read."""

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_staff)
