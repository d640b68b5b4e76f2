from rest_framework.permissions import SAFE_METHODS, BasePermission

from .models import UserProfile, role_of


class IsAdmin(BasePermission):
    """DRF permission enforcing ADMIN role."""

    def has_permission(self, request, view):
        return role_of(request.user) == UserProfile.ADMIN


class IsAdminOrManager(BasePermission):
    """DRF permission for ADMIN or MANAGER roles."""

    def has_permission(self, request, view):
        return role_of(request.user) in (UserProfile.ADMIN, UserProfile.MANAGER)


class ManagerWriteOrReadOnly(BasePermission):
    """Any authenticated user reads; ADMIN/MANAGER write."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return role_of(request.user) in (UserProfile.ADMIN, UserProfile.MANAGER)


class AdminDeleteOnly(BasePermission):
    """Restrict DELETE to ADMIN; other methods pass through."""

    def has_permission(self, request, view):
        if request.method != "DELETE":
            return True
        return role_of(request.user) == UserProfile.ADMIN
