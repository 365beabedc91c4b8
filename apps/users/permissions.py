"""Role-based permission classes shared by the API apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class _RolePermission(permissions.BasePermission):
    role_check = ""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if getattr(user, "is_banned", False):
            return False
        return bool(getattr(user, self.role_check)())


class IsAdminRole(_RolePermission):
    """Only platform admins (role='admin' or Django superusers)."""

    message = "Admin role required."
    role_check = "is_admin"


class IsClientRole(_RolePermission):
    message = "Client role required."
    role_check = "is_client"


class IsCompanionRole(_RolePermission):
    message = "Companion role required."
    role_check = "is_companion"
