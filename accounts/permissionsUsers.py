# permissions.py
from rest_framework.permissions import BasePermission
from .models import Role


class IsSuperAdminOrAdmin(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        return (
            user.is_authenticated and
            user.role in (Role.SUPERADMIN, Role.ADMIN)
        )
