from rest_framework import permissions

from apps.users.models import User


def is_admin_user(user) -> bool:
    """
    Check if user has admin privileges.

    Admin privileges are granted to superusers, users with the ADMIN role and
    Django staff users.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return user.is_superuser or user.role == User.Role.ADMIN or user.is_staff


class IsAdmin(permissions.BasePermission):
    """Allows access only to users with admin privileges."""

    def has_permission(self, request, view):
        return is_admin_user(request.user)


class IsInstructorOrAdmin(permissions.BasePermission):
    """Allows access only to Admins or Instructors."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return is_admin_user(user) or user.role == User.Role.INSTRUCTOR


class IsStudent(permissions.BasePermission):
    """Allows access only to Students."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == User.Role.STUDENT)


class IsSelfOrAdmin(permissions.BasePermission):
    """Allows access only to the user themselves or an admin."""

    def has_object_permission(self, request, view, obj):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return obj == user or is_admin_user(user)


class HasPermissionCode(permissions.BasePermission):
    """
    Checks the role-derived permission codes (e.g. ``read:students``).

    The view lists the codes it needs in ``required_permissions``; holding
    any one of them is enough.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        required = getattr(view, "required_permissions", ())
        if not required:
            return True
        return any(user.has_permission_code(code) for code in required)
