from rest_framework import permissions

from apps.users.permissions import is_admin_user


class IsCourseInstructorOrAdmin(permissions.BasePermission):
    """
    Allows access only to the instructor listed on the course or an admin user.
    Read-only requests are allowed through to the view's queryset filtering.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True

        user = request.user
        if not user or not user.is_authenticated:
            return False
        return obj.instructor == user or is_admin_user(user)
