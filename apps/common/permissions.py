from rest_framework import permissions


class IsOwnerOrAdmin(permissions.BasePermission):
    """
    Object-level permission: read for everyone allowed by the view,
    write only for the object's owner or an admin.

    The owner is looked up on `created_by`, then `instructor`, then `user`.
    """

    owner_attributes = ("created_by", "instructor", "user")

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True

        user = request.user
        if not user or not user.is_authenticated:
            return False
        if getattr(user, "is_admin", False):
            return True

        for attribute in self.owner_attributes:
            if hasattr(obj, attribute):
                return getattr(obj, attribute) == user
        return False
