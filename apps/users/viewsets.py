from django.contrib.auth import get_user_model
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import permissions, viewsets

from apps.common.pagination import StandardResultsSetPagination

from .models import PermissionCode
from .permissions import HasPermissionCode, is_admin_user
from .serializers import UserSerializer

User = get_user_model()


@extend_schema(tags=["Admin - Users"])
class UserViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Directory of users. Admins see everyone; instructors see students only.
    Filter with ``?role=STUDENT|INSTRUCTOR|ADMIN``.
    """

    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated, HasPermissionCode]
    required_permissions = (PermissionCode.READ_STUDENTS,)
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return User.objects.none()

        user = self.request.user
        queryset = User.objects.filter(is_active=True)
        if not is_admin_user(user):
            queryset = queryset.filter(role=User.Role.STUDENT)

        role = self.request.query_params.get("role")
        if role:
            queryset = queryset.filter(role=role.upper())
        return queryset.order_by("email")

    @extend_schema(
        parameters=[OpenApiParameter("role", OpenApiTypes.STR, enum=User.Role.values)]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)
