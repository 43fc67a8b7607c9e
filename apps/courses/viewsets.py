from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import permissions, viewsets

from apps.common.pagination import StandardResultsSetPagination
from apps.users.permissions import IsInstructorOrAdmin, is_admin_user

from .models import Course
from .permissions import IsCourseInstructorOrAdmin
from .serializers import CourseSerializer


@extend_schema(tags=["Courses"])
class CourseViewSet(viewsets.ModelViewSet):
    """
    Course catalogue. Students only see published courses; instructors also
    see their own drafts; admins see everything.
    """

    serializer_class = CourseSerializer
    lookup_field = "slug"
    lookup_value_regex = r"[-\w]+"
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Course.objects.none()

        user = self.request.user
        queryset = Course.objects.select_related("instructor")
        if is_admin_user(user):
            return queryset
        if user.role == user.Role.INSTRUCTOR:
            return queryset.filter(Q(status=Course.Status.PUBLISHED) | Q(instructor=user))
        return queryset.filter(status=Course.Status.PUBLISHED)

    def get_permissions(self):
        if self.action in ["list", "retrieve"]:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsInstructorOrAdmin(), IsCourseInstructorOrAdmin()]

    def perform_create(self, serializer):
        serializer.save(instructor=self.request.user)
