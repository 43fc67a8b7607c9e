import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.common.pagination import StandardResultsSetPagination
from apps.common.permissions import IsOwnerOrAdmin
from apps.users.permissions import IsInstructorOrAdmin, is_admin_user

from .models import LearningPath, LearningPathCourse

from .serializers import (
    AddCourseSerializer,
    LearningPathCourseSerializer,
    LearningPathListSerializer,
    LearningPathSerializer,
    PathEnrollmentSerializer,
    ProgressUpdateSerializer,
    ReorderCoursesSerializer,
)
from .services import EnrollmentStatusFilter, LearningPathError, LearningPathService, PathNotFound

logger = logging.getLogger(__name__)


def error_response(exc: LearningPathError) -> Response:
    """Translates a learning path domain error into an HTTP response."""
    http_status = (
        status.HTTP_404_NOT_FOUND if isinstance(exc, PathNotFound) else status.HTTP_400_BAD_REQUEST
    )
    return Response({"detail": exc.message, "code": exc.code}, status=http_status)


def visible_paths(user):
    """Active paths the user may see: published ones, plus their own drafts."""
    queryset = LearningPath.objects.active().select_related("created_by")
    if is_admin_user(user):
        return queryset
    return queryset.filter(Q(is_published=True) | Q(created_by=user))


@extend_schema(tags=["Learning Paths"])
class LearningPathViewSet(viewsets.ModelViewSet):
    """
    API endpoint for learning paths and the caller's enrollment in them.

    DELETE deactivates the path; it stays in storage and its enrollments
    are kept.
    """

    serializer_class = LearningPathSerializer
    lookup_field = "slug"
    lookup_value_regex = r"[-\w]+"
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return LearningPath.objects.none()

        queryset = visible_paths(self.request.user)
        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.filter(category=category)
        difficulty = self.request.query_params.get("difficulty")
        if difficulty:
            queryset = queryset.filter(difficulty=difficulty)
        return queryset.order_by("title")

    def get_serializer_class(self):
        if self.action in ["list", "popular"]:
            return LearningPathListSerializer
        return super().get_serializer_class()

    def get_permissions(self):
        if self.action == "create":
            return [permissions.IsAuthenticated(), IsInstructorOrAdmin()]
        if self.action in ["update", "partial_update", "destroy"]:
            return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]
        return [permissions.IsAuthenticated()]

    def perform_create(self, serializer):
        learning_path = serializer.save(created_by=self.request.user)
        logger.info(f"User {self.request.user.id} created learning path '{learning_path.title}'")

    def perform_destroy(self, instance):
        LearningPathService.deactivate(instance)

    @extend_schema(summary="Enroll in a learning path", request=None, responses={200: PathEnrollmentSerializer, 201: PathEnrollmentSerializer})
    @action(detail=True, methods=["post"])
    def enroll(self, request, slug=None):
        learning_path = self.get_object()
        try:
            enrollment, created = LearningPathService.enroll(learning_path, request.user)
        except LearningPathError as e:
            return error_response(e)
        return Response(
            PathEnrollmentSerializer(enrollment).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(summary="Leave a learning path", request=None, responses={204: OpenApiResponse(description="Unenrolled")})
    @action(detail=True, methods=["post"])
    def unenroll(self, request, slug=None):
        learning_path = self.get_object()
        try:
            LearningPathService.unenroll(learning_path, request.user)
        except LearningPathError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        methods=["GET"],
        summary="Current user's progress in this path",
        responses={200: PathEnrollmentSerializer},
    )
    @extend_schema(
        methods=["POST"],
        summary="Update progress on one course of the path",
        request=ProgressUpdateSerializer,
        responses={200: PathEnrollmentSerializer},
    )
    @action(detail=True, methods=["get", "post"])
    def progress(self, request, slug=None):
        learning_path = self.get_object()

        if request.method == "GET":
            enrollment = learning_path.enrollments.active().filter(user=request.user).first()
            if enrollment is None:
                return Response(
                    {"detail": "User not enrolled in this learning path.", "code": "not_enrolled"},
                    status=status.HTTP_404_NOT_FOUND,
                )
            return Response(PathEnrollmentSerializer(enrollment).data)

        serializer = ProgressUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            enrollment = LearningPathService.update_progress(
                learning_path,
                request.user,
                course_index=serializer.validated_data["course_index"],
                progress=serializer.validated_data["progress"],
                minutes_spent=serializer.validated_data["minutes_spent"],
            )
        except LearningPathError as e:
            return error_response(e)
        enrollment.refresh_from_db()
        return Response(PathEnrollmentSerializer(enrollment).data)

    @extend_schema(
        summary="Most popular learning paths",
        parameters=[OpenApiParameter("limit", OpenApiTypes.INT, OpenApiParameter.QUERY)],
        responses={200: LearningPathListSerializer(many=True)},
    )
    @action(detail=False, methods=["get"])
    def popular(self, request):
        try:
            limit = int(request.query_params.get("limit", 10))
        except ValueError:
            return Response({"limit": "Must be an integer."}, status=status.HTTP_400_BAD_REQUEST)
        limit = max(1, min(limit, 50))
        paths = LearningPathService.list_popular_paths(limit=limit)
        return Response(self.get_serializer(paths, many=True).data)

    @extend_schema(
        summary="Learning paths the current user is enrolled in",
        parameters=[
            OpenApiParameter(
                "status",
                OpenApiTypes.STR,
                OpenApiParameter.QUERY,
                enum=list(EnrollmentStatusFilter.choices),
            )
        ],
        responses={200: PathEnrollmentSerializer(many=True)},
    )
    @action(detail=False, methods=["get"])
    def mine(self, request):
        status_filter = request.query_params.get("status", EnrollmentStatusFilter.ALL)
        try:
            enrollments = LearningPathService.user_enrollments(request.user, status_filter)
        except LearningPathError as e:
            return error_response(e)
        enrollments = enrollments.prefetch_related("course_progress__path_course__course")
        return Response(PathEnrollmentSerializer(enrollments, many=True).data)


@extend_schema(tags=["Learning Paths"])
class LearningPathCourseViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Ordered course references of one learning path."""

    serializer_class = LearningPathCourseSerializer

    def get_learning_path(self):
        if not hasattr(self, "_learning_path"):
            self._learning_path = get_object_or_404(
                visible_paths(self.request.user), slug=self.kwargs["learning_path_slug"]
            )
        return self._learning_path

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return LearningPathCourse.objects.none()
        return (
            LearningPathCourse.objects.filter(learning_path=self.get_learning_path())
            .select_related("course")
            .order_by("order")
        )

    def get_permissions(self):
        if self.action == "list":
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsInstructorOrAdmin()]

    def _check_owner(self, request):
        learning_path = self.get_learning_path()
        if not IsOwnerOrAdmin().has_object_permission(request, self, learning_path):
            self.permission_denied(request, message="Only the path owner can change its courses.")
        return learning_path

    @extend_schema(request=AddCourseSerializer, responses={201: LearningPathCourseSerializer})
    def create(self, request, *args, **kwargs):
        learning_path = self._check_owner(request)
        serializer = AddCourseSerializer(data=request.data, context={"learning_path": learning_path})
        serializer.is_valid(raise_exception=True)
        try:
            entry = LearningPathService.add_course(
                learning_path,
                serializer.validated_data["course"],
                order=serializer.validated_data.get("order"),
            )
        except LearningPathError as e:
            return error_response(e)
        return Response(LearningPathCourseSerializer(entry).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        learning_path = self._check_owner(request)
        entry = self.get_object()
        try:
            LearningPathService.remove_course(learning_path, entry)
        except LearningPathError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Reorder the courses of a learning path",
        request=ReorderCoursesSerializer,
        responses={200: LearningPathCourseSerializer(many=True)},
    )
    @action(detail=False, methods=["post"])
    def reorder(self, request, learning_path_slug=None):
        learning_path = self._check_owner(request)
        serializer = ReorderCoursesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            entries = LearningPathService.reorder_courses(
                learning_path, serializer.validated_data["path_course_ids"]
            )
        except LearningPathError as e:
            return error_response(e)
        return Response(LearningPathCourseSerializer(entries, many=True).data)
