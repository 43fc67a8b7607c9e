import logging
from datetime import date

from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.users.models import PermissionCode, User
from apps.users.permissions import HasPermissionCode, IsAdmin, IsInstructorOrAdmin, is_admin_user

from .aggregation import week_start_for
from .models import Achievement, LearningGoal
from .serializers import (
    AchievementLeaderboardSerializer,
    AchievementProgressSerializer,
    AchievementSerializer,
    AchievementStatsSerializer,
    DailyActivityInputSerializer,
    DailyActivitySerializer,
    ExperienceAwardSerializer,
    GoalProgressSerializer,
    InsightSerializer,
    LearningGoalSerializer,
    MonthlySummarySerializer,
    UserAchievementSerializer,
    UserAnalyticsSerializer,
    WeeklySummarySerializer,
)
from .services import AchievementService, AnalyticsError, AnalyticsService

logger = logging.getLogger(__name__)

TIMEFRAME_PARAMETER = OpenApiParameter(
    "timeframe",
    OpenApiTypes.STR,
    OpenApiParameter.QUERY,
    enum=list(AnalyticsService.TIMEFRAMES),
    description="Window of daily activity to include (default 30days).",
)


def error_response(exc: AnalyticsError) -> Response:
    return Response({"detail": exc.message, "code": exc.code}, status=status.HTTP_400_BAD_REQUEST)


def user_analytics_response(user, timeframe):
    try:
        data = AnalyticsService.get_user_analytics(user, timeframe)
    except AnalyticsError as e:
        return error_response(e)
    return Response(UserAnalyticsSerializer(data).data)


@extend_schema(tags=["Analytics"])
class MyAnalyticsView(APIView):
    """Overall stats, recent daily activity and active goals of the current user."""

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(parameters=[TIMEFRAME_PARAMETER], responses={200: UserAnalyticsSerializer})
    def get(self, request, *args, **kwargs):
        return user_analytics_response(request.user, request.query_params.get("timeframe", "30days"))


@extend_schema(tags=["Analytics"])
class DailyActivityView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        summary="Report today's learning activity",
        request=DailyActivityInputSerializer,
        responses={200: DailyActivitySerializer},
    )
    def post(self, request, *args, **kwargs):
        serializer = DailyActivityInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        activity_date = serializer.validated_data.get("date")
        if activity_date and activity_date > timezone.localdate():
            return Response({"date": "Activity cannot be recorded for a future date."}, status=status.HTTP_400_BAD_REQUEST)

        record = AnalyticsService.record_daily_activity(
            request.user, serializer.to_payload(), activity_date=activity_date
        )
        record.refresh_from_db()
        return Response(DailyActivitySerializer(record).data)


@extend_schema(tags=["Analytics"])
class WeeklySummaryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter(
                "week_start",
                OpenApiTypes.DATE,
                OpenApiParameter.QUERY,
                description="First day of the week (defaults to this week's Monday).",
            )
        ],
        responses={200: WeeklySummarySerializer},
    )
    def get(self, request, *args, **kwargs):
        raw = request.query_params.get("week_start")
        if raw:
            try:
                week_start = date.fromisoformat(raw)
            except ValueError:
                return Response({"week_start": "Use the YYYY-MM-DD format."}, status=status.HTTP_400_BAD_REQUEST)
        else:
            week_start = week_start_for(timezone.localdate())

        summary = AnalyticsService.compute_weekly_summary(request.user, week_start)
        return Response(WeeklySummarySerializer(summary).data)


@extend_schema(tags=["Analytics"])
class MonthlySummaryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter("year", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("month", OpenApiTypes.INT, OpenApiParameter.QUERY),
        ],
        responses={200: MonthlySummarySerializer},
    )
    def get(self, request, *args, **kwargs):
        today = timezone.localdate()
        try:
            year = int(request.query_params.get("year", today.year))
            month = int(request.query_params.get("month", today.month))
        except ValueError:
            return Response({"detail": "Year and month must be integers."}, status=status.HTTP_400_BAD_REQUEST)

        try:
            summary = AnalyticsService.compute_monthly_summary(request.user, year, month)
        except AnalyticsError as e:
            return error_response(e)
        return Response(MonthlySummarySerializer(summary).data)


@extend_schema(tags=["Analytics"])
class InsightsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: InsightSerializer(many=True)})
    def get(self, request, *args, **kwargs):
        insights = AnalyticsService.generate_insights(request.user)
        return Response(InsightSerializer(insights, many=True).data)


@extend_schema(tags=["Admin - Analytics"])
class StudentAnalyticsView(APIView):
    """Analytics of one learner, for instructors and admins."""

    permission_classes = [permissions.IsAuthenticated, HasPermissionCode]
    required_permissions = (PermissionCode.READ_STUDENTS,)

    @extend_schema(parameters=[TIMEFRAME_PARAMETER], responses={200: UserAnalyticsSerializer})
    def get(self, request, user_id, *args, **kwargs):
        user = get_object_or_404(User, pk=user_id, is_active=True)
        if user.role != User.Role.STUDENT and not request.user.is_admin:
            return Response(status=status.HTTP_404_NOT_FOUND)
        return user_analytics_response(user, request.query_params.get("timeframe", "30days"))


@extend_schema(tags=["Admin - Analytics"])
class ExperienceAwardView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsInstructorOrAdmin]

    @extend_schema(
        summary="Award or deduct experience points",
        request=ExperienceAwardSerializer,
        responses={200: OpenApiResponse(description="Resulting level and whether it rose")},
    )
    def post(self, request, user_id, *args, **kwargs):
        user = get_object_or_404(User, pk=user_id, is_active=True)
        serializer = ExperienceAwardSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        points = serializer.validated_data["points"]
        leveled_up, level = AnalyticsService.add_experience_points(user, points)
        logger.info(
            f"User {request.user.id} awarded {points} XP to user {user.id}"
            f" ({serializer.validated_data.get('reason') or 'no reason given'})"
        )
        analytics = AnalyticsService.get_or_create_for_user(user)
        return Response(
            {
                "leveled_up": leveled_up,
                "level": level,
                "experience_points": analytics.experience_points,
            }
        )


@extend_schema(tags=["Analytics"])
class LearningGoalViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Learning goals of the current user. DELETE deactivates a goal; pass
    `?include_inactive=true` to list deactivated ones too.
    """

    serializer_class = LearningGoalSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return LearningGoal.objects.none()
        include_inactive = self.request.query_params.get("include_inactive") == "true"
        if self.action != "list":
            include_inactive = True
        return AnalyticsService.list_goals(self.request.user, include_inactive=include_inactive)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            goal = AnalyticsService.create_goal(request.user, **serializer.validated_data)
        except AnalyticsError as e:
            return error_response(e)
        return Response(self.get_serializer(goal).data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance):
        AnalyticsService.deactivate_goal(instance)

    @extend_schema(request=GoalProgressSerializer, responses={200: LearningGoalSerializer})
    @action(detail=True, methods=["post"])
    def progress(self, request, pk=None):
        goal = self.get_object()
        serializer = GoalProgressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            goal = AnalyticsService.update_goal_progress(goal, serializer.validated_data["current"])
        except AnalyticsError as e:
            return error_response(e)
        return Response(self.get_serializer(goal).data)


@extend_schema(tags=["Achievements"])
class AchievementViewSet(viewsets.ModelViewSet):
    """
    Achievement catalogue. Instructors and admins maintain it; DELETE
    (admins only) deactivates an achievement and keeps learners' records.
    """

    serializer_class = AchievementSerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Achievement.objects.none()
        queryset = Achievement.objects.all()
        if not is_admin_user(self.request.user):
            queryset = queryset.active()
        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.filter(category=category)
        return queryset

    def get_permissions(self):
        if self.action in ["create", "update", "partial_update"]:
            return [permissions.IsAuthenticated(), IsInstructorOrAdmin()]
        if self.action in ["destroy", "progress"]:
            return [permissions.IsAuthenticated(), IsAdmin()]
        return [permissions.IsAuthenticated()]

    def perform_create(self, serializer):
        achievement = serializer.save(created_by=self.request.user)
        logger.info(f"User {self.request.user.id} created achievement '{achievement.title}'")

    def perform_destroy(self, instance):
        AchievementService.deactivate(instance)

    @extend_schema(
        summary="Current user's achievements",
        parameters=[
            OpenApiParameter(
                "completed",
                OpenApiTypes.BOOL,
                OpenApiParameter.QUERY,
                description="Only earned (true) or only unearned (false) achievements.",
            )
        ],
        responses={200: UserAchievementSerializer(many=True)},
    )
    @action(detail=False, methods=["get"])
    def mine(self, request):
        completed = request.query_params.get("completed")
        completed = {"true": True, "false": False}.get(completed)
        queryset = AchievementService.list_for_user(request.user, completed=completed)
        return Response(UserAchievementSerializer(queryset, many=True).data)

    @extend_schema(responses={200: AchievementStatsSerializer})
    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(AchievementStatsSerializer(AchievementService.user_stats(request.user)).data)

    @extend_schema(responses={200: AchievementLeaderboardSerializer(many=True)})
    @action(detail=False, methods=["get"])
    def leaderboard(self, request):
        return Response(AchievementLeaderboardSerializer(AchievementService.leaderboard(), many=True).data)

    @extend_schema(
        summary="Advance a learner's progress on this achievement",
        request=AchievementProgressSerializer,
        responses={200: UserAchievementSerializer},
    )
    @action(detail=True, methods=["post"])
    def progress(self, request, pk=None):
        achievement = self.get_object()
        serializer = AchievementProgressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = get_object_or_404(User, pk=serializer.validated_data["user_id"], is_active=True)
        try:
            progress = AchievementService.advance(user, achievement, serializer.validated_data["amount"])
        except AnalyticsError as e:
            return error_response(e)
        return Response(UserAchievementSerializer(progress).data)
