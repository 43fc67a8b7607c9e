from rest_framework import serializers

from .aggregation import RESOURCE_TYPES
from .models import Achievement, DailyActivity, LearningGoal, ProgressAnalytics, UserAchievement


class ProgressAnalyticsSerializer(serializers.ModelSerializer):
    """Overall statistics of one learner."""

    class Meta:
        model = ProgressAnalytics
        fields = (
            "total_study_time",
            "total_paths",
            "completed_paths",
            "completed_courses",
            "total_achievements",
            "current_streak",
            "longest_streak",
            "last_active_date",
            "joined_date",
            "experience_points",
            "level",
        )
        read_only_fields = fields


class DailyActivitySerializer(serializers.ModelSerializer):
    class Meta:
        model = DailyActivity
        fields = (
            "date",
            "study_time",
            "courses_accessed",
            "resources_viewed",
            "achievements_earned",
            "login_time",
            "logout_time",
            "session_duration",
        )
        read_only_fields = fields


class CourseAccessSerializer(serializers.Serializer):
    course_id = serializers.UUIDField()
    time_spent = serializers.IntegerField(min_value=0, default=0)
    accessed_at = serializers.DateTimeField(required=False)


class EarnedAchievementSerializer(serializers.Serializer):
    achievement_id = serializers.CharField(max_length=64)
    earned_at = serializers.DateTimeField(required=False)


class ResourcesViewedSerializer(serializers.Serializer):
    pdfs = serializers.IntegerField(min_value=0, required=False)
    videos = serializers.IntegerField(min_value=0, required=False)
    links = serializers.IntegerField(min_value=0, required=False)
    notes = serializers.IntegerField(min_value=0, required=False)


class DailyActivityInputSerializer(serializers.Serializer):
    """
    Activity report for one day. Only the fields sent are applied; the
    optional `date` targets a past day instead of today.
    """

    date = serializers.DateField(required=False)
    study_time = serializers.IntegerField(min_value=0, required=False)
    courses_accessed = CourseAccessSerializer(many=True, required=False)
    resources_viewed = ResourcesViewedSerializer(required=False)
    achievements_earned = EarnedAchievementSerializer(many=True, required=False)
    login_time = serializers.DateTimeField(required=False, allow_null=True)
    logout_time = serializers.DateTimeField(required=False, allow_null=True)
    session_duration = serializers.IntegerField(min_value=0, required=False, allow_null=True)

    def validate(self, attrs):
        login_time = attrs.get("login_time")
        logout_time = attrs.get("logout_time")
        if login_time and logout_time and logout_time < login_time:
            raise serializers.ValidationError({"logout_time": "Logout time cannot be before login time."})
        return attrs

    def to_payload(self):
        """The validated report, minus the target date, as stored on the daily record."""
        payload = {key: value for key, value in self.validated_data.items() if key != "date"}
        for key in ("courses_accessed", "achievements_earned"):
            if key in payload:
                payload[key] = [dict(item) for item in payload[key]]
        if "resources_viewed" in payload:
            payload["resources_viewed"] = {
                key: value for key, value in payload["resources_viewed"].items() if key in RESOURCE_TYPES
            }
        return payload


class WeeklySummarySerializer(serializers.Serializer):
    week_start = serializers.DateField()
    week_end = serializers.DateField()
    total_study_time = serializers.IntegerField()
    average_daily_time = serializers.IntegerField()
    courses_accessed = serializers.IntegerField()
    achievements_earned = serializers.IntegerField()
    most_active_day = serializers.CharField()
    learning_streak = serializers.IntegerField()


class MonthlySummarySerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    total_study_time = serializers.IntegerField()
    active_days = serializers.IntegerField()
    average_session_time = serializers.IntegerField()
    total_sessions = serializers.IntegerField()
    achievements_earned = serializers.IntegerField()
    courses_accessed = serializers.IntegerField()
    longest_streak = serializers.IntegerField()
    productivity_score = serializers.IntegerField()
    resources_viewed = serializers.DictField(child=serializers.IntegerField())


class InsightSerializer(serializers.Serializer):
    type = serializers.CharField()
    message = serializers.CharField()
    priority = serializers.CharField()


class LearningGoalSerializer(serializers.ModelSerializer):
    is_achieved = serializers.BooleanField(read_only=True)

    class Meta:
        model = LearningGoal
        fields = (
            "id",
            "goal_type",
            "target",
            "current",
            "deadline",
            "is_active",
            "is_achieved",
            "achieved_at",
            "description",
            "created_at",
        )
        read_only_fields = ("id", "current", "is_active", "is_achieved", "achieved_at", "created_at")


class GoalProgressSerializer(serializers.Serializer):
    current = serializers.IntegerField(min_value=0)


class ExperienceAwardSerializer(serializers.Serializer):
    points = serializers.IntegerField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class UserAnalyticsSerializer(serializers.Serializer):
    overall_stats = ProgressAnalyticsSerializer(source="analytics")
    daily_activity = DailyActivitySerializer(many=True)
    goals = LearningGoalSerializer(many=True)


class AchievementSerializer(serializers.ModelSerializer):
    class Meta:
        model = Achievement
        fields = (
            "id",
            "title",
            "description",
            "icon",
            "category",
            "criteria_type",
            "target",
            "points",
            "badge_color",
            "rarity",
            "difficulty",
            "is_active",
            "total_earned",
            "created_at",
        )
        read_only_fields = ("id", "is_active", "total_earned", "created_at")

    def validate_badge_color(self, value):
        if len(value) != 7 or not value.startswith("#"):
            raise serializers.ValidationError("Use a #RRGGBB colour.")
        try:
            int(value[1:], 16)
        except ValueError:
            raise serializers.ValidationError("Use a #RRGGBB colour.")
        return value


class UserAchievementSerializer(serializers.ModelSerializer):
    achievement = AchievementSerializer(read_only=True)
    is_completed = serializers.BooleanField(read_only=True)

    class Meta:
        model = UserAchievement
        fields = ("achievement", "current_progress", "is_completed", "completed_at", "updated_at")
        read_only_fields = fields


class AchievementStatsSerializer(serializers.Serializer):
    total_achievements = serializers.IntegerField()
    completed = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    completion_rate = serializers.IntegerField()
    total_points = serializers.IntegerField()


class AchievementLeaderboardSerializer(serializers.Serializer):
    user_id = serializers.UUIDField(source="id")
    full_name = serializers.CharField()
    completed_count = serializers.IntegerField()
    last_completed = serializers.DateTimeField()


class AchievementProgressSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    amount = serializers.IntegerField(min_value=1, default=1)
