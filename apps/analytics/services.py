import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import Count, F, Max, Sum
from django.utils import timezone

from apps.common.utils import round_half_up
from apps.users.models import User

from . import aggregation
from .models import (
    Achievement,
    DailyActivity,
    LearningGoal,
    ProgressAnalytics,
    UserAchievement,
    default_resources_viewed,
)

logger = logging.getLogger(__name__)


class AnalyticsError(Exception):
    """Base error for analytics operations."""

    def __init__(self, message: str, code: str = "analytics_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidTimeframe(AnalyticsError):
    def __init__(self, timeframe):
        super().__init__(
            f"Unknown timeframe '{timeframe}'. Expected one of {', '.join(AnalyticsService.TIMEFRAMES)}.",
            "invalid_timeframe",
        )


class InvalidGoal(AnalyticsError):
    def __init__(self, message: str):
        super().__init__(message, "invalid_goal")


class InactiveAchievement(AnalyticsError):
    def __init__(self, achievement):
        super().__init__(f"Achievement '{achievement.title}' is no longer active.", "inactive_achievement")


ACTIVITY_FIELDS = (
    "study_time",
    "courses_accessed",
    "resources_viewed",
    "achievements_earned",
    "login_time",
    "logout_time",
    "session_duration",
)


class AnalyticsService:
    """Daily activity ingestion, derived statistics and experience awards."""

    TIMEFRAMES = {
        "7days": 7,
        "30days": 30,
        "90days": 90,
        "1year": 365,
    }

    @staticmethod
    def get_or_create_for_user(user: User) -> ProgressAnalytics:
        analytics, created = ProgressAnalytics.objects.get_or_create(
            user=user, defaults={"joined_date": user.date_joined}
        )
        if created:
            logger.info(f"Created progress analytics for user {user.id}")
        return analytics

    @staticmethod
    def _lock_for_user(user: User) -> ProgressAnalytics:
        AnalyticsService.get_or_create_for_user(user)
        return ProgressAnalytics.objects.select_for_update().get(user=user)

    @staticmethod
    @transaction.atomic
    def record_daily_activity(
        user: User, payload: Dict[str, Any], activity_date: Optional[date] = None
    ) -> DailyActivity:
        """
        Merges an activity report into the user's record for `activity_date`
        (today in the active time zone when omitted).

        Provided fields replace the stored ones; absent fields are left
        alone. Totals and the streak are recomputed from the daily records;
        the streak always ends today, so a late report for a past day only
        matters when it joins the current run. Streak and study-hour
        achievements are synced afterwards.
        """
        analytics = AnalyticsService._lock_for_user(user)
        today = timezone.localdate()
        day = activity_date or today

        record, created = DailyActivity.objects.get_or_create(analytics=analytics, date=day)

        unknown = set(payload) - set(ACTIVITY_FIELDS)
        if unknown:
            logger.warning(f"Ignoring unknown activity fields for user {user.id}: {sorted(unknown)}")

        for field_name in ACTIVITY_FIELDS:
            if field_name not in payload:
                continue
            value = payload[field_name]
            if field_name == "resources_viewed":
                value = {**default_resources_viewed(), **(value or {})}
            setattr(record, field_name, value)
        record.save()

        AnalyticsService._refresh_totals(analytics)
        AnalyticsService._refresh_streak(analytics, today)
        AnalyticsService._touch_last_active(analytics, day, today)
        analytics.save()

        logger.debug(
            f"{'Created' if created else 'Updated'} activity of user {user.id} on {day}: "
            f"{record.study_time} min, streak {analytics.current_streak}"
        )

        AchievementService.sync_progress(user, Achievement.CriteriaType.STUDY_STREAK, analytics.current_streak)
        AchievementService.sync_progress(user, Achievement.CriteriaType.STUDY_HOURS, analytics.total_study_time // 60)
        return record

    @staticmethod
    def _refresh_totals(analytics: ProgressAnalytics) -> None:
        records = analytics.daily_activities.all()
        analytics.total_study_time = records.aggregate(total=Sum("study_time"))["total"] or 0
        analytics.total_achievements = sum(
            len(achievements or []) for achievements in records.values_list("achievements_earned", flat=True)
        )

    @staticmethod
    def _refresh_streak(analytics: ProgressAnalytics, today: date) -> None:
        active_dates = analytics.daily_activities.filter(
            date__lte=today, study_time__gt=0
        ).values_list("date", flat=True)
        analytics.current_streak = aggregation.streak_ending_at(active_dates, today)
        if analytics.current_streak > analytics.longest_streak:
            analytics.longest_streak = analytics.current_streak

    @staticmethod
    def _touch_last_active(analytics: ProgressAnalytics, day: date, today: date) -> None:
        """Moves `last_active_date` forward only; a backfilled day counts from its midnight."""
        if day >= today:
            active_at = timezone.now()
        else:
            active_at = timezone.make_aware(datetime.combine(day, time.min))
        if analytics.last_active_date is None or active_at > analytics.last_active_date:
            analytics.last_active_date = active_at

    @staticmethod
    @transaction.atomic
    def add_experience_points(user: User, points: int) -> tuple[bool, int]:
        """
        Adds `points` (negative values deduct, never below zero) and
        recomputes the level. Returns (leveled_up, level).
        """
        analytics = AnalyticsService._lock_for_user(user)
        previous_level = analytics.level

        analytics.experience_points = max(analytics.experience_points + points, 0)
        analytics.level = aggregation.level_for(analytics.experience_points)
        analytics.save(update_fields=["experience_points", "level", "updated_at"])

        leveled_up = analytics.level > previous_level
        if leveled_up:
            logger.info(f"User {user.id} reached level {analytics.level}")
        return leveled_up, analytics.level

    @staticmethod
    @transaction.atomic
    def record_course_completion(user: User) -> ProgressAnalytics:
        analytics = AnalyticsService._lock_for_user(user)
        analytics.completed_courses += 1
        analytics.save(update_fields=["completed_courses", "updated_at"])
        AnalyticsService.add_experience_points(user, aggregation.COURSE_COMPLETION_XP)
        analytics.refresh_from_db()
        return analytics

    @staticmethod
    @transaction.atomic
    def record_path_completion(user: User) -> ProgressAnalytics:
        analytics = AnalyticsService._lock_for_user(user)
        analytics.completed_paths += 1
        analytics.save(update_fields=["completed_paths", "updated_at"])
        AnalyticsService.add_experience_points(user, aggregation.PATH_COMPLETION_XP)
        analytics.refresh_from_db()
        return analytics

    @staticmethod
    @transaction.atomic
    def record_path_enrollment(user: User) -> ProgressAnalytics:
        analytics = AnalyticsService._lock_for_user(user)
        analytics.total_paths += 1
        analytics.save(update_fields=["total_paths", "updated_at"])
        return analytics

    @staticmethod
    @transaction.atomic
    def record_achievement(user: User, achievement: Achievement, earned_at: datetime) -> DailyActivity:
        """Lists an earned achievement on the daily record of the day it was earned."""
        analytics = AnalyticsService._lock_for_user(user)
        record, _ = DailyActivity.objects.get_or_create(
            analytics=analytics, date=timezone.localdate(earned_at)
        )
        record.achievements_earned = [
            *(record.achievements_earned or []),
            {"achievement_id": str(achievement.id), "earned_at": earned_at},
        ]
        record.save(update_fields=["achievements_earned", "updated_at"])

        AnalyticsService._refresh_totals(analytics)
        analytics.save(update_fields=["total_study_time", "total_achievements", "updated_at"])
        return record

    @staticmethod
    def compute_weekly_summary(user: User, week_start: Optional[date] = None) -> aggregation.WeeklySummary:
        analytics = AnalyticsService.get_or_create_for_user(user)
        week_start = week_start or aggregation.week_start_for(timezone.localdate())
        records = analytics.daily_activities.filter(
            date__range=(week_start, week_start + timedelta(days=6))
        )
        return aggregation.weekly_summary(records, week_start, analytics.current_streak)

    @staticmethod
    def compute_monthly_summary(user: User, year: int, month: int) -> aggregation.MonthlySummary:
        if not 1 <= month <= 12:
            raise AnalyticsError(f"Invalid month {month}.", "invalid_month")
        analytics = AnalyticsService.get_or_create_for_user(user)
        records = analytics.daily_activities.filter(date__year=year, date__month=month)
        return aggregation.monthly_summary(records, year, month)

    @staticmethod
    def generate_insights(user: User) -> list[aggregation.Insight]:
        """Insights over the last 30 daily records; never creates analytics."""
        analytics = ProgressAnalytics.objects.filter(user=user).first()
        if analytics is None:
            return []
        recent = analytics.daily_activities.order_by("-date")[: aggregation.INSIGHT_WINDOW]
        return aggregation.generate_insights(recent, analytics.current_streak)

    @staticmethod
    def get_user_analytics(user: User, timeframe: str = "30days") -> Dict[str, Any]:
        if timeframe not in AnalyticsService.TIMEFRAMES:
            raise InvalidTimeframe(timeframe)

        analytics = AnalyticsService.get_or_create_for_user(user)
        start = aggregation.timeframe_start(timezone.localdate(), AnalyticsService.TIMEFRAMES[timeframe])
        return {
            "analytics": analytics,
            "daily_activity": analytics.daily_activities.filter(date__gte=start).order_by("date"),
            "goals": analytics.goals.filter(is_active=True),
        }

    # Goals

    @staticmethod
    def create_goal(
        user: User,
        goal_type: str,
        target: int,
        deadline=None,
        description: str = "",
    ) -> LearningGoal:
        if goal_type not in LearningGoal.GoalType.values:
            raise InvalidGoal(f"Unknown goal type '{goal_type}'.")
        if target is None or target <= 0:
            raise InvalidGoal("Goal target must be greater than zero.")

        analytics = AnalyticsService.get_or_create_for_user(user)
        goal = LearningGoal.objects.create(
            analytics=analytics,
            goal_type=goal_type,
            target=target,
            deadline=deadline,
            description=description,
        )
        logger.info(f"User {user.id} set a {goal_type} goal with target {target}")
        return goal

    @staticmethod
    def list_goals(user: User, include_inactive: bool = False):
        analytics = AnalyticsService.get_or_create_for_user(user)
        goals = analytics.goals.all()
        if not include_inactive:
            goals = goals.filter(is_active=True)
        return goals

    @staticmethod
    @transaction.atomic
    def update_goal_progress(goal: LearningGoal, current: int) -> LearningGoal:
        goal = LearningGoal.objects.select_for_update().get(pk=goal.pk)
        if not goal.is_active:
            raise InvalidGoal("Cannot update an inactive goal.")
        if current is None or current < 0:
            raise InvalidGoal("Goal progress cannot be negative.")

        goal.current = current
        if goal.current >= goal.target and goal.achieved_at is None:
            goal.achieved_at = timezone.now()
            logger.info(f"Goal {goal.id} achieved ({goal.current}/{goal.target})")
        goal.save(update_fields=["current", "achieved_at", "updated_at"])
        return goal

    @staticmethod
    def deactivate_goal(goal: LearningGoal) -> LearningGoal:
        goal.is_active = False
        goal.save(update_fields=["is_active", "updated_at"])
        return goal


@dataclass(frozen=True)
class AchievementStats:
    total_achievements: int
    completed: int
    in_progress: int
    completion_rate: int
    total_points: int


class AchievementService:
    """
    Progress towards achievements. Earning one stamps it, lists it on the
    day's activity record and awards experience.

    Counter criteria (completions) move through `increment_progress`;
    gauge criteria (streak, study hours) are synced to the current value
    and never move back.
    """

    @staticmethod
    @transaction.atomic
    def increment_progress(user: User, criteria_type: str, amount: int = 1) -> list[UserAchievement]:
        """Adds `amount` to every active achievement tracking `criteria_type`; returns the ones just earned."""
        earned = []
        for achievement in Achievement.objects.active().filter(criteria_type=criteria_type):
            progress = AchievementService._lock_progress(user, achievement)
            if AchievementService._apply(progress, progress.current_progress + amount):
                earned.append(progress)
        return earned

    @staticmethod
    @transaction.atomic
    def sync_progress(user: User, criteria_type: str, value: int) -> list[UserAchievement]:
        earned = []
        if value <= 0:
            return earned
        for achievement in Achievement.objects.active().filter(criteria_type=criteria_type):
            progress = AchievementService._lock_progress(user, achievement)
            if value > progress.current_progress and AchievementService._apply(progress, value):
                earned.append(progress)
        return earned

    @staticmethod
    @transaction.atomic
    def advance(user: User, achievement: Achievement, amount: int = 1) -> UserAchievement:
        """Manual progress on a single achievement."""
        if not achievement.is_active:
            raise InactiveAchievement(achievement)
        progress = AchievementService._lock_progress(user, achievement)
        AchievementService._apply(progress, progress.current_progress + amount)
        return progress

    @staticmethod
    def _lock_progress(user: User, achievement: Achievement) -> UserAchievement:
        UserAchievement.objects.get_or_create(user=user, achievement=achievement)
        return UserAchievement.objects.select_for_update().select_related("achievement").get(
            user=user, achievement=achievement
        )

    @staticmethod
    def _apply(progress: UserAchievement, value: int) -> bool:
        """Stores `value`; returns True when this call earned the achievement."""
        if progress.is_completed:
            return False

        progress.current_progress = value
        just_earned = value >= progress.achievement.target
        if just_earned:
            progress.completed_at = timezone.now()
        progress.save(update_fields=["current_progress", "completed_at", "updated_at"])

        if just_earned:
            AchievementService._award(progress)
        return just_earned

    @staticmethod
    def _award(progress: UserAchievement) -> None:
        achievement = progress.achievement
        Achievement.objects.filter(pk=achievement.pk).update(total_earned=F("total_earned") + 1)
        AnalyticsService.record_achievement(progress.user, achievement, progress.completed_at)
        AnalyticsService.add_experience_points(progress.user, aggregation.ACHIEVEMENT_XP)
        logger.info(f"User {progress.user_id} earned achievement '{achievement.title}'")

    @staticmethod
    def list_for_user(user: User, completed: Optional[bool] = None):
        queryset = UserAchievement.objects.filter(
            user=user, achievement__is_active=True
        ).select_related("achievement")
        if completed is not None:
            queryset = queryset.filter(completed_at__isnull=not completed)
        return queryset

    @staticmethod
    def user_stats(user: User) -> AchievementStats:
        total = Achievement.objects.active().count()
        progress = UserAchievement.objects.filter(user=user, achievement__is_active=True)
        completed = progress.filter(completed_at__isnull=False)
        completed_count = completed.count()
        return AchievementStats(
            total_achievements=total,
            completed=completed_count,
            in_progress=progress.filter(completed_at__isnull=True, current_progress__gt=0).count(),
            completion_rate=round_half_up(completed_count / total * 100) if total else 0,
            total_points=completed.aggregate(total=Sum("achievement__points"))["total"] or 0,
        )

    @staticmethod
    def leaderboard(limit: int = 10):
        """Learners by earned achievements, most first; ties go to whoever finished last most recently."""
        return (
            User.objects.filter(is_active=True, user_achievements__completed_at__isnull=False)
            .annotate(
                completed_count=Count("user_achievements"),
                last_completed=Max("user_achievements__completed_at"),
            )
            .order_by("-completed_count", "-last_completed")[:limit]
        )

    @staticmethod
    def deactivate(achievement: Achievement) -> Achievement:
        achievement.is_active = False
        achievement.save(update_fields=["is_active", "updated_at"])
        logger.info(f"Achievement '{achievement.title}' deactivated")
        return achievement
