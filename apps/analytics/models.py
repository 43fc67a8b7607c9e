from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.common.models import ActiveQuerySet, TimestampedModel


def default_resources_viewed():
    return {"pdfs": 0, "videos": 0, "links": 0, "notes": 0}


class ProgressAnalytics(TimestampedModel):
    """
    Per-user learning statistics. Created lazily the first time a user's
    analytics are accessed.

    Study time and achievement totals are derived from the daily records;
    course/path counters and experience points only move through explicit
    award calls on AnalyticsService.
    """

    user = models.OneToOneField(
        "users.User", on_delete=models.CASCADE, related_name="progress_analytics"
    )

    total_study_time = models.PositiveIntegerField(default=0, help_text="Minutes")
    total_paths = models.PositiveIntegerField(default=0)
    completed_paths = models.PositiveIntegerField(default=0)
    completed_courses = models.PositiveIntegerField(default=0)
    total_achievements = models.PositiveIntegerField(default=0)

    current_streak = models.PositiveIntegerField(default=0)
    longest_streak = models.PositiveIntegerField(default=0)
    last_active_date = models.DateTimeField(null=True, blank=True)
    joined_date = models.DateTimeField(default=timezone.now)

    experience_points = models.PositiveIntegerField(default=0)
    level = models.PositiveIntegerField(default=1)

    class Meta:
        verbose_name = _("Progress Analytics")
        verbose_name_plural = _("Progress Analytics")

    def __str__(self):
        return f"Analytics for {self.user.email} (level {self.level})"


class DailyActivity(TimestampedModel):
    """One calendar day of learning activity for a user."""

    analytics = models.ForeignKey(
        ProgressAnalytics, on_delete=models.CASCADE, related_name="daily_activities"
    )
    date = models.DateField(db_index=True)
    study_time = models.PositiveIntegerField(default=0, help_text="Minutes")
    courses_accessed = models.JSONField(
        default=list,
        blank=True,
        encoder=DjangoJSONEncoder,
        help_text="List of {course_id, time_spent, accessed_at}",
    )
    resources_viewed = models.JSONField(default=default_resources_viewed, blank=True)
    achievements_earned = models.JSONField(
        default=list,
        blank=True,
        encoder=DjangoJSONEncoder,
        help_text="List of {achievement_id, earned_at}",
    )
    login_time = models.DateTimeField(null=True, blank=True)
    logout_time = models.DateTimeField(null=True, blank=True)
    session_duration = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes")

    class Meta:
        ordering = ["date"]
        unique_together = ("analytics", "date")
        verbose_name_plural = _("Daily Activities")

    def __str__(self):
        return f"{self.analytics.user.email} on {self.date}: {self.study_time} min"

    @property
    def is_active(self):
        return self.study_time > 0


class LearningGoal(TimestampedModel):
    class GoalType(models.TextChoices):
        DAILY_TIME = "daily_time", _("Daily Study Time")
        WEEKLY_TIME = "weekly_time", _("Weekly Study Time")
        COURSES_PER_MONTH = "courses_per_month", _("Courses per Month")
        SKILL_MASTERY = "skill_mastery", _("Skill Mastery")
        CUSTOM = "custom", _("Custom")

    analytics = models.ForeignKey(
        ProgressAnalytics, on_delete=models.CASCADE, related_name="goals"
    )
    goal_type = models.CharField(max_length=20, choices=GoalType.choices)
    target = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    current = models.PositiveIntegerField(default=0)
    deadline = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    achieved_at = models.DateTimeField(null=True, blank=True)
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.get_goal_type_display()}: {self.current}/{self.target}"

    @property
    def is_achieved(self):
        return self.achieved_at is not None


class Achievement(TimestampedModel):
    """
    A badge earned by reaching `target` on one tracked criterion.

    Progress is cumulative over the learner's whole history.
    """

    class Category(models.TextChoices):
        LEARNING = "learning", _("Learning")
        COMPLETION = "completion", _("Completion")
        STREAK = "streak", _("Streak")
        SOCIAL = "social", _("Social")
        MILESTONE = "milestone", _("Milestone")
        SKILL = "skill", _("Skill")

    class CriteriaType(models.TextChoices):
        COURSES_COMPLETED = "courses_completed", _("Courses Completed")
        PATHS_COMPLETED = "paths_completed", _("Learning Paths Completed")
        STUDY_STREAK = "study_streak", _("Study Streak")
        STUDY_HOURS = "study_hours", _("Study Hours")
        RESOURCES_ADDED = "resources_added", _("Resources Added")
        NOTES_CREATED = "notes_created", _("Notes Created")
        PERFECT_SCORES = "perfect_scores", _("Perfect Scores")
        SKILL_MASTERY = "skill_mastery", _("Skill Mastery")
        LOGIN_STREAK = "login_streak", _("Login Streak")
        EARLY_BIRD = "early_bird", _("Early Bird")
        NIGHT_OWL = "night_owl", _("Night Owl")
        WEEKEND_WARRIOR = "weekend_warrior", _("Weekend Warrior")

    class Rarity(models.TextChoices):
        COMMON = "common", _("Common")
        UNCOMMON = "uncommon", _("Uncommon")
        RARE = "rare", _("Rare")
        EPIC = "epic", _("Epic")
        LEGENDARY = "legendary", _("Legendary")

    class Difficulty(models.TextChoices):
        EASY = "easy", _("Easy")
        MEDIUM = "medium", _("Medium")
        HARD = "hard", _("Hard")
        EXPERT = "expert", _("Expert")

    title = models.CharField(max_length=100, unique=True, validators=[MinLengthValidator(3)])
    description = models.CharField(max_length=300)
    icon = models.CharField(max_length=50, default="fas fa-trophy")
    category = models.CharField(max_length=20, choices=Category.choices)
    criteria_type = models.CharField(max_length=30, choices=CriteriaType.choices, db_index=True)
    target = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    points = models.PositiveIntegerField(default=10, validators=[MinValueValidator(1)])
    badge_color = models.CharField(max_length=7, default="#3B82F6")
    rarity = models.CharField(max_length=20, choices=Rarity.choices, default=Rarity.COMMON)
    difficulty = models.CharField(max_length=20, choices=Difficulty.choices, default=Difficulty.EASY)
    is_active = models.BooleanField(default=True, db_index=True)
    total_earned = models.PositiveIntegerField(default=0)
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="achievements_created",
    )

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ["category", "target"]

    def __str__(self):
        return self.title


class UserAchievement(TimestampedModel):
    """A learner's progress towards one achievement."""

    user = models.ForeignKey(
        "users.User", on_delete=models.CASCADE, related_name="user_achievements"
    )
    achievement = models.ForeignKey(
        Achievement, on_delete=models.CASCADE, related_name="user_achievements"
    )
    current_progress = models.PositiveIntegerField(default=0)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-completed_at", "-updated_at"]
        unique_together = ("user", "achievement")
        indexes = [
            models.Index(fields=["user", "completed_at"], name="analytics_u_user_id_5a1c3e_idx"),
        ]

    def __str__(self):
        return f"{self.user.email}: {self.achievement.title} ({self.current_progress}/{self.achievement.target})"

    @property
    def is_completed(self):
        return self.completed_at is not None
