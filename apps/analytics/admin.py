from django.contrib import admin

from .models import Achievement, DailyActivity, LearningGoal, ProgressAnalytics, UserAchievement


class LearningGoalInline(admin.TabularInline):
    model = LearningGoal
    extra = 0
    fields = ("goal_type", "target", "current", "deadline", "is_active", "achieved_at")
    readonly_fields = ("achieved_at",)


@admin.register(ProgressAnalytics)
class ProgressAnalyticsAdmin(admin.ModelAdmin):
    list_display = (
        "user_email",
        "level",
        "experience_points",
        "total_study_time",
        "current_streak",
        "longest_streak",
        "last_active_date",
    )
    search_fields = ("user__email",)
    list_select_related = ("user",)
    readonly_fields = (
        "total_study_time",
        "total_achievements",
        "current_streak",
        "longest_streak",
        "last_active_date",
        "level",
    )
    inlines = [LearningGoalInline]

    def user_email(self, obj):
        return obj.user.email

    user_email.short_description = "User"
    user_email.admin_order_field = "user__email"


@admin.register(DailyActivity)
class DailyActivityAdmin(admin.ModelAdmin):
    list_display = ("analytics", "date", "study_time", "session_duration")
    list_filter = ("date",)
    search_fields = ("analytics__user__email",)
    list_select_related = ("analytics__user",)
    date_hierarchy = "date"


@admin.register(Achievement)
class AchievementAdmin(admin.ModelAdmin):
    list_display = ("title", "category", "criteria_type", "target", "points", "rarity", "is_active", "total_earned")
    list_filter = ("category", "criteria_type", "rarity", "is_active")
    search_fields = ("title", "description")
    readonly_fields = ("total_earned",)


@admin.register(UserAchievement)
class UserAchievementAdmin(admin.ModelAdmin):
    list_display = ("user", "achievement", "current_progress", "completed_at")
    list_filter = ("completed_at",)
    search_fields = ("user__email", "achievement__title")
    list_select_related = ("user", "achievement")
