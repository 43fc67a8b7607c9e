from django.contrib import admin

from .models import CourseProgress, LearningPath, LearningPathCourse, PathEnrollment


class LearningPathCourseInline(admin.TabularInline):
    model = LearningPathCourse
    fk_name = "learning_path"
    extra = 1
    ordering = ("order",)
    fields = ("order", "course")
    autocomplete_fields = ("course",)


@admin.register(LearningPath)
class LearningPathAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "slug",
        "category",
        "difficulty",
        "is_published",
        "is_active",
        "course_count",
        "total_enrollments",
        "created_at",
    )
    list_filter = ("category", "difficulty", "is_published", "is_active")
    search_fields = ("title", "slug", "description", "created_by__email")
    prepopulated_fields = {"slug": ("title",)}
    list_select_related = ("created_by",)
    readonly_fields = ("total_enrollments", "completion_rate")
    inlines = [LearningPathCourseInline]
    fieldsets = (
        (None, {"fields": ("title", "slug", "created_by", "is_published", "is_active")}),
        ("Details", {"fields": ("description", "category", "difficulty", "estimated_hours", "estimated_weeks", "tags", "thumbnail")}),
        ("Statistics", {"fields": ("total_enrollments", "completion_rate", "average_rating")}),
    )

    def course_count(self, obj):
        return obj.path_courses.count()

    course_count.short_description = "Courses"


class CourseProgressInline(admin.TabularInline):
    model = CourseProgress
    extra = 0
    fields = ("path_course", "progress", "is_completed", "completed_at")
    readonly_fields = fields
    can_delete = False


@admin.register(PathEnrollment)
class PathEnrollmentAdmin(admin.ModelAdmin):
    list_display = (
        "user",
        "learning_path",
        "overall_progress",
        "current_course",
        "is_active",
        "enrolled_at",
        "completed_at",
    )
    list_filter = ("is_active", "learning_path")
    search_fields = ("user__email", "learning_path__title")
    list_select_related = ("user", "learning_path")
    readonly_fields = ("enrolled_at", "started_at", "completed_at", "overall_progress", "time_spent")
    inlines = [CourseProgressInline]
