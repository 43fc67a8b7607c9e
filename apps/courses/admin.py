from django.contrib import admin

from .models import Course


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("title", "category", "difficulty_level", "status", "instructor", "created_at")
    list_filter = ("status", "difficulty_level", "category")
    search_fields = ("title", "description", "instructor__email")
    prepopulated_fields = {"slug": ("title",)}
    list_select_related = ("instructor",)
