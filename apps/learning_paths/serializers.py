import logging

from rest_framework import serializers

from apps.courses.models import Course
from apps.courses.serializers import CourseSummarySerializer
from apps.users.serializers import UserBasicSerializer

from .models import CourseProgress, LearningPath, LearningPathCourse, PathEnrollment
from .progress import completed_courses

logger = logging.getLogger(__name__)


class LearningPathCourseSerializer(serializers.ModelSerializer):
    course = CourseSummarySerializer(read_only=True)

    class Meta:
        model = LearningPathCourse
        fields = ("id", "order", "course")
        read_only_fields = fields


class LearningPathSerializer(serializers.ModelSerializer):
    created_by = UserBasicSerializer(read_only=True)
    courses = serializers.SerializerMethodField()
    total_courses = serializers.SerializerMethodField()
    is_enrolled = serializers.SerializerMethodField()

    class Meta:
        model = LearningPath
        fields = (
            "id",
            "title",
            "slug",
            "description",
            "category",
            "difficulty",
            "estimated_hours",
            "estimated_weeks",
            "tags",
            "thumbnail",
            "created_by",
            "is_published",
            "is_active",
            "total_enrollments",
            "completion_rate",
            "average_rating",
            "courses",
            "total_courses",
            "is_enrolled",
            "created_at",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "slug",
            "created_by",
            "is_active",
            "total_enrollments",
            "completion_rate",
            "average_rating",
            "created_at",
            "updated_at",
        )

    def get_courses(self, obj):
        entries = obj.path_courses.select_related("course").order_by("order")
        return LearningPathCourseSerializer(entries, many=True).data

    def get_total_courses(self, obj):
        return obj.path_courses.count()

    def get_is_enrolled(self, obj):
        request = self.context.get("request")
        if not request or not request.user.is_authenticated:
            return False
        return obj.enrollments.filter(user=request.user, is_active=True).exists()

    def validate_tags(self, value):
        if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
            raise serializers.ValidationError("Tags must be a list of strings.")
        return [tag.strip() for tag in value if tag.strip()]


class LearningPathListSerializer(serializers.ModelSerializer):
    """Lighter representation for list, popular and mine endpoints."""

    created_by = UserBasicSerializer(read_only=True)

    class Meta:
        model = LearningPath
        fields = (
            "id",
            "title",
            "slug",
            "category",
            "difficulty",
            "estimated_hours",
            "thumbnail",
            "created_by",
            "is_published",
            "total_enrollments",
            "completion_rate",
            "average_rating",
        )
        read_only_fields = fields


class CourseProgressSerializer(serializers.ModelSerializer):
    course_index = serializers.IntegerField(source="path_course.order", read_only=True)
    course_title = serializers.CharField(source="path_course.course.title", read_only=True)

    class Meta:
        model = CourseProgress
        fields = ("course_index", "course_title", "progress", "is_completed", "completed_at")
        read_only_fields = fields


class PathEnrollmentSerializer(serializers.ModelSerializer):
    learning_path = LearningPathListSerializer(read_only=True)
    course_progress = CourseProgressSerializer(many=True, read_only=True)
    completed_courses = serializers.SerializerMethodField()
    is_completed = serializers.BooleanField(read_only=True)

    class Meta:
        model = PathEnrollment
        fields = (
            "id",
            "learning_path",
            "enrolled_at",
            "started_at",
            "completed_at",
            "is_completed",
            "current_course",
            "overall_progress",
            "time_spent",
            "is_active",
            "completed_courses",
            "course_progress",
        )
        read_only_fields = fields

    def get_completed_courses(self, obj):
        return completed_courses(obj)


class ProgressUpdateSerializer(serializers.Serializer):
    """
    Input for a progress update. Range checks on `course_index` and
    `progress` are left to the service so the error order is preserved.
    """

    course_index = serializers.IntegerField()
    progress = serializers.FloatField()
    minutes_spent = serializers.IntegerField(required=False, default=0, min_value=0)


class AddCourseSerializer(serializers.Serializer):
    course = serializers.SlugRelatedField(slug_field="slug", queryset=Course.objects.all())
    order = serializers.IntegerField(required=False, min_value=0)

    def validate_course(self, value):
        learning_path = self.context["learning_path"]
        if learning_path.path_courses.filter(course=value).exists():
            raise serializers.ValidationError("This course is already part of the learning path.")
        return value


class ReorderCoursesSerializer(serializers.Serializer):
    path_course_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
