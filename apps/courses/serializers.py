from rest_framework import serializers

from apps.users.serializers import UserBasicSerializer

from .models import Course


class CourseSerializer(serializers.ModelSerializer):
    instructor = UserBasicSerializer(read_only=True)

    class Meta:
        model = Course
        fields = (
            "id",
            "title",
            "slug",
            "description",
            "category",
            "difficulty_level",
            "estimated_duration",
            "instructor",
            "status",
            "tags",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "slug", "instructor", "created_at", "updated_at")
        extra_kwargs = {"slug": {"required": False}}

    def validate_tags(self, value):
        if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
            raise serializers.ValidationError("Tags must be a list of strings.")
        return [tag.strip() for tag in value if tag.strip()]


class CourseSummarySerializer(serializers.ModelSerializer):
    """Compact course representation nested inside learning paths."""

    class Meta:
        model = Course
        fields = ("id", "title", "slug", "category", "difficulty_level", "estimated_duration")
        read_only_fields = fields
