from django.core.validators import MaxLengthValidator, MaxValueValidator, MinLengthValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.common.models import ActiveQuerySet, TimestampedModel
from apps.courses.models import Course


class LearningPath(TimestampedModel):
    """Represents a curated, ordered sequence of courses that users enroll in."""

    class Category(models.TextChoices):
        PROGRAMMING = "programming", _("Programming")
        DESIGN = "design", _("Design")
        BUSINESS = "business", _("Business")
        DATA_SCIENCE = "data-science", _("Data Science")
        MARKETING = "marketing", _("Marketing")
        GENERAL = "general", _("General")

    class Difficulty(models.TextChoices):
        BEGINNER = "beginner", _("Beginner")
        INTERMEDIATE = "intermediate", _("Intermediate")
        ADVANCED = "advanced", _("Advanced")

    title = models.CharField(
        max_length=100, validators=[MinLengthValidator(3)]
    )
    slug = models.SlugField(
        max_length=120,
        unique=True,
        db_index=True,
        help_text="Unique identifier for the learning path URL",
    )
    description = models.TextField(
        validators=[MinLengthValidator(10), MaxLengthValidator(500)]
    )
    category = models.CharField(
        max_length=20, choices=Category.choices, default=Category.GENERAL, db_index=True
    )
    difficulty = models.CharField(
        max_length=20, choices=Difficulty.choices, default=Difficulty.BEGINNER, db_index=True
    )
    estimated_hours = models.PositiveIntegerField(default=0)
    estimated_weeks = models.PositiveIntegerField(default=0)
    tags = models.JSONField(default=list, blank=True)
    thumbnail = models.URLField(max_length=2048, null=True, blank=True)

    created_by = models.ForeignKey(
        "users.User", on_delete=models.CASCADE, related_name="learning_paths_created"
    )
    is_published = models.BooleanField(default=False, db_index=True)
    is_active = models.BooleanField(default=True, db_index=True)

    # Statistics maintained by LearningPathService
    total_enrollments = models.PositiveIntegerField(default=0)
    completion_rate = models.FloatField(default=0)
    average_rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ["title"]
        indexes = [
            models.Index(fields=["category", "difficulty"], name="learning_pa_categor_3b1f0e_idx"),
            models.Index(fields=["is_published", "is_active"], name="learning_pa_is_publ_8d2c4a_idx"),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        from apps.common.utils import generate_unique_slug

        if not self.slug:
            self.slug = generate_unique_slug(self, source_field="title")
        super().save(*args, **kwargs)


class LearningPathCourse(TimestampedModel):
    """A course reference at a fixed position inside a learning path."""

    learning_path = models.ForeignKey(
        LearningPath, related_name="path_courses", on_delete=models.CASCADE
    )
    course = models.ForeignKey(
        Course, related_name="learning_path_entries", on_delete=models.CASCADE
    )
    order = models.PositiveIntegerField(
        default=0, help_text="Position of this course within the path"
    )

    class Meta:
        ordering = ["learning_path", "order"]
        unique_together = ("learning_path", "order")

    def __str__(self):
        return f"{self.order}: {self.course.title} (Path: {self.learning_path.title})"


class PathEnrollment(TimestampedModel):
    """One user's enrollment record inside one learning path."""

    learning_path = models.ForeignKey(
        LearningPath, on_delete=models.CASCADE, related_name="enrollments"
    )
    user = models.ForeignKey(
        "users.User", on_delete=models.CASCADE, related_name="path_enrollments"
    )
    enrolled_at = models.DateTimeField()
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    current_course = models.PositiveIntegerField(
        default=0, help_text="Index of the course the user is working on"
    )
    overall_progress = models.PositiveSmallIntegerField(
        default=0, validators=[MaxValueValidator(100)]
    )
    time_spent = models.PositiveIntegerField(default=0, help_text="Minutes")
    is_active = models.BooleanField(default=True, db_index=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        unique_together = ("learning_path", "user")
        ordering = ["-enrolled_at"]

    def __str__(self):
        return f"{self.user.email} - {self.learning_path.title} ({self.overall_progress}%)"

    @property
    def is_completed(self):
        return self.completed_at is not None


class CourseProgress(TimestampedModel):
    """Progress of one enrollment on one course of the path."""

    enrollment = models.ForeignKey(
        PathEnrollment, on_delete=models.CASCADE, related_name="course_progress"
    )
    path_course = models.ForeignKey(
        LearningPathCourse, on_delete=models.CASCADE, related_name="user_progress"
    )
    progress = models.PositiveSmallIntegerField(
        default=0, validators=[MaxValueValidator(100)]
    )
    is_completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ("enrollment", "path_course")
        ordering = ["path_course__order"]

    def __str__(self):
        return f"{self.enrollment.user.email} - course {self.path_course.order} ({self.progress}%)"
