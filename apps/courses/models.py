from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.common.models import TimestampedModel
from apps.users.models import User


class Course(TimestampedModel):
    """A course in the catalogue; learning paths reference courses in order."""

    class Status(models.TextChoices):
        DRAFT = "DRAFT", _("Draft")
        PUBLISHED = "PUBLISHED", _("Published")
        ARCHIVED = "ARCHIVED", _("Archived")

    class DifficultyLevel(models.TextChoices):
        BEGINNER = "beginner", _("Beginner")
        INTERMEDIATE = "intermediate", _("Intermediate")
        ADVANCED = "advanced", _("Advanced")

    title = models.CharField(max_length=255)
    slug = models.SlugField(
        max_length=255,
        unique=True,
        db_index=True,
        help_text="Unique identifier for the course URL",
    )
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True, help_text="Course category")
    difficulty_level = models.CharField(
        max_length=20,
        choices=DifficultyLevel.choices,
        default=DifficultyLevel.BEGINNER,
        help_text="Course difficulty level",
    )
    estimated_duration = models.PositiveIntegerField(
        default=1,
        help_text="Estimated duration in hours",
    )
    instructor = models.ForeignKey(
        User,
        related_name="courses_authored",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        limit_choices_to={"role__in": [User.Role.INSTRUCTOR, User.Role.ADMIN]},
    )
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.DRAFT, db_index=True
    )
    tags = models.JSONField(
        default=list, blank=True, help_text="List of tags for categorization"
    )

    class Meta:
        ordering = ["title"]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        from apps.common.utils import generate_unique_slug

        if not self.slug:
            self.slug = generate_unique_slug(self, source_field="title")
        super().save(*args, **kwargs)

    @property
    def is_published(self):
        return self.status == self.Status.PUBLISHED
