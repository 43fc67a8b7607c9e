import uuid

import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.analytics.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ProgressAnalytics",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("total_study_time", models.PositiveIntegerField(default=0, help_text="Minutes")),
                ("total_paths", models.PositiveIntegerField(default=0)),
                ("completed_paths", models.PositiveIntegerField(default=0)),
                ("completed_courses", models.PositiveIntegerField(default=0)),
                ("total_achievements", models.PositiveIntegerField(default=0)),
                ("current_streak", models.PositiveIntegerField(default=0)),
                ("longest_streak", models.PositiveIntegerField(default=0)),
                ("last_active_date", models.DateTimeField(blank=True, null=True)),
                ("joined_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("experience_points", models.PositiveIntegerField(default=0)),
                ("level", models.PositiveIntegerField(default=1)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="progress_analytics",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Progress Analytics",
                "verbose_name_plural": "Progress Analytics",
            },
        ),
        migrations.CreateModel(
            name="DailyActivity",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("date", models.DateField(db_index=True)),
                ("study_time", models.PositiveIntegerField(default=0, help_text="Minutes")),
                (
                    "courses_accessed",
                    models.JSONField(
                        blank=True,
                        default=list,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                        help_text="List of {course_id, time_spent, accessed_at}",
                    ),
                ),
                (
                    "resources_viewed",
                    models.JSONField(blank=True, default=apps.analytics.models.default_resources_viewed),
                ),
                (
                    "achievements_earned",
                    models.JSONField(
                        blank=True,
                        default=list,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                        help_text="List of {achievement_id, earned_at}",
                    ),
                ),
                ("login_time", models.DateTimeField(blank=True, null=True)),
                ("logout_time", models.DateTimeField(blank=True, null=True)),
                ("session_duration", models.PositiveIntegerField(blank=True, help_text="Minutes", null=True)),
                (
                    "analytics",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="daily_activities",
                        to="analytics.progressanalytics",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Daily Activities",
                "ordering": ["date"],
                "unique_together": {("analytics", "date")},
            },
        ),
        migrations.CreateModel(
            name="LearningGoal",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "goal_type",
                    models.CharField(
                        choices=[
                            ("daily_time", "Daily Study Time"),
                            ("weekly_time", "Weekly Study Time"),
                            ("courses_per_month", "Courses per Month"),
                            ("skill_mastery", "Skill Mastery"),
                            ("custom", "Custom"),
                        ],
                        max_length=20,
                    ),
                ),
                ("target", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("current", models.PositiveIntegerField(default=0)),
                ("deadline", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("achieved_at", models.DateTimeField(blank=True, null=True)),
                ("description", models.CharField(blank=True, max_length=255)),
                (
                    "analytics",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="goals",
                        to="analytics.progressanalytics",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
