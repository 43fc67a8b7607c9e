import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("analytics", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Achievement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "title",
                    models.CharField(
                        max_length=100,
                        unique=True,
                        validators=[django.core.validators.MinLengthValidator(3)],
                    ),
                ),
                ("description", models.CharField(max_length=300)),
                ("icon", models.CharField(default="fas fa-trophy", max_length=50)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("learning", "Learning"),
                            ("completion", "Completion"),
                            ("streak", "Streak"),
                            ("social", "Social"),
                            ("milestone", "Milestone"),
                            ("skill", "Skill"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "criteria_type",
                    models.CharField(
                        choices=[
                            ("courses_completed", "Courses Completed"),
                            ("paths_completed", "Learning Paths Completed"),
                            ("study_streak", "Study Streak"),
                            ("study_hours", "Study Hours"),
                            ("resources_added", "Resources Added"),
                            ("notes_created", "Notes Created"),
                            ("perfect_scores", "Perfect Scores"),
                            ("skill_mastery", "Skill Mastery"),
                            ("login_streak", "Login Streak"),
                            ("early_bird", "Early Bird"),
                            ("night_owl", "Night Owl"),
                            ("weekend_warrior", "Weekend Warrior"),
                        ],
                        db_index=True,
                        max_length=30,
                    ),
                ),
                ("target", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                (
                    "points",
                    models.PositiveIntegerField(default=10, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("badge_color", models.CharField(default="#3B82F6", max_length=7)),
                (
                    "rarity",
                    models.CharField(
                        choices=[
                            ("common", "Common"),
                            ("uncommon", "Uncommon"),
                            ("rare", "Rare"),
                            ("epic", "Epic"),
                            ("legendary", "Legendary"),
                        ],
                        default="common",
                        max_length=20,
                    ),
                ),
                (
                    "difficulty",
                    models.CharField(
                        choices=[
                            ("easy", "Easy"),
                            ("medium", "Medium"),
                            ("hard", "Hard"),
                            ("expert", "Expert"),
                        ],
                        default="easy",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("total_earned", models.PositiveIntegerField(default=0)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="achievements_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["category", "target"],
            },
        ),
        migrations.CreateModel(
            name="UserAchievement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("current_progress", models.PositiveIntegerField(default=0)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "achievement",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="user_achievements",
                        to="analytics.achievement",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="user_achievements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-completed_at", "-updated_at"],
                "unique_together": {("user", "achievement")},
                "indexes": [
                    models.Index(fields=["user", "completed_at"], name="analytics_u_user_id_5a1c3e_idx"),
                ],
            },
        ),
    ]
