from django.core.management.base import BaseCommand, CommandError

from apps.courses.models import Course
from apps.learning_paths.models import LearningPath
from apps.learning_paths.services import LearningPathService
from apps.users.models import User

SAMPLE_PATHS = [
    {
        "title": "Python Programming Journey",
        "description": "Master Python programming from basics to advanced concepts through a carefully curated sequence of courses.",
        "category": LearningPath.Category.PROGRAMMING,
        "difficulty": LearningPath.Difficulty.BEGINNER,
        "estimated_hours": 40,
        "estimated_weeks": 6,
        "tags": ["python", "programming"],
    },
    {
        "title": "Web Development Fundamentals",
        "description": "Learn the essential skills for modern web development including HTML, CSS, JavaScript, and React.",
        "category": LearningPath.Category.PROGRAMMING,
        "difficulty": LearningPath.Difficulty.INTERMEDIATE,
        "estimated_hours": 60,
        "estimated_weeks": 8,
        "tags": ["web", "javascript"],
    },
    {
        "title": "Data Science Pathway",
        "description": "Comprehensive path to becoming a data scientist, covering statistics, Python, and machine learning.",
        "category": LearningPath.Category.DATA_SCIENCE,
        "difficulty": LearningPath.Difficulty.ADVANCED,
        "estimated_hours": 80,
        "estimated_weeks": 12,
        "tags": ["data", "statistics"],
    },
]


class Command(BaseCommand):
    help = "Create sample learning paths for demo purposes"

    def add_arguments(self, parser):
        parser.add_argument(
            "--owner",
            help="Email of the instructor or admin who owns the sample paths. Defaults to the first admin.",
        )
        parser.add_argument(
            "--courses-per-path", type=int, default=3, help="Number of published courses to attach to each path."
        )

    def handle(self, *args, **options):
        owner = self.get_owner(options.get("owner"))
        self.stdout.write(f"Using owner: {owner.email}")

        courses = list(Course.objects.filter(status=Course.Status.PUBLISHED).order_by("title"))
        if not courses:
            self.stdout.write(self.style.WARNING("No published courses found. Paths will be created empty."))

        for data in SAMPLE_PATHS:
            learning_path, created = LearningPath.objects.get_or_create(
                title=data["title"],
                defaults={**data, "created_by": owner, "is_published": True},
            )
            if not created:
                self.stdout.write(self.style.WARNING(f"Learning path already exists: {learning_path.title}"))
                continue

            self.stdout.write(self.style.SUCCESS(f"Created learning path: {learning_path.title}"))
            for course in courses[: options["courses_per_path"]]:
                entry = LearningPathService.add_course(learning_path, course)
                self.stdout.write(f"  Added course {entry.order}: {course.title}")

    def get_owner(self, email):
        if email:
            try:
                owner = User.objects.get_by_email(email)
            except User.DoesNotExist:
                raise CommandError(f"No user with email '{email}'.")
            if not (owner.is_admin or owner.is_instructor):
                raise CommandError("The owner must be an instructor or an admin.")
            return owner

        owner = User.objects.filter(role=User.Role.ADMIN, is_active=True).order_by("date_joined").first()
        if owner is None:
            raise CommandError("No admin user found. Create one first or pass --owner.")
        return owner
