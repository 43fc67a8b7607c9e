"""Tests for the Course model."""

from django.test import TestCase

from apps.courses.models import Course
from apps.users.models import User


class CourseModelTests(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            email="instructor@example.com",
            password="testpass123",
            first_name="Test",
            last_name="Instructor",
            role=User.Role.INSTRUCTOR,
        )

    def test_course_creation_defaults(self):
        course = Course.objects.create(title="Intro to Python", instructor=self.instructor)

        self.assertEqual(course.status, Course.Status.DRAFT)
        self.assertEqual(course.difficulty_level, Course.DifficultyLevel.BEGINNER)
        self.assertEqual(course.tags, [])
        self.assertFalse(course.is_published)
        self.assertEqual(str(course), "Intro to Python")

    def test_slug_generated_from_title(self):
        course = Course.objects.create(title="Intro to Python")
        self.assertEqual(course.slug, "intro-to-python")

    def test_duplicate_titles_get_unique_slugs(self):
        first = Course.objects.create(title="Data Structures")
        second = Course.objects.create(title="Data Structures")
        third = Course.objects.create(title="Data Structures")

        self.assertEqual(first.slug, "data-structures")
        self.assertEqual(second.slug, "data-structures-1")
        self.assertEqual(third.slug, "data-structures-2")

    def test_explicit_slug_is_kept(self):
        course = Course.objects.create(title="Algorithms", slug="algo-101")
        self.assertEqual(course.slug, "algo-101")

    def test_deleting_instructor_keeps_course(self):
        course = Course.objects.create(title="Orphaned", instructor=self.instructor)
        self.instructor.delete()

        course.refresh_from_db()
        self.assertIsNone(course.instructor)
