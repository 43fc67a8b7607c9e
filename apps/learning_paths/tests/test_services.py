"""Tests for LearningPathService."""

from unittest import mock

from django.test import TestCase

from apps.courses.models import Course
from apps.learning_paths.models import CourseProgress, LearningPath, LearningPathCourse, PathEnrollment
from apps.learning_paths.services import (
    InvalidCourseIndex,
    InvalidProgressValue,
    LearningPathError,
    LearningPathService,
    NotEnrolled,
    PathNotFound,
)
from apps.learning_paths.signals import course_completed, learning_path_completed, path_enrolled
from apps.users.models import User


class LearningPathServiceTestCase(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            email="instructor@example.com",
            password="testpass123",
            first_name="Ina",
            last_name="Structor",
            role=User.Role.INSTRUCTOR,
        )
        self.learner = User.objects.create_user(
            email="learner@example.com",
            password="testpass123",
            first_name="Lea",
            last_name="Rner",
        )
        self.other_learner = User.objects.create_user(
            email="other@example.com",
            password="testpass123",
            first_name="Otto",
            last_name="Ther",
        )
        self.learning_path = LearningPath.objects.create(
            title="Python Learning Path",
            description="From the basics of Python to advanced topics.",
            created_by=self.instructor,
            is_published=True,
        )
        self.courses = [
            Course.objects.create(
                title=f"Python {n}", instructor=self.instructor, status=Course.Status.PUBLISHED
            )
            for n in range(1, 4)
        ]
        for order, course in enumerate(self.courses):
            LearningPathCourse.objects.create(learning_path=self.learning_path, course=course, order=order)

    def make_path(self, title, **kwargs):
        kwargs.setdefault("is_published", True)
        return LearningPath.objects.create(
            title=title,
            description="A path used in service tests.",
            created_by=self.instructor,
            **kwargs,
        )


class EnrollTests(LearningPathServiceTestCase):
    def test_first_enrollment_creates_record_and_counts(self):
        enrollment, created = LearningPathService.enroll(self.learning_path, self.learner)

        self.assertTrue(created)
        self.assertTrue(enrollment.is_active)
        self.assertIsNotNone(enrollment.enrolled_at)
        self.learning_path.refresh_from_db()
        self.assertEqual(self.learning_path.total_enrollments, 1)

    def test_enroll_is_idempotent(self):
        first, _ = LearningPathService.enroll(self.learning_path, self.learner)
        second, created = LearningPathService.enroll(self.learning_path, self.learner)

        self.assertFalse(created)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(PathEnrollment.objects.filter(learning_path=self.learning_path).count(), 1)
        self.learning_path.refresh_from_db()
        self.assertEqual(self.learning_path.total_enrollments, 1)

    def test_reactivation_resets_enrolled_at_without_counting(self):
        enrollment, _ = LearningPathService.enroll(self.learning_path, self.learner)
        original_enrolled_at = enrollment.enrolled_at
        LearningPathService.unenroll(self.learning_path, self.learner)

        reactivated, created = LearningPathService.enroll(self.learning_path, self.learner)

        self.assertFalse(created)
        self.assertTrue(reactivated.is_active)
        self.assertGreaterEqual(reactivated.enrolled_at, original_enrolled_at)
        self.learning_path.refresh_from_db()
        self.assertEqual(self.learning_path.total_enrollments, 1)

    def test_enroll_in_inactive_path_raises_not_found(self):
        LearningPathService.deactivate(self.learning_path)
        with self.assertRaises(PathNotFound):
            LearningPathService.enroll(self.learning_path, self.learner)

    def test_get_path_with_unknown_id(self):
        with self.assertRaises(PathNotFound):
            LearningPathService.get_path("not-a-uuid")

    def test_first_enrollment_emits_signal_once(self):
        receiver = mock.Mock()
        path_enrolled.connect(receiver, dispatch_uid="test-path-enrolled")
        self.addCleanup(path_enrolled.disconnect, dispatch_uid="test-path-enrolled")

        with self.captureOnCommitCallbacks(execute=True):
            LearningPathService.enroll(self.learning_path, self.learner)
        with self.captureOnCommitCallbacks(execute=True):
            LearningPathService.enroll(self.learning_path, self.learner)

        receiver.assert_called_once()
        self.assertEqual(receiver.call_args.kwargs["user"], self.learner)

    def test_unenroll_without_enrollment(self):
        with self.assertRaises(NotEnrolled):
            LearningPathService.unenroll(self.learning_path, self.learner)


class UpdateProgressTests(LearningPathServiceTestCase):
    def setUp(self):
        super().setUp()
        LearningPathService.enroll(self.learning_path, self.learner)

    def test_sets_progress_and_recomputes_mean(self):
        enrollment = LearningPathService.update_progress(self.learning_path, self.learner, 0, 50)

        self.assertEqual(enrollment.overall_progress, 17)  # 50 / 3 = 16.67
        self.assertIsNotNone(enrollment.started_at)
        self.assertIsNone(enrollment.completed_at)
        self.assertEqual(enrollment.current_course, 0)

    def test_completing_course_is_sticky_and_moves_current_course(self):
        LearningPathService.update_progress(self.learning_path, self.learner, 0, 100)
        enrollment = LearningPathService.update_progress(self.learning_path, self.learner, 0, 40)

        course_progress = CourseProgress.objects.get(enrollment=enrollment, path_course__order=0)
        self.assertEqual(course_progress.progress, 40)
        self.assertTrue(course_progress.is_completed)
        self.assertIsNotNone(course_progress.completed_at)
        self.assertEqual(enrollment.current_course, 1)

    def test_completing_all_courses_stamps_completion(self):
        for index in range(3):
            enrollment = LearningPathService.update_progress(self.learning_path, self.learner, index, 100)

        self.assertEqual(enrollment.overall_progress, 100)
        self.assertIsNotNone(enrollment.completed_at)
        self.assertEqual(enrollment.current_course, 2)
        self.learning_path.refresh_from_db()
        self.assertEqual(self.learning_path.completion_rate, 100)

    def test_fractional_progress_below_hundred_does_not_complete(self):
        course_receiver = mock.Mock()
        course_completed.connect(course_receiver, dispatch_uid="test-fractional-progress")
        self.addCleanup(course_completed.disconnect, dispatch_uid="test-fractional-progress")

        with self.captureOnCommitCallbacks(execute=True):
            enrollment = LearningPathService.update_progress(self.learning_path, self.learner, 0, 99.5)

        course_progress = CourseProgress.objects.get(enrollment=enrollment, path_course__order=0)
        self.assertEqual(course_progress.progress, 99)
        self.assertFalse(course_progress.is_completed)
        self.assertIsNone(course_progress.completed_at)
        self.assertEqual(enrollment.current_course, 0)
        course_receiver.assert_not_called()

    def test_fractional_progress_rounds_half_up(self):
        enrollment = LearningPathService.update_progress(self.learning_path, self.learner, 0, 49.5)
        self.assertEqual(CourseProgress.objects.get(enrollment=enrollment).progress, 50)

    def test_completion_stamp_is_not_overwritten(self):
        for index in range(3):
            LearningPathService.update_progress(self.learning_path, self.learner, index, 100)
        completed_at = PathEnrollment.objects.get(user=self.learner).completed_at

        enrollment = LearningPathService.update_progress(self.learning_path, self.learner, 1, 100)

        self.assertEqual(enrollment.completed_at, completed_at)

    def test_progress_is_per_learner(self):
        LearningPathService.enroll(self.learning_path, self.other_learner)
        LearningPathService.update_progress(self.learning_path, self.learner, 0, 100)

        self.assertEqual(LearningPathService.compute_user_progress(self.learning_path, self.learner), 33)
        self.assertEqual(LearningPathService.compute_user_progress(self.learning_path, self.other_learner), 0)

    def test_minutes_spent_accumulate(self):
        LearningPathService.update_progress(self.learning_path, self.learner, 0, 10, minutes_spent=15)
        enrollment = LearningPathService.update_progress(self.learning_path, self.learner, 0, 20, minutes_spent=5)
        self.assertEqual(enrollment.time_spent, 20)

    def test_not_enrolled_checked_first(self):
        with self.assertRaises(NotEnrolled):
            LearningPathService.update_progress(self.learning_path, self.other_learner, 99, 500)

    def test_inactive_enrollment_counts_as_not_enrolled(self):
        LearningPathService.unenroll(self.learning_path, self.learner)
        with self.assertRaises(NotEnrolled):
            LearningPathService.update_progress(self.learning_path, self.learner, 0, 50)

    def test_index_checked_before_range(self):
        with self.assertRaises(InvalidCourseIndex):
            LearningPathService.update_progress(self.learning_path, self.learner, 3, 500)
        with self.assertRaises(InvalidCourseIndex):
            LearningPathService.update_progress(self.learning_path, self.learner, -1, 50)

    def test_invalid_range_leaves_state_unchanged(self):
        LearningPathService.update_progress(self.learning_path, self.learner, 0, 30)

        for value in (-1, 101):
            with self.assertRaises(InvalidProgressValue):
                LearningPathService.update_progress(self.learning_path, self.learner, 0, value)

        enrollment = PathEnrollment.objects.get(user=self.learner)
        self.assertEqual(enrollment.overall_progress, 10)
        self.assertEqual(CourseProgress.objects.get(enrollment=enrollment).progress, 30)

    def test_negative_minutes_rejected(self):
        with self.assertRaises(LearningPathError) as ctx:
            LearningPathService.update_progress(self.learning_path, self.learner, 0, 30, minutes_spent=-5)
        self.assertEqual(ctx.exception.code, "invalid_time")

    def test_completion_signals(self):
        course_receiver = mock.Mock()
        path_receiver = mock.Mock()
        course_completed.connect(course_receiver, dispatch_uid="test-course-completed")
        learning_path_completed.connect(path_receiver, dispatch_uid="test-path-completed")
        self.addCleanup(course_completed.disconnect, dispatch_uid="test-course-completed")
        self.addCleanup(learning_path_completed.disconnect, dispatch_uid="test-path-completed")

        with self.captureOnCommitCallbacks(execute=True):
            for index in range(3):
                LearningPathService.update_progress(self.learning_path, self.learner, index, 100)
        with self.captureOnCommitCallbacks(execute=True):
            LearningPathService.update_progress(self.learning_path, self.learner, 0, 100)

        self.assertEqual(course_receiver.call_count, 3)
        path_receiver.assert_called_once()
        self.assertEqual(path_receiver.call_args.kwargs["learning_path"].pk, self.learning_path.pk)


class ComputeUserProgressTests(LearningPathServiceTestCase):
    def test_not_enrolled_is_zero(self):
        self.assertEqual(LearningPathService.compute_user_progress(self.learning_path, self.learner), 0)

    def test_zero_courses_is_zero(self):
        empty = self.make_path("Empty Path")
        LearningPathService.enroll(empty, self.learner)
        self.assertEqual(LearningPathService.compute_user_progress(empty, self.learner), 0)

    def test_mean_rounds_half_up(self):
        two_course_path = self.make_path("Two Courses")
        LearningPathCourse.objects.create(learning_path=two_course_path, course=self.courses[0], order=0)
        LearningPathCourse.objects.create(learning_path=two_course_path, course=self.courses[1], order=1)
        LearningPathService.enroll(two_course_path, self.learner)
        LearningPathService.update_progress(two_course_path, self.learner, 0, 50)
        LearningPathService.update_progress(two_course_path, self.learner, 1, 75)

        self.assertEqual(LearningPathService.compute_user_progress(two_course_path, self.learner), 63)


class ListingTests(LearningPathServiceTestCase):
    def test_list_user_paths_filters_and_orders(self):
        second = self.make_path("Second Path")
        LearningPathCourse.objects.create(learning_path=second, course=self.courses[0], order=0)
        LearningPathService.enroll(self.learning_path, self.learner)
        LearningPathService.enroll(second, self.learner)
        LearningPathService.update_progress(second, self.learner, 0, 100)

        self.assertEqual(
            LearningPathService.list_user_paths(self.learner),
            [second, self.learning_path],
        )
        self.assertEqual(LearningPathService.list_user_paths(self.learner, "active"), [self.learning_path])
        self.assertEqual(LearningPathService.list_user_paths(self.learner, "completed"), [second])

    def test_list_user_paths_skips_inactive(self):
        second = self.make_path("Second Path")
        LearningPathService.enroll(self.learning_path, self.learner)
        LearningPathService.enroll(second, self.learner)
        LearningPathService.unenroll(self.learning_path, self.learner)
        LearningPathService.deactivate(second)

        self.assertEqual(LearningPathService.list_user_paths(self.learner), [])

    def test_list_user_paths_rejects_unknown_status(self):
        with self.assertRaises(LearningPathError) as ctx:
            LearningPathService.list_user_paths(self.learner, "paused")
        self.assertEqual(ctx.exception.code, "invalid_status")

    def test_popular_paths_ordering(self):
        LearningPath.objects.filter(pk=self.learning_path.pk).update(total_enrollments=5, average_rating=3)
        tied = self.make_path("Tied Path", total_enrollments=5, average_rating=4.5)
        top = self.make_path("Top Path", total_enrollments=9)
        self.make_path("Draft Path", total_enrollments=50, is_published=False)
        self.make_path("Retired Path", total_enrollments=50, is_active=False)

        popular = list(LearningPathService.list_popular_paths())

        self.assertEqual(popular, [top, tied, self.learning_path])
        self.assertEqual(len(LearningPathService.list_popular_paths(limit=1)), 1)


class CourseManagementTests(LearningPathServiceTestCase):
    def test_add_course_appends(self):
        extra = Course.objects.create(title="Extra", instructor=self.instructor)
        entry = LearningPathService.add_course(self.learning_path, extra)
        self.assertEqual(entry.order, 3)

    def test_add_course_at_position_shifts_later_courses(self):
        extra = Course.objects.create(title="Extra", instructor=self.instructor)
        LearningPathService.add_course(self.learning_path, extra, order=1)

        ordered = list(self.learning_path.path_courses.order_by("order").values_list("course__title", flat=True))
        self.assertEqual(ordered, ["Python 1", "Extra", "Python 2", "Python 3"])

    def test_remove_course_closes_gap(self):
        entry = self.learning_path.path_courses.get(order=0)
        LearningPathService.remove_course(self.learning_path, entry)

        orders = list(self.learning_path.path_courses.order_by("order").values_list("order", flat=True))
        self.assertEqual(orders, [0, 1])

    def test_reorder_courses(self):
        entries = list(self.learning_path.path_courses.order_by("order"))
        new_order = [entries[2].id, entries[0].id, entries[1].id]

        LearningPathService.reorder_courses(self.learning_path, new_order)

        titles = list(self.learning_path.path_courses.order_by("order").values_list("course__title", flat=True))
        self.assertEqual(titles, ["Python 3", "Python 1", "Python 2"])

    def test_reorder_requires_every_course(self):
        entries = list(self.learning_path.path_courses.order_by("order"))
        with self.assertRaises(LearningPathError):
            LearningPathService.reorder_courses(self.learning_path, [entries[0].id])

    def test_deactivate_keeps_row(self):
        LearningPathService.deactivate(self.learning_path)
        self.assertTrue(LearningPath.objects.filter(pk=self.learning_path.pk, is_active=False).exists())
