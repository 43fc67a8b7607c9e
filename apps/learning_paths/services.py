import logging
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Max, QuerySet
from django.utils import timezone

from apps.courses.models import Course
from apps.users.models import User

from .models import CourseProgress, LearningPath, LearningPathCourse, PathEnrollment
from .progress import MAX_PROGRESS, MIN_PROGRESS, first_incomplete_index, mean_progress, stored_progress
from .signals import course_completed, learning_path_completed, path_enrolled

logger = logging.getLogger(__name__)


class LearningPathError(Exception):
    """Base error for learning path operations."""

    def __init__(self, message: str, code: str = "learning_path_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class PathNotFound(LearningPathError):
    def __init__(self, message: str = "Learning path not found."):
        super().__init__(message, "not_found")


class NotEnrolled(LearningPathError):
    def __init__(self, message: str = "User not enrolled in this learning path."):
        super().__init__(message, "not_enrolled")


class InvalidCourseIndex(LearningPathError):
    def __init__(self, index, course_count: int):
        super().__init__(
            f"Invalid course index {index}; path has {course_count} course(s).",
            "invalid_index",
        )


class InvalidProgressValue(LearningPathError):
    def __init__(self, value):
        super().__init__(
            f"Progress must be between {MIN_PROGRESS} and {MAX_PROGRESS}, got {value}.",
            "invalid_range",
        )


@dataclass(frozen=True)
class ProgressValue:
    """
    A course progress percentage, validated on construction. Completion is
    decided on the value as reported, before it is rounded for storage.
    """

    raw: float

    def __post_init__(self):
        if isinstance(self.raw, bool) or not isinstance(self.raw, (int, float)):
            raise InvalidProgressValue(self.raw)
        if not MIN_PROGRESS <= self.raw <= MAX_PROGRESS:
            raise InvalidProgressValue(self.raw)

    @property
    def value(self) -> int:
        return stored_progress(self.raw)

    @property
    def is_complete(self) -> bool:
        return self.raw >= MAX_PROGRESS


@dataclass(frozen=True)
class CourseIndex:
    """A position in a path's ordered course list, validated against its length."""

    value: int
    course_count: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidCourseIndex(self.value, self.course_count)
        if not 0 <= self.value < self.course_count:
            raise InvalidCourseIndex(self.value, self.course_count)


class EnrollmentStatusFilter:
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    choices = (ALL, ACTIVE, COMPLETED)


class LearningPathService:
    """Enrollment and progress tracking for learning paths."""

    @staticmethod
    def get_path(path_id, for_update: bool = False) -> LearningPath:
        """Fetch an active learning path by primary key or raise PathNotFound."""
        queryset = LearningPath.objects.active()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=path_id)
        except (LearningPath.DoesNotExist, ValidationError, ValueError, TypeError):
            raise PathNotFound()

    @staticmethod
    @transaction.atomic
    def enroll(learning_path: LearningPath, user: User) -> tuple[PathEnrollment, bool]:
        """
        Enrolls a user in a learning path. Idempotent.

        Returns (enrollment, created). A first-time enrollment increments
        `total_enrollments`; an inactive enrollment is reactivated with a fresh
        `enrolled_at` and does not touch the counter.
        """
        path = LearningPathService.get_path(learning_path.pk, for_update=True)
        now = timezone.now()

        enrollment = PathEnrollment.objects.filter(learning_path=path, user=user).first()
        if enrollment is not None:
            if not enrollment.is_active:
                enrollment.is_active = True
                enrollment.enrolled_at = now
                enrollment.save(update_fields=["is_active", "enrolled_at", "updated_at"])
                logger.info(f"Reactivated enrollment of user {user.id} in path '{path.title}'")
            return enrollment, False

        enrollment = PathEnrollment.objects.create(
            learning_path=path, user=user, enrolled_at=now
        )
        path.total_enrollments += 1
        path.save(update_fields=["total_enrollments", "updated_at"])
        learning_path.total_enrollments = path.total_enrollments

        logger.info(
            f"User {user.id} enrolled in learning path '{path.title}' "
            f"(total_enrollments={path.total_enrollments})"
        )
        transaction.on_commit(
            lambda: path_enrolled.send(sender=LearningPathService, user=user, learning_path=path)
        )
        return enrollment, True

    @staticmethod
    @transaction.atomic
    def unenroll(learning_path: LearningPath, user: User) -> PathEnrollment:
        """Deactivates an active enrollment; progress is kept for re-enrollment."""
        path = LearningPathService.get_path(learning_path.pk, for_update=True)
        enrollment = PathEnrollment.objects.active().filter(learning_path=path, user=user).first()
        if enrollment is None:
            raise NotEnrolled()

        enrollment.is_active = False
        enrollment.save(update_fields=["is_active", "updated_at"])
        logger.info(f"User {user.id} left learning path '{path.title}'")
        return enrollment

    @staticmethod
    @transaction.atomic
    def update_progress(
        learning_path: LearningPath,
        user: User,
        course_index: int,
        progress: int,
        minutes_spent: int = 0,
    ) -> PathEnrollment:
        """
        Sets one course's progress for the user and recomputes the enrollment.

        Validation happens before any write: NotEnrolled, then
        InvalidCourseIndex, then InvalidProgressValue.
        """
        path = LearningPathService.get_path(learning_path.pk, for_update=True)

        enrollment = PathEnrollment.objects.active().filter(learning_path=path, user=user).first()
        if enrollment is None:
            raise NotEnrolled()

        path_courses = list(path.path_courses.select_related("course").order_by("order"))
        index = CourseIndex(course_index, len(path_courses))
        value = ProgressValue(progress)
        if minutes_spent < 0:
            raise LearningPathError("Time spent cannot be negative.", "invalid_time")

        now = timezone.now()
        path_course = path_courses[index.value]

        course_progress, _ = CourseProgress.objects.get_or_create(
            enrollment=enrollment, path_course=path_course
        )
        course_progress.progress = value.value
        newly_completed = value.is_complete and not course_progress.is_completed
        if newly_completed:
            course_progress.is_completed = True
            course_progress.completed_at = now
        course_progress.save()

        by_course = {
            cp.path_course_id: cp for cp in enrollment.course_progress.all()
        }
        completed_flags = [
            pc.id in by_course and by_course[pc.id].is_completed for pc in path_courses
        ]

        enrollment.overall_progress = mean_progress(
            (cp.progress for cp in by_course.values()), len(path_courses)
        )
        enrollment.current_course = first_incomplete_index(completed_flags)
        enrollment.time_spent += minutes_spent
        if enrollment.started_at is None:
            enrollment.started_at = now

        path_completed = all(completed_flags) and enrollment.completed_at is None
        if path_completed:
            enrollment.completed_at = now
        enrollment.save()

        if newly_completed:
            logger.info(
                f"User {user.id} completed course '{path_course.course.title}' "
                f"in path '{path.title}'"
            )
            course = path_course.course
            transaction.on_commit(
                lambda: course_completed.send(
                    sender=LearningPathService, user=user, learning_path=path, course=course
                )
            )

        if path_completed:
            LearningPathService._refresh_completion_rate(path)
            logger.info(f"User {user.id} completed learning path '{path.title}'")
            transaction.on_commit(
                lambda: learning_path_completed.send(
                    sender=LearningPathService, user=user, learning_path=path
                )
            )

        return enrollment

    @staticmethod
    def _refresh_completion_rate(path: LearningPath) -> None:
        enrollments = PathEnrollment.objects.filter(learning_path=path)
        total = enrollments.count()
        completed = enrollments.filter(completed_at__isnull=False).count()
        path.completion_rate = round(completed / total * 100, 2) if total else 0
        path.save(update_fields=["completion_rate", "updated_at"])

    @staticmethod
    def compute_user_progress(learning_path: LearningPath, user: User) -> int:
        """Rounded mean course progress of the user; 0 if not enrolled or no courses."""
        enrollment = PathEnrollment.objects.active().filter(learning_path=learning_path, user=user).first()
        if enrollment is None:
            return 0
        course_count = learning_path.path_courses.count()
        values = enrollment.course_progress.values_list("progress", flat=True)
        return mean_progress(values, course_count)

    @staticmethod
    def user_enrollments(user: User, status: str = EnrollmentStatusFilter.ALL) -> QuerySet:
        """Active enrollments on active paths, most recent enrollment first."""
        if status not in EnrollmentStatusFilter.choices:
            raise LearningPathError(
                f"Unknown status '{status}'. Expected one of {', '.join(EnrollmentStatusFilter.choices)}.",
                "invalid_status",
            )

        queryset = PathEnrollment.objects.filter(
            user=user, is_active=True, learning_path__is_active=True
        )
        if status == EnrollmentStatusFilter.ACTIVE:
            queryset = queryset.filter(completed_at__isnull=True)
        elif status == EnrollmentStatusFilter.COMPLETED:
            queryset = queryset.filter(completed_at__isnull=False)

        return queryset.select_related("learning_path", "learning_path__created_by").order_by("-enrolled_at")

    @staticmethod
    def list_user_paths(user: User, status: str = EnrollmentStatusFilter.ALL) -> list[LearningPath]:
        return [e.learning_path for e in LearningPathService.user_enrollments(user, status)]

    @staticmethod
    def list_popular_paths(limit: int = 10) -> QuerySet:
        return (
            LearningPath.objects.active()
            .filter(is_published=True)
            .select_related("created_by")
            .order_by("-total_enrollments", "-average_rating")[:limit]
        )

    @staticmethod
    @transaction.atomic
    def add_course(learning_path: LearningPath, course: Course, order: Optional[int] = None) -> LearningPathCourse:
        """Appends a course to the path, or inserts it at `order` shifting later ones."""
        path = LearningPathService.get_path(learning_path.pk, for_update=True)
        last_order = path.path_courses.aggregate(Max("order"))["order__max"]
        next_order = 0 if last_order is None else last_order + 1

        if order is None or order >= next_order:
            order = next_order
        else:
            # Shift from the end so the (path, order) pairs stay unique
            for entry in path.path_courses.filter(order__gte=order).order_by("-order"):
                entry.order += 1
                entry.save(update_fields=["order", "updated_at"])

        entry = LearningPathCourse.objects.create(learning_path=path, course=course, order=order)
        logger.info(f"Added course '{course.title}' to path '{path.title}' at position {order}")
        return entry

    @staticmethod
    @transaction.atomic
    def remove_course(learning_path: LearningPath, path_course: LearningPathCourse) -> None:
        path = LearningPathService.get_path(learning_path.pk, for_update=True)
        removed_order = path_course.order
        path_course.delete()
        for entry in path.path_courses.filter(order__gt=removed_order).order_by("order"):
            entry.order -= 1
            entry.save(update_fields=["order", "updated_at"])
        logger.info(f"Removed course at position {removed_order} from path '{path.title}'")

    @staticmethod
    @transaction.atomic
    def reorder_courses(learning_path: LearningPath, path_course_ids: list) -> list[LearningPathCourse]:
        path = LearningPathService.get_path(learning_path.pk, for_update=True)
        entries = {entry.id: entry for entry in path.path_courses.all()}
        if set(path_course_ids) != set(entries) or len(path_course_ids) != len(entries):
            raise LearningPathError(
                "Reorder must list every course of the path exactly once.", "invalid_order"
            )

        # Move out of the way first to avoid (path, order) collisions
        offset = len(entries)
        for entry in entries.values():
            entry.order += offset
            entry.save(update_fields=["order", "updated_at"])
        for position, entry_id in enumerate(path_course_ids):
            entry = entries[entry_id]
            entry.order = position
            entry.save(update_fields=["order", "updated_at"])
        return [entries[entry_id] for entry_id in path_course_ids]

    @staticmethod
    @transaction.atomic
    def deactivate(learning_path: LearningPath) -> LearningPath:
        """Soft delete: paths are never removed from storage."""
        learning_path.is_active = False
        learning_path.save(update_fields=["is_active", "updated_at"])
        logger.info(f"Deactivated learning path '{learning_path.title}'")
        return learning_path
