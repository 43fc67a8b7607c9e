"""
Progress arithmetic and derived counts for learning paths.

Everything here is pure over already-loaded state; the service layer does
the validation, locking and persistence.
"""

from typing import Iterable

from apps.common.utils import round_half_up

MIN_PROGRESS = 0
MAX_PROGRESS = 100


def stored_progress(raw) -> int:
    """
    Integer percentage kept for a validated progress value. Values below
    100 never round up to 100, so a stored 100 always means complete.
    """
    value = round_half_up(raw)
    if raw < MAX_PROGRESS:
        return min(value, MAX_PROGRESS - 1)
    return value


def mean_progress(values: Iterable[int], course_count: int) -> int:
    """
    Rounded (half up) mean of per-course progress over `course_count`
    courses. Courses without a value count as 0; no courses means 0.
    """
    if course_count <= 0:
        return 0
    return round_half_up(sum(values) / course_count)


def first_incomplete_index(completed_flags: list[bool]) -> int:
    for index, completed in enumerate(completed_flags):
        if not completed:
            return index
    return max(len(completed_flags) - 1, 0)


def total_courses(learning_path) -> int:
    return learning_path.path_courses.count()


def completed_courses(enrollment) -> int:
    return enrollment.course_progress.filter(is_completed=True).count()


def active_enrollment_count(learning_path) -> int:
    return learning_path.enrollments.filter(is_active=True).count()
