"""
Experience, counter and achievement awards driven by learning path events.

The learning path signals are sent after commit, so a failing award is
logged and never rolls back the learner's progress.
"""
import logging

from django.dispatch import receiver

from apps.learning_paths.signals import course_completed, learning_path_completed, path_enrolled

from .models import Achievement
from .services import AchievementService, AnalyticsService

logger = logging.getLogger(__name__)


@receiver(course_completed)
def award_course_completion(sender, user, **kwargs):
    try:
        AnalyticsService.record_course_completion(user)
    except Exception as e:
        logger.error(f"Failed to record course completion for user {user.id}: {e}", exc_info=True)


@receiver(learning_path_completed)
def award_path_completion(sender, user, **kwargs):
    try:
        AnalyticsService.record_path_completion(user)
    except Exception as e:
        logger.error(f"Failed to record path completion for user {user.id}: {e}", exc_info=True)


@receiver(path_enrolled)
def count_path_enrollment(sender, user, **kwargs):
    try:
        AnalyticsService.record_path_enrollment(user)
    except Exception as e:
        logger.error(f"Failed to record path enrollment for user {user.id}: {e}", exc_info=True)


@receiver(course_completed)
def advance_course_achievements(sender, user, **kwargs):
    try:
        AchievementService.increment_progress(user, Achievement.CriteriaType.COURSES_COMPLETED)
    except Exception as e:
        logger.error(f"Failed to advance course achievements for user {user.id}: {e}", exc_info=True)


@receiver(learning_path_completed)
def advance_path_achievements(sender, user, **kwargs):
    try:
        AchievementService.increment_progress(user, Achievement.CriteriaType.PATHS_COMPLETED)
    except Exception as e:
        logger.error(f"Failed to advance path achievements for user {user.id}: {e}", exc_info=True)
