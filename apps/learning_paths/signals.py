"""
Signals sent by LearningPathService after the enclosing transaction commits.

Receivers get keyword arguments ``user`` and ``learning_path``;
``course_completed`` also passes ``course``.
"""

from django.dispatch import Signal

path_enrolled = Signal()
course_completed = Signal()
learning_path_completed = Signal()
