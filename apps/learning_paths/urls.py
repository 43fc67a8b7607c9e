from django.urls import include, path
from rest_framework_nested import routers

from .viewsets import LearningPathCourseViewSet, LearningPathViewSet

app_name = "learning_paths"

router = routers.SimpleRouter()
router.register(r"", LearningPathViewSet, basename="learningpath")

# /<slug>/courses/ for the ordered course references of a path
courses_router = routers.NestedSimpleRouter(router, r"", lookup="learning_path")
courses_router.register(r"courses", LearningPathCourseViewSet, basename="learningpath-course")

urlpatterns = [
    path("", include(router.urls)),
    path("", include(courses_router.urls)),
]
