from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .viewsets import CourseViewSet

app_name = "courses"

router = SimpleRouter()
router.register(r"", CourseViewSet, basename="course")

urlpatterns = [
    path("", include(router.urls)),
]
