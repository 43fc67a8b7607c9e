from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import UserStatsView
from .viewsets import UserViewSet

app_name = "users_api"

router = DefaultRouter()
router.register(r"directory", UserViewSet, basename="user")  # /api/v1/users/directory/

urlpatterns = [
    path("stats/", UserStatsView.as_view(), name="user-stats"),
    path("", include(router.urls)),
]
