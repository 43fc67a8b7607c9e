"""URL configuration for the learning_platform project."""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

urlpatterns = [
    path("admin/", admin.site.urls),
    # API V1 URLs
    path(
        "api/v1/",
        include(
            [
                path("auth/", include("apps.users.urls")),  # register, login, refresh, logout, me
                path("users/", include("apps.users.api_urls")),  # user directory and stats
                path("courses/", include("apps.courses.urls")),
                path("learning-paths/", include("apps.learning_paths.urls")),
                path("analytics/", include("apps.analytics.urls")),
            ]
        ),
    ),
    # API Schema Documentation (Swagger/Redoc)
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/schema/swagger-ui/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path(
        "api/schema/redoc/",
        SpectacularRedocView.as_view(url_name="schema"),
        name="redoc",
    ),
]
