from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import (
    AchievementViewSet,
    DailyActivityView,
    ExperienceAwardView,
    InsightsView,
    LearningGoalViewSet,
    MonthlySummaryView,
    MyAnalyticsView,
    StudentAnalyticsView,
    WeeklySummaryView,
)

app_name = "analytics"

router = SimpleRouter()
router.register(r"goals", LearningGoalViewSet, basename="goal")
router.register(r"achievements", AchievementViewSet, basename="achievement")

urlpatterns = [
    path("me/", MyAnalyticsView.as_view(), name="my-analytics"),
    path("me/activity/", DailyActivityView.as_view(), name="daily-activity"),
    path("me/weekly-summary/", WeeklySummaryView.as_view(), name="weekly-summary"),
    path("me/monthly-summary/", MonthlySummaryView.as_view(), name="monthly-summary"),
    path("me/insights/", InsightsView.as_view(), name="insights"),
    path("users/<uuid:user_id>/", StudentAnalyticsView.as_view(), name="student-analytics"),
    path("users/<uuid:user_id>/experience/", ExperienceAwardView.as_view(), name="experience-award"),
    path("", include(router.urls)),
]
