"""Tests for analytics API views."""

from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.analytics.models import DailyActivity, LearningGoal
from apps.analytics.services import AnalyticsService
from apps.users.models import User


class AnalyticsAPITestCase(APITestCase):
    def setUp(self):
        self.learner = User.objects.create_user(
            email="learner@example.com", password="testpass123", first_name="Lea", last_name="Rner"
        )
        self.other_learner = User.objects.create_user(
            email="other@example.com", password="testpass123", first_name="Otto", last_name="Ther"
        )
        self.instructor = User.objects.create_user(
            email="instructor@example.com",
            password="testpass123",
            first_name="Ina",
            last_name="Structor",
            role=User.Role.INSTRUCTOR,
        )
        self.client.force_authenticate(user=self.learner)


class MyAnalyticsTests(AnalyticsAPITestCase):
    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse("analytics:my-analytics"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_created_on_first_access(self):
        response = self.client.get(reverse("analytics:my-analytics"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["overall_stats"]["level"], 1)
        self.assertEqual(response.data["daily_activity"], [])
        self.assertEqual(response.data["goals"], [])

    def test_invalid_timeframe(self):
        response = self.client.get(reverse("analytics:my-analytics"), {"timeframe": "forever"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_timeframe")


class DailyActivityViewTests(AnalyticsAPITestCase):
    def test_report_activity(self):
        response = self.client.post(
            reverse("analytics:daily-activity"),
            {
                "study_time": 45,
                "courses_accessed": [
                    {"course_id": "0f8fad5b-d9cb-469f-a165-70867728950e", "time_spent": 30}
                ],
                "resources_viewed": {"pdfs": 2},
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["study_time"], 45)
        self.assertEqual(response.data["resources_viewed"], {"pdfs": 2, "videos": 0, "links": 0, "notes": 0})
        self.assertEqual(len(response.data["courses_accessed"]), 1)

        overview = self.client.get(reverse("analytics:my-analytics"))
        self.assertEqual(overview.data["overall_stats"]["total_study_time"], 45)
        self.assertEqual(overview.data["overall_stats"]["current_streak"], 1)

    def test_backdated_report(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        response = self.client.post(
            reverse("analytics:daily-activity"),
            {"date": yesterday.isoformat(), "study_time": 20},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(DailyActivity.objects.filter(date=yesterday, analytics__user=self.learner).exists())

    def test_future_date_rejected(self):
        tomorrow = timezone.localdate() + timedelta(days=1)
        response = self.client.post(
            reverse("analytics:daily-activity"),
            {"date": tomorrow.isoformat(), "study_time": 20},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_validation(self):
        now = timezone.now()
        response = self.client.post(
            reverse("analytics:daily-activity"),
            {
                "study_time": -5,
                "login_time": now.isoformat(),
                "logout_time": (now - timedelta(hours=1)).isoformat(),
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("study_time", response.data)


class SummaryViewTests(AnalyticsAPITestCase):
    def test_weekly_summary(self):
        today = timezone.localdate()
        week_start = today - timedelta(days=today.weekday())
        AnalyticsService.record_daily_activity(self.learner, {"study_time": 90}, activity_date=week_start)

        response = self.client.get(reverse("analytics:weekly-summary"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["week_start"], week_start.isoformat())
        self.assertEqual(response.data["total_study_time"], 90)
        self.assertEqual(response.data["most_active_day"], "Monday")

    def test_weekly_summary_bad_date(self):
        response = self.client.get(reverse("analytics:weekly-summary"), {"week_start": "13/05/2024"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_monthly_summary(self):
        response = self.client.get(reverse("analytics:monthly-summary"), {"year": 2024, "month": 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["productivity_score"], 0)
        self.assertEqual(response.data["resources_viewed"], {"pdfs": 0, "videos": 0, "links": 0, "notes": 0})

        response = self.client.get(reverse("analytics:monthly-summary"), {"year": 2024, "month": 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_insights(self):
        response = self.client.get(reverse("analytics:insights"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

        AnalyticsService.record_daily_activity(self.learner, {"study_time": 10})
        response = self.client.get(reverse("analytics:insights"))
        self.assertEqual([item["type"] for item in response.data], ["consistency", "productivity"])


class StaffAnalyticsTests(AnalyticsAPITestCase):
    def test_instructor_reads_student_analytics(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.get(reverse("analytics:student-analytics", kwargs={"user_id": self.learner.id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_student_cannot_read_other_student(self):
        response = self.client.get(
            reverse("analytics:student-analytics", kwargs={"user_id": self.other_learner.id})
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_instructor_awards_experience(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post(
            reverse("analytics:experience-award", kwargs={"user_id": self.learner.id}),
            {"points": 250, "reason": "Hackathon winner"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"leveled_up": True, "level": 3, "experience_points": 250})

    def test_student_cannot_award_experience(self):
        response = self.client.post(
            reverse("analytics:experience-award", kwargs={"user_id": self.other_learner.id}),
            {"points": 1000},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class LearningGoalViewSetTests(AnalyticsAPITestCase):
    def test_goal_lifecycle(self):
        response = self.client.post(
            reverse("analytics:goal-list"),
            {"goal_type": "daily_time", "target": 30, "description": "Half an hour a day"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        goal_id = response.data["id"]

        response = self.client.post(
            reverse("analytics:goal-progress", kwargs={"pk": goal_id}), {"current": 30}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_achieved"])

        response = self.client.delete(reverse("analytics:goal-detail", kwargs={"pk": goal_id}))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(LearningGoal.objects.get(pk=goal_id).is_active)

        response = self.client.get(reverse("analytics:goal-list"))
        self.assertEqual(response.data, [])
        response = self.client.get(reverse("analytics:goal-list"), {"include_inactive": "true"})
        self.assertEqual(len(response.data), 1)

    def test_invalid_target(self):
        response = self.client.post(
            reverse("analytics:goal-list"), {"goal_type": "custom", "target": 0}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_goals_are_private(self):
        goal = AnalyticsService.create_goal(self.other_learner, "custom", 5)
        response = self.client.get(reverse("analytics:goal-detail", kwargs={"pk": goal.id}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
