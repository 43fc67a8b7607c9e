"""Tests for Learning Paths viewsets."""

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.courses.models import Course
from apps.learning_paths.models import LearningPath, LearningPathCourse, PathEnrollment
from apps.users.models import User


class LearningPathAPITestCase(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="testpass123",
            first_name="Ada",
            last_name="Min",
            role=User.Role.ADMIN,
        )
        self.instructor = User.objects.create_user(
            email="instructor@example.com",
            password="testpass123",
            first_name="Ina",
            last_name="Structor",
            role=User.Role.INSTRUCTOR,
        )
        self.other_instructor = User.objects.create_user(
            email="other.instructor@example.com",
            password="testpass123",
            first_name="Oli",
            last_name="Ver",
            role=User.Role.INSTRUCTOR,
        )
        self.learner = User.objects.create_user(
            email="learner@example.com",
            password="testpass123",
            first_name="Lea",
            last_name="Rner",
        )
        self.courses = [
            Course.objects.create(
                title=f"JavaScript {n}", instructor=self.instructor, status=Course.Status.PUBLISHED
            )
            for n in range(1, 3)
        ]
        self.learning_path = LearningPath.objects.create(
            title="Web Development Fundamentals",
            description="HTML, CSS, JavaScript and React.",
            created_by=self.instructor,
            is_published=True,
        )
        for order, course in enumerate(self.courses):
            LearningPathCourse.objects.create(learning_path=self.learning_path, course=course, order=order)
        self.draft = LearningPath.objects.create(
            title="Unfinished Path",
            description="Still being put together.",
            created_by=self.instructor,
        )

    def detail_url(self, name, learning_path=None):
        learning_path = learning_path or self.learning_path
        return reverse(f"learning_paths:learningpath-{name}", kwargs={"slug": learning_path.slug})


class LearningPathViewSetTests(LearningPathAPITestCase):
    def test_requires_authentication(self):
        response = self.client.get(reverse("learning_paths:learningpath-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_learner_sees_only_published_paths(self):
        self.client.force_authenticate(user=self.learner)
        response = self.client.get(reverse("learning_paths:learningpath-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        slugs = [item["slug"] for item in response.data["results"]]
        self.assertEqual(slugs, [self.learning_path.slug])

    def test_owner_sees_own_draft(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.get(self.detail_url("detail", self.draft))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_retrieve_includes_ordered_courses(self):
        self.client.force_authenticate(user=self.learner)
        response = self.client.get(self.detail_url("detail"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_courses"], 2)
        self.assertEqual(
            [entry["course"]["title"] for entry in response.data["courses"]],
            ["JavaScript 1", "JavaScript 2"],
        )
        self.assertFalse(response.data["is_enrolled"])

    def test_instructor_can_create(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post(
            reverse("learning_paths:learningpath-list"),
            {
                "title": "React in Depth",
                "description": "Components, hooks and state management.",
                "category": "programming",
                "difficulty": "advanced",
                "tags": ["react", " "],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["slug"], "react-in-depth")
        self.assertEqual(response.data["tags"], ["react"])
        self.assertEqual(response.data["created_by"]["email"], self.instructor.email)

    def test_learner_cannot_create(self):
        self.client.force_authenticate(user=self.learner)
        response = self.client.post(
            reverse("learning_paths:learningpath-list"),
            {"title": "My Path", "description": "A path of my very own."},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_other_instructor_cannot_update(self):
        self.client.force_authenticate(user=self.other_instructor)
        response = self.client.patch(self.detail_url("detail"), {"title": "Hijacked"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_deactivates(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.delete(self.detail_url("detail"))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.learning_path.refresh_from_db()
        self.assertFalse(self.learning_path.is_active)

        response = self.client.get(self.detail_url("detail"))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_can_delete_any_path(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(self.detail_url("detail"))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class EnrollmentAPITests(LearningPathAPITestCase):
    def setUp(self):
        super().setUp()
        self.client.force_authenticate(user=self.learner)

    def test_enroll_then_enroll_again(self):
        response = self.client.post(self.detail_url("enroll"))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["overall_progress"], 0)

        response = self.client.post(self.detail_url("enroll"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(PathEnrollment.objects.filter(user=self.learner).count(), 1)

    def test_progress_update(self):
        self.client.post(self.detail_url("enroll"))
        response = self.client.post(
            self.detail_url("progress"),
            {"course_index": 0, "progress": 100, "minutes_spent": 30},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["overall_progress"], 50)
        self.assertEqual(response.data["current_course"], 1)
        self.assertEqual(response.data["time_spent"], 30)
        self.assertEqual(response.data["completed_courses"], 1)

        response = self.client.get(self.detail_url("progress"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["course_progress"][0]["progress"], 100)

    def test_progress_errors(self):
        response = self.client.post(
            self.detail_url("progress"), {"course_index": 0, "progress": 50}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "not_enrolled")

        self.client.post(self.detail_url("enroll"))
        response = self.client.post(
            self.detail_url("progress"), {"course_index": 5, "progress": 50}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_index")

        response = self.client.post(
            self.detail_url("progress"), {"course_index": 0, "progress": 150}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_range")

    def test_progress_get_when_not_enrolled(self):
        response = self.client.get(self.detail_url("progress"))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unenroll(self):
        self.client.post(self.detail_url("enroll"))
        response = self.client.post(self.detail_url("unenroll"))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        response = self.client.post(self.detail_url("unenroll"))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_enroll_in_hidden_draft(self):
        response = self.client.post(self.detail_url("enroll", self.draft))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mine_with_status_filter(self):
        self.client.post(self.detail_url("enroll"))
        url = reverse("learning_paths:learningpath-mine")

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["learning_path"]["slug"], self.learning_path.slug)

        response = self.client.get(url, {"status": "completed"})
        self.assertEqual(response.data, [])

        response = self.client.get(url, {"status": "bogus"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_popular(self):
        LearningPath.objects.create(
            title="Crowd Favourite",
            description="Everyone is taking this one.",
            created_by=self.instructor,
            is_published=True,
            total_enrollments=10,
        )
        response = self.client.get(reverse("learning_paths:learningpath-popular"), {"limit": 1})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["title"] for item in response.data], ["Crowd Favourite"])


class LearningPathCourseAPITests(LearningPathAPITestCase):
    def courses_url(self, name="list", **kwargs):
        return reverse(
            f"learning_paths:learningpath-course-{name}",
            kwargs={"learning_path_slug": self.learning_path.slug, **kwargs},
        )

    def test_list_courses(self):
        self.client.force_authenticate(user=self.learner)
        response = self.client.get(self.courses_url())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry["order"] for entry in response.data], [0, 1])

    def test_owner_adds_course(self):
        extra = Course.objects.create(title="TypeScript", instructor=self.instructor)
        self.client.force_authenticate(user=self.instructor)

        response = self.client.post(self.courses_url(), {"course": extra.slug, "order": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["order"], 0)
        titles = list(
            self.learning_path.path_courses.order_by("order").values_list("course__title", flat=True)
        )
        self.assertEqual(titles, ["TypeScript", "JavaScript 1", "JavaScript 2"])

    def test_duplicate_course_rejected(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post(self.courses_url(), {"course": self.courses[0].slug}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_instructor_cannot_change_courses(self):
        self.client.force_authenticate(user=self.other_instructor)
        extra = Course.objects.create(title="TypeScript", instructor=self.other_instructor)
        response = self.client.post(self.courses_url(), {"course": extra.slug}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_remove_and_reorder(self):
        self.client.force_authenticate(user=self.instructor)
        first, second = self.learning_path.path_courses.order_by("order")

        response = self.client.post(
            self.courses_url("reorder"), {"path_course_ids": [str(second.id), str(first.id)]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry["course"]["title"] for entry in response.data], ["JavaScript 2", "JavaScript 1"])

        response = self.client.delete(self.courses_url("detail", pk=second.id))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        remaining = self.learning_path.path_courses.get()
        self.assertEqual(remaining.order, 0)
        self.assertEqual(remaining.course, self.courses[0])
