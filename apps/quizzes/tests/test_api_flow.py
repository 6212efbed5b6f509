from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from apps.quizzes.models import Quiz

from . import factories


class QuizApiFlowTests(TestCase):
    def setUp(self):
        self.instructor = factories.create_user("instructor")
        self.course = factories.create_course(instructor=self.instructor)
        self.student = factories.enroll(self.course, factories.create_user("student"))
        self.outsider = factories.create_user("outsider")

    def _create_payload(self, **overrides):
        now = timezone.now()
        payload = {
            "course_id": self.course.pk,
            "title": "Capitals",
            "max_attempts": 2,
            "passing_score": 50,
            "show_correct_answers": False,
            "available_from": (now - timedelta(hours=1)).isoformat(),
            "available_until": (now + timedelta(hours=1)).isoformat(),
            "questions": [
                {
                    "type": "multiple_choice",
                    "question_text": "Capital of Italy?",
                    "points": 2,
                    "options": ["Rome", "Milan"],
                    "correct_option_index": 0,
                },
                {
                    "type": "true_false",
                    "question_text": "Berlin is in Germany",
                    "points": 1,
                    "correct_answer": True,
                },
                {
                    "type": "short_answer",
                    "question_text": "Capital of France?",
                    "points": 2,
                    "correct_answers": ["Paris"],
                },
            ],
        }
        payload.update(overrides)
        return payload

    def test_full_quiz_flow(self):
        self.client.force_login(self.instructor)
        create_resp = self.client.post(
            "/api/quizzes/", self._create_payload(), content_type="application/json"
        )
        self.assertEqual(create_resp.status_code, 201)
        quiz_payload = create_resp.json()
        self.assertEqual(quiz_payload["status"], "draft")
        self.assertEqual(quiz_payload["total_points"], 5)
        quiz_id = quiz_payload["id"]
        base = f"/api/quizzes/{self.course.pk}/{quiz_id}/"

        publish_resp = self.client.post(f"{base}publish/")
        self.assertEqual(publish_resp.json()["status"], "published")

        self.client.force_login(self.student)
        detail = self.client.get(base).json()
        self.assertNotIn("correct_option_index", detail["questions"][0])
        self.assertNotIn("correct_answers", detail["questions"][2])
        question_ids = [question["id"] for question in detail["questions"]]

        start_resp = self.client.post(f"{base}start/")
        self.assertEqual(start_resp.status_code, 201)
        attempt_id = start_resp.json()["id"]

        submit_resp = self.client.post(
            f"{base}attempts/{attempt_id}/submit/",
            {"answers": {question_ids[0]: 0, question_ids[1]: False, question_ids[2]: "paris"}},
            content_type="application/json",
        )
        self.assertEqual(submit_resp.status_code, 200)
        attempt = submit_resp.json()
        self.assertEqual(attempt["score"], 4)
        self.assertEqual(attempt["max_score"], 5)
        self.assertAlmostEqual(attempt["percentage"], 80.0)
        self.assertTrue(attempt["passed"])
        self.assertNotIn("correct_option_index", attempt["answers"][question_ids[0]]["question"])

        again = self.client.post(
            f"{base}attempts/{attempt_id}/submit/",
            {"answers": {}},
            content_type="application/json",
        )
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["detail"], "Quiz already submitted")

        mine = self.client.get(f"{base}my-attempts/").json()
        self.assertEqual([a["attempt_number"] for a in mine], [1])

        self.client.force_login(self.instructor)
        stats = self.client.get(f"{base}statistics/").json()
        self.assertEqual(stats["unique_students"], 1)
        self.assertEqual(stats["average_score"], 4)

        attempts = self.client.get(f"{base}attempts/").json()
        self.assertEqual(len(attempts), 1)

    def test_statistics_without_submissions(self):
        quiz = factories.create_quiz(course=self.course)
        self.client.force_login(self.instructor)

        resp = self.client.get(f"/api/quizzes/{self.course.pk}/{quiz.pk}/statistics/")

        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "No statistics available yet")

    def test_students_cannot_author_quizzes(self):
        self.client.force_login(self.student)
        resp = self.client.post(
            "/api/quizzes/", self._create_payload(), content_type="application/json"
        )
        self.assertEqual(resp.status_code, 403)

    def test_outsider_cannot_list_or_start(self):
        quiz = factories.create_quiz(course=self.course)
        self.client.force_login(self.outsider)

        self.assertEqual(
            self.client.get(f"/api/quizzes/course/{self.course.pk}/").status_code, 403
        )
        self.assertEqual(
            self.client.post(f"/api/quizzes/{self.course.pk}/{quiz.pk}/start/").status_code,
            403,
        )

    def test_students_only_see_published_quizzes(self):
        published = factories.create_quiz(course=self.course)
        draft = factories.create_quiz(course=self.course, status=Quiz.Status.DRAFT)
        self.client.force_login(self.student)

        listing = self.client.get(f"/api/quizzes/course/{self.course.pk}/").json()

        self.assertEqual([item["id"] for item in listing], [published.pk])
        self.assertEqual(
            self.client.get(f"/api/quizzes/{self.course.pk}/{draft.pk}/").status_code, 404
        )

    def test_start_errors_map_to_bad_request(self):
        quiz = factories.create_quiz(course=self.course, status=Quiz.Status.DRAFT)
        self.client.force_login(self.student)

        resp = self.client.post(f"/api/quizzes/{self.course.pk}/{quiz.pk}/start/")

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Quiz is not open for attempts")

    def test_update_replaces_questions(self):
        quiz = factories.create_quiz(course=self.course, status=Quiz.Status.DRAFT)
        self.client.force_login(self.instructor)

        resp = self.client.patch(
            f"/api/quizzes/{self.course.pk}/{quiz.pk}/",
            {
                "questions": [
                    {
                        "type": "true_false",
                        "question_text": "Sky is blue",
                        "points": 4,
                        "correct_answer": True,
                    }
                ]
            },
            content_type="application/json",
        )

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_points"], 4)
        self.assertEqual(len(resp.json()["questions"]), 1)

    def test_delete_quiz(self):
        quiz = factories.create_quiz(course=self.course)
        self.client.force_login(self.instructor)

        resp = self.client.delete(f"/api/quizzes/{self.course.pk}/{quiz.pk}/")

        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Quiz.objects.filter(pk=quiz.pk).exists())
