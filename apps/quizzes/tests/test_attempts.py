from datetime import timedelta
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from apps.quizzes.models import Quiz, QuizAttempt
from apps.quizzes.service_utils import attempts as attempt_service
from apps.quizzes.service_utils import quizzes as quiz_service
from apps.scoring.exceptions import (
    AlreadySubmitted,
    AttemptLimitExceeded,
    AttemptNotFound,
    NoLongerAvailable,
    NotAvailableYet,
    QuizNotFound,
    QuizNotPublished,
)

from . import factories


class StartAttemptTests(TestCase):
    def setUp(self):
        self.course = factories.create_course()
        self.student = factories.enroll(self.course)

    def test_first_attempt_is_numbered_one_with_quiz_total(self):
        quiz = factories.create_quiz(
            course=self.course,
            questions=[factories.multiple_choice(points=3), factories.true_false(points=2)],
        )

        attempt = attempt_service.start_attempt(self.course, quiz.pk, self.student)

        self.assertEqual(attempt.attempt_number, 1)
        self.assertEqual(attempt.max_score, 5)
        self.assertEqual(attempt.score, 0)
        self.assertEqual(attempt.answers, {})
        self.assertFalse(attempt.is_submitted)

    def test_draft_and_closed_quizzes_reject_attempts(self):
        for status in (Quiz.Status.DRAFT, Quiz.Status.CLOSED):
            quiz = factories.create_quiz(course=self.course, status=status)
            with self.assertRaises(QuizNotPublished):
                attempt_service.start_attempt(self.course, quiz.pk, self.student)

    def test_unknown_quiz(self):
        with self.assertRaises(QuizNotFound):
            attempt_service.start_attempt(self.course, 999999, self.student)

    def test_quiz_of_other_course_is_not_found(self):
        quiz = factories.create_quiz()
        with self.assertRaises(QuizNotFound):
            attempt_service.start_attempt(self.course, quiz.pk, self.student)

    def test_availability_window_is_inclusive(self):
        now = timezone.now()
        quiz = factories.create_quiz(
            course=self.course,
            max_attempts=5,
            available_from=now,
            available_until=now + timedelta(hours=1),
        )
        target = "apps.quizzes.service_utils.attempts.timezone.now"

        with mock.patch(target, return_value=now - timedelta(seconds=1)):
            with self.assertRaises(NotAvailableYet):
                attempt_service.start_attempt(self.course, quiz.pk, self.student)

        with mock.patch(target, return_value=now):
            attempt_service.start_attempt(self.course, quiz.pk, self.student)

        with mock.patch(target, return_value=now + timedelta(hours=1)):
            attempt_service.start_attempt(self.course, quiz.pk, self.student)

        with mock.patch(target, return_value=now + timedelta(hours=1, seconds=1)):
            with self.assertRaises(NoLongerAvailable):
                attempt_service.start_attempt(self.course, quiz.pk, self.student)

    def test_attempt_limit_counts_unsubmitted_attempts(self):
        quiz = factories.create_quiz(course=self.course, max_attempts=2)

        first = attempt_service.start_attempt(self.course, quiz.pk, self.student)
        second = attempt_service.start_attempt(self.course, quiz.pk, self.student)
        with self.assertRaises(AttemptLimitExceeded):
            attempt_service.start_attempt(self.course, quiz.pk, self.student)

        self.assertEqual([first.attempt_number, second.attempt_number], [1, 2])
        self.assertEqual(
            QuizAttempt.objects.filter(quiz=quiz, student=self.student).count(), 2
        )

    def test_attempt_numbers_are_per_student(self):
        quiz = factories.create_quiz(course=self.course, max_attempts=1)
        other = factories.enroll(self.course)

        attempt_service.start_attempt(self.course, quiz.pk, self.student)
        attempt = attempt_service.start_attempt(self.course, quiz.pk, other)

        self.assertEqual(attempt.attempt_number, 1)


class SubmitAttemptTests(TestCase):
    def setUp(self):
        self.course = factories.create_course()
        self.student = factories.enroll(self.course)
        self.quiz = factories.create_quiz(
            course=self.course,
            max_attempts=3,
            passing_score=60,
            questions=[
                factories.multiple_choice(points=4, correct=2),
                factories.true_false(points=3, correct=True),
                factories.short_answer(points=3, accepted=["Paris"]),
            ],
        )
        self.questions = list(self.quiz.questions.order_by("order"))

    def _answers(self, mcq=None, tf=None, short=None):
        values = (mcq, tf, short)
        return {
            str(question.uid): value
            for question, value in zip(self.questions, values)
            if value is not None
        }

    def _start(self):
        return attempt_service.start_attempt(self.course, self.quiz.pk, self.student)

    def test_all_correct(self):
        attempt = self._start()
        attempt = attempt_service.submit_attempt(
            self.course, self.quiz.pk, attempt.pk, self._answers(2, True, " paris ")
        )

        self.assertTrue(attempt.is_submitted)
        self.assertTrue(attempt.auto_graded)
        self.assertEqual(attempt.score, 10)
        self.assertEqual(attempt.max_score, 10)
        self.assertEqual(attempt.percentage, 100.0)
        self.assertTrue(attempt.passed)
        self.assertIsNotNone(attempt.submitted_at)

    def test_partial_score_and_percentage(self):
        attempt = self._start()
        attempt = attempt_service.submit_attempt(
            self.course, self.quiz.pk, attempt.pk, self._answers(2, False, "London")
        )

        self.assertEqual(attempt.score, 4)
        self.assertAlmostEqual(attempt.percentage, 40.0)
        self.assertLessEqual(attempt.score, attempt.max_score)
        self.assertFalse(attempt.passed)

    def test_unanswered_questions_are_graded_incorrect(self):
        attempt = self._start()
        attempt = attempt_service.submit_attempt(
            self.course, self.quiz.pk, attempt.pk, self._answers(mcq=2)
        )

        self.assertEqual(attempt.score, 4)
        self.assertEqual(len(attempt.answers), 3)
        missing = attempt.answers[str(self.questions[2].uid)]
        self.assertIsNone(missing["student_answer"])
        self.assertFalse(missing["is_correct"])
        self.assertEqual(missing["points_earned"], 0)
        self.assertEqual(missing["max_points"], 3)

    def test_entries_carry_a_question_snapshot(self):
        attempt = self._start()
        attempt = attempt_service.submit_attempt(
            self.course, self.quiz.pk, attempt.pk, self._answers(2, True, "Paris")
        )
        old_key = str(self.questions[0].uid)

        quiz_service.update_quiz(
            self.course, self.quiz.pk, {"questions": [factories.true_false(points=1)]}
        )
        attempt.refresh_from_db()

        entry = attempt.answers[old_key]
        self.assertEqual(entry["question_type"], "multiple_choice")
        self.assertEqual(entry["question"]["correct_option_index"], 2)
        self.assertEqual(entry["question"]["points"], 4)

    def test_passed_is_unset_without_passing_score(self):
        quiz = factories.create_quiz(course=self.course, passing_score=None)
        attempt = attempt_service.start_attempt(self.course, quiz.pk, self.student)
        attempt = attempt_service.submit_attempt(self.course, quiz.pk, attempt.pk, {})

        self.assertIsNone(attempt.passed)

    def test_zero_point_quiz_has_zero_percentage(self):
        quiz = factories.create_quiz(
            course=self.course,
            questions=[factories.true_false(points=0)],
            passing_score=50,
        )
        attempt = attempt_service.start_attempt(self.course, quiz.pk, self.student)
        attempt = attempt_service.submit_attempt(self.course, quiz.pk, attempt.pk, {})

        self.assertEqual(attempt.max_score, 0)
        self.assertEqual(attempt.percentage, 0.0)
        self.assertFalse(attempt.passed)

    def test_resubmission_is_rejected_and_keeps_score(self):
        attempt = self._start()
        attempt_service.submit_attempt(
            self.course, self.quiz.pk, attempt.pk, self._answers(2, True, "Paris")
        )

        with self.assertRaises(AlreadySubmitted):
            attempt_service.submit_attempt(self.course, self.quiz.pk, attempt.pk, {})

        attempt.refresh_from_db()
        self.assertEqual(attempt.score, 10)

    def test_unknown_attempt(self):
        with self.assertRaises(AttemptNotFound):
            attempt_service.submit_attempt(self.course, self.quiz.pk, 424242, {})

    def test_attempt_of_another_student_is_not_found(self):
        attempt = self._start()
        intruder = factories.enroll(self.course)
        with self.assertRaises(AttemptNotFound):
            attempt_service.submit_attempt(
                self.course, self.quiz.pk, attempt.pk, {}, student=intruder
            )

    def test_elapsed_minutes_are_rounded(self):
        started = timezone.now()
        with mock.patch(
            "apps.quizzes.service_utils.attempts.timezone.now", return_value=started
        ):
            attempt = self._start()
        with mock.patch(
            "apps.quizzes.service_utils.attempts.timezone.now",
            return_value=started + timedelta(minutes=12, seconds=30),
        ):
            attempt = attempt_service.submit_attempt(self.course, self.quiz.pk, attempt.pk, {})

        self.assertEqual(attempt.time_taken_minutes, 13)

    def test_quiz_aggregates_follow_submissions(self):
        first = self._start()
        attempt_service.submit_attempt(
            self.course, self.quiz.pk, first.pk, self._answers(2, True, "Paris")
        )
        second = self._start()
        attempt_service.submit_attempt(
            self.course, self.quiz.pk, second.pk, self._answers(2, False, "x")
        )
        self._start()

        self.quiz.refresh_from_db()
        self.assertEqual(self.quiz.total_attempts, 2)
        self.assertAlmostEqual(self.quiz.average_score, 7.0)

    def test_aggregates_untouched_without_submissions(self):
        self._start()
        attempt_service.recompute_quiz_aggregates(self.quiz)

        self.quiz.refresh_from_db()
        self.assertEqual(self.quiz.total_attempts, 0)
        self.assertIsNone(self.quiz.average_score)


class AttemptListingTests(TestCase):
    def test_student_attempts_newest_first(self):
        course = factories.create_course()
        student = factories.enroll(course)
        quiz = factories.create_quiz(course=course, max_attempts=3)
        for _ in range(3):
            attempt_service.start_attempt(course, quiz.pk, student)

        attempts = attempt_service.list_student_attempts(course, quiz.pk, student)

        self.assertEqual([a.attempt_number for a in attempts], [3, 2, 1])

    def test_submitted_attempts_most_recent_first(self):
        course = factories.create_course()
        quiz = factories.create_quiz(course=course)
        first_student = factories.enroll(course)
        second_student = factories.enroll(course)
        now = timezone.now()
        target = "apps.quizzes.service_utils.attempts.timezone.now"

        with mock.patch(target, return_value=now):
            first = attempt_service.start_attempt(course, quiz.pk, first_student)
            second = attempt_service.start_attempt(course, quiz.pk, second_student)
            attempt_service.submit_attempt(course, quiz.pk, first.pk, {})
        with mock.patch(target, return_value=now + timedelta(minutes=5)):
            attempt_service.submit_attempt(course, quiz.pk, second.pk, {})

        attempts = attempt_service.list_submitted_attempts(course, quiz.pk)

        self.assertEqual([a.pk for a in attempts], [second.pk, first.pk])
