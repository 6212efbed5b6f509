"""Attempt state machine and submission grading.

An attempt is created by :func:`start_attempt` (``not submitted``) and moves
exactly once to ``submitted`` through :func:`submit_attempt`.  Both pipelines
run inside a transaction with a row lock so that concurrent requests for the
same quiz or attempt are serialized.
"""
from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Optional

from django.db import transaction
from django.db.models import Avg, Count
from django.utils import timezone

from apps.quizzes.models import Quiz, QuizAttempt
from apps.scoring.exceptions import (
    AlreadySubmitted,
    AttemptLimitExceeded,
    AttemptNotFound,
    NoLongerAvailable,
    NotAvailableYet,
    QuizNotPublished,
)

from .grading import grade_answer
from .quizzes import get_quiz

logger = logging.getLogger(__name__)

__all__ = [
    "list_student_attempts",
    "list_submitted_attempts",
    "recompute_quiz_aggregates",
    "start_attempt",
    "submit_attempt",
]


def _elapsed_minutes(started_at, submitted_at) -> int:
    seconds = max(0.0, (submitted_at - started_at).total_seconds())
    return int(math.floor(seconds / 60 + 0.5))


@transaction.atomic
def start_attempt(course, quiz_id, student) -> QuizAttempt:
    """Open a new attempt for ``student`` if the quiz rules allow it."""

    quiz = get_quiz(course, quiz_id, for_update=True)

    if quiz.status != Quiz.Status.PUBLISHED:
        raise QuizNotPublished()

    now = timezone.now()
    if now < quiz.available_from:
        raise NotAvailableYet()
    if now > quiz.available_until:
        raise NoLongerAvailable()

    previous = QuizAttempt.objects.filter(quiz=quiz, student=student).count()
    if previous + 1 > quiz.max_attempts:
        raise AttemptLimitExceeded()

    attempt = QuizAttempt.objects.create(
        quiz=quiz,
        course=course,
        student=student,
        attempt_number=previous + 1,
        started_at=now,
        answers={},
        score=0,
        max_score=quiz.total_points,
        percentage=0.0,
        is_submitted=False,
    )
    logger.info(
        "Quiz attempt started",
        extra={
            "quiz_id": quiz.pk,
            "attempt_id": attempt.pk,
            "student_id": student.pk,
            "attempt_number": attempt.attempt_number,
        },
    )
    return attempt


@transaction.atomic
def submit_attempt(
    course,
    quiz_id,
    attempt_id,
    answers: Optional[Mapping[str, Any]],
    *,
    student=None,
) -> QuizAttempt:
    """Grade and submit an attempt.

    Every current question of the quiz is graded, including questions missing
    from ``answers`` which are graded as unanswered and therefore incorrect.
    Each stored entry carries a snapshot of the question it was graded against.
    """

    queryset = QuizAttempt.objects.select_for_update().filter(
        course=course, quiz_id=quiz_id
    )
    if student is not None:
        queryset = queryset.filter(student=student)
    try:
        attempt = queryset.get(pk=attempt_id)
    except (QuizAttempt.DoesNotExist, ValueError, TypeError) as exc:
        raise AttemptNotFound() from exc

    if attempt.is_submitted:
        raise AlreadySubmitted()

    quiz = attempt.quiz
    answers = answers or {}

    graded: dict = {}
    score = 0
    for question in quiz.questions.order_by("order"):
        key = str(question.uid)
        submitted = answers.get(key)
        result = grade_answer(question, submitted)
        score += result.points_earned
        graded[key] = {
            "question_id": key,
            "question_type": question.kind,
            "student_answer": submitted,
            "is_correct": result.is_correct,
            "points_earned": result.points_earned,
            "max_points": result.max_points,
            "question": question.snapshot(),
        }

    max_score = quiz.total_points
    percentage = score * 100 / max_score if max_score > 0 else 0.0
    now = timezone.now()

    attempt.answers = graded
    attempt.score = score
    attempt.max_score = max_score
    attempt.percentage = percentage
    attempt.passed = (
        percentage >= quiz.passing_score if quiz.passing_score is not None else None
    )
    attempt.is_submitted = True
    attempt.auto_graded = True
    attempt.submitted_at = now
    attempt.time_taken_minutes = _elapsed_minutes(attempt.started_at, now)
    attempt.save()

    recompute_quiz_aggregates(quiz)

    logger.info(
        "Quiz attempt submitted",
        extra={
            "quiz_id": quiz.pk,
            "attempt_id": attempt.pk,
            "student_id": attempt.student_id,
            "score": score,
            "max_score": max_score,
        },
    )
    return attempt


def recompute_quiz_aggregates(quiz: Quiz) -> Quiz:
    """Refresh ``total_attempts`` and ``average_score`` from submitted attempts.

    The quiz is left untouched when it has no submitted attempts.
    """

    with transaction.atomic():
        locked = Quiz.objects.select_for_update().get(pk=quiz.pk)
        stats = QuizAttempt.objects.filter(quiz=locked, is_submitted=True).aggregate(
            total=Count("id"), average=Avg("score")
        )
        if not stats["total"]:
            return quiz

        locked.total_attempts = stats["total"]
        locked.average_score = float(stats["average"])
        locked.save(update_fields=["total_attempts", "average_score", "updated_at"])

    quiz.total_attempts = locked.total_attempts
    quiz.average_score = locked.average_score
    logger.debug(
        "Quiz aggregates recomputed",
        extra={
            "quiz_id": quiz.pk,
            "total_attempts": quiz.total_attempts,
            "average_score": quiz.average_score,
        },
    )
    return quiz


def list_student_attempts(course, quiz_id, student) -> List[QuizAttempt]:
    quiz = get_quiz(course, quiz_id)
    return list(
        QuizAttempt.objects.filter(quiz=quiz, student=student).order_by("-attempt_number")
    )


def list_submitted_attempts(course, quiz_id) -> List[QuizAttempt]:
    quiz = get_quiz(course, quiz_id)
    return list(
        QuizAttempt.objects.filter(quiz=quiz, is_submitted=True)
        .select_related("student")
        .order_by("-submitted_at", "-id")
    )
