"""Quiz definition and lifecycle.

Questions have no identity across edits: whenever a quiz's question list is
supplied the old questions are deleted and the new list is created with fresh
identifiers and 1-based order.  Attempts keep a snapshot of each graded
question so they stay readable after such a replacement.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from django.core.exceptions import ValidationError as ModelValidationError
from django.db import DatabaseError, transaction
from django.db.models import Sum
from rest_framework import exceptions

from apps.quizzes.models import Quiz, QuizQuestion
from apps.scoring.exceptions import DeleteFailed, InvalidTransition, QuizNotFound

logger = logging.getLogger(__name__)

__all__ = [
    "QUIZ_FIELDS",
    "close_quiz",
    "create_quiz",
    "delete_quiz",
    "get_quiz",
    "list_quizzes",
    "publish_quiz",
    "recompute_quiz_totals",
    "redact_attempt_for_student",
    "redact_for_student",
    "update_quiz",
]

# Authoring fields that may be set on create and changed on update.
QUIZ_FIELDS = (
    "title",
    "description",
    "instructions",
    "time_limit_minutes",
    "max_attempts",
    "shuffle_questions",
    "shuffle_options",
    "show_correct_answers",
    "show_score_immediately",
    "available_from",
    "available_until",
    "passing_score",
)

QUESTION_FIELDS = (
    "kind",
    "question_text",
    "points",
    "options",
    "correct_option_index",
    "correct_boolean",
    "accepted_answers",
    "case_sensitive",
    "explanation",
)


def _ensure_window(available_from, available_until) -> None:
    if available_from and available_until and available_from > available_until:
        raise exceptions.ValidationError(
            {"available_until": ["Availability window ends before it starts."]}
        )


def _build_questions(quiz: Quiz, questions: Iterable[Mapping[str, Any]]) -> List[QuizQuestion]:
    built: List[QuizQuestion] = []
    for index, payload in enumerate(questions, start=1):
        question = QuizQuestion(
            quiz=quiz,
            order=index,
            **{field: payload[field] for field in QUESTION_FIELDS if field in payload},
        )
        try:
            question.clean()
        except ModelValidationError as exc:
            raise exceptions.ValidationError(
                {"questions": {str(index): exc.message_dict}}
            ) from exc
        built.append(question)
    return built


def _replace_questions(quiz: Quiz, questions: Iterable[Mapping[str, Any]]) -> None:
    built = _build_questions(quiz, questions)
    quiz.questions.all().delete()
    QuizQuestion.objects.bulk_create(built)


def recompute_quiz_totals(quiz: Quiz) -> int:
    """Set ``total_points`` to the sum of the quiz's current question points."""

    total = quiz.questions.aggregate(total=Sum("points"))["total"] or 0
    if quiz.total_points != total:
        quiz.total_points = total
        quiz.save(update_fields=["total_points", "updated_at"])
    return total


@transaction.atomic
def create_quiz(course, data: Mapping[str, Any], *, created_by=None) -> Quiz:
    """Create a draft quiz together with its questions."""

    fields = {field: data[field] for field in QUIZ_FIELDS if field in data}
    _ensure_window(fields.get("available_from"), fields.get("available_until"))

    quiz = Quiz.objects.create(
        course=course,
        created_by=created_by,
        status=Quiz.Status.DRAFT,
        total_attempts=0,
        average_score=None,
        **fields,
    )
    _replace_questions(quiz, data.get("questions") or [])
    recompute_quiz_totals(quiz)

    logger.info(
        "Quiz created",
        extra={"quiz_id": quiz.pk, "course_id": course.pk, "questions": quiz.questions.count()},
    )
    return quiz


def get_quiz(course, quiz_id, *, for_update: bool = False) -> Quiz:
    queryset = Quiz.objects.filter(course=course)
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=quiz_id)
    except (Quiz.DoesNotExist, ValueError, TypeError) as exc:
        raise QuizNotFound() from exc


def list_quizzes(course, status: Optional[str] = None) -> List[Quiz]:
    queryset = Quiz.objects.filter(course=course)
    if status:
        queryset = queryset.filter(status=status)
    return list(queryset.prefetch_related("questions").order_by("-created_at", "-id"))


@transaction.atomic
def update_quiz(course, quiz_id, data: Mapping[str, Any]) -> Quiz:
    """Apply a partial update; a supplied ``questions`` list replaces the old one."""

    quiz = get_quiz(course, quiz_id, for_update=True)

    changed = [field for field in QUIZ_FIELDS if field in data]
    for field in changed:
        setattr(quiz, field, data[field])
    _ensure_window(quiz.available_from, quiz.available_until)
    if changed:
        quiz.save(update_fields=[*changed, "updated_at"])

    if "questions" in data:
        _replace_questions(quiz, data["questions"] or [])
        recompute_quiz_totals(quiz)

    logger.info(
        "Quiz updated",
        extra={
            "quiz_id": quiz.pk,
            "fields": changed,
            "questions_replaced": "questions" in data,
        },
    )
    return quiz


@transaction.atomic
def publish_quiz(course, quiz_id) -> Quiz:
    quiz = get_quiz(course, quiz_id, for_update=True)
    if quiz.status == Quiz.Status.PUBLISHED:
        return quiz
    if quiz.status == Quiz.Status.CLOSED:
        raise InvalidTransition("A closed quiz cannot be published")

    quiz.status = Quiz.Status.PUBLISHED
    quiz.save(update_fields=["status", "updated_at"])
    logger.info("Quiz published", extra={"quiz_id": quiz.pk})
    return quiz


@transaction.atomic
def close_quiz(course, quiz_id) -> Quiz:
    quiz = get_quiz(course, quiz_id, for_update=True)
    if quiz.status != Quiz.Status.CLOSED:
        quiz.status = Quiz.Status.CLOSED
        quiz.save(update_fields=["status", "updated_at"])
        logger.info("Quiz closed", extra={"quiz_id": quiz.pk})
    return quiz


def delete_quiz(course, quiz_id) -> None:
    """Delete a quiz; its questions and attempts go with it."""

    quiz = get_quiz(course, quiz_id)
    pk = quiz.pk
    try:
        with transaction.atomic():
            quiz.delete()
    except DatabaseError as exc:
        logger.exception("Failed to delete quiz", extra={"quiz_id": pk})
        raise DeleteFailed("Failed to delete quiz") from exc
    logger.info("Quiz deleted", extra={"quiz_id": pk, "course_id": course.pk})


def redact_for_student(quiz: Quiz, payload: dict) -> dict:
    """Strip correctness data from a serialized quiz when it must stay hidden."""

    if quiz.show_correct_answers:
        return payload
    hidden = ("correct_option_index", "correct_answer", "correct_answers")
    for question in payload.get("questions", []):
        for key in hidden:
            question.pop(key, None)
    return payload


def redact_attempt_for_student(quiz: Quiz, payload: dict) -> dict:
    """Strip correctness data from the question snapshots of a serialized attempt."""

    if quiz.show_correct_answers:
        return payload
    hidden = ("correct_option_index", "correct_boolean", "accepted_answers")
    for entry in (payload.get("answers") or {}).values():
        snapshot = entry.get("question") or {}
        for key in hidden:
            snapshot.pop(key, None)
    return payload
