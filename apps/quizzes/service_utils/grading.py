"""Deterministic auto-grading of a single answer.

Grading never raises: an answer of the wrong shape (for example a string for
a multiple choice question, or ``None`` for an unanswered question) is simply
incorrect.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from apps.quizzes.models import QuizQuestion

__all__ = ["GradedAnswer", "grade_answer", "normalize_short_answer"]


@dataclass(frozen=True)
class GradedAnswer:
    is_correct: bool
    points_earned: int
    max_points: int


def normalize_short_answer(value: str, case_sensitive: bool) -> str:
    value = value.strip()
    return value if case_sensitive else value.lower()


def _is_correct(question: QuizQuestion, answer: Any) -> bool:
    kind = question.kind

    if kind == QuizQuestion.Kind.MULTIPLE_CHOICE:
        # ``True == 1`` in Python, booleans are not option indexes.
        if isinstance(answer, bool) or not isinstance(answer, int):
            return False
        return answer == question.correct_option_index

    if kind == QuizQuestion.Kind.TRUE_FALSE:
        if not isinstance(answer, bool):
            return False
        return answer == question.correct_boolean

    if kind == QuizQuestion.Kind.SHORT_ANSWER:
        if not isinstance(answer, str):
            return False
        submitted = normalize_short_answer(answer, question.case_sensitive)
        return any(
            submitted == normalize_short_answer(accepted, question.case_sensitive)
            for accepted in question.accepted_answers or []
            if isinstance(accepted, str)
        )

    return False


def grade_answer(question: QuizQuestion, answer: Any) -> GradedAnswer:
    """Grade ``answer`` against ``question`` and return the points earned."""

    correct = _is_correct(question, answer)
    return GradedAnswer(
        is_correct=correct,
        points_earned=question.points if correct else 0,
        max_points=question.points,
    )
