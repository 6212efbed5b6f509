"""Quiz statistics derived from submitted attempts."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from apps.quizzes.models import Quiz, QuizAttempt
from apps.scoring.stats import NumericSummary, summarize

__all__ = ["QuestionStatistics", "QuizStatistics", "build_quiz_statistics"]


@dataclass
class QuestionStatistics:
    question_id: str
    question_text: str
    total_attempts: int = 0
    correct_answers: int = 0

    @property
    def accuracy_rate(self) -> float:
        if not self.total_attempts:
            return 0.0
        return self.correct_answers / self.total_attempts * 100

    def as_dict(self) -> dict:
        return {**asdict(self), "accuracy_rate": self.accuracy_rate}


@dataclass
class QuizStatistics:
    quiz_id: int
    quiz_title: str
    passing_score: Optional[int]
    total_attempts: int
    unique_students: int
    scores: NumericSummary
    students_passed: int
    pass_rate: float
    question_statistics: Dict[str, QuestionStatistics] = field(default_factory=dict)

    def as_dict(self) -> dict:
        summary = self.scores.as_dict()
        return {
            "quiz_id": self.quiz_id,
            "quiz_title": self.quiz_title,
            "total_attempts": self.total_attempts,
            "unique_students": self.unique_students,
            "average_score": summary["mean"],
            "median_score": summary["median"],
            "min_score": summary["min"],
            "max_score": summary["max"],
            "std_deviation": summary["std_deviation"],
            "passing_score": self.passing_score,
            "students_passed": self.students_passed,
            "pass_rate": self.pass_rate,
            "question_statistics": {
                key: value.as_dict() for key, value in self.question_statistics.items()
            },
        }


def _best_attempts(attempts: List[QuizAttempt]) -> Dict[int, QuizAttempt]:
    best: Dict[int, QuizAttempt] = {}
    for attempt in attempts:
        current = best.get(attempt.student_id)
        # Attempts arrive newest first, so ties keep the most recent one.
        if current is None or attempt.score > current.score:
            best[attempt.student_id] = attempt
    return best


def build_quiz_statistics(quiz: Quiz) -> Optional[QuizStatistics]:
    """Return statistics for ``quiz`` or ``None`` when nobody has submitted.

    Score figures use each student's best attempt; per-question accuracy counts
    every submitted attempt.
    """

    attempts = list(
        QuizAttempt.objects.filter(quiz=quiz, is_submitted=True).order_by(
            "-submitted_at", "-id"
        )
    )
    if not attempts:
        return None

    best = _best_attempts(attempts)
    summary = summarize(attempt.score for attempt in best.values())

    students_passed = sum(1 for attempt in best.values() if attempt.passed)
    if quiz.passing_score is not None:
        pass_rate = students_passed / len(best) * 100
    else:
        pass_rate = 0.0

    questions: Dict[str, QuestionStatistics] = {
        str(question.uid): QuestionStatistics(
            question_id=str(question.uid), question_text=question.question_text
        )
        for question in quiz.questions.order_by("order")
    }
    for attempt in attempts:
        for key, entry in (attempt.answers or {}).items():
            stats = questions.get(key)
            if stats is None:
                continue
            stats.total_attempts += 1
            if entry.get("is_correct"):
                stats.correct_answers += 1

    return QuizStatistics(
        quiz_id=quiz.pk,
        quiz_title=quiz.title,
        passing_score=quiz.passing_score,
        total_attempts=len(attempts),
        unique_students=len(best),
        scores=summary,
        students_passed=students_passed,
        pass_rate=pass_rate,
        question_statistics=questions,
    )
