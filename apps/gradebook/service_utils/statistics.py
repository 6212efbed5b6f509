"""Descriptive statistics of one grade column."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from apps.gradebook.models import LetterGrade, StudentGradeRecord
from apps.scoring.stats import NumericSummary, summarize

from .columns import get_column
from .recompute import column_percentage, letter_grade

__all__ = ["ColumnStatistics", "build_column_statistics"]


@dataclass
class ColumnStatistics:
    column_id: int
    column_name: str
    summary: NumericSummary
    total_graded: int
    total_students: int
    grade_distribution: Dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {
            "column_id": self.column_id,
            "column_name": self.column_name,
            "mean": self.summary.mean,
            "median": self.summary.median,
            "min": self.summary.min,
            "max": self.summary.max,
            "std_deviation": self.summary.std_deviation,
            "total_graded": self.total_graded,
            "total_students": self.total_students,
            "grade_distribution": dict(self.grade_distribution),
        }


def build_column_statistics(course, column_id) -> Optional[ColumnStatistics]:
    """Summarize the graded entries of a column, ``None`` when nobody is graded."""

    column = get_column(course, column_id)
    records = list(StudentGradeRecord.objects.filter(course=course))

    grades = []
    for record in records:
        entry = (record.grades or {}).get(column.key)
        if entry and entry.get("grade") is not None:
            grades.append(entry["grade"])

    summary = summarize(grades)
    if summary is None:
        return None

    distribution = {letter.value: 0 for letter in LetterGrade}
    for grade in grades:
        distribution[letter_grade(column_percentage(grade, column.points))] += 1

    return ColumnStatistics(
        column_id=column.pk,
        column_name=column.name,
        summary=summary,
        total_graded=len(grades),
        total_students=len(records),
        grade_distribution=distribution,
    )
