"""Overall grade recomputation.

A student's overall grade is point based: over the columns of the course that
are included in calculations and that the student has a grade for, the earned
points are divided by the current ``points`` of those columns.  Columns the
student has not been graded in do not count against them.

The weighted percentage is the weight-averaged percentage over included,
graded columns that carry a positive weight; it stays ``None`` when no such
column exists.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from apps.gradebook.models import GradeColumn, LetterGrade, StudentGradeRecord

logger = logging.getLogger(__name__)

__all__ = [
    "LETTER_THRESHOLDS",
    "column_percentage",
    "letter_grade",
    "recompute_course_grades",
    "recompute_overall_grade",
]

LETTER_THRESHOLDS = (
    (97, LetterGrade.A_PLUS),
    (93, LetterGrade.A),
    (90, LetterGrade.A_MINUS),
    (87, LetterGrade.B_PLUS),
    (83, LetterGrade.B),
    (80, LetterGrade.B_MINUS),
    (77, LetterGrade.C_PLUS),
    (73, LetterGrade.C),
    (70, LetterGrade.C_MINUS),
    (67, LetterGrade.D_PLUS),
    (63, LetterGrade.D),
    (60, LetterGrade.D_MINUS),
)


def letter_grade(percentage: float) -> str:
    for threshold, letter in LETTER_THRESHOLDS:
        if percentage >= threshold:
            return letter.value
    return LetterGrade.F.value


def column_percentage(grade: float, points: float) -> float:
    if not points:
        return 0.0
    return grade * 100 / points


def _graded_value(record: StudentGradeRecord, column: GradeColumn) -> Optional[float]:
    entry = (record.grades or {}).get(column.key)
    if not entry:
        return None
    return entry.get("grade")


def recompute_overall_grade(
    record: StudentGradeRecord,
    columns: Optional[Iterable[GradeColumn]] = None,
    *,
    save: bool = True,
) -> StudentGradeRecord:
    """Recompute the overall fields of ``record`` from its entries."""

    if columns is None:
        columns = GradeColumn.objects.filter(course_id=record.course_id)

    earned = 0.0
    possible = 0.0
    weighted_sum = 0.0
    weight_total = 0.0

    for column in columns:
        if not column.include_in_calculations:
            continue
        grade = _graded_value(record, column)
        if grade is None:
            continue

        earned += grade
        possible += column.points
        if column.weight:
            weighted_sum += column_percentage(grade, column.points) * column.weight
            weight_total += column.weight

    percentage = earned * 100 / possible if possible > 0 else 0.0

    record.overall_points_earned = earned
    record.overall_points_possible = possible
    record.overall_percentage = percentage
    record.overall_letter_grade = letter_grade(percentage)
    record.weighted_percentage = weighted_sum / weight_total if weight_total else None
    record.calculated_at = timezone.now()

    if save:
        record.save(
            update_fields=[
                "overall_points_earned",
                "overall_points_possible",
                "overall_percentage",
                "overall_letter_grade",
                "weighted_percentage",
                "calculated_at",
                "updated_at",
            ]
        )
    logger.debug(
        "Overall grade recomputed",
        extra={
            "course_id": record.course_id,
            "student_id": record.student_id,
            "overall_percentage": percentage,
        },
    )
    return record


@transaction.atomic
def recompute_course_grades(course) -> List[StudentGradeRecord]:
    """Recompute every student record of ``course``."""

    columns = list(GradeColumn.objects.filter(course=course))
    records = list(
        StudentGradeRecord.objects.select_for_update().filter(course=course).order_by("pk")
    )
    for record in records:
        recompute_overall_grade(record, columns)

    logger.info(
        "Course grades recomputed",
        extra={"course_id": course.pk, "records": len(records)},
    )
    return records
