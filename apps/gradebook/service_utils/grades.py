"""Per-student grade entries and their change history.

Each student has one :class:`StudentGradeRecord` per course holding a map of
grade entries keyed by column id.  Changing an existing grade appends a
:class:`GradeHistory` row; every write recomputes the overall grade under the
record's row lock.
"""
from __future__ import annotations

import logging
from numbers import Real
from typing import List, Optional

from django.db import transaction
from django.utils import timezone
from rest_framework import exceptions

from apps.gradebook.models import GradeHistory, StudentGradeRecord

from .columns import get_column
from .recompute import column_percentage, letter_grade, recompute_overall_grade

logger = logging.getLogger(__name__)

__all__ = [
    "get_grade_history",
    "get_student_grades",
    "list_student_records",
    "update_grade",
]


def _validate_grade(grade) -> float:
    if isinstance(grade, bool) or not isinstance(grade, Real):
        raise exceptions.ValidationError({"grade": ["A numeric grade is required."]})
    if grade < 0:
        raise exceptions.ValidationError({"grade": ["Grade cannot be negative."]})
    return grade


@transaction.atomic
def update_grade(
    course,
    student,
    column_id,
    grade,
    *,
    graded_by=None,
    is_override: bool = False,
    override_reason: str = "",
) -> dict:
    """Set ``student``'s grade in a column and return the stored entry."""

    column = get_column(course, column_id)
    grade = _validate_grade(grade)

    StudentGradeRecord.objects.get_or_create(course=course, student=student)
    record = StudentGradeRecord.objects.select_for_update().get(course=course, student=student)

    percentage = column_percentage(grade, column.points)
    now = timezone.now().isoformat()
    previous = (record.grades or {}).get(column.key)

    entry = {
        "column_id": column.pk,
        "column_name": column.name,
        "column_type": column.kind,
        "grade": grade,
        "max_points": column.points,
        "percentage": percentage,
        "letter_grade": letter_grade(percentage),
        "is_override": is_override,
        "override_reason": override_reason,
        "graded_by": getattr(graded_by, "pk", None),
        "graded_at": now,
        "updated_at": now,
    }

    if previous is not None and previous.get("grade") != grade:
        GradeHistory.objects.create(
            record=record,
            course=course,
            student=student,
            column=column,
            column_name=column.name,
            old_grade=previous.get("grade"),
            new_grade=grade,
            old_percentage=previous.get("percentage"),
            new_percentage=percentage,
            changed_by=graded_by,
            reason=override_reason,
            is_override=is_override,
        )
        logger.info(
            "Grade change recorded",
            extra={
                "course_id": course.pk,
                "student_id": student.pk,
                "column_id": column.pk,
                "old_grade": previous.get("grade"),
                "new_grade": grade,
            },
        )

    grades = dict(record.grades or {})
    grades[column.key] = entry
    record.grades = grades
    record.save(update_fields=["grades", "updated_at"])

    recompute_overall_grade(record)

    logger.info(
        "Grade updated",
        extra={
            "course_id": course.pk,
            "student_id": student.pk,
            "column_id": column.pk,
            "grade": grade,
        },
    )
    return entry


def get_student_grades(course, student) -> Optional[StudentGradeRecord]:
    return StudentGradeRecord.objects.filter(course=course, student=student).first()


def list_student_records(course) -> List[StudentGradeRecord]:
    return list(
        StudentGradeRecord.objects.filter(course=course)
        .select_related("student")
        .order_by("student__username", "pk")
    )


def get_grade_history(course, student) -> List[GradeHistory]:
    return list(
        GradeHistory.objects.filter(course=course, student=student)
        .select_related("changed_by")
        .order_by("-changed_at", "-id")
    )
