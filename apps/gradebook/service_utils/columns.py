"""Grade column management."""
from __future__ import annotations

import logging
from typing import Any, List, Mapping

from django.db import DatabaseError, transaction
from django.db.models import Max

from apps.gradebook.models import GradeColumn, StudentGradeRecord
from apps.scoring.exceptions import ColumnNotFound, DeleteFailed
from courses.access import get_course_or_404

from .recompute import recompute_course_grades

logger = logging.getLogger(__name__)

__all__ = [
    "COLUMN_FIELDS",
    "create_column",
    "delete_column",
    "get_column",
    "list_columns",
    "update_column",
]

COLUMN_FIELDS = (
    "name",
    "kind",
    "points",
    "weight",
    "category",
    "linked_assignment_id",
    "linked_content_type",
    "visible_to_students",
    "include_in_calculations",
)

# Changing any of these alters the overall grades of the course.
RECOMPUTE_FIELDS = ("points", "weight", "include_in_calculations")


def get_column(course, column_id) -> GradeColumn:
    try:
        return GradeColumn.objects.get(course=course, pk=column_id)
    except (GradeColumn.DoesNotExist, ValueError, TypeError) as exc:
        raise ColumnNotFound() from exc


def list_columns(course) -> List[GradeColumn]:
    return list(GradeColumn.objects.filter(course=course).order_by("order", "id"))


@transaction.atomic
def create_column(course, data: Mapping[str, Any], *, created_by=None) -> GradeColumn:
    """Append a column after the current last one of the course."""

    # The course row serializes concurrent order assignment.
    get_course_or_404(course.pk, for_update=True)
    last = GradeColumn.objects.filter(course=course).aggregate(last=Max("order"))["last"]

    fields = {field: data[field] for field in COLUMN_FIELDS if field in data}
    column = GradeColumn.objects.create(
        course=course,
        created_by=created_by,
        order=(last or 0) + 1,
        **fields,
    )
    logger.info(
        "Grade column created",
        extra={"course_id": course.pk, "column_id": column.pk, "order": column.order},
    )
    return column


@transaction.atomic
def update_column(course, column_id, data: Mapping[str, Any]) -> GradeColumn:
    column = get_column(course, column_id)

    changed = []
    for field in (*COLUMN_FIELDS, "order"):
        if field in data and getattr(column, field) != data[field]:
            setattr(column, field, data[field])
            changed.append(field)

    if not changed:
        return column

    column.save(update_fields=[*changed, "updated_at"])
    logger.info(
        "Grade column updated",
        extra={"course_id": course.pk, "column_id": column.pk, "fields": changed},
    )

    if any(field in RECOMPUTE_FIELDS for field in changed):
        recompute_course_grades(course)
    return column


def delete_column(course, column_id) -> None:
    """Delete a column and drop its entries from every student record.

    Grade history rows keep the column name and lose only the link.
    """

    column = get_column(course, column_id)
    key = column.key
    try:
        with transaction.atomic():
            records = StudentGradeRecord.objects.select_for_update().filter(course=course)
            for record in records:
                if key in (record.grades or {}):
                    record.grades.pop(key)
                    record.save(update_fields=["grades", "updated_at"])
            column.delete()
            recompute_course_grades(course)
    except DatabaseError as exc:
        logger.exception(
            "Failed to delete grade column",
            extra={"course_id": course.pk, "column_id": column_id},
        )
        raise DeleteFailed("Failed to delete grade column") from exc

    logger.info(
        "Grade column deleted",
        extra={"course_id": course.pk, "column_id": column_id},
    )
