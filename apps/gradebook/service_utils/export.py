"""CSV export of a course's grade center."""
from __future__ import annotations

import csv
import io

from .columns import list_columns
from .grades import list_student_records

__all__ = ["export_grades_csv"]


def _format_grade(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_grades_csv(course) -> str:
    """Return one CSV row per student record, columns in gradebook order."""

    columns = list_columns(course)
    records = list_student_records(course)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(
        ["Student Name", "Student Email", *[column.name for column in columns], "Overall %", "Overall Grade"]
    )

    for record in records:
        student = record.student
        grades = record.grades or {}
        writer.writerow(
            [
                student.get_full_name() or student.get_username(),
                student.email,
                *[_format_grade((grades.get(column.key) or {}).get("grade")) for column in columns],
                f"{record.overall_percentage:.2f}",
                record.overall_letter_grade,
            ]
        )

    return buffer.getvalue()
