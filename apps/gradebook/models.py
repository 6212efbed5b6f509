from __future__ import annotations

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from courses.models import TimeStampedModel


class LetterGrade(models.TextChoices):
    A_PLUS = "A+", "A+"
    A = "A", "A"
    A_MINUS = "A-", "A-"
    B_PLUS = "B+", "B+"
    B = "B", "B"
    B_MINUS = "B-", "B-"
    C_PLUS = "C+", "C+"
    C = "C", "C"
    C_MINUS = "C-", "C-"
    D_PLUS = "D+", "D+"
    D = "D", "D"
    D_MINUS = "D-", "D-"
    F = "F", "F"


class GradeColumn(TimeStampedModel):
    class Kind(models.TextChoices):
        ASSIGNMENT = "assignment", "Assignment"
        EXAM = "exam", "Exam"
        QUIZ = "quiz", "Quiz"
        PARTICIPATION = "participation", "Participation"
        CUSTOM = "custom", "Custom"
        TOTAL = "total", "Total"

    class LinkedContentType(models.TextChoices):
        ASSIGNMENT = "assignment", "Assignment"
        QUIZ = "quiz", "Quiz"
        EXAM = "exam", "Exam"

    course = models.ForeignKey(
        "courses.Course", on_delete=models.CASCADE, related_name="grade_columns"
    )
    name = models.CharField(max_length=100)
    kind = models.CharField(max_length=20, choices=Kind.choices)
    points = models.PositiveIntegerField()
    weight = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Share of the weighted grade, in percent.",
    )
    category = models.CharField(max_length=100, blank=True)

    linked_assignment_id = models.CharField(max_length=64, blank=True)
    linked_content_type = models.CharField(
        max_length=20, choices=LinkedContentType.choices, blank=True
    )

    visible_to_students = models.BooleanField(default=True)
    include_in_calculations = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=1)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="grade_columns_created",
    )

    class Meta:
        ordering = ["course", "order", "id"]
        indexes = [models.Index(fields=["course", "order"], name="gradecolumn_course_order_idx")]

    def __str__(self) -> str:
        return f"{self.name} ({self.course})"

    @property
    def key(self) -> str:
        """Key of this column's entries in a student's ``grades`` map."""
        return str(self.pk)


class StudentGradeRecord(TimeStampedModel):
    course = models.ForeignKey(
        "courses.Course", on_delete=models.CASCADE, related_name="grade_records"
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="grade_records",
    )

    grades = models.JSONField(default=dict, blank=True)

    overall_points_earned = models.FloatField(default=0.0)
    overall_points_possible = models.FloatField(default=0.0)
    overall_percentage = models.FloatField(default=0.0)
    overall_letter_grade = models.CharField(
        max_length=2, choices=LetterGrade.choices, blank=True
    )
    weighted_percentage = models.FloatField(null=True, blank=True)
    calculated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["course", "student__username"]
        unique_together = ("course", "student")

    def __str__(self) -> str:
        return f"{self.student} in {self.course}"


class GradeHistory(models.Model):
    """Append-only log of changes to an existing grade."""

    record = models.ForeignKey(
        StudentGradeRecord, on_delete=models.CASCADE, related_name="history"
    )
    course = models.ForeignKey(
        "courses.Course", on_delete=models.CASCADE, related_name="grade_history"
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="grade_history",
    )
    column = models.ForeignKey(
        GradeColumn,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="history",
    )
    column_name = models.CharField(max_length=100)

    old_grade = models.FloatField(null=True, blank=True)
    new_grade = models.FloatField(null=True, blank=True)
    old_percentage = models.FloatField(null=True, blank=True)
    new_percentage = models.FloatField(null=True, blank=True)

    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="grade_changes",
    )
    reason = models.TextField(blank=True)
    is_override = models.BooleanField(default=False)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-changed_at", "-id"]
        verbose_name_plural = "grade history"

    def __str__(self) -> str:
        return f"{self.column_name}: {self.old_grade} -> {self.new_grade}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Grade history entries cannot be modified")
        super().save(*args, **kwargs)
