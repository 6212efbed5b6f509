from __future__ import annotations

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from courses.models import TimeStampedModel


class Quiz(TimeStampedModel):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        CLOSED = "closed", "Closed"

    course = models.ForeignKey(
        "courses.Course", on_delete=models.CASCADE, related_name="quizzes"
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    instructions = models.TextField(blank=True)

    time_limit_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
    )
    max_attempts = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1)]
    )
    shuffle_questions = models.BooleanField(default=False)
    shuffle_options = models.BooleanField(default=False)
    show_correct_answers = models.BooleanField(
        default=True,
        help_text="Reveal correctness data to students.",
    )
    show_score_immediately = models.BooleanField(default=True)

    available_from = models.DateTimeField()
    available_until = models.DateTimeField()

    total_points = models.PositiveIntegerField(
        default=0,
        help_text="Sum of the points of the current questions.",
    )
    passing_score = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(100)],
        help_text="Passing threshold in percent.",
    )

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.DRAFT
    )

    total_attempts = models.PositiveIntegerField(default=0)
    average_score = models.FloatField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="quizzes_created",
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["course", "status"], name="quiz_course_status_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    def clean(self):
        super().clean()
        if (
            self.available_from
            and self.available_until
            and self.available_from > self.available_until
        ):
            raise ValidationError(
                {"available_until": "Availability window ends before it starts."}
            )


class QuizQuestion(TimeStampedModel):
    class Kind(models.TextChoices):
        MULTIPLE_CHOICE = "multiple_choice", "Multiple choice"
        TRUE_FALSE = "true_false", "True / false"
        SHORT_ANSWER = "short_answer", "Short answer"

    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="questions")
    uid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    kind = models.CharField(max_length=32, choices=Kind.choices)
    question_text = models.TextField()
    points = models.PositiveIntegerField(default=1)

    options = models.JSONField(default=list, blank=True)
    correct_option_index = models.PositiveIntegerField(null=True, blank=True)
    correct_boolean = models.BooleanField(null=True, blank=True)
    accepted_answers = models.JSONField(default=list, blank=True)
    case_sensitive = models.BooleanField(default=False)

    explanation = models.TextField(blank=True)
    order = models.PositiveIntegerField()

    class Meta:
        ordering = ["quiz", "order"]
        unique_together = ("quiz", "order")
        indexes = [models.Index(fields=["quiz", "order"], name="quizquestion_quiz_order_idx")]

    def __str__(self) -> str:
        return f"{self.quiz} #{self.order}"

    def clean(self):
        super().clean()

        if self.kind == self.Kind.MULTIPLE_CHOICE:
            if not isinstance(self.options, list) or len(self.options) < 2:
                raise ValidationError(
                    {"options": "Multiple choice questions need at least two options."}
                )
            if self.correct_option_index is None:
                raise ValidationError(
                    {"correct_option_index": "Correct option index is required."}
                )
            if self.correct_option_index >= len(self.options):
                raise ValidationError(
                    {"correct_option_index": "Correct option index is out of range."}
                )
        elif self.kind == self.Kind.TRUE_FALSE:
            if self.correct_boolean is None:
                raise ValidationError(
                    {"correct_boolean": "True/false questions need a correct value."}
                )
        elif self.kind == self.Kind.SHORT_ANSWER:
            answers = self.accepted_answers
            if (
                not isinstance(answers, list)
                or not answers
                or not all(isinstance(item, str) for item in answers)
            ):
                raise ValidationError(
                    {"accepted_answers": "Short answer questions need accepted answers."}
                )
        else:
            raise ValidationError({"kind": "Unknown question type."})

    def snapshot(self) -> dict:
        """Defining fields of the question as graded, stored on attempts."""
        return {
            "question_id": str(self.uid),
            "kind": self.kind,
            "question_text": self.question_text,
            "points": self.points,
            "options": list(self.options or []),
            "correct_option_index": self.correct_option_index,
            "correct_boolean": self.correct_boolean,
            "accepted_answers": list(self.accepted_answers or []),
            "case_sensitive": self.case_sensitive,
            "order": self.order,
        }


class QuizAttempt(TimeStampedModel):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="attempts")
    course = models.ForeignKey(
        "courses.Course", on_delete=models.CASCADE, related_name="quiz_attempts"
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="quiz_attempts",
    )
    attempt_number = models.PositiveIntegerField(default=1)

    started_at = models.DateTimeField()
    submitted_at = models.DateTimeField(null=True, blank=True)
    time_taken_minutes = models.PositiveIntegerField(null=True, blank=True)

    answers = models.JSONField(default=dict, blank=True)

    score = models.PositiveIntegerField(default=0)
    max_score = models.PositiveIntegerField(default=0)
    percentage = models.FloatField(default=0.0)
    passed = models.BooleanField(null=True, blank=True)

    is_submitted = models.BooleanField(default=False)
    auto_graded = models.BooleanField(default=False)

    class Meta:
        ordering = ["quiz", "student", "attempt_number"]
        unique_together = ("quiz", "student", "attempt_number")
        indexes = [
            models.Index(fields=["quiz", "student"], name="quizattempt_quiz_student_idx"),
            models.Index(fields=["quiz", "is_submitted"], name="quizattempt_submitted_idx"),
        ]

    def __str__(self) -> str:
        return f"Attempt {self.attempt_number} of {self.quiz} by {self.student}"
