import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("courses", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Quiz",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("instructions", models.TextField(blank=True)),
                (
                    "time_limit_minutes",
                    models.PositiveIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "max_attempts",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("shuffle_questions", models.BooleanField(default=False)),
                ("shuffle_options", models.BooleanField(default=False)),
                (
                    "show_correct_answers",
                    models.BooleanField(default=True, help_text="Reveal correctness data to students."),
                ),
                ("show_score_immediately", models.BooleanField(default=True)),
                ("available_from", models.DateTimeField()),
                ("available_until", models.DateTimeField()),
                (
                    "total_points",
                    models.PositiveIntegerField(
                        default=0, help_text="Sum of the points of the current questions."
                    ),
                ),
                (
                    "passing_score",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        help_text="Passing threshold in percent.",
                        validators=[django.core.validators.MaxValueValidator(100)],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("published", "Published"), ("closed", "Closed")],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("total_attempts", models.PositiveIntegerField(default=0)),
                ("average_score", models.FloatField(blank=True, null=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quizzes",
                        to="courses.course",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="quizzes_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["course", "status"], name="quiz_course_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="QuizQuestion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("uid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("multiple_choice", "Multiple choice"),
                            ("true_false", "True / false"),
                            ("short_answer", "Short answer"),
                        ],
                        max_length=32,
                    ),
                ),
                ("question_text", models.TextField()),
                ("points", models.PositiveIntegerField(default=1)),
                ("options", models.JSONField(blank=True, default=list)),
                ("correct_option_index", models.PositiveIntegerField(blank=True, null=True)),
                ("correct_boolean", models.BooleanField(blank=True, null=True)),
                ("accepted_answers", models.JSONField(blank=True, default=list)),
                ("case_sensitive", models.BooleanField(default=False)),
                ("explanation", models.TextField(blank=True)),
                ("order", models.PositiveIntegerField()),
                (
                    "quiz",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="questions",
                        to="quizzes.quiz",
                    ),
                ),
            ],
            options={
                "ordering": ["quiz", "order"],
                "unique_together": {("quiz", "order")},
                "indexes": [models.Index(fields=["quiz", "order"], name="quizquestion_quiz_order_idx")],
            },
        ),
        migrations.CreateModel(
            name="QuizAttempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("attempt_number", models.PositiveIntegerField(default=1)),
                ("started_at", models.DateTimeField()),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("time_taken_minutes", models.PositiveIntegerField(blank=True, null=True)),
                ("answers", models.JSONField(blank=True, default=dict)),
                ("score", models.PositiveIntegerField(default=0)),
                ("max_score", models.PositiveIntegerField(default=0)),
                ("percentage", models.FloatField(default=0.0)),
                ("passed", models.BooleanField(blank=True, null=True)),
                ("is_submitted", models.BooleanField(default=False)),
                ("auto_graded", models.BooleanField(default=False)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quiz_attempts",
                        to="courses.course",
                    ),
                ),
                (
                    "quiz",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attempts",
                        to="quizzes.quiz",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quiz_attempts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["quiz", "student", "attempt_number"],
                "unique_together": {("quiz", "student", "attempt_number")},
                "indexes": [
                    models.Index(fields=["quiz", "student"], name="quizattempt_quiz_student_idx"),
                    models.Index(fields=["quiz", "is_submitted"], name="quizattempt_submitted_idx"),
                ],
            },
        ),
    ]
