import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


LETTER_GRADES = [
    ("A+", "A+"),
    ("A", "A"),
    ("A-", "A-"),
    ("B+", "B+"),
    ("B", "B"),
    ("B-", "B-"),
    ("C+", "C+"),
    ("C", "C"),
    ("C-", "C-"),
    ("D+", "D+"),
    ("D", "D"),
    ("D-", "D-"),
    ("F", "F"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("courses", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="GradeColumn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("assignment", "Assignment"),
                            ("exam", "Exam"),
                            ("quiz", "Quiz"),
                            ("participation", "Participation"),
                            ("custom", "Custom"),
                            ("total", "Total"),
                        ],
                        max_length=20,
                    ),
                ),
                ("points", models.PositiveIntegerField()),
                (
                    "weight",
                    models.FloatField(
                        blank=True,
                        null=True,
                        help_text="Share of the weighted grade, in percent.",
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                ("category", models.CharField(blank=True, max_length=100)),
                ("linked_assignment_id", models.CharField(blank=True, max_length=64)),
                (
                    "linked_content_type",
                    models.CharField(
                        blank=True,
                        choices=[("assignment", "Assignment"), ("quiz", "Quiz"), ("exam", "Exam")],
                        max_length=20,
                    ),
                ),
                ("visible_to_students", models.BooleanField(default=True)),
                ("include_in_calculations", models.BooleanField(default=True)),
                ("order", models.PositiveIntegerField(default=1)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="grade_columns",
                        to="courses.course",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="grade_columns_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["course", "order", "id"],
                "indexes": [models.Index(fields=["course", "order"], name="gradecolumn_course_order_idx")],
            },
        ),
        migrations.CreateModel(
            name="StudentGradeRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("grades", models.JSONField(blank=True, default=dict)),
                ("overall_points_earned", models.FloatField(default=0.0)),
                ("overall_points_possible", models.FloatField(default=0.0)),
                ("overall_percentage", models.FloatField(default=0.0)),
                ("overall_letter_grade", models.CharField(blank=True, choices=LETTER_GRADES, max_length=2)),
                ("weighted_percentage", models.FloatField(blank=True, null=True)),
                ("calculated_at", models.DateTimeField(blank=True, null=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="grade_records",
                        to="courses.course",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="grade_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["course", "student__username"],
                "unique_together": {("course", "student")},
            },
        ),
        migrations.CreateModel(
            name="GradeHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("column_name", models.CharField(max_length=100)),
                ("old_grade", models.FloatField(blank=True, null=True)),
                ("new_grade", models.FloatField(blank=True, null=True)),
                ("old_percentage", models.FloatField(blank=True, null=True)),
                ("new_percentage", models.FloatField(blank=True, null=True)),
                ("reason", models.TextField(blank=True)),
                ("is_override", models.BooleanField(default=False)),
                ("changed_at", models.DateTimeField(auto_now_add=True)),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="grade_changes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "column",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="history",
                        to="gradebook.gradecolumn",
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="grade_history",
                        to="courses.course",
                    ),
                ),
                (
                    "record",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="history",
                        to="gradebook.studentgraderecord",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="grade_history",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-changed_at", "-id"],
                "verbose_name_plural": "grade history",
            },
        ),
    ]
