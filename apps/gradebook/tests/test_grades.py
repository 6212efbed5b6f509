from django.test import SimpleTestCase, TestCase
from rest_framework import exceptions

from apps.gradebook.models import GradeHistory, StudentGradeRecord
from apps.gradebook.service_utils import grades as grade_service
from apps.gradebook.service_utils.recompute import letter_grade, recompute_overall_grade
from apps.scoring.exceptions import ColumnNotFound

from . import factories


class LetterGradeTests(SimpleTestCase):
    def test_thresholds(self):
        cases = [
            (100, "A+"),
            (97, "A+"),
            (96.99, "A"),
            (93, "A"),
            (90, "A-"),
            (87, "B+"),
            (85, "B"),
            (80, "B-"),
            (77, "C+"),
            (73, "C"),
            (70, "C-"),
            (67, "D+"),
            (63, "D"),
            (60, "D-"),
            (59.99, "F"),
            (0, "F"),
        ]
        for percentage, expected in cases:
            with self.subTest(percentage=percentage):
                self.assertEqual(letter_grade(percentage), expected)


class UpdateGradeTests(TestCase):
    def setUp(self):
        self.course = factories.create_course()
        self.student = factories.enroll(self.course)
        self.grader = self.course.instructor
        self.column = factories.create_column(self.course, name="Essay", points=20)

    def test_first_grade_creates_record_and_entry(self):
        entry = grade_service.update_grade(
            self.course, self.student, self.column.pk, 17, graded_by=self.grader
        )

        self.assertEqual(entry["grade"], 17)
        self.assertEqual(entry["max_points"], 20)
        self.assertAlmostEqual(entry["percentage"], 85.0)
        self.assertEqual(entry["letter_grade"], "B")
        self.assertEqual(entry["column_name"], "Essay")
        self.assertEqual(entry["column_type"], "assignment")
        self.assertEqual(entry["graded_by"], self.grader.pk)

        record = grade_service.get_student_grades(self.course, self.student)
        self.assertEqual(record.grades[str(self.column.pk)]["grade"], 17)
        self.assertEqual(record.overall_letter_grade, "B")
        self.assertFalse(GradeHistory.objects.exists())

    def test_changed_grade_appends_history(self):
        column = factories.create_column(self.course, points=100)
        grade_service.update_grade(self.course, self.student, column.pk, 70)
        grade_service.update_grade(
            self.course,
            self.student,
            column.pk,
            75,
            graded_by=self.grader,
            is_override=True,
            override_reason="Regrade request",
        )

        history = grade_service.get_grade_history(self.course, self.student)
        self.assertEqual(len(history), 1)
        change = history[0]
        self.assertEqual(change.old_grade, 70)
        self.assertEqual(change.new_grade, 75)
        self.assertEqual(change.old_percentage, 70.0)
        self.assertEqual(change.new_percentage, 75.0)
        self.assertEqual(change.changed_by, self.grader)
        self.assertTrue(change.is_override)
        self.assertEqual(change.reason, "Regrade request")

    def test_same_grade_does_not_append_history(self):
        grade_service.update_grade(self.course, self.student, self.column.pk, 10)
        grade_service.update_grade(self.course, self.student, self.column.pk, 10)
        self.assertFalse(GradeHistory.objects.exists())

    def test_history_newest_first(self):
        for grade in (1, 2, 3):
            grade_service.update_grade(self.course, self.student, self.column.pk, grade)

        history = grade_service.get_grade_history(self.course, self.student)

        self.assertEqual([h.new_grade for h in history], [3, 2])

    def test_history_rows_are_append_only(self):
        grade_service.update_grade(self.course, self.student, self.column.pk, 1)
        grade_service.update_grade(self.course, self.student, self.column.pk, 2)
        change = GradeHistory.objects.get()
        change.new_grade = 5
        with self.assertRaises(ValueError):
            change.save()

    def test_negative_grade_rejected(self):
        with self.assertRaises(exceptions.ValidationError):
            grade_service.update_grade(self.course, self.student, self.column.pk, -1)
        self.assertFalse(StudentGradeRecord.objects.exists())

    def test_unknown_column(self):
        with self.assertRaises(ColumnNotFound):
            grade_service.update_grade(self.course, self.student, 55555, 10)

    def test_zero_point_column_has_zero_percentage(self):
        bonus = factories.create_column(self.course, points=0)
        entry = grade_service.update_grade(self.course, self.student, bonus.pk, 5)
        self.assertEqual(entry["percentage"], 0.0)
        self.assertEqual(entry["letter_grade"], "F")

    def test_records_listed_by_username(self):
        zed = factories.enroll(self.course, factories.create_user("zed"))
        amy = factories.enroll(self.course, factories.create_user("amy"))
        grade_service.update_grade(self.course, zed, self.column.pk, 1)
        grade_service.update_grade(self.course, amy, self.column.pk, 1)

        records = grade_service.list_student_records(self.course)

        self.assertEqual([r.student.username for r in records], ["amy", "zed"])


class OverallRecomputationTests(TestCase):
    def setUp(self):
        self.course = factories.create_course()
        self.student = factories.enroll(self.course)

    def test_point_based_over_graded_included_columns(self):
        counted = factories.create_column(self.course, points=50)
        excluded = factories.create_column(self.course, points=50, include_in_calculations=False)
        factories.create_column(self.course, points=100)  # never graded

        grade_service.update_grade(self.course, self.student, counted.pk, 45)
        grade_service.update_grade(self.course, self.student, excluded.pk, 0)

        record = grade_service.get_student_grades(self.course, self.student)
        self.assertEqual(record.overall_points_earned, 45)
        self.assertEqual(record.overall_points_possible, 50)
        self.assertAlmostEqual(record.overall_percentage, 90.0)
        self.assertEqual(record.overall_letter_grade, "A-")
        self.assertIsNotNone(record.calculated_at)

    def test_nothing_possible_gives_zero(self):
        excluded = factories.create_column(self.course, include_in_calculations=False)
        grade_service.update_grade(self.course, self.student, excluded.pk, 100)

        record = grade_service.get_student_grades(self.course, self.student)

        self.assertEqual(record.overall_points_possible, 0)
        self.assertEqual(record.overall_percentage, 0.0)
        self.assertEqual(record.overall_letter_grade, "F")

    def test_weighted_percentage(self):
        homework = factories.create_column(self.course, points=10, weight=25)
        exam = factories.create_column(self.course, points=100, weight=75)
        unweighted = factories.create_column(self.course, points=10)

        grade_service.update_grade(self.course, self.student, homework.pk, 10)
        grade_service.update_grade(self.course, self.student, exam.pk, 60)
        grade_service.update_grade(self.course, self.student, unweighted.pk, 0)

        record = grade_service.get_student_grades(self.course, self.student)
        self.assertAlmostEqual(record.weighted_percentage, 70.0)

    def test_weighted_percentage_unset_without_weights(self):
        column = factories.create_column(self.course)
        grade_service.update_grade(self.course, self.student, column.pk, 50)

        record = grade_service.get_student_grades(self.course, self.student)

        self.assertIsNone(record.weighted_percentage)

    def test_recompute_is_idempotent(self):
        column = factories.create_column(self.course, points=40)
        grade_service.update_grade(self.course, self.student, column.pk, 30)
        record = grade_service.get_student_grades(self.course, self.student)

        recompute_overall_grade(record)
        first = (record.overall_points_earned, record.overall_percentage)
        recompute_overall_grade(record)

        self.assertEqual(first, (record.overall_points_earned, record.overall_percentage))
        self.assertAlmostEqual(record.overall_percentage, 75.0)
