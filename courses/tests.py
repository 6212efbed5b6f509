from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import exceptions

from apps.scoring.exceptions import CourseNotFound
from courses.access import (
    ensure_course_manager,
    ensure_course_member,
    get_course_or_404,
    is_course_manager,
    is_enrolled_student,
)
from courses.models import Course, CourseEnrollment


class CourseAccessTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        self.instructor = user_model.objects.create_user(username="instructor", password="pass")
        self.staff = user_model.objects.create_user(
            username="admin", password="pass", is_staff=True
        )
        self.student = user_model.objects.create_user(username="student", password="pass")
        self.applicant = user_model.objects.create_user(username="applicant", password="pass")
        self.course = Course.objects.create(
            slug="statistics-101",
            title="Statistics 101",
            instructor=self.instructor,
        )
        CourseEnrollment.objects.create(
            course=self.course,
            student=self.student,
            status=CourseEnrollment.Status.ENROLLED,
        )
        CourseEnrollment.objects.create(
            course=self.course,
            student=self.applicant,
            status=CourseEnrollment.Status.APPLIED,
        )

    def test_get_course_or_404(self):
        self.assertEqual(get_course_or_404(self.course.pk), self.course)
        with self.assertRaises(CourseNotFound):
            get_course_or_404(self.course.pk + 100)
        with self.assertRaises(CourseNotFound):
            get_course_or_404("not-a-number")

    def test_managers_are_instructor_and_staff(self):
        self.assertTrue(is_course_manager(self.instructor, self.course))
        self.assertTrue(is_course_manager(self.staff, self.course))
        self.assertFalse(is_course_manager(self.student, self.course))

    def test_only_active_enrollments_count(self):
        self.assertTrue(is_enrolled_student(self.student, self.course))
        self.assertFalse(is_enrolled_student(self.applicant, self.course))

        CourseEnrollment.objects.filter(student=self.student).update(
            status=CourseEnrollment.Status.COMPLETED
        )
        self.assertTrue(is_enrolled_student(self.student, self.course))

    def test_ensure_helpers_raise_permission_denied(self):
        ensure_course_manager(self.instructor, self.course)
        ensure_course_member(self.student, self.course)
        ensure_course_member(self.instructor, self.course)

        with self.assertRaises(exceptions.PermissionDenied) as ctx:
            ensure_course_manager(self.student, self.course, "grade students")
        self.assertEqual(str(ctx.exception.detail), "Not authorized to grade students")

        with self.assertRaises(exceptions.PermissionDenied):
            ensure_course_member(self.applicant, self.course)
