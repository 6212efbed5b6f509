"""Course ownership and membership checks used by the API views.

The assessment services never check roles themselves; the HTTP layer calls
these helpers before handing a request to a service.
"""
from __future__ import annotations

from rest_framework import exceptions

from apps.scoring.exceptions import CourseNotFound

from .models import Course, CourseEnrollment


def get_course_or_404(course_id, *, for_update: bool = False) -> Course:
    queryset = Course.objects.all()
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=course_id)
    except (Course.DoesNotExist, ValueError, TypeError) as exc:
        raise CourseNotFound() from exc


def is_course_manager(user, course: Course) -> bool:
    if not user or not user.is_authenticated:
        return False
    return user.is_staff or course.instructor_id == user.pk


def is_enrolled_student(user, course: Course) -> bool:
    if not user or not user.is_authenticated:
        return False
    return CourseEnrollment.objects.filter(
        course=course,
        student=user,
        status__in=CourseEnrollment.ACTIVE_STATUSES,
    ).exists()


def ensure_course_manager(user, course: Course, action: str = "manage this course") -> None:
    if not is_course_manager(user, course):
        raise exceptions.PermissionDenied(f"Not authorized to {action}")


def ensure_course_member(user, course: Course) -> None:
    if is_course_manager(user, course) or is_enrolled_student(user, course):
        return
    raise exceptions.PermissionDenied("You are not enrolled in this course")
