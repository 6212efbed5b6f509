from django.contrib.auth import get_user_model
from django.http import HttpResponse
from rest_framework import exceptions, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from courses.access import (
    ensure_course_manager,
    get_course_or_404,
    is_course_manager,
    is_enrolled_student,
)

from ..models import StudentGradeRecord
from ..service_utils import columns as column_service
from ..service_utils import grades as grade_service
from ..service_utils.export import export_grades_csv
from ..service_utils.statistics import build_column_statistics
from .serializers import (
    GradeColumnCreateSerializer,
    GradeColumnSerializer,
    GradeHistorySerializer,
    GradeUpdateSerializer,
    StudentGradeRecordSerializer,
)


def _get_student_or_404(student_id):
    try:
        return get_user_model().objects.get(pk=student_id)
    except get_user_model().DoesNotExist as exc:
        raise exceptions.NotFound("Student not found") from exc


class GradeColumnCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = GradeColumnCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        course = get_course_or_404(data.pop("course_id"))
        ensure_course_manager(request.user, course, "create grade columns for this course")

        column = column_service.create_column(course, data, created_by=request.user)
        return Response(GradeColumnSerializer(column).data, status=status.HTTP_201_CREATED)


class GradeColumnListView(APIView):
    """Columns of a course; students only see the visible ones."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        columns = column_service.list_columns(course)

        if not is_course_manager(request.user, course):
            if not is_enrolled_student(request.user, course):
                raise exceptions.PermissionDenied("You are not enrolled in this course")
            columns = [column for column in columns if column.visible_to_students]
        return Response(GradeColumnSerializer(columns, many=True).data)


class GradeColumnDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, course_id: int, column_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "update this grade column")

        serializer = GradeColumnSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        column = column_service.update_column(course, column_id, serializer.validated_data)
        return Response(GradeColumnSerializer(column).data)

    def delete(self, request, course_id: int, column_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "delete this grade column")
        column_service.delete_column(course, column_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MyGradesView(APIView):
    """The caller's own grade record with hidden columns removed."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        if not is_enrolled_student(request.user, course):
            raise exceptions.PermissionDenied("You are not enrolled in this course")

        record = grade_service.get_student_grades(course, request.user)
        if record is None:
            record = StudentGradeRecord(course=course, student=request.user)

        hidden = {
            column.key
            for column in column_service.list_columns(course)
            if not column.visible_to_students
        }
        data = StudentGradeRecordSerializer(record).data
        data["grades"] = {
            key: entry for key, entry in (record.grades or {}).items() if key not in hidden
        }
        return Response(data)


class GradeCenterView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "view grade center for this course")

        columns = column_service.list_columns(course)
        records = grade_service.list_student_records(course)
        return Response(
            {
                "columns": GradeColumnSerializer(columns, many=True).data,
                "students": StudentGradeRecordSerializer(records, many=True).data,
            }
        )


class GradeUpdateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, course_id: int, student_id: int, column_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "update grades for this course")

        serializer = GradeUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        student = _get_student_or_404(student_id)

        entry = grade_service.update_grade(
            course,
            student,
            column_id,
            serializer.validated_data["grade"],
            graded_by=request.user,
            is_override=serializer.validated_data["is_override"],
            override_reason=serializer.validated_data["override_reason"],
        )
        return Response(entry)


class GradeHistoryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, student_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        if request.user.pk != student_id:
            ensure_course_manager(request.user, course, "view grade history")

        student = _get_student_or_404(student_id)
        history = grade_service.get_grade_history(course, student)
        return Response(GradeHistorySerializer(history, many=True).data)


class ColumnStatisticsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, column_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "view statistics for this course")

        statistics = build_column_statistics(course, column_id)
        if statistics is None:
            return Response({"detail": "No statistics available yet"}, status=404)
        return Response(statistics.as_dict())


class GradeExportView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "export grades for this course")

        response = HttpResponse(export_grades_csv(course), content_type="text/csv")
        response["Content-Disposition"] = f'attachment; filename="grades-{course.pk}.csv"'
        return response
