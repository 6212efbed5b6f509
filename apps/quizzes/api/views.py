from rest_framework import exceptions, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.scoring.exceptions import QuizNotFound
from courses.access import (
    ensure_course_manager,
    ensure_course_member,
    get_course_or_404,
    is_course_manager,
    is_enrolled_student,
)

from ..models import Quiz
from ..service_utils import attempts as attempt_service
from ..service_utils import quizzes as quiz_service
from ..service_utils.statistics import build_quiz_statistics
from .serializers import (
    QuizAttemptSerializer,
    QuizCreateSerializer,
    QuizInputSerializer,
    QuizSerializer,
    SubmitAttemptSerializer,
)


class QuizCreateView(APIView):
    """Create a draft quiz in a course taught by the caller."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = QuizCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        course = get_course_or_404(data.pop("course_id"))
        ensure_course_manager(request.user, course, "create quizzes for this course")

        quiz = quiz_service.create_quiz(course, data, created_by=request.user)
        return Response(QuizSerializer(quiz).data, status=status.HTTP_201_CREATED)


class CourseQuizListView(APIView):
    """List quizzes of a course; students only see published ones."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_member(request.user, course)

        if is_course_manager(request.user, course):
            quizzes = quiz_service.list_quizzes(course, request.query_params.get("status"))
            return Response(QuizSerializer(quizzes, many=True).data)

        quizzes = quiz_service.list_quizzes(course, Quiz.Status.PUBLISHED)
        data = [
            quiz_service.redact_for_student(quiz, QuizSerializer(quiz).data)
            for quiz in quizzes
        ]
        return Response(data)


class QuizDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, quiz_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_member(request.user, course)
        quiz = quiz_service.get_quiz(course, quiz_id)

        data = QuizSerializer(quiz).data
        if not is_course_manager(request.user, course):
            if quiz.status == Quiz.Status.DRAFT:
                raise QuizNotFound()
            data = quiz_service.redact_for_student(quiz, data)
        return Response(data)

    def patch(self, request, course_id: int, quiz_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "update this quiz")

        serializer = QuizInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        quiz = quiz_service.update_quiz(course, quiz_id, serializer.validated_data)
        return Response(QuizSerializer(quiz).data)

    def delete(self, request, course_id: int, quiz_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "delete this quiz")
        quiz_service.delete_quiz(course, quiz_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class QuizPublishView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, course_id: int, quiz_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "publish this quiz")
        quiz = quiz_service.publish_quiz(course, quiz_id)
        return Response(QuizSerializer(quiz).data)


class QuizCloseView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, course_id: int, quiz_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "close this quiz")
        quiz = quiz_service.close_quiz(course, quiz_id)
        return Response(QuizSerializer(quiz).data)


class QuizAttemptStartView(APIView):
    """Start a new attempt for the enrolled caller."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, course_id: int, quiz_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        if not is_enrolled_student(request.user, course):
            raise exceptions.PermissionDenied("You are not enrolled in this course")

        attempt = attempt_service.start_attempt(course, quiz_id, request.user)
        return Response(QuizAttemptSerializer(attempt).data, status=status.HTTP_201_CREATED)


class QuizAttemptSubmitView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, course_id: int, quiz_id: int, attempt_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        serializer = SubmitAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        attempt = attempt_service.submit_attempt(
            course,
            quiz_id,
            attempt_id,
            serializer.validated_data["answers"],
            student=request.user,
        )
        data = QuizAttemptSerializer(attempt).data
        return Response(quiz_service.redact_attempt_for_student(attempt.quiz, data))


class MyQuizAttemptsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, quiz_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_member(request.user, course)
        quiz = quiz_service.get_quiz(course, quiz_id)

        attempts = attempt_service.list_student_attempts(course, quiz.pk, request.user)
        data = [
            quiz_service.redact_attempt_for_student(quiz, QuizAttemptSerializer(attempt).data)
            for attempt in attempts
        ]
        return Response(data)


class QuizAttemptListView(APIView):
    """All submitted attempts of a quiz, for the course staff."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, quiz_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "view quiz attempts")
        attempts = attempt_service.list_submitted_attempts(course, quiz_id)
        return Response(QuizAttemptSerializer(attempts, many=True).data)


class QuizStatisticsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, quiz_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        ensure_course_manager(request.user, course, "view quiz statistics")
        quiz = quiz_service.get_quiz(course, quiz_id)

        statistics = build_quiz_statistics(quiz)
        if statistics is None:
            return Response({"detail": "No statistics available yet"}, status=404)
        return Response(statistics.as_dict())
