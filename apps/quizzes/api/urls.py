from django.urls import path

from .views import (
    CourseQuizListView,
    MyQuizAttemptsView,
    QuizAttemptListView,
    QuizAttemptStartView,
    QuizAttemptSubmitView,
    QuizCloseView,
    QuizCreateView,
    QuizDetailView,
    QuizPublishView,
    QuizStatisticsView,
)

app_name = "quizzes"

urlpatterns = [
    path("", QuizCreateView.as_view(), name="quiz-create"),
    path("course/<int:course_id>/", CourseQuizListView.as_view(), name="course-quiz-list"),
    path("<int:course_id>/<int:quiz_id>/", QuizDetailView.as_view(), name="quiz-detail"),
    path("<int:course_id>/<int:quiz_id>/publish/", QuizPublishView.as_view(), name="quiz-publish"),
    path("<int:course_id>/<int:quiz_id>/close/", QuizCloseView.as_view(), name="quiz-close"),
    path("<int:course_id>/<int:quiz_id>/start/", QuizAttemptStartView.as_view(), name="quiz-start"),
    path(
        "<int:course_id>/<int:quiz_id>/attempts/<int:attempt_id>/submit/",
        QuizAttemptSubmitView.as_view(),
        name="quiz-submit",
    ),
    path(
        "<int:course_id>/<int:quiz_id>/my-attempts/",
        MyQuizAttemptsView.as_view(),
        name="quiz-my-attempts",
    ),
    path(
        "<int:course_id>/<int:quiz_id>/attempts/",
        QuizAttemptListView.as_view(),
        name="quiz-attempts",
    ),
    path(
        "<int:course_id>/<int:quiz_id>/statistics/",
        QuizStatisticsView.as_view(),
        name="quiz-statistics",
    ),
]
