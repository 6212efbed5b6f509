from django.urls import path

from .views import (
    ColumnStatisticsView,
    GradeCenterView,
    GradeColumnCreateView,
    GradeColumnDetailView,
    GradeColumnListView,
    GradeExportView,
    GradeHistoryView,
    GradeUpdateView,
    MyGradesView,
)

app_name = "gradebook"

urlpatterns = [
    path("columns/", GradeColumnCreateView.as_view(), name="column-create"),
    path("columns/<int:course_id>/", GradeColumnListView.as_view(), name="column-list"),
    path(
        "columns/<int:course_id>/<int:column_id>/",
        GradeColumnDetailView.as_view(),
        name="column-detail",
    ),
    path("my-grades/<int:course_id>/", MyGradesView.as_view(), name="my-grades"),
    path("grade-center/<int:course_id>/", GradeCenterView.as_view(), name="grade-center"),
    path(
        "history/<int:course_id>/<int:student_id>/",
        GradeHistoryView.as_view(),
        name="grade-history",
    ),
    path(
        "statistics/<int:course_id>/<int:column_id>/",
        ColumnStatisticsView.as_view(),
        name="column-statistics",
    ),
    path("export/<int:course_id>/", GradeExportView.as_view(), name="grade-export"),
    path(
        "<int:course_id>/<int:student_id>/<int:column_id>/",
        GradeUpdateView.as_view(),
        name="grade-update",
    ),
]
