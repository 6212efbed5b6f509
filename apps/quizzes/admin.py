from django.contrib import admin, messages

from apps.scoring.exceptions import InvalidTransition

from .models import Quiz, QuizAttempt, QuizQuestion
from .service_utils import quizzes as quiz_service


class QuizQuestionInline(admin.StackedInline):
    model = QuizQuestion
    extra = 0
    ordering = ("order",)
    readonly_fields = ("uid",)


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    inlines = [QuizQuestionInline]
    list_display = (
        "title",
        "course",
        "status",
        "total_points",
        "passing_score",
        "total_attempts",
        "average_score",
        "available_from",
        "available_until",
    )
    list_filter = ("status", "course")
    search_fields = ("title", "course__title")
    # Status moves only through the publish and close actions.
    readonly_fields = ("status", "total_points", "total_attempts", "average_score")
    actions = ["publish_selected", "close_selected"]

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        quiz_service.recompute_quiz_totals(form.instance)

    @admin.action(description="Publish selected quizzes")
    def publish_selected(self, request, queryset):
        published = 0
        for quiz in queryset:
            try:
                quiz_service.publish_quiz(quiz.course, quiz.pk)
            except InvalidTransition as exc:
                self.message_user(request, f"{quiz.title}: {exc.detail}", messages.ERROR)
            else:
                published += 1
        self.message_user(request, f"{published} quizzes published.")

    @admin.action(description="Close selected quizzes")
    def close_selected(self, request, queryset):
        for quiz in queryset:
            quiz_service.close_quiz(quiz.course, quiz.pk)
        self.message_user(request, f"{queryset.count()} quizzes closed.")


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = (
        "quiz",
        "student",
        "attempt_number",
        "score",
        "max_score",
        "percentage",
        "passed",
        "is_submitted",
        "submitted_at",
    )
    list_filter = ("is_submitted", "passed", "quiz__course")
    search_fields = ("student__username", "quiz__title")
    readonly_fields = (
        "answers",
        "score",
        "max_score",
        "percentage",
        "passed",
        "submitted_at",
        "time_taken_minutes",
    )
