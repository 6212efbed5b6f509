from django.core.management.base import BaseCommand, CommandError

from apps.quizzes.models import Quiz
from apps.quizzes.service_utils.attempts import recompute_quiz_aggregates
from apps.quizzes.service_utils.quizzes import recompute_quiz_totals
from courses.models import Course


class Command(BaseCommand):
    help = "Recompute quiz point totals and attempt aggregates"

    def add_arguments(self, parser):
        parser.add_argument(
            "--course",
            dest="course",
            type=int,
            help="Limit recomputation to a single course id",
        )

    def handle(self, *args, **options):
        quizzes = Quiz.objects.all()
        course_id = options.get("course")
        if course_id:
            if not Course.objects.filter(pk=course_id).exists():
                raise CommandError("Course not found")
            quizzes = quizzes.filter(course_id=course_id)

        count = 0
        for quiz in quizzes.iterator():
            recompute_quiz_totals(quiz)
            recompute_quiz_aggregates(quiz)
            count += 1

        self.stdout.write(self.style.SUCCESS(f"Quiz statistics recomputed for {count} quizzes"))
