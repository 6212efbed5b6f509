from django.core.management.base import BaseCommand, CommandError

from apps.gradebook.service_utils.recompute import recompute_course_grades
from courses.models import Course


class Command(BaseCommand):
    help = "Recompute overall grades of student grade records"

    def add_arguments(self, parser):
        parser.add_argument(
            "--course",
            dest="course",
            type=int,
            help="Recompute grades for a single course id",
        )

    def handle(self, *args, **options):
        course_id = options.get("course")
        if course_id:
            courses = Course.objects.filter(pk=course_id)
            if not courses.exists():
                raise CommandError("Course not found")
        else:
            courses = Course.objects.filter(grade_records__isnull=False).distinct()

        total = 0
        for course in courses:
            total += len(recompute_course_grades(course))

        self.stdout.write(self.style.SUCCESS(f"Grades recomputed for {total} students"))
