from django.contrib import admin

from .models import GradeColumn, GradeHistory, StudentGradeRecord
from .service_utils import columns as column_service


@admin.register(GradeColumn)
class GradeColumnAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "course",
        "kind",
        "points",
        "weight",
        "order",
        "visible_to_students",
        "include_in_calculations",
    )
    list_filter = ("kind", "course", "include_in_calculations")
    search_fields = ("name", "category", "course__title")

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return ("course", "created_by")
        return ("order", "created_by")

    def save_model(self, request, obj, form, change):
        # Writes go through the column service so ordering and overall grades follow.
        if not change:
            fields = {field: getattr(obj, field) for field in column_service.COLUMN_FIELDS}
            column = column_service.create_column(obj.course, fields, created_by=request.user)
            obj.pk = column.pk
            obj.order = column.order
            return
        data = {field: getattr(obj, field) for field in form.changed_data}
        column_service.update_column(obj.course, obj.pk, data)

    def delete_model(self, request, obj):
        column_service.delete_column(obj.course, obj.pk)

    def delete_queryset(self, request, queryset):
        for column in queryset.select_related("course"):
            column_service.delete_column(column.course, column.pk)


@admin.register(StudentGradeRecord)
class StudentGradeRecordAdmin(admin.ModelAdmin):
    list_display = (
        "student",
        "course",
        "overall_points_earned",
        "overall_points_possible",
        "overall_percentage",
        "overall_letter_grade",
        "calculated_at",
    )
    list_filter = ("course", "overall_letter_grade")
    search_fields = ("student__username", "student__email", "course__title")
    # Entries change only through update_grade, which records history.
    readonly_fields = (
        "grades",
        "overall_points_earned",
        "overall_points_possible",
        "overall_percentage",
        "overall_letter_grade",
        "weighted_percentage",
        "calculated_at",
    )


@admin.register(GradeHistory)
class GradeHistoryAdmin(admin.ModelAdmin):
    list_display = ("student", "course", "column_name", "old_grade", "new_grade", "changed_by", "changed_at")
    list_filter = ("course", "is_override")
    search_fields = ("student__username", "column_name")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
