from rest_framework import serializers

from ..models import GradeColumn, GradeHistory, StudentGradeRecord


def _display_name(user) -> str:
    if user is None:
        return ""
    return user.get_full_name() or user.get_username()


class GradeColumnSerializer(serializers.ModelSerializer):
    course_id = serializers.IntegerField(read_only=True)
    type = serializers.ChoiceField(source="kind", choices=GradeColumn.Kind.choices)
    created_by = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = GradeColumn
        fields = [
            "id",
            "course_id",
            "name",
            "type",
            "points",
            "weight",
            "category",
            "linked_assignment_id",
            "linked_content_type",
            "visible_to_students",
            "include_in_calculations",
            "order",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "course_id", "created_by", "created_at", "updated_at"]
        extra_kwargs = {"order": {"required": False}}


class GradeColumnCreateSerializer(GradeColumnSerializer):
    course_id = serializers.IntegerField()

    class Meta(GradeColumnSerializer.Meta):
        read_only_fields = ["id", "order", "created_by", "created_at", "updated_at"]


class GradeUpdateSerializer(serializers.Serializer):
    grade = serializers.FloatField(min_value=0)
    is_override = serializers.BooleanField(default=False)
    override_reason = serializers.CharField(allow_blank=True, required=False, default="")


class StudentGradeRecordSerializer(serializers.ModelSerializer):
    course_id = serializers.IntegerField(read_only=True)
    student_id = serializers.IntegerField(read_only=True)
    student_name = serializers.SerializerMethodField()
    student_email = serializers.EmailField(source="student.email", read_only=True)

    class Meta:
        model = StudentGradeRecord
        fields = [
            "course_id",
            "student_id",
            "student_name",
            "student_email",
            "grades",
            "overall_points_earned",
            "overall_points_possible",
            "overall_percentage",
            "overall_letter_grade",
            "weighted_percentage",
            "calculated_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_student_name(self, obj):
        return _display_name(obj.student)


class GradeHistorySerializer(serializers.ModelSerializer):
    course_id = serializers.IntegerField(read_only=True)
    student_id = serializers.IntegerField(read_only=True)
    column_id = serializers.IntegerField(read_only=True, allow_null=True)
    changed_by = serializers.PrimaryKeyRelatedField(read_only=True)
    changed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = GradeHistory
        fields = [
            "id",
            "course_id",
            "student_id",
            "column_id",
            "column_name",
            "old_grade",
            "new_grade",
            "old_percentage",
            "new_percentage",
            "changed_by",
            "changed_by_name",
            "reason",
            "is_override",
            "changed_at",
        ]
        read_only_fields = fields

    def get_changed_by_name(self, obj):
        return _display_name(obj.changed_by)
