from rest_framework import serializers

from ..models import Quiz, QuizAttempt, QuizQuestion


class QuizQuestionSerializer(serializers.ModelSerializer):
    id = serializers.UUIDField(source="uid", read_only=True)
    type = serializers.ChoiceField(source="kind", choices=QuizQuestion.Kind.choices)
    options = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False
    )
    correct_option_index = serializers.IntegerField(
        min_value=0, required=False, allow_null=True
    )
    correct_answer = serializers.BooleanField(
        source="correct_boolean", required=False, allow_null=True
    )
    correct_answers = serializers.ListField(
        source="accepted_answers",
        child=serializers.CharField(allow_blank=True, trim_whitespace=False),
        required=False,
    )

    class Meta:
        model = QuizQuestion
        fields = [
            "id",
            "type",
            "question_text",
            "points",
            "options",
            "correct_option_index",
            "correct_answer",
            "correct_answers",
            "case_sensitive",
            "explanation",
            "order",
        ]
        read_only_fields = ["id", "order"]
        extra_kwargs = {"points": {"min_value": 0}}

    def validate(self, attrs):
        # Nested lists are validated partially on PATCH, so check presence here.
        for field, key in (("type", "kind"), ("question_text", "question_text")):
            if not attrs.get(key):
                raise serializers.ValidationError({field: "This field is required."})

        kind = attrs.get("kind")
        if kind == QuizQuestion.Kind.MULTIPLE_CHOICE:
            options = attrs.get("options") or []
            index = attrs.get("correct_option_index")
            if len(options) < 2:
                raise serializers.ValidationError(
                    {"options": "Multiple choice questions need at least two options."}
                )
            if index is None or index >= len(options):
                raise serializers.ValidationError(
                    {"correct_option_index": "A valid option index is required."}
                )
        elif kind == QuizQuestion.Kind.TRUE_FALSE:
            if attrs.get("correct_boolean") is None:
                raise serializers.ValidationError(
                    {"correct_answer": "True/false questions need a correct value."}
                )
        elif kind == QuizQuestion.Kind.SHORT_ANSWER:
            if not attrs.get("accepted_answers"):
                raise serializers.ValidationError(
                    {"correct_answers": "Short answer questions need accepted answers."}
                )
        return attrs


class QuizSerializer(serializers.ModelSerializer):
    course_id = serializers.IntegerField(read_only=True)
    created_by = serializers.PrimaryKeyRelatedField(read_only=True)
    questions = QuizQuestionSerializer(many=True, read_only=True)

    class Meta:
        model = Quiz
        fields = [
            "id",
            "course_id",
            "title",
            "description",
            "instructions",
            "time_limit_minutes",
            "max_attempts",
            "shuffle_questions",
            "shuffle_options",
            "show_correct_answers",
            "show_score_immediately",
            "available_from",
            "available_until",
            "total_points",
            "passing_score",
            "questions",
            "status",
            "total_attempts",
            "average_score",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class QuizInputSerializer(serializers.ModelSerializer):
    """Validates authoring payloads for create (full) and update (partial)."""

    questions = QuizQuestionSerializer(many=True, required=False)

    class Meta:
        model = Quiz
        fields = [
            "title",
            "description",
            "instructions",
            "time_limit_minutes",
            "max_attempts",
            "shuffle_questions",
            "shuffle_options",
            "show_correct_answers",
            "show_score_immediately",
            "available_from",
            "available_until",
            "passing_score",
            "questions",
        ]

    def validate(self, attrs):
        start = attrs.get("available_from")
        end = attrs.get("available_until")
        if start and end and start > end:
            raise serializers.ValidationError(
                {"available_until": "Availability window ends before it starts."}
            )
        return attrs


class QuizCreateSerializer(QuizInputSerializer):
    course_id = serializers.IntegerField()
    questions = QuizQuestionSerializer(many=True)

    class Meta(QuizInputSerializer.Meta):
        fields = ["course_id", *QuizInputSerializer.Meta.fields]


class QuizAttemptSerializer(serializers.ModelSerializer):
    quiz_id = serializers.IntegerField(read_only=True)
    course_id = serializers.IntegerField(read_only=True)
    student_id = serializers.IntegerField(read_only=True)
    student_name = serializers.SerializerMethodField()
    student_email = serializers.EmailField(source="student.email", read_only=True)

    class Meta:
        model = QuizAttempt
        fields = [
            "id",
            "quiz_id",
            "course_id",
            "student_id",
            "student_name",
            "student_email",
            "attempt_number",
            "started_at",
            "submitted_at",
            "time_taken_minutes",
            "answers",
            "score",
            "max_score",
            "percentage",
            "passed",
            "is_submitted",
            "auto_graded",
        ]
        read_only_fields = fields

    def get_student_name(self, obj):
        return obj.student.get_full_name() or obj.student.get_username()


class SubmitAttemptSerializer(serializers.Serializer):
    answers = serializers.DictField()
