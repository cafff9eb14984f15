"""
Exam Attempt Serializers

Serializers:
- ExamListSerializer: Exams a test-taker can see
- AttemptSerializer: Attempt metadata (no snapshot, no correctness data)
- AnswerInputSerializer / SubmitAttemptSerializer: Submitted payloads
- GradeAnswerSerializer: Manual grade input
- PendingAnswerSerializer: Grading queue entries
- ListQuerySerializer: Paging and filter query parameters

Author: DSP Development Team
Version: 1.0.0
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from rest_framework import serializers

from ..exams.models import Exam
from .models import AttemptAnswer, ExamAttempt


class ExamListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Exam
        fields = [
            "id",
            "title",
            "description",
            "instructions",
            "duration_minutes",
            "passing_score",
            "max_attempts",
            "start_time",
            "end_time",
            "show_results_immediately",
        ]


class AttemptSerializer(serializers.ModelSerializer):
    exam_title = serializers.CharField(source="exam.title", read_only=True)
    percentage = serializers.DecimalField(max_digits=6, decimal_places=2, read_only=True)
    expires_at = serializers.DateTimeField(read_only=True)
    total_questions = serializers.SerializerMethodField()

    class Meta:
        model = ExamAttempt
        fields = [
            "id",
            "exam",
            "exam_title",
            "attempt_number",
            "status",
            "started_at",
            "expires_at",
            "submitted_at",
            "graded_at",
            "duration_seconds",
            "total_questions",
            "max_score",
            "earned_score",
            "percentage",
            "is_auto_graded",
        ]
        read_only_fields = fields

    def get_total_questions(self, obj: ExamAttempt) -> int:
        return len(obj.snapshot_questions)


class AnswerInputSerializer(serializers.Serializer):
    question_id = serializers.IntegerField(min_value=1)
    payload = serializers.JSONField(required=False, allow_null=True, default=None)


class SubmitAttemptSerializer(serializers.Serializer):
    answers = AnswerInputSerializer(many=True, required=False, default=list)


class GradeAnswerSerializer(serializers.Serializer):
    # bounds are checked against the answer's max score by the service
    score = serializers.DecimalField(max_digits=7, decimal_places=2)
    feedback = serializers.CharField(required=False, allow_blank=True, default="")


class ListQuerySerializer(serializers.Serializer):
    exam_id = serializers.IntegerField(required=False, min_value=1)
    page = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1)


class PendingAnswerSerializer(serializers.ModelSerializer):
    attempt_id = serializers.IntegerField(read_only=True)
    exam_id = serializers.IntegerField(source="attempt.exam_id", read_only=True)
    exam_title = serializers.CharField(source="attempt.exam.title", read_only=True)
    test_taker = serializers.CharField(source="attempt.test_taker.get_username", read_only=True)
    submitted_at = serializers.DateTimeField(source="attempt.submitted_at", read_only=True)
    question = serializers.SerializerMethodField()

    class Meta:
        model = AttemptAnswer
        fields = [
            "id",
            "attempt_id",
            "exam_id",
            "exam_title",
            "test_taker",
            "submitted_at",
            "question_id",
            "question_type",
            "question",
            "answer_data",
            "max_score",
        ]
        read_only_fields = fields

    def get_question(self, obj: AttemptAnswer) -> Optional[Dict[str, Any]]:
        """Question text and reference answer from the attempt snapshot."""
        for question in obj.attempt.snapshot_questions:
            if int(question["question_id"]) == obj.question_id:
                return {
                    "content": question.get("content", ""),
                    "answer_key": (question.get("correctness") or {}).get("answer_key", ""),
                    "points": question.get("points", str(Decimal("0"))),
                }
        return None
