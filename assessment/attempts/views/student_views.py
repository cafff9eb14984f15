from rest_framework import generics, permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone

# Angepasste Importe
from ...exams.models import Exam
from ...services import AttemptResultService, AttemptService
from ..serializers import (
    AnswerInputSerializer,
    AttemptSerializer,
    ExamListSerializer,
    ListQuerySerializer,
    SubmitAttemptSerializer,
)


class AvailableExamsView(generics.ListAPIView):
    serializer_class = ExamListSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        now = timezone.now()
        return (
            Exam.objects.filter(is_published=True)
            .filter(Q(start_time__isnull=True) | Q(start_time__lte=now))
            .filter(Q(end_time__isnull=True) | Q(end_time__gte=now))
            .order_by("title")
        )


class StartAttemptView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, exam_id):
        exam = get_object_or_404(Exam, pk=exam_id)
        result = AttemptService().start(request.user, exam)

        data = {
            "attempt": AttemptSerializer(result.attempt).data,
            "questions": result.public_questions,
            "resumed": not result.created,
        }
        response_status = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
        return Response({"success": True, "data": data}, status=response_status)


class AttemptListView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        query = ListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        page = AttemptService().list_attempts(request.user, **query.validated_data)
        return Response(
            {
                "success": True,
                "data": AttemptSerializer(page.items, many=True).data,
                "meta": page.meta,
            }
        )


class AttemptDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, attempt_id):
        detail = AttemptService().get_attempt_detail(attempt_id, test_taker=request.user)
        data = {
            "attempt": AttemptSerializer(detail.attempt).data,
            "questions": detail.public_questions,
            "answers": [
                {"question_id": question_id, "payload": payload}
                for question_id, payload in detail.saved_answers.items()
            ],
        }
        return Response({"success": True, "data": data})


class SaveAnswerView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, attempt_id):
        serializer = AnswerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        answer = AttemptService().save_answer(
            attempt_id,
            serializer.validated_data["question_id"],
            serializer.validated_data.get("payload"),
            test_taker=request.user,
        )
        return Response(
            {
                "success": True,
                "data": {"question_id": answer.question_id, "payload": answer.answer_data},
            }
        )


class SubmitAttemptView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, attempt_id):
        serializer = SubmitAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AttemptService().submit(
            attempt_id,
            serializer.validated_data.get("answers", []),
            test_taker=request.user,
        )
        data = {
            "attempt": AttemptSerializer(result.attempt).data,
            "duration_seconds": result.duration_seconds,
            "auto_graded": result.auto_graded,
            "failed_items": result.failed_items,
        }
        return Response({"success": True, "data": data})


class AttemptResultView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, attempt_id):
        result = AttemptResultService().get_result(attempt_id, viewer=request.user)
        return Response({"success": True, "data": result})
