from rest_framework import permissions
from rest_framework.views import APIView
from rest_framework.response import Response

# Angepasste Importe
from ...services import AttemptResultService, GradingCoordinator
from ..serializers import (
    AttemptSerializer,
    GradeAnswerSerializer,
    ListQuerySerializer,
    PendingAnswerSerializer,
)


class PendingGradingListView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        query = ListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        page = GradingCoordinator().list_pending(**query.validated_data)
        return Response(
            {
                "success": True,
                "data": PendingAnswerSerializer(page.items, many=True).data,
                "meta": page.meta,
            }
        )


class GradeAnswerView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, answer_id):
        serializer = GradeAnswerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = GradingCoordinator().grade_answer(
            answer_id,
            serializer.validated_data["score"],
            feedback=serializer.validated_data.get("feedback", ""),
            grader=request.user,
        )
        data = {
            "answer_id": result.answer.pk,
            "score": str(result.answer.score),
            "attempt": AttemptSerializer(result.attempt).data,
        }
        return Response({"success": True, "data": data})


class GraderAttemptResultView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request, attempt_id):
        result = AttemptResultService().get_result(attempt_id, as_grader=True)
        return Response({"success": True, "data": result})
