"""
Grading Coordinator

Manual grading of subjective answers (SHORT_ANSWER, ESSAY).

- ``list_pending``: the grading queue, oldest submission first
- ``grade_answer``: record one grade and re-evaluate attempt completion

Corrections are allowed while the attempt is GRADED; the aggregate is always
recomputed from all stored answers under a row lock on the attempt.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Optional

from django.db import transaction
from django.utils import timezone

from ...attempts.models import AttemptAnswer, ExamAttempt
from ...exceptions import AnswerNotFound, InvalidState, NotGradable, OutOfRange
from ...question_bank.models import SUBJECTIVE_TYPES
from ..pagination import Page, paginate
from .aggregation import recompute_attempt_score

logger = logging.getLogger(__name__)

GRADABLE_STATES = (ExamAttempt.Status.SUBMITTED, ExamAttempt.Status.GRADED)


@dataclass
class GradeResult:
    answer: AttemptAnswer
    attempt: ExamAttempt


class GradingCoordinator:
    def __init__(self, now: Callable[[], Any] = timezone.now):
        self.now = now
        self.logger = logger

    def pending_queryset(self, exam_id: Optional[int] = None):
        queryset = AttemptAnswer.objects.filter(
            question_type__in=SUBJECTIVE_TYPES,
            score__isnull=True,
            attempt__status__in=GRADABLE_STATES,
        )
        if exam_id is not None:
            queryset = queryset.filter(attempt__exam_id=exam_id)
        return queryset.select_related(
            "attempt", "attempt__exam", "attempt__test_taker"
        ).order_by("attempt__submitted_at", "id")

    def list_pending(
        self,
        exam_id: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page:
        """Subjective answers waiting for a score, oldest submission first."""
        return paginate(self.pending_queryset(exam_id), page=page, limit=limit)

    def grade_answer(self, answer_id: int, score, feedback: str = "", grader=None) -> GradeResult:
        """
        Record a manual grade.

        Raises:
            AnswerNotFound: Unknown answer
            InvalidState: Attempt is still IN_PROGRESS
            NotGradable: Answer belongs to an objective question
            OutOfRange: Score is negative or above the answer's max score
        """
        try:
            score = Decimal(str(score))
        except (InvalidOperation, ValueError):
            raise OutOfRange(answer_id, score, "?")
        if not score.is_finite():
            raise OutOfRange(answer_id, score, "?")

        with transaction.atomic():
            attempt_id = (
                AttemptAnswer.objects.filter(pk=answer_id)
                .values_list("attempt_id", flat=True)
                .first()
            )
            if attempt_id is None:
                raise AnswerNotFound(answer_id=answer_id)

            attempt = ExamAttempt.objects.select_for_update().get(pk=attempt_id)
            answer = AttemptAnswer.objects.get(pk=answer_id)

            if attempt.status not in GRADABLE_STATES:
                raise InvalidState(attempt.pk, attempt.status, "grade")
            if answer.is_objective:
                raise NotGradable(answer.pk, answer.question_type)
            if score < 0 or score > answer.max_score:
                raise OutOfRange(answer.pk, score, answer.max_score)

            now = self.now()
            answer.score = score.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            answer.feedback = feedback or ""
            answer.graded_by = grader
            answer.graded_at = now
            answer.grading_error = ""
            answer.save()

            all_graded = recompute_attempt_score(attempt)
            if all_graded and attempt.status == ExamAttempt.Status.SUBMITTED:
                attempt.transition_to(ExamAttempt.Status.GRADED)
                attempt.graded_at = now
                attempt.graded_by = grader
                self.logger.info(f"Versuch {attempt.pk} vollständig bewertet")
            attempt.save()

        self.logger.debug(f"Antwort {answer.pk} bewertet: {answer.score}/{answer.max_score}")
        return GradeResult(answer=answer, attempt=attempt)
