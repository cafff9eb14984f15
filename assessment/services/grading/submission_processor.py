"""
Submission Processor

Finalises an IN_PROGRESS attempt: stores the submitted payloads, grades every
snapshot question automatically where possible and computes the aggregate.

Grading only ever reads the attempt snapshot, never the live question bank,
so later edits or deletions in the bank cannot change a result.

Per question:
- TRUE_FALSE: correct iff the submitted boolean equals the snapshot value
- SINGLE_CHOICE / MULTIPLE_CHOICE: correct iff the set of submitted option
  keys equals the set of correct keys
- SHORT_ANSWER / ESSAY: left for manual grading (blank answers score 0)

A payload that cannot be interpreted is graded incorrect and the reason is
stored in ``grading_error``; the remaining answers are graded normally.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from ...attempts.models import AttemptAnswer, ExamAttempt
from ...exceptions import AttemptNotFound, InvalidState
from ..assembly import AnswerFormatError, ExamSnapshot, SnapshotQuestion
from .aggregation import recompute_attempt_score

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    attempt: ExamAttempt
    duration_seconds: int
    auto_graded: bool
    failed_items: List[int] = field(default_factory=list)


def index_payloads(snapshot: ExamSnapshot, answers: Optional[Iterable[Dict[str, Any]]]) -> Dict[int, Any]:
    """
    Map ``[{"question_id": ..., "payload": ...}]`` to ``{question_id: payload}``.

    Entries for questions outside the snapshot are dropped with a warning.
    """
    indexed: Dict[int, Any] = {}
    for item in answers or []:
        try:
            question_id = int(item.get("question_id"))
        except (AttributeError, TypeError, ValueError):
            logger.warning(f"Antwort ohne gültige question_id ignoriert: {item!r}")
            continue
        if snapshot.question(question_id) is None:
            logger.warning(f"Antwort für unbekannte Frage {question_id} ignoriert")
            continue
        indexed[question_id] = item.get("payload")
    return indexed


class SubmissionProcessor:
    """
    Submits and auto-grades attempts.

    Args:
        now: Clock used for submission and grading timestamps
    """

    def __init__(self, now: Callable[[], Any] = timezone.now):
        self.now = now
        self.logger = logger

    def submit(
        self,
        attempt_id: int,
        answers: Optional[Iterable[Dict[str, Any]]] = None,
        test_taker=None,
    ) -> SubmissionResult:
        """
        Submit an attempt with its final answers.

        Payloads given here replace answers saved earlier for the same
        question; questions without any payload count as unanswered.

        Raises:
            AttemptNotFound: Unknown attempt or not owned by ``test_taker``
            InvalidState: Attempt is not IN_PROGRESS
        """
        with transaction.atomic():
            attempt = self._lock_attempt(attempt_id, test_taker)
            if attempt.status != ExamAttempt.Status.IN_PROGRESS:
                raise InvalidState(attempt.pk, attempt.status, "submit")

            snapshot = ExamSnapshot.from_dict(attempt.snapshot)
            submitted = index_payloads(snapshot, answers)

            now = self.now()
            attempt.submitted_at = now
            attempt.duration_seconds = max(0, int((now - attempt.started_at).total_seconds()))
            attempt.transition_to(ExamAttempt.Status.SUBMITTED)

            saved = {answer.question_id: answer for answer in attempt.answers.all()}
            failed_items: List[int] = []

            for question in snapshot.questions:
                answer = saved.get(question.question_id) or AttemptAnswer(
                    attempt=attempt,
                    question_id=question.question_id,
                    question_type=question.question_type,
                )
                if question.question_id in submitted:
                    answer.answer_data = submitted[question.question_id]
                answer.max_score = question.points
                if not self._grade(answer, question, now):
                    failed_items.append(question.question_id)
                answer.save()

            all_graded = recompute_attempt_score(attempt)
            attempt.is_auto_graded = all_graded
            if all_graded:
                attempt.transition_to(ExamAttempt.Status.GRADED)
                attempt.graded_at = now
            attempt.save()

        self.logger.info(
            f"Versuch {attempt.pk} abgegeben: Status {attempt.status}, "
            f"{attempt.earned_score}/{attempt.max_score} Punkte"
        )
        return SubmissionResult(
            attempt=attempt,
            duration_seconds=attempt.duration_seconds,
            auto_graded=all_graded,
            failed_items=failed_items,
        )

    def _lock_attempt(self, attempt_id: int, test_taker) -> ExamAttempt:
        queryset = ExamAttempt.objects.select_for_update()
        if test_taker is not None:
            queryset = queryset.filter(test_taker=test_taker)
        try:
            return queryset.get(pk=attempt_id)
        except ExamAttempt.DoesNotExist:
            raise AttemptNotFound(attempt_id)

    def _grade(self, answer: AttemptAnswer, question: SnapshotQuestion, now) -> bool:
        """Grade one answer in place. Returns False if the payload was unreadable."""
        try:
            outcome = question.grade(answer.answer_data)
        except AnswerFormatError as e:
            self.logger.warning(
                f"Antwort auf Frage {question.question_id} nicht auswertbar: {e}"
            )
            answer.is_correct = False
            answer.score = Decimal("0")
            answer.grading_error = str(e)
            answer.graded_at = now
            return False

        answer.is_correct = outcome.is_correct
        answer.score = outcome.score
        answer.grading_error = ""
        answer.graded_at = None if outcome.is_pending else now
        return True
