"""
Attempt Result Service

Builds the result view of an attempt: summary, per-question breakdown and
per-category statistics. Everything is derived from the attempt snapshot and
its stored answers.

Visibility:
- Test-takers see results once the attempt is GRADED, or right after
  submission when the exam has ``show_results_immediately``
- Correct answers and explanations are only revealed to test-takers when
  ``show_results_immediately`` is set; graders always see them
- ``passed`` is only decided once the attempt is GRADED

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from collections import OrderedDict
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from ...attempts.models import AttemptAnswer, ExamAttempt
from ...conf import engine_setting
from ...exceptions import AttemptNotFound, InvalidState
from ..assembly import ExamSnapshot, is_blank_answer

logger = logging.getLogger(__name__)


def _decimal_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def percentage_of(earned: Optional[Decimal], maximum: Optional[Decimal]) -> Optional[Decimal]:
    if earned is None or not maximum:
        return None
    places = Decimal(1).scaleb(-engine_setting("SCORE_DECIMAL_PLACES"))
    return (Decimal(earned) / Decimal(maximum) * 100).quantize(places, rounding=ROUND_HALF_UP)


class AttemptResultService:
    def __init__(self):
        self.logger = logger

    def get_result(self, attempt_id: int, viewer=None, as_grader: bool = False) -> Dict[str, Any]:
        """
        Result of one attempt.

        Args:
            attempt_id: Attempt to report on
            viewer: Test-taker requesting the result; ignored for graders
            as_grader: Grader view (any attempt, correct answers always shown)

        Raises:
            AttemptNotFound: Unknown attempt or not owned by ``viewer``
            InvalidState: Results are not available yet
        """
        queryset = ExamAttempt.objects.select_related("exam")
        if not as_grader and viewer is not None:
            queryset = queryset.filter(test_taker=viewer)
        try:
            attempt = queryset.get(pk=attempt_id)
        except ExamAttempt.DoesNotExist:
            raise AttemptNotFound(attempt_id)

        exam = attempt.exam
        if attempt.status == ExamAttempt.Status.IN_PROGRESS:
            raise InvalidState(attempt.pk, attempt.status, "view results of")
        if (
            not as_grader
            and attempt.status == ExamAttempt.Status.SUBMITTED
            and not exam.show_results_immediately
        ):
            raise InvalidState(attempt.pk, attempt.status, "view results of")

        reveal = as_grader or exam.show_results_immediately
        snapshot = ExamSnapshot.from_dict(attempt.snapshot)
        answers = {answer.question_id: answer for answer in attempt.answers.all()}

        per_question = [
            self._question_entry(question, answers.get(question.question_id), reveal)
            for question in snapshot.questions
        ]
        return {
            "summary": self._summary(attempt, per_question),
            "per_question": per_question,
            "per_category": self._category_stats(snapshot, answers),
        }

    def _summary(self, attempt: ExamAttempt, per_question: List[Dict[str, Any]]) -> Dict[str, Any]:
        exam = attempt.exam
        percentage = percentage_of(attempt.earned_score, attempt.max_score)
        passed = None
        if attempt.status == ExamAttempt.Status.GRADED:
            passed = percentage is not None and percentage >= exam.passing_score

        return {
            "attempt_id": attempt.pk,
            "attempt_number": attempt.attempt_number,
            "exam_id": exam.pk,
            "exam_title": exam.title,
            "status": attempt.status,
            "started_at": attempt.started_at,
            "submitted_at": attempt.submitted_at,
            "graded_at": attempt.graded_at,
            "duration_seconds": attempt.duration_seconds,
            "max_score": _decimal_str(attempt.max_score),
            "earned_score": _decimal_str(attempt.earned_score),
            "percentage": _decimal_str(percentage),
            "passing_score": _decimal_str(exam.passing_score),
            "passed": passed,
            "total_questions": len(per_question),
            "answered_questions": sum(1 for item in per_question if item["answered"]),
            "correct_answers": sum(1 for item in per_question if item["is_correct"] is True),
            "pending_answers": sum(1 for item in per_question if item["pending"]),
        }

    def _question_entry(self, question, answer: Optional[AttemptAnswer], reveal: bool) -> Dict[str, Any]:
        entry = {
            "question_id": question.question_id,
            "order": question.order,
            "type": question.question_type,
            "content": question.content,
            "category_id": question.category_id,
            "category_name": question.category_name,
            "difficulty": question.difficulty,
            "options": [option.to_dict() for option in question.options],
            "max_score": _decimal_str(question.points),
            "answer": answer.answer_data if answer else None,
            "answered": bool(answer and not is_blank_answer(answer.answer_data)),
            "is_correct": answer.is_correct if answer else None,
            "score": _decimal_str(answer.score) if answer else None,
            "pending": bool(answer and not answer.is_graded),
            "feedback": answer.feedback if answer else "",
            "grading_error": answer.grading_error if answer else "",
        }
        if reveal:
            entry["correct_answer"] = question.correctness_payload()
            entry["explanation"] = question.explanation
        return entry

    def _category_stats(self, snapshot: ExamSnapshot, answers: Dict[int, AttemptAnswer]) -> List[Dict[str, Any]]:
        stats: "OrderedDict[Any, Dict[str, Any]]" = OrderedDict()
        for question in snapshot.questions:
            entry = stats.setdefault(
                question.category_id,
                {
                    "category_id": question.category_id,
                    "category_name": question.category_name,
                    "total_questions": 0,
                    "correct_answers": 0,
                    "max_score": Decimal("0"),
                    "earned_score": Decimal("0"),
                },
            )
            answer = answers.get(question.question_id)
            entry["total_questions"] += 1
            entry["max_score"] += question.points
            if answer is not None:
                if answer.is_correct:
                    entry["correct_answers"] += 1
                if answer.is_graded:
                    entry["earned_score"] += answer.score

        result = []
        for entry in stats.values():
            entry["percentage"] = _decimal_str(percentage_of(entry["earned_score"], entry["max_score"]))
            entry["max_score"] = _decimal_str(entry["max_score"])
            entry["earned_score"] = _decimal_str(entry["earned_score"])
            result.append(entry)
        return result
