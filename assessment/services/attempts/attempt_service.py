"""
Attempt Service

Lifecycle operations of exam attempts for test-takers:

- start: idempotent creation of a personalised attempt (selection, assembly,
  snapshot, usage counters) after the eligibility checks
- save_answer: store a raw payload while the attempt is IN_PROGRESS
- submit: delegate to the SubmissionProcessor
- list_attempts / get_attempt_detail: read access for resuming and history

Concurrency:
    "One open attempt per test-taker and exam" is enforced by a partial unique
    constraint. A concurrent start that loses the race hits an IntegrityError
    inside a savepoint and returns the attempt created by the winner.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
import random
import secrets
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone

from ...attempts.models import AttemptAnswer, ExamAttempt
from ...exams.models import Exam
from ...exceptions import (
    AnswerNotFound,
    AttemptLimitReached,
    AttemptNotFound,
    InvalidState,
    NotPublished,
    OutOfTimeWindow,
)
from ..assembly import ExamAssembler, ExamSnapshot
from ..distribution import DistributionResolver
from ..grading import SubmissionProcessor, SubmissionResult
from ..pagination import Page, paginate
from ..question_bank import QuestionBankService

logger = logging.getLogger(__name__)


def default_seed_source() -> int:
    return secrets.randbits(32)


@dataclass
class StartResult:
    attempt: ExamAttempt
    public_questions: List[Dict[str, Any]] = field(default_factory=list)
    created: bool = True


@dataclass
class AttemptDetail:
    attempt: ExamAttempt
    public_questions: List[Dict[str, Any]] = field(default_factory=list)
    saved_answers: Dict[int, Any] = field(default_factory=dict)


class AttemptService:
    """
    Entry point for test-taker operations on attempts.

    Collaborators are injected so tests can pin the clock and the random
    source.

    Args:
        question_bank: Candidate queries and usage counters
        assembler: Builds snapshots from resolved questions
        submission_processor: Submit and auto-grade
        now: Clock
        seed_source: Returns the seed for selection and shuffling; the seed is
            stored in the snapshot
    """

    def __init__(
        self,
        question_bank: Optional[QuestionBankService] = None,
        assembler: Optional[ExamAssembler] = None,
        submission_processor: Optional[SubmissionProcessor] = None,
        now: Callable[[], Any] = timezone.now,
        seed_source: Callable[[], int] = default_seed_source,
    ):
        self.question_bank = question_bank or QuestionBankService()
        self.assembler = assembler or ExamAssembler()
        self.submission_processor = submission_processor or SubmissionProcessor(now=now)
        self.now = now
        self.seed_source = seed_source
        self.logger = logger

    # --- Start ---

    def start(self, test_taker, exam: Exam) -> StartResult:
        """
        Start (or resume) the test-taker's attempt at ``exam``.

        Returns the existing IN_PROGRESS attempt unchanged if there is one.

        Raises:
            NotPublished, OutOfTimeWindow, AttemptLimitReached: Not eligible
            InsufficientQuestions, InvalidConfiguration: Selection failed;
                nothing is persisted
        """
        existing = self._open_attempt(test_taker, exam)
        if existing is not None:
            return self._resumed(existing)

        now = self.now()
        self._check_eligibility(test_taker, exam, now)

        seed = self.seed_source()
        rng = random.Random(seed)
        resolution = DistributionResolver(self.question_bank, rng).resolve(exam.ordered_rules())
        assembled = self.assembler.assemble(exam, resolution, rng, seed=seed)

        try:
            with transaction.atomic():
                last_number = (
                    ExamAttempt.objects.filter(test_taker=test_taker, exam=exam)
                    .aggregate(last=Max("attempt_number"))["last"]
                )
                attempt = ExamAttempt.objects.create(
                    exam=exam,
                    test_taker=test_taker,
                    attempt_number=(last_number or 0) + 1,
                    status=ExamAttempt.Status.IN_PROGRESS,
                    snapshot=assembled.snapshot.to_dict(),
                    max_score=assembled.snapshot.max_score,
                    started_at=now,
                )
                self.question_bank.increment_usage(resolution.question_ids)
        except IntegrityError:
            # parallel start for the same test-taker won the race
            existing = self._open_attempt(test_taker, exam)
            if existing is None:
                raise
            self.logger.info(f"Parallelen Start erkannt, verwende Versuch {existing.pk}")
            return self._resumed(existing)

        self.logger.info(
            f"Versuch {attempt.pk} (#{attempt.attempt_number}) für Prüfung {exam.pk} "
            f"gestartet, {len(assembled.public_questions)} Fragen, Seed {seed}"
        )
        return StartResult(attempt=attempt, public_questions=assembled.public_questions, created=True)

    def _open_attempt(self, test_taker, exam: Exam) -> Optional[ExamAttempt]:
        return ExamAttempt.objects.filter(
            test_taker=test_taker,
            exam=exam,
            status=ExamAttempt.Status.IN_PROGRESS,
        ).first()

    def _resumed(self, attempt: ExamAttempt) -> StartResult:
        snapshot = ExamSnapshot.from_dict(attempt.snapshot)
        return StartResult(attempt=attempt, public_questions=snapshot.public_questions(), created=False)

    def _check_eligibility(self, test_taker, exam: Exam, now) -> None:
        if not exam.is_published:
            raise NotPublished(exam.pk)
        if not exam.is_open_at(now):
            raise OutOfTimeWindow(exam.pk, exam.start_time, exam.end_time)
        if exam.max_attempts is not None:
            used = ExamAttempt.objects.filter(test_taker=test_taker, exam=exam).count()
            if used >= exam.max_attempts:
                raise AttemptLimitReached(exam.pk, exam.max_attempts, used)

    # --- Answers ---

    def save_answer(self, attempt_id: int, question_id: int, payload: Any, test_taker=None) -> AttemptAnswer:
        """
        Store (or replace) the raw payload for one snapshot question.

        Raises:
            AttemptNotFound: Unknown attempt or not owned by ``test_taker``
            InvalidState: Attempt is not IN_PROGRESS
            AnswerNotFound: Question is not part of the attempt's snapshot
        """
        with transaction.atomic():
            queryset = ExamAttempt.objects.select_for_update()
            if test_taker is not None:
                queryset = queryset.filter(test_taker=test_taker)
            try:
                attempt = queryset.get(pk=attempt_id)
            except ExamAttempt.DoesNotExist:
                raise AttemptNotFound(attempt_id)

            if attempt.status != ExamAttempt.Status.IN_PROGRESS:
                raise InvalidState(attempt.pk, attempt.status, "save answers for")

            question = ExamSnapshot.from_dict(attempt.snapshot).question(int(question_id))
            if question is None:
                raise AnswerNotFound(question_id=question_id)

            answer, _ = AttemptAnswer.objects.update_or_create(
                attempt=attempt,
                question_id=question.question_id,
                defaults={
                    "question_type": question.question_type,
                    "answer_data": payload,
                    "max_score": question.points,
                },
            )
        return answer

    def submit(self, attempt_id: int, answers=None, test_taker=None) -> SubmissionResult:
        return self.submission_processor.submit(attempt_id, answers, test_taker=test_taker)

    # --- Read access ---

    def list_attempts(
        self,
        test_taker,
        exam_id: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page:
        queryset = ExamAttempt.objects.filter(test_taker=test_taker)
        if exam_id is not None:
            queryset = queryset.filter(exam_id=exam_id)
        queryset = queryset.select_related("exam").order_by("-started_at", "-id")
        return paginate(queryset, page=page, limit=limit)

    def get_attempt_detail(self, attempt_id: int, test_taker=None) -> AttemptDetail:
        """Public questions plus saved payloads, used to resume an attempt."""
        queryset = ExamAttempt.objects.select_related("exam")
        if test_taker is not None:
            queryset = queryset.filter(test_taker=test_taker)
        try:
            attempt = queryset.get(pk=attempt_id)
        except ExamAttempt.DoesNotExist:
            raise AttemptNotFound(attempt_id)

        snapshot = ExamSnapshot.from_dict(attempt.snapshot)
        saved = {answer.question_id: answer.answer_data for answer in attempt.answers.all()}
        return AttemptDetail(
            attempt=attempt,
            public_questions=snapshot.public_questions(),
            saved_answers=saved,
        )
