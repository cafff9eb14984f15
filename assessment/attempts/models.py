"""
Exam Attempt Models

Models:
- ExamAttempt: One test-taker's instance of an exam, from start through final
  grade, including the frozen question snapshot
- AttemptAnswer: One answer per (attempt, question), auto- or manually graded

Lifecycle:
    IN_PROGRESS -> SUBMITTED -> GRADED (no back-transitions)

The snapshot is written once at creation and never re-derived from the live
question bank. Answers reference bank questions by id only.

Author: DSP Development Team
Version: 1.0.0
"""

import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from ..exams.models import Exam
from ..exceptions import InvalidState
from ..question_bank.models import OBJECTIVE_TYPES, QuestionType

User = settings.AUTH_USER_MODEL


class ExamAttempt(models.Model):
    class Status(models.TextChoices):
        IN_PROGRESS = "IN_PROGRESS", _("In Progress")
        SUBMITTED = "SUBMITTED", _("Submitted")
        GRADED = "GRADED", _("Graded")

    # Erlaubte Übergänge, keine Rückwärtsschritte
    TRANSITIONS = {
        Status.IN_PROGRESS: {Status.SUBMITTED},
        Status.SUBMITTED: {Status.GRADED},
        Status.GRADED: set(),
    }

    exam = models.ForeignKey(Exam, on_delete=models.PROTECT, related_name="attempts")
    test_taker = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="exam_attempts",
    )
    attempt_number = models.PositiveIntegerField()
    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.IN_PROGRESS,
        db_index=True,
    )
    snapshot = models.JSONField(
        help_text=_("Frozen copy of the questions shown, including correct answers."),
    )
    max_score = models.DecimalField(max_digits=9, decimal_places=2, default=Decimal("0"))
    earned_score = models.DecimalField(
        max_digits=9,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Recomputed from all answers whenever grading changes."),
    )
    is_auto_graded = models.BooleanField(default=False)
    started_at = models.DateTimeField()
    submitted_at = models.DateTimeField(null=True, blank=True)
    graded_at = models.DateTimeField(null=True, blank=True)
    duration_seconds = models.PositiveIntegerField(null=True, blank=True)
    graded_by = models.ForeignKey(
        User,
        related_name="graded_exam_attempts",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )

    class Meta:
        verbose_name = _("Exam Attempt")
        verbose_name_plural = _("Exam Attempts")
        ordering = ["-started_at"]
        db_table = "assessment_exam_attempt"
        constraints = [
            models.UniqueConstraint(
                fields=["test_taker", "exam"],
                condition=Q(status="IN_PROGRESS"),
                name="assessment_one_open_attempt_per_exam",
            ),
            models.UniqueConstraint(
                fields=["test_taker", "exam", "attempt_number"],
                name="assessment_unique_attempt_number",
            ),
        ]

    def __str__(self) -> str:
        return f"Attempt #{self.attempt_number} for {self.exam} by {self.test_taker}"

    @property
    def snapshot_questions(self) -> List[Dict[str, Any]]:
        return list((self.snapshot or {}).get("questions", []))

    @property
    def expires_at(self) -> Optional[datetime.datetime]:
        minutes = (self.snapshot or {}).get("time_limit_minutes")
        if self.started_at and minutes:
            return self.started_at + datetime.timedelta(minutes=minutes)
        return None

    @property
    def percentage(self) -> Optional[Decimal]:
        if self.earned_score is None or not self.max_score:
            return None
        return (self.earned_score / self.max_score * 100).quantize(Decimal("0.01"))

    def transition_to(self, new_status: str) -> None:
        """
        Move to ``new_status`` if the lifecycle allows it.

        Raises:
            InvalidState: For back-transitions, skips or terminal states
        """
        allowed = self.TRANSITIONS[self.Status(self.status)]
        if new_status not in allowed:
            raise InvalidState(self.pk, self.status, f"move to {new_status}")
        self.status = new_status


class AttemptAnswer(models.Model):
    """
    A test-taker's answer to one snapshot question.

    ``score`` is ``None`` until the answer is graded. ``is_correct`` is only
    set for objective types; subjective answers keep ``None`` even after
    manual grading. ``grading_error`` records why an answer could not be
    interpreted during auto-grading.
    """

    attempt = models.ForeignKey(
        ExamAttempt,
        on_delete=models.CASCADE,
        related_name="answers",
    )
    question_id = models.PositiveBigIntegerField(
        help_text=_("Id of the question in the snapshot (and originally in the bank)."),
    )
    question_type = models.CharField(max_length=20, choices=QuestionType.choices)
    answer_data = models.JSONField(null=True, blank=True)
    is_correct = models.BooleanField(null=True, blank=True)
    score = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    max_score = models.DecimalField(max_digits=7, decimal_places=2, default=Decimal("0"))
    feedback = models.TextField(blank=True)
    grading_error = models.TextField(blank=True)
    graded_by = models.ForeignKey(
        User,
        related_name="graded_answers",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    graded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Attempt Answer")
        verbose_name_plural = _("Attempt Answers")
        ordering = ["attempt", "id"]
        db_table = "assessment_attempt_answer"
        constraints = [
            models.UniqueConstraint(
                fields=["attempt", "question_id"],
                name="assessment_one_answer_per_question",
            ),
        ]

    def __str__(self) -> str:
        return f"Answer to question {self.question_id} in attempt {self.attempt_id}"

    @property
    def is_objective(self) -> bool:
        return self.question_type in OBJECTIVE_TYPES

    @property
    def is_graded(self) -> bool:
        return self.score is not None

    def clean(self):
        if self.score is not None and not (0 <= self.score <= self.max_score):
            raise ValidationError(
                {"score": _("Score must be between 0 and %(max)s.") % {"max": self.max_score}}
            )
