"""
Exam Configuration Models

Models:
- Exam: Publishable exam configuration with time window, attempt limit,
  shuffle flags and scoring settings
- DistributionRule: How many questions of a category/difficulty/type to draw

Author: DSP Development Team
Version: 1.0.0
"""

import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ..question_bank.models import Difficulty, QuestionCategory, QuestionType


class Exam(models.Model):
    """
    Exam configuration a test-taker can start attempts for.

    Eligibility for a new attempt requires the exam to be published, the
    current time to lie within ``start_time``/``end_time`` (each optional) and
    the test-taker to be below ``max_attempts`` (``None`` means unlimited).
    """

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    instructions = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Time limit per attempt. Empty means no limit."),
    )
    total_points = models.DecimalField(
        max_digits=7,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_(
            "Spread evenly over all questions whose rule has no points per question."
        ),
    )
    passing_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("50.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text=_("Pass mark in percent of the attempt's max score."),
    )
    shuffle_questions = models.BooleanField(default=False)
    shuffle_options = models.BooleanField(default=False)
    show_results_immediately = models.BooleanField(
        default=False,
        help_text=_(
            "Show results (including correct answers) right after submission."
        ),
    )
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    max_attempts = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
    )
    is_published = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Exam")
        verbose_name_plural = _("Exams")
        ordering = ["-created_at"]
        db_table = "assessment_exam"

    def __str__(self) -> str:
        return self.title

    def is_open_at(self, moment: datetime.datetime) -> bool:
        if self.start_time and moment < self.start_time:
            return False
        if self.end_time and moment > self.end_time:
            return False
        return True

    def ordered_rules(self) -> List["DistributionRule"]:
        return list(self.distributions.select_related("category").order_by("order_index", "id"))

    def clean(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError({"end_time": _("End time must be after start time.")})


class DistributionRule(models.Model):
    """
    A single selection requirement of an exam.

    Either a difficulty split (``easy_count``/``medium_count``/``hard_count``)
    or a flat ``quantity`` drawn without a difficulty filter. When both are
    given, ``quantity`` must equal the split total.
    """

    exam = models.ForeignKey(
        Exam,
        on_delete=models.CASCADE,
        related_name="distributions",
    )
    category = models.ForeignKey(
        QuestionCategory,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="distribution_rules",
        help_text=_("Empty means any category."),
    )
    question_type = models.CharField(
        max_length=20,
        choices=QuestionType.choices,
        blank=True,
        help_text=_("Empty means any question type."),
    )
    quantity = models.PositiveIntegerField(null=True, blank=True)
    easy_count = models.PositiveIntegerField(default=0)
    medium_count = models.PositiveIntegerField(default=0)
    hard_count = models.PositiveIntegerField(default=0)
    points_per_question = models.DecimalField(
        max_digits=7,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    order_index = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Distribution Rule")
        verbose_name_plural = _("Distribution Rules")
        ordering = ["exam", "order_index", "id"]
        db_table = "assessment_distribution_rule"

    def __str__(self) -> str:
        category = self.category.name if self.category_id else "any"
        return f"{category}: {self.requested_total} question(s)"

    @property
    def split_total(self) -> int:
        return self.easy_count + self.medium_count + self.hard_count

    @property
    def has_split(self) -> bool:
        return self.split_total > 0

    @property
    def requested_total(self) -> int:
        if self.has_split:
            return self.split_total
        return self.quantity or 0

    def selection_pairs(self) -> List[Tuple[Optional[str], int]]:
        """
        (difficulty, count) pairs to resolve, zero counts skipped.

        A flat quantity yields a single pair with difficulty ``None``.
        """
        if not self.has_split:
            return [(None, self.quantity)] if self.quantity else []
        pairs = [
            (Difficulty.EASY.value, self.easy_count),
            (Difficulty.MEDIUM.value, self.medium_count),
            (Difficulty.HARD.value, self.hard_count),
        ]
        return [(difficulty, count) for difficulty, count in pairs if count > 0]

    def consistency_error(self) -> Optional[str]:
        if self.has_split and self.quantity is not None and self.quantity != self.split_total:
            return (
                f"total count ({self.split_total}) must equal quantity ({self.quantity})"
            )
        return None

    def clean(self):
        error = self.consistency_error()
        if error:
            raise ValidationError({"quantity": error})
