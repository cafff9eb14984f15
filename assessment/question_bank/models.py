"""
Question Bank Models

This module defines the question catalog the Exam Attempt Engine draws from.
The engine only reads these records and requests atomic usage-counter
increments; authoring happens through the admin.

Models:
- QuestionCategory: Organizational categories for questions
- Question: A single question with type, difficulty and correctness data
- QuestionOption: Discrete answer options of choice questions

Correctness payload per type:
- TRUE_FALSE: ``correct_boolean``
- SINGLE_CHOICE / MULTIPLE_CHOICE: options flagged ``is_correct``
- SHORT_ANSWER / ESSAY: free-text ``answer_key`` (reference for graders)

Author: DSP Development Team
Version: 1.0.0
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class QuestionType(models.TextChoices):
    TRUE_FALSE = "TRUE_FALSE", _("True / False")
    SINGLE_CHOICE = "SINGLE_CHOICE", _("Single Choice")
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE", _("Multiple Choice")
    SHORT_ANSWER = "SHORT_ANSWER", _("Short Answer")
    ESSAY = "ESSAY", _("Essay")


class Difficulty(models.TextChoices):
    EASY = "EASY", _("Easy")
    MEDIUM = "MEDIUM", _("Medium")
    HARD = "HARD", _("Hard")


OBJECTIVE_TYPES = frozenset(
    {
        QuestionType.TRUE_FALSE.value,
        QuestionType.SINGLE_CHOICE.value,
        QuestionType.MULTIPLE_CHOICE.value,
    }
)
SUBJECTIVE_TYPES = frozenset({QuestionType.SHORT_ANSWER.value, QuestionType.ESSAY.value})
CHOICE_TYPES = frozenset({QuestionType.SINGLE_CHOICE.value, QuestionType.MULTIPLE_CHOICE.value})


class QuestionCategory(models.Model):
    """
    Organizational category for questions (e.g. "Geometry", "Algebra").

    Distribution rules draw questions per category; results report per-category
    statistics using the category captured in the attempt snapshot.
    """

    name = models.CharField(
        max_length=150,
        unique=True,
        verbose_name=_("Category Name"),
    )
    description = models.TextField(blank=True)
    order_index = models.PositiveIntegerField(default=0)

    def __str__(self) -> str:
        return self.name

    class Meta:
        verbose_name = _("Question Category")
        verbose_name_plural = _("Question Categories")
        ordering = ["order_index", "name"]
        db_table = "assessment_question_category"


class Question(models.Model):
    """
    A question in the bank.

    Questions stay editable after being used in attempts; attempts never read
    them again after snapshotting. ``usage_count`` is only ever increased via
    atomic ``F()`` updates and is used as a fairness heuristic during selection.

    Example:
        >>> question = Question.objects.create(
        ...     category=category,
        ...     content="2 + 2 = 4?",
        ...     question_type=QuestionType.TRUE_FALSE,
        ...     difficulty=Difficulty.EASY,
        ...     correct_boolean=True,
        ... )
    """

    category = models.ForeignKey(
        QuestionCategory,
        on_delete=models.PROTECT,
        related_name="questions",
        verbose_name=_("Category"),
    )
    content = models.TextField(verbose_name=_("Question Text"))
    question_type = models.CharField(
        max_length=20,
        choices=QuestionType.choices,
        default=QuestionType.SINGLE_CHOICE,
        db_index=True,
    )
    difficulty = models.CharField(
        max_length=10,
        choices=Difficulty.choices,
        default=Difficulty.MEDIUM,
        db_index=True,
    )
    points = models.DecimalField(
        max_digits=7,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Default max score when the exam does not set points per question."),
    )
    correct_boolean = models.BooleanField(
        null=True,
        blank=True,
        help_text=_("Correct value for TRUE_FALSE questions."),
    )
    answer_key = models.TextField(
        blank=True,
        help_text=_("Reference answer for SHORT_ANSWER / ESSAY graders."),
    )
    explanation = models.TextField(blank=True)
    usage_count = models.PositiveIntegerField(default=0, db_index=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Question")
        verbose_name_plural = _("Questions")
        ordering = ["category", "id"]
        db_table = "assessment_question"

    def __str__(self) -> str:
        return f"{self.content[:50]}..."

    @property
    def is_objective(self) -> bool:
        return self.question_type in OBJECTIVE_TYPES

    def clean(self):
        if self.question_type == QuestionType.TRUE_FALSE and self.correct_boolean is None:
            raise ValidationError(
                {"correct_boolean": _("TRUE_FALSE questions need a correct value.")}
            )


class QuestionOption(models.Model):
    """
    Answer option of a choice question.

    ``key`` is the stable identifier test-takers submit; it stays attached to
    the option content when option order is shuffled.
    """

    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name="options",
    )
    key = models.CharField(max_length=20)
    content = models.TextField()
    is_correct = models.BooleanField(default=False)
    order_index = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Question Option")
        verbose_name_plural = _("Question Options")
        ordering = ["question", "order_index", "id"]
        unique_together = ("question", "key")
        db_table = "assessment_question_option"

    def __str__(self) -> str:
        return f"{self.key}: {self.content[:40]}"
