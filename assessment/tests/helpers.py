"""
Test helpers for the Exam Attempt Engine test suites.

Small factory functions instead of fixtures, so that every test module can
build exactly the question bank it needs in ``setUpTestData``.
"""

import datetime
from decimal import Decimal

from django.contrib.auth.models import User
from django.utils import timezone

from assessment.models import (
    Difficulty,
    DistributionRule,
    Exam,
    Question,
    QuestionCategory,
    QuestionOption,
    QuestionType,
)


def create_user(username="student", is_staff=False):
    return User.objects.create_user(username=username, password="Musterpassword", is_staff=is_staff)


def create_category(name="Python"):
    return QuestionCategory.objects.create(name=name)


def create_true_false(category, difficulty=Difficulty.EASY, correct=True, content="Wahr oder falsch?", **kwargs):
    return Question.objects.create(
        category=category,
        content=content,
        question_type=QuestionType.TRUE_FALSE,
        difficulty=difficulty,
        correct_boolean=correct,
        **kwargs,
    )


def create_choice(
    category,
    correct_keys=("A",),
    keys=("A", "B", "C", "D"),
    multiple=False,
    difficulty=Difficulty.MEDIUM,
    content="Welche Antwort stimmt?",
    **kwargs,
):
    question = Question.objects.create(
        category=category,
        content=content,
        question_type=QuestionType.MULTIPLE_CHOICE if multiple else QuestionType.SINGLE_CHOICE,
        difficulty=difficulty,
        **kwargs,
    )
    for position, key in enumerate(keys):
        QuestionOption.objects.create(
            question=question,
            key=key,
            content=f"Option {key}",
            is_correct=key in correct_keys,
            order_index=position,
        )
    return question


def create_essay(category, difficulty=Difficulty.HARD, short=False, content="Erklären Sie.", **kwargs):
    return Question.objects.create(
        category=category,
        content=content,
        question_type=QuestionType.SHORT_ANSWER if short else QuestionType.ESSAY,
        difficulty=difficulty,
        answer_key="Musterlösung",
        **kwargs,
    )


def create_exam(title="Abschlussprüfung", **kwargs):
    defaults = {
        "is_published": True,
        "passing_score": Decimal("50.00"),
    }
    defaults.update(kwargs)
    return Exam.objects.create(title=title, **defaults)


def add_rule(exam, category=None, order_index=0, **kwargs):
    return DistributionRule.objects.create(exam=exam, category=category, order_index=order_index, **kwargs)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=None):
        self.current = start or timezone.now()

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += datetime.timedelta(**kwargs)
