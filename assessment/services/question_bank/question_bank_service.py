"""
Question Bank Service

Read access to the question catalog for the Exam Attempt Engine plus the
atomic usage-counter increment performed after an attempt is created.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from typing import Iterable, List, Optional

from django.db.models import F

from ...question_bank.models import Question

logger = logging.getLogger(__name__)


class QuestionBankService:
    """
    Repository for the question bank.

    The engine only reads questions and increments usage counters; it never
    edits question content.
    """

    def __init__(self):
        self.logger = logger

    def find_candidates(
        self,
        category_id: Optional[int] = None,
        question_type: Optional[str] = None,
        difficulty: Optional[str] = None,
        exclude_ids: Iterable[int] = (),
    ) -> List[Question]:
        """
        Active questions matching the filters, least used first.

        Args:
            category_id: Restrict to one category (``None`` = any)
            question_type: Restrict to one question type (``None`` = any)
            difficulty: Restrict to one difficulty (``None`` = any)
            exclude_ids: Questions already selected for the same exam

        Returns:
            Questions ordered by ascending ``usage_count`` (id as tie-breaker),
            with category and options preloaded
        """
        queryset = Question.objects.filter(is_active=True)
        if category_id is not None:
            queryset = queryset.filter(category_id=category_id)
        if question_type:
            queryset = queryset.filter(question_type=question_type)
        if difficulty:
            queryset = queryset.filter(difficulty=difficulty)

        excluded = list(exclude_ids)
        if excluded:
            queryset = queryset.exclude(id__in=excluded)

        return list(
            queryset.select_related("category")
            .prefetch_related("options")
            .order_by("usage_count", "id")
        )

    def increment_usage(self, question_ids: Iterable[int]) -> int:
        """
        Atomically add one to the usage counter of each question.

        Returns:
            Number of updated rows
        """
        ids = list(question_ids)
        if not ids:
            return 0
        updated = Question.objects.filter(id__in=ids).update(usage_count=F("usage_count") + 1)
        self.logger.debug(f"Usage counter erhöht für {updated} Fragen")
        return updated
