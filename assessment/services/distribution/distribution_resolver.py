"""
Distribution Resolver

Selects the questions of a personalised exam from the question bank according
to an exam's ordered distribution rules.

Selection per (rule, difficulty) pair:
1. Query active candidates matching category/type/difficulty, least used first
2. Build the pool of lowest-usage candidates (everything up to and including
   the usage level of the last needed question)
3. Fisher-Yates shuffle the pool, then take the requested count, lowest usage
   level first (random tie-breaking inside a usage level)

A question is never selected twice for the same exam. If any pair cannot be
satisfied the whole resolution fails with ``InsufficientQuestions``; nothing
is persisted here.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
import random
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence, Set

from ...exams.models import DistributionRule
from ...exceptions import InsufficientQuestions, InvalidConfiguration
from ...question_bank.models import Question
from ..question_bank import QuestionBankService
from .shuffle import fisher_yates_shuffle

logger = logging.getLogger(__name__)


@dataclass
class ResolvedQuestion:
    """A selected bank question and the rule it was drawn for."""

    question: Question
    rule_index: int
    difficulty: Optional[str]
    points_per_question: Optional[Decimal] = None


@dataclass
class Resolution:
    """Result of resolving all rules of an exam."""

    questions: List[ResolvedQuestion] = field(default_factory=list)
    total_requested: int = 0

    @property
    def question_ids(self) -> List[int]:
        return [resolved.question.id for resolved in self.questions]


class DistributionResolver:
    """
    Resolves distribution rules into concrete questions.

    Args:
        question_bank: Repository used to query candidates
        rng: Random source; a seeded ``random.Random`` makes selection
            reproducible
    """

    def __init__(self, question_bank: QuestionBankService, rng: random.Random):
        self.question_bank = question_bank
        self.rng = rng
        self.logger = logger

    def resolve(self, rules: Sequence[DistributionRule]) -> Resolution:
        """
        Resolve the ordered rules of one exam.

        Raises:
            InvalidConfiguration: No rules, inconsistent rule, or zero questions
            InsufficientQuestions: A (rule, difficulty) pair cannot be satisfied
        """
        self._validate(rules)

        resolution = Resolution(total_requested=sum(rule.requested_total for rule in rules))
        selected_ids: Set[int] = set()

        for rule_index, rule in enumerate(rules):
            for difficulty, count in rule.selection_pairs():
                candidates = self.question_bank.find_candidates(
                    category_id=rule.category_id,
                    question_type=rule.question_type or None,
                    difficulty=difficulty,
                    exclude_ids=selected_ids,
                )
                if len(candidates) < count:
                    self.logger.info(
                        f"Regel {rule_index}: zu wenige Fragen ({difficulty or 'ANY'}), "
                        f"benötigt {count}, verfügbar {len(candidates)}"
                    )
                    raise InsufficientQuestions(
                        rule_index=rule_index,
                        requested=count,
                        available=len(candidates),
                        difficulty=difficulty,
                        category_id=rule.category_id,
                    )

                for question in self._pick(candidates, count):
                    selected_ids.add(question.id)
                    resolution.questions.append(
                        ResolvedQuestion(
                            question=question,
                            rule_index=rule_index,
                            difficulty=difficulty,
                            points_per_question=rule.points_per_question,
                        )
                    )

        self.logger.debug(
            f"{len(resolution.questions)} Fragen aus {len(rules)} Regeln ausgewählt"
        )
        return resolution

    def _pick(self, candidates: List[Question], count: int) -> List[Question]:
        # candidates are sorted by usage_count ascending
        boundary_usage = candidates[count - 1].usage_count
        pool = [c for c in candidates if c.usage_count <= boundary_usage]
        shuffled = fisher_yates_shuffle(pool, self.rng)
        shuffled.sort(key=lambda question: question.usage_count)
        return shuffled[:count]

    def _validate(self, rules: Sequence[DistributionRule]) -> None:
        if not rules:
            raise InvalidConfiguration("No distributions configured for this exam")

        for rule_index, rule in enumerate(rules):
            error = rule.consistency_error()
            if error:
                raise InvalidConfiguration(
                    f"Distribution rule {rule_index}: {error}",
                    details={"rule_index": rule_index},
                )

        if sum(rule.requested_total for rule in rules) <= 0:
            raise InvalidConfiguration("Distribution rules request no questions")
