"""
Exam Assembler

Turns a resolved question selection into the ordered, personalised exam of
one attempt. Produces the typed snapshot (with correctness data) from which the
public view (without correctness data) is derived, so both views always share
the same ordering.

Points per question:
1. ``points_per_question`` of the rule the question was drawn for
2. otherwise ``exam.total_points`` spread evenly over all requested questions
3. otherwise the question's own ``points``

Author: DSP Development Team
Version: 1.0.0
"""

import logging
import random
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from ...exams.models import Exam
from ...question_bank.models import CHOICE_TYPES, QuestionType
from ..distribution import Resolution, ResolvedQuestion, fisher_yates_shuffle
from .snapshot import (
    ChoiceQuestion,
    EssayQuestion,
    ExamSnapshot,
    ShortAnswerQuestion,
    SnapshotOption,
    SnapshotQuestion,
    TrueFalseQuestion,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass
class AssembledExam:
    snapshot: ExamSnapshot
    public_questions: List[Dict[str, Any]] = field(default_factory=list)


class ExamAssembler:
    """
    Orders questions and options and builds the attempt snapshot.

    Example:
        >>> assembler = ExamAssembler()
        >>> assembled = assembler.assemble(exam, resolution, random.Random(7), seed=7)
        >>> assembled.snapshot.to_dict()["questions"][0]["order"]
        1
    """

    def __init__(self):
        self.logger = logger

    def assemble(
        self,
        exam: Exam,
        resolution: Resolution,
        rng: random.Random,
        seed: Optional[int] = None,
    ) -> AssembledExam:
        resolved = list(resolution.questions)
        if exam.shuffle_questions:
            resolved = fisher_yates_shuffle(resolved, rng)

        default_points = self._default_points(exam, resolution.total_requested)

        questions = [
            self._build_question(item, order, default_points, exam.shuffle_options, rng)
            for order, item in enumerate(resolved, start=1)
        ]

        snapshot = ExamSnapshot(
            exam_id=exam.pk,
            exam_title=exam.title,
            selection_seed=seed,
            time_limit_minutes=exam.duration_minutes,
            questions=questions,
        )
        self.logger.debug(
            f"Prüfung '{exam.title}' zusammengestellt: {len(questions)} Fragen, "
            f"max. {snapshot.max_score} Punkte"
        )
        return AssembledExam(snapshot=snapshot, public_questions=snapshot.public_questions())

    def _default_points(self, exam: Exam, total_requested: int) -> Optional[Decimal]:
        if exam.total_points is None or total_requested <= 0:
            return None
        return (Decimal(exam.total_points) / total_requested).quantize(CENT, rounding=ROUND_HALF_UP)

    def _build_question(
        self,
        item: ResolvedQuestion,
        order: int,
        default_points: Optional[Decimal],
        shuffle_options: bool,
        rng: random.Random,
    ) -> SnapshotQuestion:
        question = item.question

        if item.points_per_question is not None:
            points = Decimal(item.points_per_question)
        elif default_points is not None:
            points = default_points
        else:
            points = Decimal(question.points)

        common = dict(
            question_id=question.id,
            order=order,
            points=points.quantize(CENT, rounding=ROUND_HALF_UP),
            content=question.content,
            category_id=question.category_id,
            category_name=question.category.name if question.category_id else None,
            difficulty=question.difficulty,
            explanation=question.explanation,
        )

        if question.question_type == QuestionType.TRUE_FALSE:
            return TrueFalseQuestion(**common, correct_value=bool(question.correct_boolean))

        if question.question_type in CHOICE_TYPES:
            options = list(question.options.all())
            if shuffle_options:
                options = fisher_yates_shuffle(options, rng)
            return ChoiceQuestion(
                **common,
                multiple=question.question_type == QuestionType.MULTIPLE_CHOICE,
                choices=[
                    SnapshotOption(key=option.key, content=option.content, order=position)
                    for position, option in enumerate(options, start=1)
                ],
                correct_keys=[option.key for option in options if option.is_correct],
            )

        if question.question_type == QuestionType.SHORT_ANSWER:
            return ShortAnswerQuestion(**common, answer_key=question.answer_key)
        return EssayQuestion(**common, answer_key=question.answer_key)
