"""
Exam Snapshot

Typed representation of the frozen exam embedded in every attempt. The
snapshot is a tagged union over the question type:

- TrueFalseQuestion: correctness is a boolean
- ChoiceQuestion: single or multiple choice, correctness is a set of option keys
- ShortAnswerQuestion / EssayQuestion: graded by hand, reference answer only

Each variant grades its own payloads, so grading only ever needs the snapshot
and the test-taker's answer. The persisted layout (``to_dict``) is the only
durable format and must stay stable when the question bank evolves:

    {
        "version": 1,
        "exam_id": ..., "exam_title": ..., "selection_seed": ...,
        "time_limit_minutes": ..., "max_score": "10.00", "total_questions": 5,
        "questions": [
            {"question_id": 7, "order": 1, "points": "2.00", "content": "...",
             "type": "MULTIPLE_CHOICE", "category_id": 3, "category_name": "...",
             "difficulty": "EASY", "explanation": "...",
             "correctness": {"correct_keys": ["A", "C"]},
             "options": [{"key": "A", "content": "...", "order": 1}, ...]},
            ...
        ]
    }

Author: DSP Development Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ...question_bank.models import QuestionType

SNAPSHOT_VERSION = 1


class AnswerFormatError(ValueError):
    """Raised when a submitted payload cannot be interpreted for a question type."""


@dataclass
class GradeOutcome:
    """
    Result of grading one payload.

    ``score is None`` means the answer waits for manual grading.
    """

    is_correct: Optional[bool]
    score: Optional[Decimal]

    @property
    def is_pending(self) -> bool:
        return self.score is None


@dataclass
class SnapshotOption:
    key: str
    content: str
    order: int

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "content": self.content, "order": self.order}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SnapshotOption":
        return cls(key=str(data["key"]), content=data.get("content", ""), order=int(data["order"]))


@dataclass
class SnapshotQuestion:
    """Common part of all snapshot question variants."""

    question_id: int
    order: int
    points: Decimal
    content: str
    category_id: Optional[int]
    category_name: Optional[str]
    difficulty: Optional[str]
    explanation: str

    @property
    def question_type(self) -> str:
        raise NotImplementedError

    @property
    def is_objective(self) -> bool:
        return True

    @property
    def options(self) -> List[SnapshotOption]:
        return []

    def correctness_payload(self) -> Dict[str, Any]:
        raise NotImplementedError

    def grade(self, payload: Any) -> GradeOutcome:
        raise NotImplementedError

    def to_public_dict(self) -> Dict[str, Any]:
        """Question as shown to the test-taker, without correctness data."""
        return {
            "question_id": self.question_id,
            "order": self.order,
            "points": str(self.points),
            "content": self.content,
            "type": self.question_type,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "difficulty": self.difficulty,
            "options": [option.to_dict() for option in self.options],
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_public_dict()
        data["explanation"] = self.explanation
        data["correctness"] = self.correctness_payload()
        return data

    def _award(self, correct: bool) -> GradeOutcome:
        return GradeOutcome(is_correct=correct, score=self.points if correct else Decimal("0"))


@dataclass
class TrueFalseQuestion(SnapshotQuestion):
    correct_value: bool = False

    @property
    def question_type(self) -> str:
        return QuestionType.TRUE_FALSE.value

    def correctness_payload(self) -> Dict[str, Any]:
        return {"value": self.correct_value}

    def grade(self, payload: Any) -> GradeOutcome:
        if payload is None:
            return self._award(False)
        return self._award(normalize_boolean(payload) == self.correct_value)


@dataclass
class ChoiceQuestion(SnapshotQuestion):
    multiple: bool = False
    choices: List[SnapshotOption] = field(default_factory=list)
    correct_keys: List[str] = field(default_factory=list)

    @property
    def question_type(self) -> str:
        if self.multiple:
            return QuestionType.MULTIPLE_CHOICE.value
        return QuestionType.SINGLE_CHOICE.value

    @property
    def options(self) -> List[SnapshotOption]:
        return self.choices

    def correctness_payload(self) -> Dict[str, Any]:
        return {"correct_keys": sorted(self.correct_keys)}

    def grade(self, payload: Any) -> GradeOutcome:
        if payload is None:
            return self._award(False)
        submitted = normalize_option_keys(payload)
        # exact set match, no partial credit
        return self._award(set(submitted) == set(self.correct_keys))


@dataclass
class SubjectiveQuestion(SnapshotQuestion):
    answer_key: str = ""

    @property
    def is_objective(self) -> bool:
        return False

    def correctness_payload(self) -> Dict[str, Any]:
        return {"answer_key": self.answer_key}

    def grade(self, payload: Any) -> GradeOutcome:
        # blank answers have nothing to grade
        if is_blank_answer(payload):
            return GradeOutcome(is_correct=None, score=Decimal("0"))
        return GradeOutcome(is_correct=None, score=None)


@dataclass
class ShortAnswerQuestion(SubjectiveQuestion):
    @property
    def question_type(self) -> str:
        return QuestionType.SHORT_ANSWER.value


@dataclass
class EssayQuestion(SubjectiveQuestion):
    @property
    def question_type(self) -> str:
        return QuestionType.ESSAY.value


@dataclass
class ExamSnapshot:
    """The frozen exam of one attempt."""

    exam_id: int
    exam_title: str
    selection_seed: Optional[int]
    time_limit_minutes: Optional[int]
    questions: List[SnapshotQuestion] = field(default_factory=list)

    @property
    def max_score(self) -> Decimal:
        return sum((question.points for question in self.questions), Decimal("0"))

    def question(self, question_id: int) -> Optional[SnapshotQuestion]:
        for question in self.questions:
            if question.question_id == question_id:
                return question
        return None

    def public_questions(self) -> List[Dict[str, Any]]:
        return [question.to_public_dict() for question in self.questions]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "exam_id": self.exam_id,
            "exam_title": self.exam_title,
            "selection_seed": self.selection_seed,
            "time_limit_minutes": self.time_limit_minutes,
            "max_score": str(self.max_score),
            "total_questions": len(self.questions),
            "questions": [question.to_dict() for question in self.questions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExamSnapshot":
        return cls(
            exam_id=data.get("exam_id"),
            exam_title=data.get("exam_title", ""),
            selection_seed=data.get("selection_seed"),
            time_limit_minutes=data.get("time_limit_minutes"),
            questions=[snapshot_question_from_dict(item) for item in data.get("questions", [])],
        )


def snapshot_question_from_dict(data: Dict[str, Any]) -> SnapshotQuestion:
    """Rebuild the typed variant of a persisted snapshot question."""
    question_type = data["type"]
    correctness = data.get("correctness") or {}
    common = dict(
        question_id=int(data["question_id"]),
        order=int(data["order"]),
        points=Decimal(str(data["points"])),
        content=data.get("content", ""),
        category_id=data.get("category_id"),
        category_name=data.get("category_name"),
        difficulty=data.get("difficulty"),
        explanation=data.get("explanation", ""),
    )

    if question_type == QuestionType.TRUE_FALSE:
        return TrueFalseQuestion(**common, correct_value=bool(correctness.get("value")))
    if question_type in (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE):
        return ChoiceQuestion(
            **common,
            multiple=question_type == QuestionType.MULTIPLE_CHOICE,
            choices=[SnapshotOption.from_dict(option) for option in data.get("options", [])],
            correct_keys=[str(key) for key in correctness.get("correct_keys", [])],
        )
    if question_type == QuestionType.SHORT_ANSWER:
        return ShortAnswerQuestion(**common, answer_key=correctness.get("answer_key", ""))
    if question_type == QuestionType.ESSAY:
        return EssayQuestion(**common, answer_key=correctness.get("answer_key", ""))
    raise ValueError(f"Unknown question type in snapshot: {question_type}")


# --- Payload normalisation ---


def normalize_boolean(payload: Any) -> bool:
    """
    Accepts ``true``/``false``, ``"true"``/``"false"`` and ``{"value": ...}``.

    Raises:
        AnswerFormatError: For anything else
    """
    if isinstance(payload, dict):
        if "value" not in payload:
            raise AnswerFormatError("Expected {'value': true|false}")
        payload = payload["value"]
    if isinstance(payload, bool):
        return payload
    if isinstance(payload, str) and payload.strip().lower() in ("true", "false"):
        return payload.strip().lower() == "true"
    raise AnswerFormatError(f"Cannot read {payload!r} as true/false")


def normalize_option_keys(payload: Any) -> List[str]:
    """
    Accepts a key, a list of keys, ``{"selected": [...]}``,
    ``{"option_id": key}`` or ``{"value": key}``.

    Raises:
        AnswerFormatError: For anything else
    """
    if isinstance(payload, dict):
        if isinstance(payload.get("selected"), list):
            payload = payload["selected"]
        else:
            key = payload.get("option_id", payload.get("value"))
            payload = [key] if key is not None else []
    if isinstance(payload, (str, int)) and not isinstance(payload, bool):
        payload = [payload]
    if not isinstance(payload, list):
        raise AnswerFormatError(f"Cannot read {payload!r} as option keys")
    keys = []
    for key in payload:
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            raise AnswerFormatError(f"Invalid option key {key!r}")
        keys.append(str(key))
    return keys


TEXT_KEYS = ("text", "free_text", "value", "answer")


def is_blank_answer(payload: Any) -> bool:
    """
    ``None``, ``""``, ``{}``, ``[]`` and whitespace-only text are blank.
    Any other payload counts as an answer, even without a known text key.
    """
    if payload is None:
        return True
    if isinstance(payload, str):
        return not payload.strip()
    if isinstance(payload, dict):
        if not payload:
            return True
        present = [payload[key] for key in TEXT_KEYS if key in payload]
        if present and len(present) == len(payload):
            return all(is_blank_answer(value) for value in present)
        return False
    if isinstance(payload, (list, tuple)):
        return not payload
    return False
