"""
Assembly Services Package

Snapshot-Typen (tagged union) und Zusammenstellung der persönlichen Prüfung.
"""

from .snapshot import (
    AnswerFormatError,
    ChoiceQuestion,
    EssayQuestion,
    ExamSnapshot,
    GradeOutcome,
    ShortAnswerQuestion,
    SnapshotOption,
    SnapshotQuestion,
    TrueFalseQuestion,
    normalize_boolean,
    normalize_option_keys,
    is_blank_answer,
)
from .exam_assembler import AssembledExam, ExamAssembler

__all__ = [
    "AnswerFormatError",
    "ChoiceQuestion",
    "EssayQuestion",
    "ExamSnapshot",
    "GradeOutcome",
    "ShortAnswerQuestion",
    "SnapshotOption",
    "SnapshotQuestion",
    "TrueFalseQuestion",
    "normalize_boolean",
    "normalize_option_keys",
    "is_blank_answer",
    "AssembledExam",
    "ExamAssembler",
]
