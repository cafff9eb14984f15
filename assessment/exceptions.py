"""
Exam Attempt Engine Exceptions

This module provides the domain exception hierarchy of the Exam Attempt Engine.
Every exception carries an ``ErrorKind`` so that the transport layer can map
domain failures to response codes without inspecting messages.

All exceptions here are recoverable and user-facing. Infrastructure failures
(database unavailable etc.) are not wrapped and propagate unchanged.

Author: DSP Development Team
Version: 1.0.0
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Typed error kinds of the engine."""

    NOT_PUBLISHED = "NotPublished"
    OUT_OF_TIME_WINDOW = "OutOfTimeWindow"
    ATTEMPT_LIMIT_REACHED = "AttemptLimitReached"
    INSUFFICIENT_QUESTIONS = "InsufficientQuestions"
    INVALID_STATE = "InvalidState"
    ANSWER_NOT_FOUND = "AnswerNotFound"
    ATTEMPT_NOT_FOUND = "AttemptNotFound"
    NOT_GRADABLE = "NotGradable"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_CONFIGURATION = "InvalidConfiguration"


class AssessmentException(Exception):
    """
    Base exception class for all Exam Attempt Engine errors.

    Attributes:
        message (str): Human-readable error message
        kind (ErrorKind): Typed error kind used by the transport layer
        details (Dict[str, Any]): Context for the caller (ids, counts)

    Example:
        >>> try:
        ...     attempt_service.submit(attempt_id, answers)
        ... except AssessmentException as e:
        ...     logger.warning(f"Submit rejected: {e.kind.value} {e.details}")
    """

    kind: ErrorKind = ErrorKind.INVALID_STATE

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


# --- Eligibility ---


class NotPublished(AssessmentException):
    """Raised when a test-taker tries to start an unpublished exam."""

    kind = ErrorKind.NOT_PUBLISHED

    def __init__(self, exam_id: int) -> None:
        super().__init__(
            f"Exam {exam_id} is not published",
            details={"exam_id": exam_id},
        )


class OutOfTimeWindow(AssessmentException):
    """Raised when an exam is started before its start or after its end time."""

    kind = ErrorKind.OUT_OF_TIME_WINDOW

    def __init__(self, exam_id: int, start_time=None, end_time=None) -> None:
        super().__init__(
            f"Exam {exam_id} is not open at this time",
            details={
                "exam_id": exam_id,
                "start_time": start_time.isoformat() if start_time else None,
                "end_time": end_time.isoformat() if end_time else None,
            },
        )


class AttemptLimitReached(AssessmentException):
    """Raised when the test-taker has used all configured attempts."""

    kind = ErrorKind.ATTEMPT_LIMIT_REACHED

    def __init__(self, exam_id: int, max_attempts: int, used_attempts: int) -> None:
        super().__init__(
            f"Attempt limit reached for exam {exam_id} ({used_attempts}/{max_attempts})",
            details={
                "exam_id": exam_id,
                "max_attempts": max_attempts,
                "used_attempts": used_attempts,
            },
        )


# --- Selection ---


class InsufficientQuestions(AssessmentException):
    """
    Raised when a distribution rule cannot be satisfied by the question bank.

    The whole resolution aborts; no partial exam is ever assembled.
    """

    kind = ErrorKind.INSUFFICIENT_QUESTIONS

    def __init__(
        self,
        rule_index: int,
        requested: int,
        available: int,
        difficulty: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> None:
        self.rule_index = rule_index
        self.requested = requested
        self.available = available
        self.difficulty = difficulty
        self.category_id = category_id
        label = difficulty or "ANY"
        super().__init__(
            f"Not enough {label} questions for rule {rule_index} "
            f"(category {category_id}). Need {requested}, available {available}",
            details={
                "rule_index": rule_index,
                "difficulty": difficulty,
                "category_id": category_id,
                "requested": requested,
                "available": available,
            },
        )


class InvalidConfiguration(AssessmentException):
    """Raised when an exam's distribution rules do not describe a valid exam."""

    kind = ErrorKind.INVALID_CONFIGURATION


# --- Lifecycle ---


class InvalidState(AssessmentException):
    """Raised when an operation is not allowed in the attempt's current state."""

    kind = ErrorKind.INVALID_STATE

    def __init__(self, attempt_id: int, current: str, operation: str) -> None:
        super().__init__(
            f"Cannot {operation} attempt {attempt_id} in state {current}",
            details={
                "attempt_id": attempt_id,
                "state": current,
                "operation": operation,
            },
        )


class AttemptNotFound(AssessmentException):
    kind = ErrorKind.ATTEMPT_NOT_FOUND

    def __init__(self, attempt_id: int) -> None:
        super().__init__(
            f"Attempt {attempt_id} not found",
            details={"attempt_id": attempt_id},
        )


class AnswerNotFound(AssessmentException):
    """Raised for unknown answer ids or question ids outside an attempt's snapshot."""

    kind = ErrorKind.ANSWER_NOT_FOUND

    def __init__(self, answer_id: Optional[int] = None, question_id: Optional[int] = None) -> None:
        if answer_id is not None:
            message = f"Answer {answer_id} not found"
        else:
            message = f"Question {question_id} is not part of this attempt"
        super().__init__(
            message,
            details={"answer_id": answer_id, "question_id": question_id},
        )


# --- Grading ---


class NotGradable(AssessmentException):
    """Raised when a manual grade targets an objective (auto-graded) answer."""

    kind = ErrorKind.NOT_GRADABLE

    def __init__(self, answer_id: int, question_type: str) -> None:
        super().__init__(
            f"Answer {answer_id} of type {question_type} is graded automatically",
            details={"answer_id": answer_id, "question_type": question_type},
        )


class OutOfRange(AssessmentException):
    """Raised when a manual score is negative or exceeds the answer's max score."""

    kind = ErrorKind.OUT_OF_RANGE

    def __init__(self, answer_id: int, score, max_score) -> None:
        super().__init__(
            f"Score {score} for answer {answer_id} must be between 0 and {max_score}",
            details={
                "answer_id": answer_id,
                "score": str(score),
                "max_score": str(max_score),
            },
        )
