from decimal import Decimal

from ...attempts.models import ExamAttempt


def recompute_attempt_score(attempt: ExamAttempt) -> bool:
    """
    Re-read every answer of ``attempt`` and set ``earned_score`` to the sum of
    the non-null scores. Does not save.

    Returns:
        True if every answer has a score
    """
    scores = list(attempt.answers.values_list("score", flat=True))
    attempt.earned_score = sum((score for score in scores if score is not None), Decimal("0"))
    return bool(scores) and all(score is not None for score in scores)
