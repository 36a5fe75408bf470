"""
Attempt gating.

Two entry points share the grade tables but not the policy:

- submit_once: learner self-submission, a single attempt per (respondent, assessment)
- record_attempt: instructor grade entry, any number of numbered attempts
"""

import logging
from typing import Any, List, Optional

from .config import RECORD_ATTEMPT_RETRIES
from .exceptions import (
    AlreadySubmittedError,
    AttemptConflictError,
    DuplicateAttemptError,
    ValidationError,
)
from .scoring import Question, ScoreResult, score
from .store import GradeRecord, GradeStore, to_record
from .submissions import dump_submission, normalize_submission

logger = logging.getLogger(__name__)


def submit_once(
    store: GradeStore,
    respondent_id: int,
    assessment_id: int,
    questions: List[Question],
    submission: Any,
) -> GradeRecord:
    if not questions:
        raise ValidationError(f"{store.kind.value.capitalize()} {assessment_id} has no questions")

    answers = normalize_submission(submission)

    if store.find_for(respondent_id, assessment_id) is not None:
        raise AlreadySubmittedError(respondent_id, assessment_id)

    result = score(questions, answers)

    try:
        row = store.insert(
            respondent_id,
            assessment_id,
            result,
            attempt_number=1,
            student_answers=dump_submission(answers),
        )
    except DuplicateAttemptError as e:
        # lost the race against a concurrent submission for the same pair
        raise AlreadySubmittedError(respondent_id, assessment_id) from e

    logger.info(
        "Stored %s grade %s for student %s: %s/%s (%s%%)",
        store.kind.value, row.id, respondent_id, result.earned, result.max_score, result.percentage,
    )
    return to_record(row, store.kind, correct_count=result.correct_count)


def _validate_numbers(earned: int, max_score: int, percentage: int):
    if earned < 0 or max_score < 0:
        raise ValidationError("Score and max score must not be negative")
    if earned > max_score:
        raise ValidationError("Score cannot exceed max score")
    if not 0 <= percentage <= 100:
        raise ValidationError("Percentage must be between 0 and 100")


def record_attempt(
    store: GradeStore,
    respondent_id: int,
    assessment_id: int,
    earned: int,
    max_score: int,
    percentage: int,
    submission: Optional[Any] = None,
) -> GradeRecord:
    _validate_numbers(earned, max_score, percentage)

    student_answers = None
    if submission is not None:
        student_answers = dump_submission(normalize_submission(submission))

    result = ScoreResult(earned=earned, max_score=max_score, percentage=percentage)

    for _ in range(max(RECORD_ATTEMPT_RETRIES, 1)):
        attempt_number = store.latest_attempt_number(respondent_id, assessment_id) + 1
        try:
            row = store.insert(respondent_id, assessment_id, result, attempt_number, student_answers)
        except DuplicateAttemptError:
            logger.warning(
                "Attempt %s for student %s on %s %s was taken concurrently, retrying",
                attempt_number, respondent_id, store.kind.value, assessment_id,
            )
            continue

        logger.info(
            "Recorded %s attempt %s for student %s: %s/%s (%s%%)",
            store.kind.value, attempt_number, respondent_id, earned, max_score, percentage,
        )
        return to_record(row, store.kind)

    raise AttemptConflictError(
        f"Could not allocate an attempt number for student {respondent_id} "
        f"on {store.kind.value} {assessment_id}"
    )
