from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, Field

from .submissions import lookup_answer

# Fixed-choice (workshop) answers are letters; A is the first option
LETTER_ORDINALS = {"A": 0, "B": 1, "C": 2, "D": 3}


class Question(BaseModel):
    id: int
    prompt: str = ""
    correct_answer: Union[int, str]
    points: int = Field(1, gt=0)
    order_index: int = 0


class ScoreResult(BaseModel):
    earned: int
    max_score: int
    percentage: int
    correct_count: int = 0


def coerce_answer(value: Any) -> Optional[int]:
    """
    Normalize an answer designator to an integer so letters and indices compare.

    Returns None for anything that is not a valid designator; None never equals
    a coerced correct answer.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return int(value) if value.is_integer() else None

    if isinstance(value, str):
        text = value.strip()
        if text.upper() in LETTER_ORDINALS:
            return LETTER_ORDINALS[text.upper()]
        try:
            return int(text)
        except ValueError:
            return None

    return None


def is_correct(question: Question, answer: Any) -> bool:
    submitted = coerce_answer(answer)
    if submitted is None:
        return False
    return submitted == coerce_answer(question.correct_answer)


def compute_percentage(earned: int, max_score: int) -> int:
    # the only rounding point: half up, to a whole percent
    if max_score <= 0:
        return 0
    ratio = Decimal(earned) * 100 / Decimal(max_score)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def score(questions: Iterable[Question], submission: Mapping[str, Any]) -> ScoreResult:
    earned = 0
    max_score = 0
    correct_count = 0

    for question in questions:
        max_score += question.points
        if is_correct(question, lookup_answer(submission, question.id)):
            earned += question.points
            correct_count += 1

    return ScoreResult(
        earned=earned,
        max_score=max_score,
        percentage=compute_percentage(earned, max_score),
        correct_count=correct_count,
    )
