import json
from typing import Any, Dict, Mapping, Optional

from .exceptions import MalformedSubmissionError, SubmissionValidationError

Submission = Dict[str, Any]

QUESTION_ID_KEYS = ("question_id", "questionId")
ANSWER_KEYS = ("answer", "selectedAnswer", "selected_answer")


def _pick(item: Mapping[str, Any], keys) -> Any:
    for key in keys:
        if key in item:
            return item[key]
    return None


def normalize_submission(value: Any) -> Submission:
    """
    Turn an incoming answer set into a mapping of question id (as str) -> answer.

    Accepted shapes:
    - {question_id: answer, ...}
    - [{"question_id": 1, "answer": 2}, ...]  (also questionId / selectedAnswer)
    - [(question_id, answer), ...]
    """
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}

    if not isinstance(value, (list, tuple)):
        raise SubmissionValidationError("Answers must be a mapping or a list of answers")

    normalized: Submission = {}
    for item in value:
        if isinstance(item, Mapping):
            question_id = _pick(item, QUESTION_ID_KEYS)
            answer = _pick(item, ANSWER_KEYS)
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            question_id, answer = item
        else:
            raise SubmissionValidationError(f"Unrecognized answer entry: {item!r}")

        if question_id is None:
            raise SubmissionValidationError(f"Answer entry without question id: {item!r}")

        normalized[str(question_id)] = answer

    return normalized


def dump_submission(submission: Mapping[str, Any]) -> str:
    return json.dumps({str(k): v for k, v in submission.items()}, ensure_ascii=False)


def load_submission(raw: Any) -> Submission:
    """
    Read a stored submission that may be structured already or JSON text.

    Raises MalformedSubmissionError when the value cannot be read as a mapping.
    """
    if raw is None:
        return {}

    if isinstance(raw, Mapping):
        data = raw
    elif isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise MalformedSubmissionError(f"Stored submission is not valid JSON: {e}") from e
    else:
        raise MalformedSubmissionError(f"Unsupported stored submission type: {type(raw).__name__}")

    if not isinstance(data, Mapping):
        raise MalformedSubmissionError("Stored submission is not a mapping")

    return {str(k): v for k, v in data.items()}


def lookup_answer(submission: Mapping[str, Any], question_id: Any) -> Optional[Any]:
    key = str(question_id)
    if key in submission:
        return submission[key]
    # callers may hand over a raw mapping keyed by int
    return submission.get(question_id)
