class GradingError(Exception):
    """Base class for every error raised by the grading core."""


# ============ validation (bad input, rejected before any computation) ============

class ValidationError(GradingError):
    pass


class SubmissionValidationError(ValidationError):
    pass


# ============ conflict (attempt policy) ============

class ConflictError(GradingError):
    pass


class AlreadySubmittedError(ConflictError):
    def __init__(self, respondent_id: int, assessment_id: int):
        self.respondent_id = respondent_id
        self.assessment_id = assessment_id
        super().__init__(
            f"Respondent {respondent_id} already completed assessment {assessment_id}. "
            "Only one attempt is allowed."
        )


class DuplicateAttemptError(ConflictError):
    """Raised by the store when the attempt unique key rejects an insert."""


class AttemptConflictError(ConflictError):
    pass


# ============ data (stored state we can recover from) ============

class DataError(GradingError):
    pass


class MalformedSubmissionError(DataError):
    pass


class MissingQuestionsError(DataError):
    pass


class InvalidQuestionError(DataError):
    """A stored question cannot be scored (for example a non-positive point value)."""


# ============ not found ============

class NotFoundError(GradingError):
    pass


class AssessmentNotFoundError(NotFoundError):
    pass


class GradeNotFoundError(NotFoundError):
    pass
