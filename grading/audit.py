import logging
from typing import Any, List, Optional, Union

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .exceptions import MalformedSubmissionError
from .scoring import Question, ScoreResult, is_correct, score
from .store import AssessmentKind, GradeRecord, GradeStore, QuestionReader, to_record
from .submissions import load_submission, lookup_answer

logger = logging.getLogger(__name__)


class QuestionAudit(BaseModel):
    question_id: int
    question: str
    correct_answer: Union[int, str]
    student_answer: Optional[Any] = None
    answered: bool
    is_correct: bool
    points_possible: int
    points_earned: int


class AuditSummary(BaseModel):
    total_questions: int
    correct_answers: int
    incorrect_answers: int
    unanswered: int


class AuditResult(BaseModel):
    grade: GradeRecord
    stored_results: ScoreResult
    calculated_results: ScoreResult
    is_calculation_correct: bool
    percentage_delta: int
    score_delta: int
    submission_valid: bool
    questions_audit: List[QuestionAudit]
    summary: AuditSummary


def audit(grade: GradeRecord, questions: List[Question]) -> AuditResult:
    """
    Recompute a stored grade against the current questions. Read only.

    An unreadable stored submission is audited as empty and flagged with
    submission_valid=False instead of raising.
    """
    submission_valid = True
    try:
        submission = load_submission(grade.student_answers)
    except MalformedSubmissionError as e:
        logger.warning("Auditing grade %s with an empty submission: %s", grade.id, e)
        submission = {}
        submission_valid = False

    calculated = score(questions, submission)

    rows = []
    for question in questions:
        answer = lookup_answer(submission, question.id)
        correct = is_correct(question, answer)
        rows.append(
            QuestionAudit(
                question_id=question.id,
                question=question.prompt,
                correct_answer=question.correct_answer,
                student_answer=answer,
                answered=answer is not None,
                is_correct=correct,
                points_possible=question.points,
                points_earned=question.points if correct else 0,
            )
        )

    correct_count = sum(1 for row in rows if row.is_correct)
    unanswered = sum(1 for row in rows if not row.answered)

    stored = ScoreResult(
        earned=grade.score,
        max_score=grade.max_score,
        percentage=grade.percentage,
    )

    return AuditResult(
        grade=grade,
        stored_results=stored,
        calculated_results=calculated,
        is_calculation_correct=calculated.percentage == grade.percentage,
        percentage_delta=calculated.percentage - grade.percentage,
        score_delta=calculated.earned - grade.score,
        submission_valid=submission_valid,
        questions_audit=rows,
        summary=AuditSummary(
            total_questions=len(rows),
            correct_answers=correct_count,
            incorrect_answers=len(rows) - correct_count,
            unanswered=unanswered,
        ),
    )


def audit_grade(db: Session, kind: AssessmentKind, grade_id: int) -> AuditResult:
    store = GradeStore(db, kind)
    grade = to_record(store.get(grade_id), kind)
    questions = QuestionReader(db).get_questions(kind, grade.assessment_id)
    return audit(grade, questions)
