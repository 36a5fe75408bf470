import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException, Depends, status
from pydantic import BaseModel, StrictInt, StrictStr
from sqlalchemy.orm import Session

from auth.dependencies import require_roles, ensure_self_or_staff
from db.database import Base, engine, get_db
from db.models.users import User

from grading.attempts import submit_once, record_attempt
from grading.audit import AuditResult, audit_grade
from grading.config import LOG_LEVEL, WORKSHOP_PASSING_SCORE
from grading.exceptions import (
    GradingError,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from grading.reconcile import ReconcileReport, reconcile_all
from grading.scoring import is_correct, score
from grading.store import AssessmentKind, GradeRecord, GradeStore, QuestionReader, to_record
from grading.submissions import lookup_answer, normalize_submission
from grading.summary import GradeSummary, grade_summary

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="LMS Grading API",
    version="1.0.0",
    description=(
        "Quiz and workshop scoring, attempt gating, grade audit and "
        "reconciliation for the learning platform."
    ),
)

@app.on_event("startup")
def create_tables():
    Base.metadata.create_all(bind=engine)


def to_http_error(e: GradingError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    logger.error("Unhandled grading error: %s", e)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")


# ============ request / response models ============

# strict so a JSON boolean is rejected instead of becoming 0 or 1
AnswerValue = Optional[Union[StrictInt, StrictStr]]


class AnswerItem(BaseModel):
    question_id: int
    answer: AnswerValue = None


class SubmitAnswersRequest(BaseModel):
    answers: Union[Dict[str, AnswerValue], List[AnswerItem]]

    def as_submission(self) -> Any:
        if isinstance(self.answers, dict):
            return self.answers
        return [(item.question_id, item.answer) for item in self.answers]


class QuestionResult(BaseModel):
    question_id: int
    correct: bool
    user_answer: AnswerValue = None
    correct_answer: Union[int, str]


class SubmitResponse(BaseModel):
    message: str
    grade_id: int
    score: int
    max_score: int
    percentage: int
    correct_count: int
    passed: bool
    attempt_number: int
    results: List[QuestionResult] = []


class QuizGradeEntry(SubmitAnswersRequest):
    student_id: int
    quiz_id: int


class WorkshopGradeEntry(BaseModel):
    student_id: int
    workshop_id: int
    score: int
    max_score: int
    percentage: int
    answers: Optional[Dict[str, AnswerValue]] = None


class GradeEntryResponse(BaseModel):
    message: str
    grade_id: int
    attempt_number: int
    score: int
    max_score: int
    percentage: int


# ============ health ============

@app.get("/health")
def health():
    return {"status": "ok"}


# ============ learner self-submission (single attempt) ============

@app.post("/quizzes/{quiz_id}/submit", response_model=SubmitResponse)
def submit_quiz(
    quiz_id: int,
    req: SubmitAnswersRequest,
    current_student: User = Depends(require_roles("student")),
    db: Session = Depends(get_db),
):
    reader = QuestionReader(db)
    try:
        quiz = reader.get_assessment(AssessmentKind.QUIZ, quiz_id)
        questions = reader.get_questions(AssessmentKind.QUIZ, quiz_id)
        store = GradeStore(db, AssessmentKind.QUIZ)
        record = submit_once(store, current_student.id, quiz_id, questions, req.as_submission())
    except GradingError as e:
        raise to_http_error(e)

    return SubmitResponse(
        message="Quiz submitted successfully",
        grade_id=record.id,
        score=record.score,
        max_score=record.max_score,
        percentage=record.percentage,
        correct_count=record.correct_count,
        passed=record.percentage >= (quiz.passing_score or 0),
        attempt_number=record.attempt_number,
    )


@app.post("/workshops/{workshop_id}/submit", response_model=SubmitResponse)
def submit_workshop(
    workshop_id: int,
    req: SubmitAnswersRequest,
    current_student: User = Depends(require_roles("student")),
    db: Session = Depends(get_db),
):
    reader = QuestionReader(db)
    try:
        reader.get_assessment(AssessmentKind.WORKSHOP, workshop_id)
        questions = reader.get_questions(AssessmentKind.WORKSHOP, workshop_id)
        store = GradeStore(db, AssessmentKind.WORKSHOP)
        record = submit_once(store, current_student.id, workshop_id, questions, req.as_submission())
    except GradingError as e:
        raise to_http_error(e)

    answers = normalize_submission(req.as_submission())
    results = []
    for question in questions:
        answer = lookup_answer(answers, question.id)
        results.append(
            QuestionResult(
                question_id=question.id,
                correct=is_correct(question, answer),
                user_answer=answer,
                correct_answer=question.correct_answer,
            )
        )

    return SubmitResponse(
        message="Workshop completed successfully",
        grade_id=record.id,
        score=record.score,
        max_score=record.max_score,
        percentage=record.percentage,
        correct_count=record.correct_count,
        passed=record.percentage >= WORKSHOP_PASSING_SCORE,
        attempt_number=record.attempt_number,
        results=results,
    )


# ============ instructor grade entry (numbered attempts) ============

@app.post("/grades/quiz", response_model=GradeEntryResponse, status_code=201)
def enter_quiz_grade(
    req: QuizGradeEntry,
    current_user: User = Depends(require_roles("admin", "trainer")),
    db: Session = Depends(get_db),
):
    reader = QuestionReader(db)
    try:
        reader.get_assessment(AssessmentKind.QUIZ, req.quiz_id)
        questions = reader.get_questions(AssessmentKind.QUIZ, req.quiz_id)
        if not questions:
            raise ValidationError(f"Quiz {req.quiz_id} has no questions")

        submission = normalize_submission(req.as_submission())
        result = score(questions, submission)

        record = record_attempt(
            GradeStore(db, AssessmentKind.QUIZ),
            req.student_id,
            req.quiz_id,
            result.earned,
            result.max_score,
            result.percentage,
            submission,
        )
    except GradingError as e:
        raise to_http_error(e)

    return GradeEntryResponse(
        message="Grade submitted successfully",
        grade_id=record.id,
        attempt_number=record.attempt_number,
        score=record.score,
        max_score=record.max_score,
        percentage=record.percentage,
    )


@app.post("/grades/workshop", response_model=GradeEntryResponse, status_code=201)
def enter_workshop_grade(
    req: WorkshopGradeEntry,
    current_user: User = Depends(require_roles("admin", "trainer")),
    db: Session = Depends(get_db),
):
    try:
        QuestionReader(db).get_assessment(AssessmentKind.WORKSHOP, req.workshop_id)
        record = record_attempt(
            GradeStore(db, AssessmentKind.WORKSHOP),
            req.student_id,
            req.workshop_id,
            req.score,
            req.max_score,
            req.percentage,
            req.answers,
        )
    except GradingError as e:
        raise to_http_error(e)

    return GradeEntryResponse(
        message="Workshop grade submitted successfully",
        grade_id=record.id,
        attempt_number=record.attempt_number,
        score=record.score,
        max_score=record.max_score,
        percentage=record.percentage,
    )


# ============ audit / reconciliation ============

@app.get("/grades/audit/{kind}/{grade_id}", response_model=AuditResult)
def audit_grade_route(
    kind: AssessmentKind,
    grade_id: int,
    current_user: User = Depends(require_roles("admin", "trainer")),
    db: Session = Depends(get_db),
):
    try:
        return audit_grade(db, kind, grade_id)
    except GradingError as e:
        raise to_http_error(e)


@app.post("/grades/reconcile", response_model=ReconcileReport)
def reconcile_grades(
    current_user: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    logger.info("Reconciliation requested by user %s", current_user.id)
    return reconcile_all(db)


# ============ grade listings ============

def _grades_for_student(db: Session, student_id: int) -> List[GradeRecord]:
    records = []
    for kind in AssessmentKind:
        store = GradeStore(db, kind)
        records.extend(to_record(row, kind) for row in store.list_for_student(student_id))
    # newest first across both kinds
    records.sort(key=lambda r: r.completed_at or datetime.min, reverse=True)
    return records


@app.get("/grades/my-grades", response_model=List[GradeRecord])
def my_grades(
    current_student: User = Depends(require_roles("student")),
    db: Session = Depends(get_db),
):
    return _grades_for_student(db, current_student.id)


@app.get("/grades/student/{student_id}", response_model=List[GradeRecord])
def student_grades(
    student_id: int,
    current_user: User = Depends(require_roles("admin", "trainer", "student")),
    db: Session = Depends(get_db),
):
    ensure_self_or_staff(current_user, student_id)

    if current_user.role != "student":
        student = db.query(User).filter(User.id == student_id, User.role == "student").first()
        if not student:
            raise HTTPException(status_code=404, detail="Student not found")

    return _grades_for_student(db, student_id)


@app.get("/grades/summary/{student_id}", response_model=GradeSummary)
def student_summary(
    student_id: int,
    current_user: User = Depends(require_roles("admin", "trainer", "student")),
    db: Session = Depends(get_db),
):
    ensure_self_or_staff(current_user, student_id)
    return grade_summary(db, student_id)


@app.get("/assessments/{kind}/{assessment_id}/grades", response_model=List[GradeRecord])
def assessment_grades(
    kind: AssessmentKind,
    assessment_id: int,
    current_user: User = Depends(require_roles("admin", "trainer")),
    db: Session = Depends(get_db),
):
    try:
        QuestionReader(db).get_assessment(kind, assessment_id)
    except GradingError as e:
        raise to_http_error(e)

    store = GradeStore(db, kind)
    return [to_record(row, kind) for row in store.list_for_assessment(assessment_id)]
