from datetime import datetime
from enum import Enum
from typing import Any, Iterator, List, Optional

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db.models.quizzes import Quiz, QuizQuestion
from db.models.workshops import Workshop, WorkshopQuestion
from db.models.grades import QuizGrade, WorkshopGrade

from .exceptions import (
    AssessmentNotFoundError,
    DuplicateAttemptError,
    GradeNotFoundError,
    InvalidQuestionError,
)
from .scoring import Question, ScoreResult


class AssessmentKind(str, Enum):
    QUIZ = "quiz"
    WORKSHOP = "workshop"


class _Tables:
    def __init__(self, assessment, question, grade, foreign_key: str):
        self.assessment = assessment
        self.question = question
        self.grade = grade
        self.foreign_key = foreign_key

    def grade_assessment_column(self):
        return getattr(self.grade, self.foreign_key)

    def question_assessment_column(self):
        return getattr(self.question, self.foreign_key)


TABLES = {
    AssessmentKind.QUIZ: _Tables(Quiz, QuizQuestion, QuizGrade, "quiz_id"),
    AssessmentKind.WORKSHOP: _Tables(Workshop, WorkshopQuestion, WorkshopGrade, "workshop_id"),
}


class GradeRecord(BaseModel):
    id: int
    kind: AssessmentKind
    student_id: int
    assessment_id: int
    score: int
    max_score: int
    percentage: int
    attempt_number: int
    student_answers: Optional[Any] = None
    completed_at: Optional[datetime] = None
    # only known right after scoring; not persisted
    correct_count: Optional[int] = None


def to_record(row, kind: AssessmentKind, correct_count: Optional[int] = None) -> GradeRecord:
    return GradeRecord(
        id=row.id,
        kind=kind,
        student_id=row.student_id,
        assessment_id=getattr(row, TABLES[kind].foreign_key),
        score=row.score,
        max_score=row.max_score,
        percentage=row.percentage,
        attempt_number=row.attempt_number,
        student_answers=row.student_answers,
        completed_at=row.completed_at,
        correct_count=correct_count,
    )


# ============ question-set reader ============

class QuestionReader:
    def __init__(self, db: Session):
        self.db = db

    def get_assessment(self, kind: AssessmentKind, assessment_id: int):
        model = TABLES[kind].assessment
        assessment = self.db.query(model).filter(model.id == assessment_id).first()
        if assessment is None:
            raise AssessmentNotFoundError(f"{kind.value.capitalize()} {assessment_id} not found")
        return assessment

    def get_questions(self, kind: AssessmentKind, assessment_id: int) -> List[Question]:
        tables = TABLES[kind]
        rows = (
            self.db.query(tables.question)
            .filter(tables.question_assessment_column() == assessment_id)
            .order_by(tables.question.order_index, tables.question.id)
            .all()
        )
        questions = []
        for row in rows:
            try:
                questions.append(
                    Question(
                        id=row.id,
                        prompt=row.question,
                        correct_answer=row.correct_answer,
                        points=row.points,
                        order_index=row.order_index or 0,
                    )
                )
            except ModelValidationError as e:
                raise InvalidQuestionError(
                    f"{kind.value.capitalize()} question {row.id} cannot be scored: points={row.points}"
                ) from e
        return questions


# ============ grade-record store ============

class GradeStore:
    """Persistence for one kind of grade record (quiz or workshop)."""

    def __init__(self, db: Session, kind: AssessmentKind):
        self.db = db
        self.kind = kind
        self.tables = TABLES[kind]

    @property
    def model(self):
        return self.tables.grade

    def _for_pair(self, student_id: int, assessment_id: int):
        return self.db.query(self.model).filter(
            self.model.student_id == student_id,
            self.tables.grade_assessment_column() == assessment_id,
        )

    def insert(
        self,
        student_id: int,
        assessment_id: int,
        result: ScoreResult,
        attempt_number: int,
        student_answers: Optional[str],
    ):
        row = self.model(
            student_id=student_id,
            score=result.earned,
            max_score=result.max_score,
            percentage=result.percentage,
            attempt_number=attempt_number,
            student_answers=student_answers,
            completed_at=datetime.utcnow(),
        )
        setattr(row, self.tables.foreign_key, assessment_id)

        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateAttemptError(
                f"Attempt {attempt_number} already stored for student {student_id}, "
                f"{self.kind.value} {assessment_id}"
            ) from e

        self.db.refresh(row)
        return row

    def find_for(self, student_id: int, assessment_id: int):
        return self._for_pair(student_id, assessment_id).order_by(self.model.attempt_number).first()

    def latest_attempt_number(self, student_id: int, assessment_id: int) -> int:
        latest = (
            self.db.query(func.max(self.model.attempt_number))
            .filter(
                self.model.student_id == student_id,
                self.tables.grade_assessment_column() == assessment_id,
            )
            .scalar()
        )
        return latest or 0

    def get(self, grade_id: int):
        row = self.db.query(self.model).filter(self.model.id == grade_id).first()
        if row is None:
            raise GradeNotFoundError(f"{self.kind.value.capitalize()} grade {grade_id} not found")
        return row

    def update_score(self, row, result: ScoreResult):
        row.score = result.earned
        row.max_score = result.max_score
        row.percentage = result.percentage
        self.db.commit()
        return row

    def with_submissions(self) -> Iterator:
        ids = [
            grade_id
            for (grade_id,) in self.db.query(self.model.id)
            .filter(self.model.student_answers.isnot(None))
            .order_by(self.model.id)
            .all()
        ]
        # re-fetched per id: a rollback in one unit of work expires loaded rows
        for grade_id in ids:
            row = self.db.query(self.model).filter(self.model.id == grade_id).first()
            if row is not None:
                yield row

    def list_for_student(self, student_id: int) -> List:
        return (
            self.db.query(self.model)
            .filter(self.model.student_id == student_id)
            .order_by(self.model.completed_at.desc(), self.model.id.desc())
            .all()
        )

    def list_for_assessment(self, assessment_id: int) -> List:
        return (
            self.db.query(self.model)
            .filter(self.tables.grade_assessment_column() == assessment_id)
            .order_by(self.model.percentage.desc(), self.model.completed_at.desc())
            .all()
        )
