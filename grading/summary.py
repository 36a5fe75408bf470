from typing import Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from db.models.quizzes import Quiz

from .config import WORKSHOP_PASSING_SCORE
from .store import AssessmentKind, GradeStore


class GradeSummary(BaseModel):
    student_id: int
    total_graded: int
    quizzes_taken: int
    workshops_taken: int
    average_percentage: Optional[float] = None
    lowest_percentage: Optional[int] = None
    highest_percentage: Optional[int] = None
    passed: int


def grade_summary(db: Session, student_id: int) -> GradeSummary:
    """Aggregate a student's quiz and workshop grades."""
    quiz_rows = GradeStore(db, AssessmentKind.QUIZ).list_for_student(student_id)
    workshop_rows = GradeStore(db, AssessmentKind.WORKSHOP).list_for_student(student_id)

    passing_scores = {}
    quiz_ids = {row.quiz_id for row in quiz_rows}
    if quiz_ids:
        for quiz in db.query(Quiz).filter(Quiz.id.in_(quiz_ids)).all():
            passing_scores[quiz.id] = quiz.passing_score or 0

    passed = sum(1 for row in quiz_rows if row.percentage >= passing_scores.get(row.quiz_id, 0))
    passed += sum(1 for row in workshop_rows if row.percentage >= WORKSHOP_PASSING_SCORE)

    percentages = [row.percentage for row in quiz_rows] + [row.percentage for row in workshop_rows]

    return GradeSummary(
        student_id=student_id,
        total_graded=len(percentages),
        quizzes_taken=len(quiz_rows),
        workshops_taken=len(workshop_rows),
        average_percentage=round(sum(percentages) / len(percentages), 2) if percentages else None,
        lowest_percentage=min(percentages) if percentages else None,
        highest_percentage=max(percentages) if percentages else None,
        passed=passed,
    )
