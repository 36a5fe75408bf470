from datetime import datetime

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint
from db.database import Base

# referenced tables must share the metadata before create_all
from db.models import users, quizzes, workshops  # noqa: F401

class QuizGrade(Base):
    __tablename__ = "quiz_grades"
    # one row per attempt; the single-attempt path relies on this to reject racing inserts
    __table_args__ = (
        UniqueConstraint("student_id", "quiz_id", "attempt_number", name="uq_quiz_grade_attempt"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    max_score = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False)
    attempt_number = Column(Integer, nullable=False, default=1)
    student_answers = Column(Text, nullable=True)
    completed_at = Column(DateTime, default=datetime.utcnow)


class WorkshopGrade(Base):
    __tablename__ = "workshop_grades"
    __table_args__ = (
        UniqueConstraint("student_id", "workshop_id", "attempt_number", name="uq_workshop_grade_attempt"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    workshop_id = Column(Integer, ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    max_score = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False)
    attempt_number = Column(Integer, nullable=False, default=1)
    student_answers = Column(Text, nullable=True)
    completed_at = Column(DateTime, default=datetime.utcnow)
