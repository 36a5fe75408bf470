from sqlalchemy import Column, Integer, String, Text, ForeignKey
from db.database import Base

class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    passing_score = Column(Integer, default=70)


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    options = Column(Text)  # JSON list of option labels
    correct_answer = Column(Integer, nullable=False)  # index into options
    points = Column(Integer, default=1, nullable=False)
    order_index = Column(Integer, default=0)
