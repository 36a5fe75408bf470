from sqlalchemy import Column, Integer, String, Text, ForeignKey
from db.database import Base

class Workshop(Base):
    __tablename__ = "workshops"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)


class WorkshopQuestion(Base):
    __tablename__ = "workshop_questions"

    id = Column(Integer, primary_key=True, index=True)
    workshop_id = Column(Integer, ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    option_a_text = Column(Text)
    option_b_text = Column(Text)
    option_c_text = Column(Text)
    option_d_text = Column(Text)
    correct_answer = Column(String(1), nullable=False)  # A / B / C / D
    points = Column(Integer, default=1, nullable=False)
    order_index = Column(Integer, default=0)
