from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime
from db.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(50), nullable=False)  # admin / trainer / student
    created_at = Column(DateTime, default=datetime.utcnow)
