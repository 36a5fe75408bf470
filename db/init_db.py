# python db/init_db.py

import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db.database import Base, engine
from db.models.users import User
from db.models.quizzes import Quiz, QuizQuestion
from db.models.workshops import Workshop, WorkshopQuestion
from db.models.grades import QuizGrade, WorkshopGrade

print("Creating tables...")
Base.metadata.create_all(bind=engine)
print("Done ✅")
