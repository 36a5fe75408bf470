import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(__file__))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///" + os.path.join(BASE_DIR, "lms.db"))

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_SECRET_KEY")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Workshops carry no passing score column of their own
WORKSHOP_PASSING_SCORE = int(os.getenv("WORKSHOP_PASSING_SCORE", "70"))

RECORD_ATTEMPT_RETRIES = int(os.getenv("RECORD_ATTEMPT_RETRIES", "3"))
