import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth.security import create_access_token
from db.database import Base, get_db
from db.models.users import User
from db.models.quizzes import Quiz, QuizQuestion
from db.models.workshops import Workshop, WorkshopQuestion
from main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="student", user_id=None, name=None):
        counter["n"] += 1
        user = User(
            id=user_id,
            name=name or f"{role} {counter['n']}",
            email=f"{role}{counter['n']}@example.com",
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_quiz(db):
    def _make(correct_answers, points=None, passing_score=70, quiz_id=None):
        quiz = Quiz(id=quiz_id, title="Quiz", description="", passing_score=passing_score)
        db.add(quiz)
        db.commit()
        db.refresh(quiz)

        question_ids = []
        for index, correct in enumerate(correct_answers):
            question = QuizQuestion(
                quiz_id=quiz.id,
                question=f"Question {index + 1}",
                options=json.dumps(["a", "b", "c", "d"]),
                correct_answer=correct,
                points=points[index] if points else 1,
                order_index=index,
            )
            db.add(question)
            db.commit()
            question_ids.append(question.id)

        return quiz.id, question_ids

    return _make


@pytest.fixture
def make_workshop(db):
    def _make(correct_letters, points=None):
        workshop = Workshop(title="Workshop", description="")
        db.add(workshop)
        db.commit()
        db.refresh(workshop)

        question_ids = []
        for index, letter in enumerate(correct_letters):
            question = WorkshopQuestion(
                workshop_id=workshop.id,
                question=f"Picture {index + 1}",
                option_a_text="A",
                option_b_text="B",
                option_c_text="C",
                option_d_text="D",
                correct_answer=letter,
                points=points[index] if points else 1,
                order_index=index,
            )
            db.add(question)
            db.commit()
            question_ids.append(question.id)

        return workshop.id, question_ids

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": user.id, "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _headers
