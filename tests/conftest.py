import os

# Settings 는 import 시점에 환경변수를 읽으므로 앱 import 전에 설정
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "lms-quiz-test-secret-0123456789abcdef")
os.environ.setdefault("CREATE_TABLES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lms_quiz.db import Base, get_db
from lms_quiz.main import app

INSTRUCTOR = {"X-User-Id": "100", "X-User-Role": "instructor"}
ADMIN = {"X-User-Id": "1", "X-User-Role": "admin"}
STUDENT = {"X-User-Id": "7", "X-User-Role": "student"}
OTHER_STUDENT = {"X-User-Id": "8", "X-User-Role": "student"}


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client(session_factory):
    def _override_get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_question(text="What is 2 + 2?", qtype="single_choice", points=1, answers=None, explanation=None):
    if answers is None:
        answers = [
            {"answerText": "4", "isCorrect": True},
            {"answerText": "3", "isCorrect": False},
            {"answerText": "5", "isCorrect": False},
        ]
    q = {"questionText": text, "questionType": qtype, "points": points, "answers": answers}
    if explanation is not None:
        q["explanation"] = explanation
    return q


def make_quiz_payload(n_questions=3, lesson_id=11, **extra):
    payload = {
        "title": "Arithmetic basics",
        "description": "warm-up",
        "timeLimit": 10,
        "passingScore": 60,
        "questions": [make_question(text=f"Question {i}") for i in range(n_questions)],
    }
    if lesson_id is not None:
        payload["lessonId"] = lesson_id
    payload.update(extra)
    return payload


@pytest.fixture()
def create_quiz(client):
    """강의 퀴즈 생성 헬퍼 (instructor)"""
    def _create(payload=None, base="/api/quizzes"):
        r = client.post(base, json=payload or make_quiz_payload(), headers=INSTRUCTOR)
        assert r.status_code == 201, r.text
        return r.json()

    return _create
