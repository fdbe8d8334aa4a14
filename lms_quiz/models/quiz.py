# lms_quiz/models/quiz.py
"""
퀴즈 / 모의고사 DB 모델
※ lesson_id, user_id 는 다른 서비스(강의/계정) 소유 테이블을 가리키므로 FK 없이 정수만 보관
※ lesson_id 가 NULL 이면 모의고사(mock test)
"""
from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Float,
    DateTime,
    Enum,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from lms_quiz.db import Base

QUESTION_TYPES = ("single_choice", "multiple_choice", "true_false", "fill_blank")


class Quiz(Base):
    """
    퀴즈 (강의 소속) 또는 모의고사 (lesson_id = NULL)
    """
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lesson_id = Column(Integer, nullable=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    time_limit = Column(Integer, nullable=True)      # 분
    passing_score = Column(Integer, nullable=True)   # 합격 기준 %
    category = Column(String(100), nullable=True)    # 모의고사 전용
    difficulty = Column(String(50), nullable=True)   # 모의고사 전용
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    questions = relationship(
        "QuizQuestion",
        back_populates="quiz",
        order_by="QuizQuestion.position",
        cascade="all, delete-orphan",
    )
    attempts = relationship("QuizAttempt", back_populates="quiz")

    @property
    def is_mock_test(self) -> bool:
        return self.lesson_id is None


class QuizQuestion(Base):
    """
    문항
    """
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    quiz_id = Column(
        Integer,
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_text = Column(Text, nullable=False)
    question_type = Column(Enum(*QUESTION_TYPES, name="quiz_question_type"), nullable=False)
    points = Column(Integer, nullable=False, default=1)
    explanation = Column(Text, nullable=True)         # 채점 후 공개되는 해설
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    quiz = relationship("Quiz", back_populates="questions")
    answers = relationship(
        "QuizAnswer",
        back_populates="question",
        order_by="QuizAnswer.id",
        cascade="all, delete-orphan",
    )
    user_answers = relationship("UserQuizAnswer", back_populates="question")


class QuizAnswer(Base):
    """
    보기 (fill_blank 문항에서는 허용 정답 텍스트)
    """
    __tablename__ = "quiz_answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(
        Integer,
        ForeignKey("quiz_questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    answer_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    explanation = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    question = relationship("QuizQuestion", back_populates="answers")


class QuizAttempt(Base):
    """
    응시 기록 (user_id NULL = 비로그인 응시)
    """
    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)

    started_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    time_spent_seconds = Column(Integer, nullable=True)

    score = Column(Integer, nullable=True)             # 획득 점수
    max_score = Column(Integer, nullable=True)         # 제출 문항 배점 합
    percentage_score = Column(Float, nullable=True)
    passed = Column(Boolean, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    quiz = relationship("Quiz", back_populates="attempts")
    user_answers = relationship(
        "UserQuizAnswer",
        back_populates="attempt",
        order_by="UserQuizAnswer.id",
        cascade="all, delete-orphan",
    )


class UserQuizAnswer(Base):
    """
    응시자의 개별 문항 응답 (채점 결과 포함, 생성 후 변경 없음)
    """
    __tablename__ = "user_quiz_answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    attempt_id = Column(
        Integer,
        ForeignKey("quiz_attempts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id = Column(Integer, ForeignKey("quiz_questions.id"), nullable=False, index=True)
    answer_id = Column(Integer, ForeignKey("quiz_answers.id"), nullable=True)
    text_answer = Column(Text, nullable=True)  # 주관식 (fill_blank)

    is_correct = Column(Boolean, nullable=False, default=False)
    points_earned = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    attempt = relationship("QuizAttempt", back_populates="user_answers")
    question = relationship("QuizQuestion", back_populates="user_answers")
    answer = relationship("QuizAnswer")
