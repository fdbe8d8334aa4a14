# lms_quiz/crud/attempt.py
"""
응시 제출 / 결과 조회
- 로그인/비로그인 모두 제출 가능 (user_id NULL = 비로그인)
- 응시 생성 → 채점 → 응답 저장 → 점수 갱신을 하나의 트랜잭션으로 처리
- 비로그인 응시 결과는 id 만 알면 누구나 조회, 소유자가 있으면 본인/관리자만
"""
from __future__ import annotations
import logging
import math
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from lms_quiz.core.config import cfg
from lms_quiz.core.errors import Forbidden, NotFound, ValidationError
from lms_quiz.core.logging import get_logger
from lms_quiz.crud.quiz import (
    SCOPE_MOCK,
    scoped_to, answer_detail, get_quiz, normalize_page, paginate, question_detail,
)
from lms_quiz.db import transaction
from lms_quiz.models.quiz import Quiz, QuizQuestion, QuizAttempt, UserQuizAnswer
from lms_quiz.schemas.common import Pagination, User
from lms_quiz.schemas.quiz import (
    AttemptOut, AttemptQuizInfo, AttemptResultResponse, AttemptScore,
    SubmitAttemptRequest, UserAnswerOut,
)
from lms_quiz.services.scoring import grade, summarize


def _utc_naive(dt: datetime) -> datetime:
    """DB 에는 UTC naive 로 저장"""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _label(scope: str) -> str:
    return "Mock test attempt" if scope == SCOPE_MOCK else "Quiz attempt"


# ---------- DTO 변환 ----------
def _attempt_out(attempt: QuizAttempt, with_answers: bool = True) -> AttemptOut:
    quiz = attempt.quiz
    answers: List[UserAnswerOut] = []
    if with_answers:
        for ua in attempt.user_answers:
            answers.append(UserAnswerOut(
                id=ua.id,
                questionId=ua.question_id,
                answerId=ua.answer_id,
                textAnswer=ua.text_answer,
                isCorrect=ua.is_correct,
                pointsEarned=ua.points_earned,
                question=question_detail(ua.question) if ua.question is not None else None,
                answer=answer_detail(ua.answer) if ua.answer is not None else None,
            ))

    return AttemptOut(
        id=attempt.id,
        quizId=attempt.quiz_id,
        userId=attempt.user_id,
        startedAt=attempt.started_at,
        completedAt=attempt.completed_at,
        timeSpentSeconds=attempt.time_spent_seconds,
        score=attempt.score or 0,
        maxScore=attempt.max_score or 0,
        percentageScore=attempt.percentage_score or 0.0,
        passed=bool(attempt.passed),
        quiz=AttemptQuizInfo(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            passingScore=quiz.passing_score,
            category=quiz.category,
            difficulty=quiz.difficulty,
        ) if quiz is not None else None,
        userAnswers=answers,
    )


def _load_attempt(db: Session, scope: str, attempt_id: int) -> Optional[QuizAttempt]:
    stmt = (
        select(QuizAttempt)
        .join(Quiz, Quiz.id == QuizAttempt.quiz_id)
        .where(QuizAttempt.id == attempt_id)
        .options(
            selectinload(QuizAttempt.quiz),
            selectinload(QuizAttempt.user_answers)
            .selectinload(UserQuizAnswer.question)
            .selectinload(QuizQuestion.answers),
            selectinload(QuizAttempt.user_answers).selectinload(UserQuizAnswer.answer),
        )
    )
    return db.execute(scoped_to(stmt, scope)).scalar_one_or_none()


# ---------- 제출 & 채점 ----------
def submit_attempt(
        db: Session,
        scope: str,
        req: SubmitAttemptRequest,
        requester: Optional[User] = None,
        log: Optional[logging.Logger] = None,
) -> AttemptResultResponse:
    """
    응시 제출 및 채점

    Args:
        db: DB 세션
        scope: lesson | mock (다른 범위의 퀴즈 id 는 NotFound)
        req: quizId, startedAt, answers[]
        requester: 로그인 사용자 (None = 비로그인)

    Returns:
        응시 상세 + 점수 요약 + requiresLogin
    """
    log = log or get_logger()

    # 빈 배열은 허용 (0점 처리)
    if req.quizId is None or req.startedAt is None or req.answers is None:
        raise ValidationError("Missing required fields: quizId, startedAt, and answers array")

    quiz = get_quiz(db, scope, req.quizId)
    user_id = requester.userId if requester else None

    completed_at = _utcnow()
    started_at = _utc_naive(req.startedAt)
    time_spent = math.floor((completed_at - started_at).total_seconds())
    if time_spent < 0 or (quiz.time_limit and time_spent > quiz.time_limit * 60 * 2):
        log.warning(f"비정상 응시 시간: quiz={quiz.id}, timeSpentSeconds={time_spent}")

    with transaction(db):
        attempt = QuizAttempt(
            quiz_id=quiz.id,
            user_id=user_id,
            started_at=started_at,
            completed_at=completed_at,
            time_spent_seconds=time_spent,
        )
        db.add(attempt)
        db.flush()

        graded = grade(quiz.questions, req.answers, dedupe=cfg.DEDUPE_SUBMISSIONS, log=log)

        # 제출 순서대로 저장
        for r in graded.results:
            db.add(UserQuizAnswer(
                attempt_id=attempt.id,
                question_id=r.question_id,
                answer_id=r.answer_id,
                text_answer=r.text_answer,
                is_correct=r.is_correct,
                points_earned=r.points_earned,
            ))

        percentage, passed = summarize(graded.total_score, graded.max_score, quiz.passing_score)
        attempt.score = graded.total_score
        attempt.max_score = graded.max_score
        attempt.percentage_score = percentage
        attempt.passed = passed
        db.flush()
        attempt_id = attempt.id

    log.info(
        f"응시 제출: quiz={quiz.id}, attempt={attempt_id}, user={user_id}, "
        f"score={graded.total_score}/{graded.max_score}, skipped={graded.skipped}"
    )

    completed = _load_attempt(db, scope, attempt_id)
    return AttemptResultResponse(
        attempt=_attempt_out(completed),
        result=AttemptScore(
            score=graded.total_score,
            maxScore=graded.max_score,
            percentageScore=percentage,
            passed=passed,
            timeSpentSeconds=time_spent,
        ),
        requiresLogin=user_id is None and passed,
    )


# ---------- 결과 조회 ----------
def get_attempt(
        db: Session,
        scope: str,
        attempt_id: int,
        requester: Optional[User] = None,
) -> AttemptOut:
    attempt = _load_attempt(db, scope, attempt_id)
    if attempt is None:
        raise NotFound(f"{_label(scope)} not found")

    # 소유자가 있는 응시는 본인 또는 관리자만
    if attempt.user_id is not None:
        if requester is None or (requester.userId != attempt.user_id and not requester.is_admin):
            raise Forbidden("Not authorized to view this attempt")

    return _attempt_out(attempt)


def list_user_attempts(
        db: Session,
        scope: str,
        user_id: int,
        quiz_id: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
) -> Tuple[List[AttemptOut], Pagination]:
    """내 응시 기록 (최근 완료 순)"""
    page, limit = normalize_page(page, limit)

    conditions = [QuizAttempt.user_id == user_id]
    if quiz_id is not None:
        conditions.append(QuizAttempt.quiz_id == quiz_id)

    base = scoped_to(
        select(QuizAttempt).join(Quiz, Quiz.id == QuizAttempt.quiz_id), scope
    ).where(*conditions)

    total = db.execute(
        select(func.count()).select_from(base.subquery())
    ).scalar_one()

    rows = db.execute(
        base.options(selectinload(QuizAttempt.quiz))
        .order_by(QuizAttempt.completed_at.desc(), QuizAttempt.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    ).scalars().all()

    return [_attempt_out(a, with_answers=False) for a in rows], paginate(total, page, limit)
