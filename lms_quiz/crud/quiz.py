# lms_quiz/crud/quiz.py
"""
퀴즈 / 모의고사 CRUD 작업
- 조회 범위(scope): 강의 퀴즈(lesson) / 모의고사(mock). 범위가 다르면 NotFound
- 생성/삭제는 하나의 트랜잭션 (부분 트리 저장 없음)
- 응시 기록이 있는 퀴즈는 삭제 불가
"""
from __future__ import annotations
import logging
import math
from typing import Dict, List, Optional, Tuple

from sqlalchemy import case, delete, func, select
from sqlalchemy.orm import Session, selectinload

from lms_quiz.core.config import cfg
from lms_quiz.core.errors import Conflict, NotFound, ValidationError
from lms_quiz.core.logging import get_logger
from lms_quiz.db import transaction
from lms_quiz.models.quiz import (
    QUESTION_TYPES,
    Quiz, QuizQuestion, QuizAnswer,
    QuizAttempt, UserQuizAnswer,
)
from lms_quiz.schemas.common import Pagination
from lms_quiz.schemas.quiz import (
    AnswerCreate, AnswerDetail, QuestionCreate, QuestionDetail, QuestionUpdate,
    QuestionStat, QuizCreate, QuizDetail, QuizStatistics, QuizSummary, QuizUpdate,
)

SCOPE_LESSON = "lesson"
SCOPE_MOCK = "mock"

# 범위별 수정 가능 필드 (요청 필드명 → 컬럼명)
_UPDATABLE_FIELDS = {
    SCOPE_LESSON: {
        "description": "description",
        "timeLimit": "time_limit",
        "passingScore": "passing_score",
    },
    SCOPE_MOCK: {
        "description": "description",
        "timeLimit": "time_limit",
        "passingScore": "passing_score",
        "category": "category",
        "difficulty": "difficulty",
    },
}


def scope_label(scope: str) -> str:
    return "Mock test" if scope == SCOPE_MOCK else "Quiz"


def scoped_to(stmt, scope: str):
    if scope == SCOPE_MOCK:
        return stmt.where(Quiz.lesson_id.is_(None))
    return stmt.where(Quiz.lesson_id.is_not(None))


# ---------- DTO 변환 ----------
def answer_detail(a: QuizAnswer) -> AnswerDetail:
    return AnswerDetail(id=a.id, answerText=a.answer_text, isCorrect=a.is_correct, explanation=a.explanation)


def question_detail(q: QuizQuestion) -> QuestionDetail:
    return QuestionDetail(
        id=q.id,
        questionText=q.question_text,
        questionType=q.question_type,
        points=q.points,
        explanation=q.explanation,
        position=q.position,
        answers=[answer_detail(a) for a in sorted(q.answers, key=lambda a: a.id)],
    )


def quiz_detail(quiz: Quiz) -> QuizDetail:
    return QuizDetail(
        id=quiz.id,
        lessonId=quiz.lesson_id,
        title=quiz.title,
        description=quiz.description,
        timeLimit=quiz.time_limit,
        passingScore=quiz.passing_score,
        category=quiz.category,
        difficulty=quiz.difficulty,
        createdAt=quiz.created_at,
        updatedAt=quiz.updated_at,
        questions=[question_detail(q) for q in sorted(quiz.questions, key=lambda q: (q.position, q.id))],
    )


def paginate(total: int, page: int, limit: int) -> Pagination:
    return Pagination(total=total, page=page, limit=limit, totalPages=math.ceil(total / limit) if limit else 0)


def normalize_page(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else cfg.DEFAULT_PAGE_SIZE
    return page, min(limit, cfg.MAX_PAGE_SIZE)


# ---------- 조회 ----------
def get_quiz(db: Session, scope: str, quiz_id: int, with_tree: bool = True) -> Quiz:
    """범위 안의 퀴즈 조회 (문항/보기 eager 로딩). 없으면 NotFound"""
    stmt = select(Quiz).where(Quiz.id == quiz_id)
    if with_tree:
        stmt = stmt.options(selectinload(Quiz.questions).selectinload(QuizQuestion.answers))
    quiz = db.execute(scoped_to(stmt, scope)).scalar_one_or_none()
    if quiz is None:
        raise NotFound(f"{scope_label(scope)} not found")
    return quiz


def has_attempts(db: Session, quiz_id: int) -> bool:
    count = db.execute(
        select(func.count(QuizAttempt.id)).where(QuizAttempt.quiz_id == quiz_id)
    ).scalar_one()
    return count > 0


def list_quizzes(
        db: Session,
        scope: str,
        title: Optional[str] = None,
        lesson_id: Optional[int] = None,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
) -> Tuple[List[QuizSummary], Pagination]:
    page, limit = normalize_page(page, limit)

    conditions = []
    if title:
        conditions.append(Quiz.title.like(f"%{title}%"))
    if scope == SCOPE_LESSON and lesson_id is not None:
        conditions.append(Quiz.lesson_id == lesson_id)
    if scope == SCOPE_MOCK and category:
        conditions.append(Quiz.category == category)
    if scope == SCOPE_MOCK and difficulty:
        conditions.append(Quiz.difficulty == difficulty)

    total = db.execute(
        scoped_to(select(func.count(Quiz.id)), scope).where(*conditions)
    ).scalar_one()

    question_count = (
        select(func.count(QuizQuestion.id))
        .where(QuizQuestion.quiz_id == Quiz.id)
        .correlate(Quiz)
        .scalar_subquery()
    )
    rows = db.execute(
        scoped_to(select(Quiz, question_count), scope)
        .where(*conditions)
        .order_by(Quiz.created_at.desc(), Quiz.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    ).all()

    items = [
        QuizSummary(
            id=quiz.id,
            lessonId=quiz.lesson_id,
            title=quiz.title,
            description=quiz.description,
            timeLimit=quiz.time_limit,
            passingScore=quiz.passing_score,
            category=quiz.category,
            difficulty=quiz.difficulty,
            questionCount=cnt or 0,
            createdAt=quiz.created_at,
        )
        for quiz, cnt in rows
    ]
    return items, paginate(total, page, limit)


# ---------- 문항/보기 저장 ----------
def _validate_points(points: Optional[int], where: str) -> int:
    if points is None:
        return 1
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise ValidationError(f"Invalid question{where}: points must be a positive integer")
    return points


def _add_answers(db: Session, question: QuizQuestion, answers: List[AnswerCreate]) -> None:
    for a in answers:
        if not a.answerText or a.isCorrect is None:
            raise ValidationError("Invalid answer: missing required fields")
        db.add(QuizAnswer(
            question_id=question.id,
            answer_text=a.answerText,
            is_correct=a.isCorrect,
            explanation=a.explanation,
        ))


def _add_question(db: Session, quiz_id: int, item: QuestionCreate, position: int, where: str) -> QuizQuestion:
    if not item.questionText or not item.questionType or item.answers is None:
        raise ValidationError(f"Invalid question{where}: missing required fields")
    if item.questionType not in QUESTION_TYPES:
        raise ValidationError(
            f"Invalid question{where}: questionType must be one of {', '.join(QUESTION_TYPES)}"
        )

    q = QuizQuestion(
        quiz_id=quiz_id,
        question_text=item.questionText,
        question_type=item.questionType,
        points=_validate_points(item.points, where),
        explanation=item.explanation,
        position=position,
    )
    db.add(q)
    db.flush()

    _add_answers(db, q, item.answers)
    return q


def _insert_quiz_tree(db: Session, fields: Dict, questions: List[QuestionCreate]) -> Quiz:
    quiz = Quiz(**fields)
    db.add(quiz)
    db.flush()

    # 제출된 배열 순서가 곧 position
    for i, item in enumerate(questions):
        _add_question(db, quiz.id, item, position=i, where=f" at index {i}")

    db.flush()
    return quiz


# ---------- 생성 / 수정 / 삭제 ----------
def create_quiz(
        db: Session,
        scope: str,
        data: QuizCreate,
        log: Optional[logging.Logger] = None,
) -> QuizDetail:
    """
    퀴즈 + 문항 + 보기 생성 (단일 트랜잭션)

    Args:
        db: DB 세션
        scope: lesson (lessonId 필수) | mock (lessonId 무시, category/difficulty 허용)
        data: 생성 요청

    Returns:
        생성된 퀴즈 상세 (정답 포함)
    """
    log = log or get_logger()

    if scope == SCOPE_LESSON:
        if data.lessonId is None or not data.title or not data.questions:
            raise ValidationError("Missing required fields: lessonId, title, and questions array")
    elif not data.title or not data.questions:
        raise ValidationError("Missing required fields: title and questions array")

    fields = {
        "lesson_id": data.lessonId if scope == SCOPE_LESSON else None,
        "title": data.title,
        "description": data.description,
        "time_limit": data.timeLimit,
        "passing_score": data.passingScore,
    }
    if scope == SCOPE_MOCK:
        fields.update(category=data.category, difficulty=data.difficulty)

    with transaction(db):
        quiz = _insert_quiz_tree(db, fields, data.questions)
        quiz_id = quiz.id

    log.info(f"{scope_label(scope)} 생성: id={quiz_id}, 문항 {len(data.questions)}개")
    return quiz_detail(get_quiz(db, scope, quiz_id))


def update_quiz(
        db: Session,
        scope: str,
        quiz_id: int,
        patch: QuizUpdate,
        log: Optional[logging.Logger] = None,
) -> QuizDetail:
    """메타데이터 부분 수정. 문항/보기는 건드리지 않음"""
    log = log or get_logger()
    with transaction(db):
        quiz = get_quiz(db, scope, quiz_id, with_tree=False)
        changes = patch.model_dump(exclude_unset=True)

        if changes.get("title"):
            quiz.title = changes["title"]
        for key, column in _UPDATABLE_FIELDS[scope].items():
            if key in changes:
                setattr(quiz, column, changes[key])

    log.info(f"{scope_label(scope)} 수정: id={quiz_id}, 필드={sorted(changes)}")
    return quiz_detail(get_quiz(db, scope, quiz_id))


def delete_quiz(
        db: Session,
        scope: str,
        quiz_id: int,
        log: Optional[logging.Logger] = None,
) -> None:
    """응시 기록이 있으면 Conflict. 보기 → 문항 → 퀴즈 순 삭제"""
    log = log or get_logger()
    with transaction(db):
        get_quiz(db, scope, quiz_id, with_tree=False)

        if has_attempts(db, quiz_id):
            log.warning(f"{scope_label(scope)} 삭제 거부 (응시 기록 존재): id={quiz_id}")
            raise Conflict(f"Cannot delete {scope_label(scope).lower()} with existing attempts")

        question_ids = select(QuizQuestion.id).where(QuizQuestion.quiz_id == quiz_id)
        db.execute(
            delete(QuizAnswer)
            .where(QuizAnswer.question_id.in_(question_ids))
            .execution_options(synchronize_session=False)
        )
        db.execute(
            delete(QuizQuestion)
            .where(QuizQuestion.quiz_id == quiz_id)
            .execution_options(synchronize_session=False)
        )
        db.execute(
            delete(Quiz)
            .where(Quiz.id == quiz_id)
            .execution_options(synchronize_session=False)
        )

    log.info(f"{scope_label(scope)} 삭제: id={quiz_id}")


# ---------- 문항 단위 수정 ----------
def _get_scoped_question(db: Session, scope: str, question_id: int) -> QuizQuestion:
    stmt = (
        select(QuizQuestion)
        .join(Quiz, Quiz.id == QuizQuestion.quiz_id)
        .where(QuizQuestion.id == question_id)
        .options(selectinload(QuizQuestion.answers))
    )
    question = db.execute(scoped_to(stmt, scope)).scalar_one_or_none()
    if question is None:
        raise NotFound("Question not found")
    return question


def _guard_question_edit(db: Session, quiz_id: int) -> None:
    if cfg.LOCK_QUESTIONS_AFTER_ATTEMPTS and has_attempts(db, quiz_id):
        raise Conflict("Cannot modify questions of a quiz with existing attempts")


def add_question(
        db: Session,
        scope: str,
        quiz_id: int,
        item: QuestionCreate,
        log: Optional[logging.Logger] = None,
) -> QuestionDetail:
    """기존 퀴즈 끝에 문항 추가"""
    log = log or get_logger()
    with transaction(db):
        get_quiz(db, scope, quiz_id, with_tree=False)
        _guard_question_edit(db, quiz_id)

        last = db.execute(
            select(func.max(QuizQuestion.position)).where(QuizQuestion.quiz_id == quiz_id)
        ).scalar_one()
        question = _add_question(db, quiz_id, item, position=(last + 1) if last is not None else 0, where="")
        db.flush()
        question_id = question.id

    log.info(f"문항 추가: quiz={quiz_id}, question={question_id}")
    return question_detail(_get_scoped_question(db, scope, question_id))


def update_question(
        db: Session,
        scope: str,
        question_id: int,
        patch: QuestionUpdate,
        log: Optional[logging.Logger] = None,
) -> QuestionDetail:
    """문항 부분 수정. answers 가 주어지면 보기를 통째로 교체"""
    log = log or get_logger()
    with transaction(db):
        question = _get_scoped_question(db, scope, question_id)
        _guard_question_edit(db, question.quiz_id)
        changes = patch.model_dump(exclude_unset=True)

        if changes.get("questionText"):
            question.question_text = changes["questionText"]
        if "questionType" in changes:
            if changes["questionType"] not in QUESTION_TYPES:
                raise ValidationError(
                    f"Invalid question: questionType must be one of {', '.join(QUESTION_TYPES)}"
                )
            question.question_type = changes["questionType"]
        if "points" in changes:
            question.points = _validate_points(changes["points"], "")
        if "explanation" in changes:
            question.explanation = changes["explanation"]

        if patch.answers is not None:
            for a in list(question.answers):
                db.delete(a)
            db.flush()
            _add_answers(db, question, patch.answers)

    log.info(f"문항 수정: question={question_id}, 필드={sorted(changes)}")
    return question_detail(_get_scoped_question(db, scope, question_id))


def delete_question(
        db: Session,
        scope: str,
        question_id: int,
        log: Optional[logging.Logger] = None,
) -> None:
    """응시 기록이 있는 퀴즈의 문항은 삭제 불가. 보기 먼저 삭제"""
    log = log or get_logger()
    with transaction(db):
        question = _get_scoped_question(db, scope, question_id)
        if has_attempts(db, question.quiz_id):
            raise Conflict("Cannot delete question of a quiz with existing attempts")

        db.execute(
            delete(QuizAnswer)
            .where(QuizAnswer.question_id == question_id)
            .execution_options(synchronize_session=False)
        )
        db.execute(
            delete(QuizQuestion)
            .where(QuizQuestion.id == question_id)
            .execution_options(synchronize_session=False)
        )

    log.info(f"문항 삭제: question={question_id}")


# ---------- 텍스트 가져오기 ----------
def import_mock_test(
        db: Session,
        meta: Dict,
        questions: List[QuestionCreate],
        log: Optional[logging.Logger] = None,
) -> QuizDetail:
    """파싱된 문항으로 모의고사 생성 (시간/합격 기준 기본값 적용)"""
    log = log or get_logger()
    if not meta.get("title"):
        raise ValidationError("Missing required field: title")
    if not questions:
        raise ValidationError("No questions could be parsed from the content")

    data = QuizCreate(
        title=meta["title"],
        description=meta.get("description"),
        timeLimit=meta.get("timeLimit") or cfg.IMPORT_DEFAULT_TIME_LIMIT,
        passingScore=meta.get("passingScore") or cfg.IMPORT_DEFAULT_PASSING_SCORE,
        category=meta.get("category"),
        difficulty=meta.get("difficulty"),
        questions=questions,
    )
    detail = create_quiz(db, SCOPE_MOCK, data, log=log)
    log.info(f"모의고사 가져오기 완료: id={detail.id}, 문항 {len(questions)}개")
    return detail


# ---------- 통계 ----------
def get_quiz_statistics(db: Session, scope: str, quiz_id: int) -> QuizStatistics:
    get_quiz(db, scope, quiz_id, with_tree=False)

    total_attempts = db.execute(
        select(func.count(QuizAttempt.id)).where(QuizAttempt.quiz_id == quiz_id)
    ).scalar_one()
    passed_attempts = db.execute(
        select(func.count(QuizAttempt.id))
        .where(QuizAttempt.quiz_id == quiz_id, QuizAttempt.passed.is_(True))
    ).scalar_one()
    average = db.execute(
        select(func.avg(QuizAttempt.percentage_score)).where(QuizAttempt.quiz_id == quiz_id)
    ).scalar_one()

    rows = db.execute(
        select(
            QuizQuestion,
            func.count(UserQuizAnswer.id),
            func.sum(case((UserQuizAnswer.is_correct.is_(True), 1), else_=0)),
        )
        .outerjoin(UserQuizAnswer, UserQuizAnswer.question_id == QuizQuestion.id)
        .where(QuizQuestion.quiz_id == quiz_id)
        .group_by(QuizQuestion.id)
        .order_by(QuizQuestion.position, QuizQuestion.id)
    ).all()

    stats: List[QuestionStat] = []
    for q, total, correct in rows:
        correct = int(correct or 0)  # 응답이 없으면 SUM 이 NULL
        stats.append(QuestionStat(
            id=q.id,
            questionText=q.question_text,
            questionType=q.question_type,
            points=q.points,
            totalAnswers=total,
            correctAnswers=correct,
            correctPercentage=(correct / total) * 100 if total > 0 else 0.0,
        ))

    return QuizStatistics(
        quizId=quiz_id,
        totalAttempts=total_attempts,
        passedAttempts=passed_attempts,
        passRate=(passed_attempts / total_attempts) * 100 if total_attempts > 0 else 0.0,
        averageScore=float(average or 0),
        questionStats=stats,
    )
