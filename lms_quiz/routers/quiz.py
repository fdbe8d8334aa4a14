# lms_quiz/routers/quiz.py
"""
퀴즈 API 라우터
- 목록 / 응시 화면(시드 기반 섞기)
- 출제: 생성 / 수정 / 삭제, 문항 단위 추가·수정·삭제
- 응시 제출 / 결과 조회 / 내 응시 기록
- 통계
강의 퀴즈(/api/quizzes)와 모의고사(/api/mock-tests)는 같은 라우터 구성을 범위만 바꿔 사용
"""
from __future__ import annotations
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from lms_quiz.core.logging import get_logger
from lms_quiz.crud import attempt as attempt_crud
from lms_quiz.crud import quiz as quiz_crud
from lms_quiz.crud.quiz import SCOPE_LESSON
from lms_quiz.db import get_db
from lms_quiz.deps import get_client_host, get_current_user, get_optional_user, require_instructor
from lms_quiz.schemas.common import User
from lms_quiz.schemas.quiz import (
    AttemptListResponse, AttemptOut, AttemptResultResponse,
    QuestionCreate, QuestionDetail, QuestionUpdate,
    QuizCreate, QuizDetail, QuizListResponse, QuizStatistics, QuizUpdate, QuizView,
    SubmitAttemptRequest,
)
from lms_quiz.services.assembly import AssemblyOptions, assemble_quiz_view


def build_quiz_router(scope: str) -> APIRouter:
    router = APIRouter()

    # ---------- 1) 목록 ----------
    @router.get("", response_model=QuizListResponse)
    def list_quizzes(
            title: Optional[str] = None,
            lessonId: Optional[int] = None,
            category: Optional[str] = None,
            difficulty: Optional[str] = None,
            page: int = Query(1, ge=1),
            limit: Optional[int] = Query(None, ge=1),
            db: Session = Depends(get_db),
    ):
        """
        목록 조회 (최신순)

        - title: 제목 부분 검색
        - lessonId: 강의 퀴즈 전용 필터
        - category / difficulty: 모의고사 전용 필터
        """
        items, pagination = quiz_crud.list_quizzes(
            db, scope,
            title=title, lesson_id=lessonId, category=category, difficulty=difficulty,
            page=page, limit=limit,
        )
        return QuizListResponse(items=items, pagination=pagination)

    # ---------- 2) 응시 기록 (고정 경로를 /{quiz_id} 보다 먼저 등록) ----------
    @router.post("/attempts/submit", response_model=AttemptResultResponse, status_code=201)
    def submit_attempt(
            req: SubmitAttemptRequest,
            user: Optional[User] = Depends(get_optional_user),
            db: Session = Depends(get_db),
            log: logging.Logger = Depends(get_logger),
    ):
        """
        답안 제출 및 채점 (비로그인 가능)

        - quizId: 퀴즈 ID
        - startedAt: 응시 시작 시각 (ISO 8601)
        - answers: [{questionId, answerId?, textAnswer?}]
        - 같은 문항을 여러 번 제출하면 첫 번째만 채점 (DEDUPE_SUBMISSIONS=false 면 모두 채점)
        """
        return attempt_crud.submit_attempt(db, scope, req, requester=user, log=log)

    @router.get("/attempts/user", response_model=AttemptListResponse)
    def my_attempts(
            quizId: Optional[int] = None,
            page: int = Query(1, ge=1),
            limit: Optional[int] = Query(None, ge=1),
            user: User = Depends(get_current_user),
            db: Session = Depends(get_db),
    ):
        items, pagination = attempt_crud.list_user_attempts(
            db, scope, user.userId, quiz_id=quizId, page=page, limit=limit,
        )
        return AttemptListResponse(items=items, pagination=pagination)

    @router.get("/attempts/{attempt_id}", response_model=AttemptOut)
    def get_attempt(
            attempt_id: int,
            user: Optional[User] = Depends(get_optional_user),
            db: Session = Depends(get_db),
    ):
        """비로그인 응시는 id 만으로 조회 가능, 소유자가 있으면 본인/관리자만"""
        return attempt_crud.get_attempt(db, scope, attempt_id, requester=user)

    # ---------- 3) 문항 단위 출제 ----------
    @router.put("/questions/{question_id}", response_model=QuestionDetail)
    def update_question(
            question_id: int,
            patch: QuestionUpdate,
            _: User = Depends(require_instructor),
            db: Session = Depends(get_db),
            log: logging.Logger = Depends(get_logger),
    ):
        return quiz_crud.update_question(db, scope, question_id, patch, log=log)

    @router.delete("/questions/{question_id}", status_code=204)
    def delete_question(
            question_id: int,
            _: User = Depends(require_instructor),
            db: Session = Depends(get_db),
            log: logging.Logger = Depends(get_logger),
    ):
        quiz_crud.delete_question(db, scope, question_id, log=log)
        return Response(status_code=204)

    # ---------- 4) 응시 화면 ----------
    @router.get("/{quiz_id}", response_model=QuizView)
    def get_quiz(
            quiz_id: int,
            randomize: bool = False,
            questionCount: Optional[int] = None,
            userSeed: Optional[str] = None,
            shuffleAnswers: bool = False,
            user: Optional[User] = Depends(get_optional_user),
            client_host: Optional[str] = Depends(get_client_host),
            db: Session = Depends(get_db),
    ):
        """
        응시 화면 (정답/해설 제외)

        - randomize: 요청자 + 퀴즈 + userSeed 기반 고정 셔플
        - questionCount: randomize 시 문항 수 제한
        - shuffleAnswers: randomize 시 보기도 섞기
        """
        quiz = quiz_crud.get_quiz(db, scope, quiz_id)
        options = AssemblyOptions(
            randomize=randomize,
            question_count=questionCount,
            user_seed=userSeed,
            shuffle_answers=shuffleAnswers,
        )
        return assemble_quiz_view(
            quiz, options,
            user_id=user.userId if user else None,
            client_host=client_host,
        )

    # ---------- 5) 출제 ----------
    @router.post("", response_model=QuizDetail, status_code=201)
    def create_quiz(
            data: QuizCreate,
            _: User = Depends(require_instructor),
            db: Session = Depends(get_db),
            log: logging.Logger = Depends(get_logger),
    ):
        return quiz_crud.create_quiz(db, scope, data, log=log)

    @router.put("/{quiz_id}", response_model=QuizDetail)
    def update_quiz(
            quiz_id: int,
            patch: QuizUpdate,
            _: User = Depends(require_instructor),
            db: Session = Depends(get_db),
            log: logging.Logger = Depends(get_logger),
    ):
        return quiz_crud.update_quiz(db, scope, quiz_id, patch, log=log)

    @router.delete("/{quiz_id}", status_code=204)
    def delete_quiz(
            quiz_id: int,
            _: User = Depends(require_instructor),
            db: Session = Depends(get_db),
            log: logging.Logger = Depends(get_logger),
    ):
        quiz_crud.delete_quiz(db, scope, quiz_id, log=log)
        return Response(status_code=204)

    @router.post("/{quiz_id}/questions", response_model=QuestionDetail, status_code=201)
    def add_question(
            quiz_id: int,
            item: QuestionCreate,
            _: User = Depends(require_instructor),
            db: Session = Depends(get_db),
            log: logging.Logger = Depends(get_logger),
    ):
        return quiz_crud.add_question(db, scope, quiz_id, item, log=log)

    # ---------- 6) 통계 ----------
    @router.get("/{quiz_id}/statistics", response_model=QuizStatistics)
    def get_statistics(
            quiz_id: int,
            _: User = Depends(require_instructor),
            db: Session = Depends(get_db),
    ):
        return quiz_crud.get_quiz_statistics(db, scope, quiz_id)

    return router


router = build_quiz_router(SCOPE_LESSON)

