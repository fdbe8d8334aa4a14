# lms_quiz/routers/mocktest.py
"""
모의고사 API 라우터 (lesson_id 가 없는 독립 퀴즈)
- 퀴즈 라우터와 같은 엔드포인트 구성 + 텍스트 문항 가져오기
"""
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from lms_quiz.core.logging import get_logger
from lms_quiz.crud.quiz import SCOPE_MOCK, import_mock_test
from lms_quiz.db import get_db
from lms_quiz.deps import require_instructor
from lms_quiz.routers.quiz import build_quiz_router
from lms_quiz.schemas.common import User
from lms_quiz.schemas.quiz import MockTestImportRequest, QuizImportResponse
from lms_quiz.services.question_import import parse_question_text

router = build_quiz_router(SCOPE_MOCK)


@router.post("/import", response_model=QuizImportResponse, status_code=201)
def import_questions(
        req: MockTestImportRequest,
        _: User = Depends(require_instructor),
        db: Session = Depends(get_db),
        log: logging.Logger = Depends(get_logger),
):
    """
    추출된 평문으로 모의고사 생성

    - content: "Q1: ..." / "A) ..." 형식, 정답 보기는 "*" 또는 "(correct)"
    - timeLimit / passingScore 미지정 시 기본값(60분 / 70%)
    """
    questions = parse_question_text(req.content)
    log.info(f"문항 파싱: {len(questions)}개")
    quiz = import_mock_test(db, req.model_dump(exclude={"content"}), questions, log=log)
    return QuizImportResponse(quiz=quiz, importedQuestions=len(questions))
